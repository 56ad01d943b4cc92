from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000

Priority = Literal["Low", "Medium", "High"]
Status = Literal["To Do", "In Progress", "Done"]


def _date_part(value):
    # Accept full ISO datetimes by keeping the YYYY-MM-DD prefix
    if isinstance(value, str) and len(value) > 10 and value[10] in "T ":
        return value[:10]
    return value


class ExtractedFields(BaseModel):
    """
    Fields pulled out of a transcript by one of the extractors.
    due_date is exposed to API clients as "dueDate".
    """
    model_config = ConfigDict(populate_by_name=True)

    title: str
    priority: Priority = "Medium"
    due_date: Optional[date] = Field(None, alias="dueDate")

    @field_validator("title")
    @classmethod
    def clip_title(cls, v: str) -> str:
        v = v.strip()[:TITLE_MAX_LENGTH]
        return v[:1].upper() + v[1:]

    @field_validator("due_date", mode="before")
    @classmethod
    def due_date_prefix(cls, v):
        return _date_part(v)


class ParsedTask(ExtractedFields):
    status: Literal["To Do"] = "To Do"
    transcript: str


class Task(BaseModel):
    id: str
    title: str
    description: str = ""
    status: Status = "To Do"
    priority: Priority = "Medium"
    due_date: Optional[date] = None
    created_at: str  # ISO format datetime string
    updated_at: str


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field("", max_length=DESCRIPTION_MAX_LENGTH)
    status: Status = "To Do"
    priority: Priority = "Medium"
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2

    @field_validator("due_date", mode="before")
    @classmethod
    def due_date_prefix(cls, v):
        return _date_part(v)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    status: Optional[Status] = None
    priority: Optional[Priority] = None
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("title must not be blank")
        return v.strip() if v is not None else v

    @field_validator("due_date", mode="before")
    @classmethod
    def due_date_prefix(cls, v):
        return _date_part(v)


class ParseVoiceRequest(BaseModel):
    transcript: str
