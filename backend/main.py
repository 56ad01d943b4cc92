from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from datetime import date, datetime
from typing import Optional
import logging
import uuid
import os
from dotenv import load_dotenv

# Load .env before local modules read their configuration
load_dotenv()

from models import Task, TaskCreate, TaskUpdate, ParsedTask, ParseVoiceRequest
from database import (
    init_db,
    get_all_tasks,
    get_task_db,
    create_task_db,
    update_task_db,
    delete_task_db,
)
from ai_parser import TranscriptParser

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Startup
    init_db()
    yield
    # Shutdown (nothing to do)

app = FastAPI(lifespan=lifespan)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

transcript_parser = TranscriptParser.from_env()


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


def _to_db(values: dict) -> dict:
    """Convert date values to ISO strings for storage."""
    return {k: v.isoformat() if isinstance(v, date) else v for k, v in values.items()}


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "timestamp": datetime.now().isoformat()}


@app.get("/tasks")
def get_tasks(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    search: Optional[str] = None
) -> list[Task]:
    return get_all_tasks(status=status, priority=priority, search=search)


@app.post("/tasks/parse-voice")
async def parse_voice(request: ParseVoiceRequest) -> ParsedTask:
    """Turn a voice transcript into task fields for the user to review before saving."""
    if not request.transcript.strip():
        raise HTTPException(status_code=400, detail="Transcript is required")
    return await transcript_parser.parse(request.transcript)


@app.get("/tasks/{task_id}")
def get_task(task_id: str) -> Task:
    task = get_task_db(task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@app.post("/tasks", status_code=201)
def create_task(task_data: TaskCreate) -> Task:
    task_id = str(uuid.uuid4())
    return create_task_db(task_id, **_to_db(task_data.model_dump()))


@app.put("/tasks/{task_id}")
def replace_task(task_id: str, task_data: TaskCreate) -> Task:
    result = update_task_db(task_id, **_to_db(task_data.model_dump()))
    if not result:
        raise HTTPException(status_code=404, detail="Task not found")
    return result


@app.patch("/tasks/{task_id}")
def update_task(task_id: str, task_data: TaskUpdate) -> Task:
    # Only due_date may be cleared with an explicit null
    changes = {k: v for k, v in task_data.model_dump(exclude_unset=True).items() if v is not None or k == "due_date"}
    result = update_task_db(task_id, **_to_db(changes))
    if not result:
        raise HTTPException(status_code=404, detail="Task not found")
    return result


@app.delete("/tasks/{task_id}")
def delete_task(task_id: str) -> dict:
    if not delete_task_db(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return {"status": "deleted"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
