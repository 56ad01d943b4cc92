"""
Voice input parsing: turns a free-text transcript into a ParsedTask.

The language model is tried first. Any failure (transport, malformed response,
invalid fields) is logged and answered by the rule-based extractor instead,
so callers always get a result.
"""
import json
import logging
import os
import re
from datetime import date
from typing import Optional

import anthropic
from pydantic import ValidationError

from models import ExtractedFields, ParsedTask
from prompts import PARSE_PROMPT
from rules import RuleBasedExtractor

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_TOKENS = 1024
PLACEHOLDER_API_KEY = "your-api-key-here"

# Greedy: first "{" to last "}"
JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


class ExtractionError(Exception):
    """Base class for failures of the language model path."""


class TransportFailure(ExtractionError):
    """Request to the language model failed (network, timeout, non-2xx)."""


class MalformedResponse(ExtractionError):
    """Response held no JSON object, or it did not parse."""


class ValidationFailure(ExtractionError):
    """Parsed JSON is missing a title or has invalid fields."""


def extract_json_object(text: str) -> dict:
    """Find and parse the brace-delimited JSON object embedded in a model response."""
    match = JSON_OBJECT_PATTERN.search(text or "")
    if not match:
        raise MalformedResponse("No JSON found in response")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Invalid JSON in response: {e}") from e


def validate_fields(data: dict) -> ExtractedFields:
    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValidationFailure("Title is required")

    priority = data.get("priority") or "Medium"
    if isinstance(priority, str):
        priority = priority.strip().capitalize()

    # Accept the camelCase spelling as well
    due_date = data.get("due_date", data.get("dueDate"))

    try:
        return ExtractedFields(title=title, priority=priority, due_date=due_date)
    except ValidationError as e:
        raise ValidationFailure(str(e)) from e


class PrimaryExtractor:
    """Language model extractor with the rule-based extractor as its fallback."""

    def __init__(
        self,
        client: anthropic.AsyncAnthropic,
        fallback: Optional[RuleBasedExtractor] = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        self.client = client
        self.fallback = fallback or RuleBasedExtractor()
        self.model = model
        self.max_tokens = max_tokens

    async def request(self, transcript: str, today: date) -> str:
        """Send one completion request and return the response text."""
        prompt = PARSE_PROMPT.format(transcript=transcript, today=today.isoformat())
        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise TransportFailure(str(e)) from e

        if not message.content:
            raise MalformedResponse("Empty response from model")
        return message.content[0].text

    async def extract(self, transcript: str, today: Optional[date] = None) -> ExtractedFields:
        today = today or date.today()
        try:
            text = await self.request(transcript, today)
            logger.debug("Model response: %s", text)
            return validate_fields(extract_json_object(text))
        except ExtractionError as e:
            logger.warning("AI parsing failed (%s: %s), using rule-based parser", type(e).__name__, e)
        except Exception:
            logger.exception("Unexpected AI parsing error, using rule-based parser")
        return self.fallback.extract(transcript, today)


class TranscriptParser:
    """Entry point used by the API layer."""

    def __init__(
        self,
        primary: Optional[PrimaryExtractor] = None,
        fallback: Optional[RuleBasedExtractor] = None,
    ):
        self.fallback = fallback or RuleBasedExtractor()
        self.primary = primary

    @classmethod
    def from_env(cls) -> "TranscriptParser":
        """
        Build a parser from environment configuration.
        Without an API key the model path is disabled and only rule-based parsing runs.
        """
        fallback = RuleBasedExtractor()
        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key or api_key == PLACEHOLDER_API_KEY:
            logger.warning("ANTHROPIC_API_KEY not configured, voice input uses rule-based parsing only")
            return cls(fallback=fallback)

        # No retries: a failed attempt goes straight to the fallback
        client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=float(os.getenv("PARSE_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)),
            max_retries=0,
        )
        primary = PrimaryExtractor(
            client,
            fallback,
            model=os.getenv("ANTHROPIC_MODEL", DEFAULT_MODEL),
            max_tokens=int(os.getenv("PARSE_MAX_TOKENS", DEFAULT_MAX_TOKENS)),
        )
        return cls(primary, fallback)

    async def parse(self, transcript: str, today: Optional[date] = None) -> ParsedTask:
        if self.primary is not None:
            fields = await self.primary.extract(transcript, today)
        else:
            fields = self.fallback.extract(transcript, today)
        return ParsedTask(**fields.model_dump(), transcript=transcript)
