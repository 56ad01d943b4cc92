"""
Rule-based extraction of task fields from a transcript.
Used directly when no language model is configured, and as the fallback when the model path fails.
"""
import logging
import re
from datetime import date
from typing import Optional

from dates import add_days, next_weekday
from models import ExtractedFields

logger = logging.getLogger(__name__)

# Priority keyword classes, checked in order; matching is substring-based
HIGH_PRIORITY_PATTERN = re.compile(r"urgent|critical|high priority|important|asap", re.IGNORECASE)
LOW_PRIORITY_PATTERN = re.compile(r"low priority|minor|small|whenever", re.IGNORECASE)

PRIORITY_RULES = [
    ("High", HIGH_PRIORITY_PATTERN),
    ("Low", LOW_PRIORITY_PATTERN),
]

# Relative date phrases, checked in order; first match wins
TOMORROW_PATTERN = re.compile(r"tomorrow", re.IGNORECASE)
TODAY_PATTERN = re.compile(r"today", re.IGNORECASE)
NEXT_WEEK_PATTERN = re.compile(r"next week", re.IGNORECASE)
IN_DAYS_PATTERN = re.compile(r"in (\d+) days?", re.IGNORECASE)
WEEKDAY_PATTERN = re.compile(
    r"\b(?:next |on )?(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b",
    re.IGNORECASE,
)

LEADING_FILLER_PATTERN = re.compile(
    r"^(?:create|add|remind me to|make a task to|a task to|task to)\s+", re.IGNORECASE
)
TRAILING_FILLER_PATTERN = re.compile(r"\s+(?:task|by|before|due)\s*$", re.IGNORECASE)
WHITESPACE_PATTERN = re.compile(r"\s+")


def _collapse(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


class RuleBasedExtractor:
    """Deterministic extractor: priority keywords, relative dates, filler phrases, capitalization."""

    def extract(self, transcript: str, today: Optional[date] = None) -> ExtractedFields:
        transcript = transcript or ""
        today = today or date.today()

        title = transcript
        priority, title = self._detect_priority(transcript, title)
        due_date, title = self._detect_due_date(transcript, title, today)
        title = self._strip_filler(title)

        # Stripping consumed everything: keep the transcript rather than an empty title
        if not title:
            title = _collapse(transcript)

        result = ExtractedFields(title=_capitalize(title), priority=priority, due_date=due_date)
        logger.debug("Rule-based extraction: %r -> %s", transcript, result)
        return result

    def _detect_priority(self, transcript: str, title: str) -> tuple[str, str]:
        for priority, pattern in PRIORITY_RULES:
            if pattern.search(transcript):
                return priority, pattern.sub("", title)
        return "Medium", title

    def _detect_due_date(self, transcript: str, title: str, today: date) -> tuple[Optional[date], str]:
        if TOMORROW_PATTERN.search(transcript):
            return add_days(today, 1), TOMORROW_PATTERN.sub("", title)
        if TODAY_PATTERN.search(transcript):
            return today, TODAY_PATTERN.sub("", title)
        if NEXT_WEEK_PATTERN.search(transcript):
            return add_days(today, 7), NEXT_WEEK_PATTERN.sub("", title)

        match = IN_DAYS_PATTERN.search(transcript)
        if match:
            try:
                return add_days(today, int(match.group(1))), IN_DAYS_PATTERN.sub("", title)
            except (OverflowError, ValueError):
                # Day count too large for a calendar date; not a usable phrase
                logger.debug("Ignoring out-of-range day count %r", match.group(1)[:20])

        match = WEEKDAY_PATTERN.search(transcript)
        if match:
            try:
                return next_weekday(today, match.group(1)), WEEKDAY_PATTERN.sub("", title)
            except OverflowError:
                logger.debug("Weekday %r past the last representable date", match.group(1))

        return None, title

    def _strip_filler(self, title: str) -> str:
        title = _collapse(title)
        while True:
            stripped = LEADING_FILLER_PATTERN.sub("", title, count=1)
            stripped = TRAILING_FILLER_PATTERN.sub("", stripped, count=1)
            if stripped == title:
                break
            title = stripped
        return _collapse(title)
