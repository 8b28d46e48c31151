"""Content extraction and lightweight text signals for indexed records."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from core.errors import IndexingError
from memory.embedding import tokenize

STOP_WORDS = frozenset(
    {
        "the", "and", "for", "are", "but", "not", "you", "all", "can", "had", "her", "was",
        "one", "our", "out", "day", "get", "has", "him", "his", "how", "man", "new", "now",
        "old", "see", "two", "way", "who", "did", "its", "let", "put", "say", "she", "too",
        "use", "that", "this", "with", "from", "have", "been", "were", "they", "them", "then",
        "than", "into", "your", "about", "there", "their", "which", "what", "when", "will",
        "would", "could", "should", "some", "more", "very", "just", "also", "each", "over",
    }
)  # fmt: skip

POSITIVE_WORDS = frozenset({"good", "great", "excellent", "amazing", "awesome", "completed", "achieved", "success"})
NEGATIVE_WORDS = frozenset({"bad", "terrible", "awful", "failed", "missed", "delayed", "problem", "issue"})

_CAPITALIZED = re.compile(r"^[A-Z][a-z]+")
_DATE = re.compile(r"\d{1,2}/\d{1,2}/\d{4}|\d{4}-\d{2}-\d{2}")
_TIME = re.compile(r"\d{1,2}:\d{2}")

# Fields concatenated into searchable text, per record type.
CONTENT_FIELDS: dict[str, tuple[str, ...]] = {
    "task": ("title", "description", "notes"),
    "goal": ("title", "description"),
    "session": ("notes", "type"),
    "habit": ("name", "description"),
    "timeblock": ("title", "description", "type"),
    "note": ("title", "content", "text"),
    "insight": ("title", "content", "text"),
}


def as_mapping(record: Any) -> dict[str, Any]:
    if isinstance(record, BaseModel):
        return record.model_dump()
    if isinstance(record, dict):
        return record
    raise IndexingError(f"Cannot index record of type {type(record).__name__}")


def pick(data: dict[str, Any], *names: str) -> Any:
    """First present value among snake_case / camelCase spellings.

    Blank strings count as absent.
    """
    for name in names:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return value
    return None


def searchable_content(data: dict[str, Any], record_type: str) -> str:
    fields = CONTENT_FIELDS.get(record_type)
    if fields is None:
        raise IndexingError(f"Unsupported record type: {record_type}")
    parts = [str(data.get(name) or "") for name in fields]
    return " ".join(part for part in parts if part).strip()


def extract_keywords(text: str) -> list[str]:
    """Distinct lowercase tokens longer than three characters, minus stop words."""
    seen: dict[str, None] = {}
    for token in tokenize(text):
        if len(token) > 3 and token not in STOP_WORDS:
            seen.setdefault(token, None)
    return list(seen)


def extract_entities(text: str) -> list[str]:
    """Capitalized words, dates and clock times, in first-seen order."""
    seen: dict[str, None] = {}
    for raw in text.split():
        word = raw.strip(".,;:!?()[]{}\"'")
        if not word:
            continue
        match = _CAPITALIZED.match(word)
        if match and match.group(0).lower() not in STOP_WORDS:
            seen.setdefault(match.group(0), None)
        for pattern in (_DATE, _TIME):
            found = pattern.search(word)
            if found:
                seen.setdefault(found.group(0), None)
    return list(seen)


def sentiment(text: str) -> float:
    tokens = tokenize(text)
    if not tokens:
        return 0.0
    score = sum((token in POSITIVE_WORDS) - (token in NEGATIVE_WORDS) for token in tokens)
    return max(-1.0, min(1.0, score / len(tokens)))


def importance(data: dict[str, Any], record_type: str, now: datetime, deadline: datetime | None) -> float:
    value = 0.5
    if data.get("priority") in ("high", "critical"):
        value += 0.3
    if data.get("status") == "completed":
        value += 0.2
    if record_type == "goal":
        value += 0.2
    if deadline is not None and deadline < now:
        value += 0.2
    return min(1.0, value)
