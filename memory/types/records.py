"""Index entry models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import Field

from core.models import TrackerModel, UtcDatetime

RecordType = Literal["task", "goal", "session", "habit", "timeblock", "note", "insight"]
RECORD_TYPES: tuple[str, ...] = ("task", "goal", "session", "habit", "timeblock", "note", "insight")


class IndexEntry(TrackerModel):
    """One indexed activity record; re-indexing the same id replaces it."""

    id: str
    type: RecordType
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    embedding: list[float] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    entities: list[str] = Field(default_factory=list)
    sentiment: float = Field(default=0.0, ge=-1.0, le=1.0)
    importance: float = Field(default=0.5, ge=0.0, le=1.0)
    timestamp: UtcDatetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def status(self) -> str | None:
        return self.metadata.get("status")
