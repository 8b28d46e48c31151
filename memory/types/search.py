"""Search and conversation models."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from core.models import TrackerModel, UtcDatetime


class SearchFilters(TrackerModel):
    """Optional constraints applied before scoring."""

    start: UtcDatetime | None = None
    end: UtcDatetime | None = None
    data_types: list[str] | None = None
    relevance_threshold: float | None = None


class SearchResult(TrackerModel):
    id: str
    type: str
    content: str
    relevance_score: float
    context: dict[str, Any] = Field(default_factory=dict)
    timestamp: UtcDatetime


class ConversationalResponse(TrackerModel):
    """Answer to a natural-language question about indexed activity."""

    answer: str
    confidence: float = Field(ge=0.0, le=1.0)
    sources: list[SearchResult] = Field(default_factory=list)
    follow_up_questions: list[str] = Field(default_factory=list)
    data_insights: list[str] = Field(default_factory=list)
