"""Rolling semantic context and index statistics."""

from __future__ import annotations

from pydantic import BaseModel, Field

TIME_OF_DAY = ("morning", "afternoon", "evening")


def time_of_day(hour: int) -> str:
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    return "evening"


class SemanticContext(BaseModel):
    """What the index has learned about the user so far."""

    active_goals: dict[str, str] = Field(default_factory=dict)
    working_patterns: dict[str, int] = Field(default_factory=lambda: {slot: 0 for slot in TIME_OF_DAY})
    tags: dict[str, int] = Field(default_factory=dict)

    def dominant_working_time(self) -> str | None:
        if not any(self.working_patterns.values()):
            return None
        return max(TIME_OF_DAY, key=lambda slot: self.working_patterns.get(slot, 0))


class IndexStats(BaseModel):
    data_points: int = 0
    connections: int = 0
    nodes: int = 0
    confidence: float = 0.0
    coverage: float = 0.0
