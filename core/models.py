"""Entity shapes exchanged with the external store.

Records arrive from the tracker in camelCase (``targetDate``,
``estimatedMinutes``); the models accept either spelling and always expose
snake_case attributes.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Priority = Literal["low", "medium", "high", "critical"]
Complexity = Literal["simple", "moderate", "complex", "expert"]

PRIORITY_RANK: dict[str, int] = {"critical": 0, "high": 1, "medium": 2, "low": 3}


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so all comparisons are offset-aware."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def utc_now(now: datetime | None = None) -> datetime:
    """Return ``now`` normalized to an aware datetime, defaulting to the clock."""
    return as_utc(now) if now is not None else datetime.now(UTC)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class TrackerModel(BaseModel):
    """Base model accepting camelCase or snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Goal(TrackerModel):
    """A user goal."""

    id: str
    title: str
    description: str = ""
    priority: Priority = "medium"
    status: str = "active"
    target_date: UtcDatetime | None = None
    deadline: UtcDatetime | None = None
    total_hours_target: float | None = None
    time_allocation_target: float | None = None
    complexity: Complexity = "moderate"

    @property
    def due(self) -> datetime | None:
        """Deadline, falling back to the target date."""
        return self.deadline or self.target_date

    @property
    def text(self) -> str:
        """Lowercased title and description for keyword matching."""
        return f"{self.title} {self.description}".lower()


class KeyResult(TrackerModel):
    """Measurable key result attached to a goal."""

    id: str
    goal_id: str = ""
    title: str
    description: str = ""
    progress: float = 0.0
    target_value: float | None = None
    current_value: float | None = None


class Task(TrackerModel):
    """Unit of work, either consumed from the store or generated."""

    id: str
    title: str
    description: str = ""
    estimated_minutes: int | None = None
    priority: Priority = "medium"
    status: str = "todo"
    goal_id: str | None = None
    goal_ids: list[str] = Field(default_factory=list)
    milestone_id: str | None = None
    tags: list[str] = Field(default_factory=list)
    due_date: UtcDatetime | None = None

    @property
    def minutes(self) -> int:
        """Estimated minutes, one hour when unknown."""
        return self.estimated_minutes or 60

    def references_goal(self, goal_id: str) -> bool:
        return self.goal_id == goal_id or goal_id in self.goal_ids


class TimeBlock(TrackerModel):
    """Calendar block; proposals produced here are never authoritative."""

    id: str
    title: str
    description: str = ""
    start_time: UtcDatetime
    end_time: UtcDatetime
    type: str = "work"
    status: str = "planned"
    task_ids: list[str] = Field(default_factory=list)
    goal_ids: list[str] = Field(default_factory=list)

    @property
    def duration_minutes(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 60.0
