"""Plan models produced by goal decomposition."""

from __future__ import annotations

from pydantic import Field

from core.models import Goal, Task, TimeBlock, TrackerModel, UtcDatetime


class Milestone(TrackerModel):
    """Intermediate checkpoint between now and the goal deadline."""

    id: str
    goal_id: str
    title: str
    description: str = ""
    deadline: UtcDatetime
    progress: float = Field(default=0.0, ge=0.0, le=100.0)
    dependencies: list[str] = Field(default_factory=list)
    task_ids: list[str] = Field(default_factory=list)


class TimeSlot(TrackerModel):
    """Recurring weekly slot, times as ``HH:MM``."""

    start: str
    end: str
    days: list[str] = Field(default_factory=list)


class WeeklyScheduleRecommendation(TrackerModel):
    """Suggested weekly effort for one goal."""

    goal_id: str
    recommended_hours_per_week: float
    preferred_days: list[str] = Field(default_factory=list)
    preferred_time_slots: list[TimeSlot] = Field(default_factory=list)
    reasoning: str = ""
    risk_level: str | None = None


class GoalDecomposition(TrackerModel):
    """Full plan for a goal, regenerated wholesale on every decomposition."""

    goal: Goal
    strategy: str
    milestones: list[Milestone] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    time_blocks: list[TimeBlock] = Field(default_factory=list)
    weekly_schedule: WeeklyScheduleRecommendation
