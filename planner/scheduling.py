"""Provisional time blocks and weekly schedule recommendations."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any

from core.models import PRIORITY_RANK, Goal, Task, TimeBlock
from planner.execution_plan import TimeSlot, WeeklyScheduleRecommendation
from planner.rules import PlannerTables, first_match

FOCUS_PRIORITIES = {"high", "critical"}


def propose_time_blocks(
    tasks: Sequence[Task],
    goal: Goal,
    now: datetime,
    config: dict[str, Any] | None = None,
) -> list[TimeBlock]:
    """Place the highest-priority tasks over a rolling horizon.

    Each day takes the next ``max_blocks_per_day`` unplaced tasks in
    priority order. High and critical tasks anchor at the focus hour,
    everything else at the afternoon hour. A block never starts before the
    previous one ends, so a long morning chain pushes the afternoon block
    back instead of overlapping it. Tasks shorter than ``min_block_minutes``
    are never placed.
    """
    cfg = config or {}
    horizon_days = int(cfg.get("time_block_horizon_days", 7))
    per_day = int(cfg.get("max_blocks_per_day", 3))
    min_minutes = int(cfg.get("min_block_minutes", 30))
    focus_hour = int(cfg.get("focus_start_hour", 9))
    default_hour = int(cfg.get("default_start_hour", 14))

    eligible = [task for task in tasks if task.minutes >= min_minutes]
    queue = sorted(eligible, key=lambda task: PRIORITY_RANK.get(task.priority, len(PRIORITY_RANK)))

    blocks: list[TimeBlock] = []
    cursor: datetime | None = None
    for day_offset in range(horizon_days):
        todays, queue = queue[:per_day], queue[per_day:]
        if not todays:
            break
        day = now + timedelta(days=day_offset)
        for task in todays:
            hour = focus_hour if task.priority in FOCUS_PRIORITIES else default_hour
            start = day.replace(hour=hour, minute=0, second=0, microsecond=0)
            if cursor is not None and cursor > start:
                start = cursor
            end = start + timedelta(minutes=task.minutes)
            cursor = end
            blocks.append(
                TimeBlock(
                    id=f"block-{task.id}-{start.date().isoformat()}",
                    title=task.title,
                    description=f"Proposed for {goal.title}",
                    start_time=start,
                    end_time=end,
                    type="work",
                    status="planned",
                    task_ids=[task.id],
                    goal_ids=[goal.id],
                )
            )
    return blocks


def total_task_hours(tasks: Sequence[Task]) -> float:
    return sum(task.minutes for task in tasks) / 60.0


def preferred_days(goal: Goal, tables: PlannerTables) -> list[str]:
    days = first_match(goal.title.lower(), tables.preferred_days, tables.default_days)
    return list(days)  # type: ignore[call-overload]


def preferred_time_slots(goal: Goal, tables: PlannerTables) -> list[TimeSlot]:
    slots = first_match(goal.title.lower(), tables.preferred_slots, tables.default_slots)
    return [TimeSlot(start=start, end=end, days=list(days)) for start, end, days in slots]  # type: ignore[union-attr]


def schedule_reasoning(goal: Goal, tasks: Sequence[Task], hours_per_week: float, now: datetime) -> str:
    reasons = [f"Allocated {hours_per_week:.1f} hours per week based on {len(tasks)} tasks"]
    if goal.priority in FOCUS_PRIORITIES:
        reasons.append("High priority goal requires consistent daily attention")
    if tasks and total_task_hours(tasks) / len(tasks) > 2:
        reasons.append("Tasks require focused deep work sessions")
    if goal.due is not None:
        days_left = (goal.due - now).days
        reasons.append(f"{days_left} days until deadline requires steady progress")
    return ". ".join(reasons) + "."


def recommend_weekly_schedule(
    goal: Goal,
    tasks: Sequence[Task],
    now: datetime,
    tables: PlannerTables,
    weekly_hours_cap: float = 10.0,
) -> WeeklyScheduleRecommendation:
    hours = min(total_task_hours(tasks) / 4, weekly_hours_cap)
    return WeeklyScheduleRecommendation(
        goal_id=goal.id,
        recommended_hours_per_week=hours,
        preferred_days=preferred_days(goal, tables),
        preferred_time_slots=preferred_time_slots(goal, tables),
        reasoning=schedule_reasoning(goal, tasks, hours, now),
    )
