"""Milestone generation strategies.

Each strategy turns a goal into an ordered list of milestones with raw
deadlines measured from ``now``. Dependency chaining and deadline
validation happen afterwards in the decomposer.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timedelta

from core.models import Goal, KeyResult
from planner.execution_plan import Milestone
from planner.rules import (
    HABIT_BASED,
    MILESTONE_BASED,
    PROJECT_BASED,
    SKILL_BASED,
    TIME_BASED,
    PlannerTables,
    first_match,
)

Strategy = Callable[[Goal, Sequence[KeyResult], datetime, PlannerTables], list[Milestone]]

DAYS_PER_SKILL = 21
DAYS_PER_SUB_PROJECT = 45
DAYS_PER_QUARTER = 90
DAYS_PER_GENERIC_PHASE = 30
MIN_PHASES = 3
MAX_PHASES = 8


def goal_timeframe_days(goal: Goal, now: datetime, tables: PlannerTables, default_days: int = 90) -> float:
    """Days available for the goal, at least 30 when a deadline is set."""
    if goal.due is not None:
        return max(30, (goal.due - now).days)
    value = first_match(goal.title.lower(), tables.timeframes, default_days)
    return float(value)  # type: ignore[arg-type]


def time_based(goal: Goal, key_results: Sequence[KeyResult], now: datetime, tables: PlannerTables) -> list[Milestone]:
    timeframe = goal_timeframe_days(goal, now, tables)
    phases = max(MIN_PHASES, min(MAX_PHASES, int(timeframe // 30)))
    milestones: list[Milestone] = []
    for i in range(phases):
        milestones.append(
            Milestone(
                id=f"milestone-{goal.id}-phase-{i + 1}",
                goal_id=goal.id,
                title=f"{goal.title} - Phase {i + 1}",
                description=f"Complete phase {i + 1} of {phases} for {goal.title}",
                deadline=now + timedelta(days=(i + 1) * timeframe / phases),
            )
        )
    return milestones


def generic_phases(goal: Goal, now: datetime, tables: PlannerTables) -> list[Milestone]:
    milestones: list[Milestone] = []
    for i, phase in enumerate(tables.generic_phases):
        milestones.append(
            Milestone(
                id=f"milestone-{goal.id}-generic-{i}",
                goal_id=goal.id,
                title=f"{phase} Phase",
                description=f"Complete {phase.lower()} phase of {goal.title}",
                deadline=now + timedelta(days=(i + 1) * DAYS_PER_GENERIC_PHASE),
            )
        )
    return milestones


def milestone_based(
    goal: Goal, key_results: Sequence[KeyResult], now: datetime, tables: PlannerTables
) -> list[Milestone]:
    """One milestone per key result, evenly spaced up to the goal deadline."""
    if not key_results:
        return generic_phases(goal, now, tables)
    goal_deadline = goal.due or now + timedelta(days=90)
    interval = (goal_deadline - now) / len(key_results)
    milestones: list[Milestone] = []
    for i, kr in enumerate(key_results):
        milestones.append(
            Milestone(
                id=f"milestone-{goal.id}-kr-{kr.id}",
                goal_id=goal.id,
                title=kr.title,
                description=kr.description or f"Achieve key result: {kr.title}",
                deadline=now + interval * (i + 1),
                progress=max(0.0, min(100.0, kr.progress)),
            )
        )
    return milestones


def skill_based(goal: Goal, key_results: Sequence[KeyResult], now: datetime, tables: PlannerTables) -> list[Milestone]:
    skills = first_match(goal.text, tables.skills, tables.generic_skills)
    milestones: list[Milestone] = []
    for i, skill in enumerate(skills):  # type: ignore[arg-type]
        milestones.append(
            Milestone(
                id=f"milestone-{goal.id}-skill-{i}",
                goal_id=goal.id,
                title=f"Master {skill}",
                description=f"Develop {skill} skill for {goal.title}",
                deadline=now + timedelta(days=(i + 1) * DAYS_PER_SKILL),
            )
        )
    return milestones


def project_based(
    goal: Goal, key_results: Sequence[KeyResult], now: datetime, tables: PlannerTables
) -> list[Milestone]:
    projects = first_match(goal.title.lower(), tables.sub_projects, tables.generic_sub_projects)
    milestones: list[Milestone] = []
    for i, project in enumerate(projects):  # type: ignore[arg-type]
        milestones.append(
            Milestone(
                id=f"milestone-{goal.id}-project-{i}",
                goal_id=goal.id,
                title=f"Complete {project}",
                description=f"Finish {project} component of {goal.title}",
                deadline=now + timedelta(days=(i + 1) * DAYS_PER_SUB_PROJECT),
            )
        )
    return milestones


def habit_based(goal: Goal, key_results: Sequence[KeyResult], now: datetime, tables: PlannerTables) -> list[Milestone]:
    """Four quarterly consistency checkpoints."""
    habits = first_match(goal.text, tables.habits, tables.generic_habits)
    habit_list = ", ".join(habits)  # type: ignore[arg-type]
    milestones: list[Milestone] = []
    for i in range(4):
        milestones.append(
            Milestone(
                id=f"milestone-{goal.id}-habit-q{i + 1}",
                goal_id=goal.id,
                title=f"Q{i + 1} Habit Consistency",
                description=f"Maintain {habit_list} for {goal.title} - Quarter {i + 1}",
                deadline=now + timedelta(days=(i + 1) * DAYS_PER_QUARTER),
            )
        )
    return milestones


STRATEGIES: dict[str, Strategy] = {
    MILESTONE_BASED: milestone_based,
    SKILL_BASED: skill_based,
    HABIT_BASED: habit_based,
    PROJECT_BASED: project_based,
    TIME_BASED: time_based,
}
