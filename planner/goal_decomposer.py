"""Goal decomposition into milestones, tasks and a schedule proposal."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any

from core.errors import DecompositionError
from core.models import Goal, KeyResult, Task, TimeBlock, utc_now
from planner.dependency_graph import DependencyGraph
from planner.execution_plan import GoalDecomposition, Milestone, WeeklyScheduleRecommendation
from planner.rules import PlannerTables, select_strategy
from planner.scheduling import propose_time_blocks, recommend_weekly_schedule
from planner.strategies import STRATEGIES

logger = logging.getLogger("planwise.planner")


class GoalDecomposer:
    """Turn a goal into a regenerated plan.

    Every call builds the plan from scratch; nothing is patched in place.
    A risk predictor, when supplied, only annotates the weekly schedule.
    """

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        tables: PlannerTables | None = None,
        risk_predictor: Any | None = None,
    ) -> None:
        cfg = config or {}
        self.config = cfg
        self.tables = tables or PlannerTables()
        self.risk_predictor = risk_predictor
        self.min_spacing_days = int(cfg.get("min_spacing_days", 14))
        self.rebase_step_days = int(cfg.get("rebase_step_days", 7))
        self.weekly_hours_cap = float(cfg.get("weekly_hours_cap", 10))

    def decompose(
        self,
        goal: Goal,
        key_results: Sequence[KeyResult] = (),
        now: datetime | None = None,
    ) -> GoalDecomposition:
        """Build milestones, tasks, time blocks and a weekly schedule.

        Raises:
            DecompositionError: the goal is invalid or any step failed.
        """
        if not isinstance(goal, Goal) or not goal.title.strip():
            raise DecompositionError("Expected a Goal with a non-empty title.")
        current = utc_now(now)
        try:
            strategy = self.select_strategy(goal, key_results)
            milestones = self._milestones_for(strategy, goal, key_results, current)
            tasks = self.generate_tasks(milestones)
            time_blocks = self.generate_time_blocks(tasks, goal, current)
            schedule = self.recommend_schedule(goal, tasks, current)
            self._annotate_risk(schedule, goal, key_results, tasks, current)
            plan = GoalDecomposition(
                goal=goal,
                strategy=strategy,
                milestones=milestones,
                tasks=tasks,
                time_blocks=time_blocks,
                weekly_schedule=schedule,
            )
        except DecompositionError:
            raise
        except Exception as exc:
            logger.error("Decomposition of goal %s failed: %s", goal.id, exc)
            raise DecompositionError(f"Failed to decompose goal '{goal.title}': {exc}") from exc

        logger.info(
            "Decomposed goal %s with %s: %d milestones, %d tasks, %d blocks",
            goal.id,
            strategy,
            len(milestones),
            len(tasks),
            len(time_blocks),
        )
        return plan

    def select_strategy(self, goal: Goal, key_results: Sequence[KeyResult] = ()) -> str:
        return select_strategy(self.tables.strategy_rules, goal, key_results, self.tables.default_strategy)

    def generate_milestones(
        self,
        goal: Goal,
        key_results: Sequence[KeyResult] = (),
        now: datetime | None = None,
    ) -> list[Milestone]:
        current = utc_now(now)
        return self._milestones_for(self.select_strategy(goal, key_results), goal, key_results, current)

    def _milestones_for(
        self,
        strategy: str,
        goal: Goal,
        key_results: Sequence[KeyResult],
        now: datetime,
    ) -> list[Milestone]:
        builder = STRATEGIES.get(strategy)
        if builder is None:
            raise DecompositionError(f"Unknown decomposition strategy: {strategy}")
        milestones = builder(goal, key_results, now, self.tables)
        logger.debug("Strategy %s produced %d milestones for %s", strategy, len(milestones), goal.id)
        self._chain_dependencies(milestones)
        return self._validate_deadlines(milestones, goal, now)

    @staticmethod
    def _chain_dependencies(milestones: list[Milestone]) -> None:
        graph = DependencyGraph.linear_chain([m.id for m in milestones])
        for milestone in milestones:
            milestone.dependencies = graph.dependencies_of(milestone.id)

    def _validate_deadlines(self, milestones: list[Milestone], goal: Goal, now: datetime) -> list[Milestone]:
        """Apply the spacing floor, then the goal-deadline ceiling.

        Milestone ``i`` lands no earlier than ``now + spacing*(i+1)`` days.
        With a goal deadline, it lands no later than
        ``deadline - step*(n-1-i)`` days. Both bounds grow strictly with
        ``i``, so the clamped list keeps its order and ends on or before the
        deadline.
        """
        count = len(milestones)
        for i, milestone in enumerate(milestones):
            floor = now + timedelta(days=self.min_spacing_days * (i + 1))
            deadline = max(milestone.deadline, floor)
            if goal.due is not None:
                ceiling = goal.due - timedelta(days=self.rebase_step_days * (count - 1 - i))
                if deadline > ceiling:
                    logger.debug("Re-basing milestone %s to %s", milestone.id, ceiling.isoformat())
                    deadline = ceiling
            milestone.deadline = deadline
        return milestones

    def generate_tasks(self, milestones: Sequence[Milestone]) -> list[Task]:
        """Instantiate the template set for each milestone and link the ids."""
        tasks: list[Task] = []
        for milestone in milestones:
            words = milestone.title.split()
            tag = words[0].lower() if words else "milestone"
            generated = [
                Task(
                    id=f"task-{milestone.id}-{i}",
                    title=template.title,
                    description=f"Part of milestone: {milestone.title}",
                    estimated_minutes=template.estimated_minutes,
                    priority=template.priority,  # type: ignore[arg-type]
                    status="todo",
                    goal_id=milestone.goal_id,
                    goal_ids=[milestone.goal_id],
                    milestone_id=milestone.id,
                    tags=[tag],
                    due_date=milestone.deadline,
                )
                for i, template in enumerate(self.tables.templates_for(milestone.title))
            ]
            milestone.task_ids = [task.id for task in generated]
            tasks.extend(generated)
        return tasks

    def generate_time_blocks(
        self,
        tasks: Sequence[Task],
        goal: Goal,
        now: datetime | None = None,
    ) -> list[TimeBlock]:
        return propose_time_blocks(tasks, goal, utc_now(now), self.config)

    def recommend_schedule(
        self,
        goal: Goal,
        tasks: Sequence[Task],
        now: datetime | None = None,
    ) -> WeeklyScheduleRecommendation:
        return recommend_weekly_schedule(goal, tasks, utc_now(now), self.tables, self.weekly_hours_cap)

    def _annotate_risk(
        self,
        schedule: WeeklyScheduleRecommendation,
        goal: Goal,
        key_results: Sequence[KeyResult],
        tasks: Sequence[Task],
        now: datetime,
    ) -> None:
        if self.risk_predictor is None:
            return
        assessment = self.risk_predictor.assess_goal_risk(goal, key_results, [], tasks=tasks, now=now)
        schedule.risk_level = assessment.risk_level
        schedule.reasoning = f"{schedule.reasoning} Current deadline risk is {assessment.risk_level}."
