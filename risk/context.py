"""Prediction context: progress, velocity history and constraints.

``historical_data`` entries are mappings (or objects with the same
attributes) of two shapes:

- ``{"velocity": 0.08}``: an explicit weekly velocity as a progress fraction;
- ``{"timestamp": ..., "progress": 42}``: a progress snapshot in percent.

Entries carrying a ``goal_id`` / ``goalId`` for another goal are ignored.
Snapshots are bucketed by week and turned into per-week deltas. With fewer
than two usable values the configured cold-start curve is used instead.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError

from core.errors import RiskAssessmentError
from core.models import Goal, KeyResult, UtcDatetime
from risk.models import ResourceConstraints

logger = logging.getLogger("planwise.risk")

COLD_START_VELOCITIES = [0.05, 0.10, 0.15, 0.12]

# Relative historical performance by calendar month (1 = January).
SEASONAL_FACTORS: dict[int, float] = {
    1: 0.3,
    2: 0.4,
    3: 0.6,
    4: 0.7,
    5: 0.8,
    6: 0.9,
    7: 0.7,
    8: 0.6,
    9: 0.8,
    10: 0.9,
    11: 0.7,
    12: 0.4,
}

_TIMESTAMP = TypeAdapter(UtcDatetime)


@dataclass(frozen=True)
class RiskPattern:
    """Keyword-triggered failure pattern with its historical frequency."""

    pattern: str
    frequency: float
    impact: str
    triggers: tuple[str, ...]


DEFAULT_RISK_PATTERNS: list[RiskPattern] = [
    RiskPattern("scope_creep", 0.3, "high", ("complex", "comprehensive", "complete")),
    RiskPattern("skill_gap", 0.4, "medium", ("learn", "new", "unfamiliar")),
    RiskPattern("dependency_delay", 0.2, "high", ("approval", "review", "stakeholder")),
]


@dataclass
class PredictionContext:
    goal_id: str
    progress: float
    velocities: list[float]
    velocity_source: str
    constraints: ResourceConstraints
    seasonal_factors: dict[int, float] = field(default_factory=lambda: dict(SEASONAL_FACTORS))
    risk_patterns: list[RiskPattern] = field(default_factory=lambda: list(DEFAULT_RISK_PATTERNS))

    @property
    def cold_start(self) -> bool:
        return self.velocity_source == "cold_start"


def current_progress(key_results: Sequence[KeyResult]) -> float:
    """Mean key-result progress as a fraction in [0, 1]."""
    if not key_results:
        return 0.0
    total = sum(kr.progress or 0.0 for kr in key_results)
    return max(0.0, min(1.0, total / (len(key_results) * 100)))


def _field(item: Any, *names: str) -> Any:
    for name in names:
        if isinstance(item, dict):
            if name in item:
                return item[name]
        elif hasattr(item, name):
            return getattr(item, name)
    return None


def _for_goal(item: Any, goal_id: str) -> bool:
    owner = _field(item, "goal_id", "goalId")
    return owner is None or owner == goal_id


def snapshot_deltas(snapshots: Sequence[tuple[datetime, float]]) -> list[float]:
    """Weekly progress deltas (as fractions) from percent snapshots."""
    if not snapshots:
        return []
    ordered = sorted(snapshots, key=lambda snap: snap[0])
    origin = ordered[0][0]
    weekly: dict[int, float] = {}
    for stamp, progress in ordered:
        weekly[(stamp - origin).days // 7] = progress
    weeks = sorted(weekly)
    deltas: list[float] = []
    for previous, current in zip(weeks, weeks[1:]):
        deltas.append((weekly[current] - weekly[previous]) / 100.0 / (current - previous))
    return deltas


def velocity_history(
    historical_data: Sequence[Any] | None,
    goal_id: str,
    cold_start: Sequence[float] = COLD_START_VELOCITIES,
) -> tuple[list[float], str]:
    """Return weekly velocities and where they came from."""
    velocities: list[float] = []
    snapshots: list[tuple[datetime, float]] = []
    for item in historical_data or []:
        if not _for_goal(item, goal_id):
            continue
        velocity = _field(item, "velocity")
        if velocity is not None:
            velocities.append(float(velocity))
            continue
        stamp = _field(item, "timestamp", "date", "created_at", "createdAt")
        progress = _field(item, "progress")
        if stamp is None or progress is None:
            continue
        try:
            snapshots.append((_TIMESTAMP.validate_python(stamp), float(progress)))
        except (ValidationError, TypeError, ValueError) as exc:
            raise RiskAssessmentError(f"Malformed progress snapshot for goal {goal_id}: {item!r}") from exc

    velocities.extend(snapshot_deltas(snapshots))
    if len(velocities) >= 2:
        return velocities, "history"
    logger.debug("Goal %s has %d velocity points; using cold-start curve", goal_id, len(velocities))
    return list(cold_start), "cold_start"


def default_constraints(goal: Goal, config: dict[str, Any] | None = None) -> ResourceConstraints:
    cfg = config or {}
    return ResourceConstraints(
        weekly_hours=goal.time_allocation_target or float(cfg.get("default_weekly_hours", 10)),
        energy_capacity=float(cfg.get("energy_capacity", 0.8)),
        skill_level=float(cfg.get("skill_level", 0.7)),
    )


def build_prediction_context(
    goal: Goal,
    key_results: Sequence[KeyResult],
    historical_data: Sequence[Any] | None,
    constraints: ResourceConstraints | None = None,
    config: dict[str, Any] | None = None,
    risk_patterns: Sequence[RiskPattern] | None = None,
) -> PredictionContext:
    cfg = config or {}
    cold_start = cfg.get("cold_start_velocities") or COLD_START_VELOCITIES
    velocities, source = velocity_history(historical_data, goal.id, cold_start)
    return PredictionContext(
        goal_id=goal.id,
        progress=current_progress(key_results),
        velocities=velocities,
        velocity_source=source,
        constraints=constraints or default_constraints(goal, cfg),
        risk_patterns=list(risk_patterns) if risk_patterns is not None else list(DEFAULT_RISK_PATTERNS),
    )
