"""Velocity analysis over weekly progress history."""

from __future__ import annotations

import statistics
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from core.models import Goal
from risk.context import PredictionContext

MAX_SUSTAINABLE_VELOCITY = 0.25
MIN_VELOCITY = 0.01


@dataclass(frozen=True)
class VelocityAnalysis:
    current: float
    required: float
    trend: float
    consistency: float
    sustainability: float
    confidence: float


def linear_trend(values: Sequence[float]) -> float:
    """Least-squares slope of values against their index."""
    if len(values) < 2:
        return 0.0
    points = list(values)
    slope, _intercept = statistics.linear_regression(list(range(len(points))), points)
    return slope


def consistency_of(values: Sequence[float]) -> float:
    """One minus the coefficient of variation, clamped to [0, 1]."""
    if not values:
        return 0.0
    mean = statistics.fmean(values)
    if mean <= 0:
        return 0.0
    return max(0.0, min(1.0, 1.0 - statistics.pstdev(values) / mean))


def weeks_remaining(goal: Goal, now: datetime, default_horizon_days: int = 90) -> float:
    due = goal.due or now + timedelta(days=default_horizon_days)
    return max(1.0, (due - now) / timedelta(weeks=1))


def analyze_velocity(
    goal: Goal,
    context: PredictionContext,
    now: datetime,
    max_sustainable: float = MAX_SUSTAINABLE_VELOCITY,
    default_horizon_days: int = 90,
) -> VelocityAnalysis:
    history = context.velocities
    recent = history[-2:]
    current = statistics.fmean(recent) if recent else 0.0
    required = (1.0 - context.progress) / weeks_remaining(goal, now, default_horizon_days)
    consistency = consistency_of(history)
    sustainability = max(0.0, 1.0 - required / max_sustainable)
    ratio = min(1.0, max(0.0, current) / max(MIN_VELOCITY, required))
    confidence = min(0.95, consistency * sustainability * ratio)
    return VelocityAnalysis(
        current=current,
        required=required,
        trend=linear_trend(history[-4:]),
        consistency=consistency,
        sustainability=sustainability,
        confidence=confidence,
    )
