"""Monte Carlo trajectory simulation."""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from core.models import Goal
from risk.context import PredictionContext
from risk.models import PredictedMilestone, ScenarioOutcome, TrajectoryScenarios
from risk.velocity import MIN_VELOCITY

MILESTONE_FRACTIONS = (0.25, 0.5, 0.75, 0.9)
DEFAULT_BASE_VELOCITY = 0.1


@dataclass(frozen=True)
class MonteCarloSettings:
    iterations: int = 1000
    velocity_noise: float = 0.2
    fatigue_min: float = 0.9
    fatigue_max: float = 1.0

    @classmethod
    def from_config(cls, cfg: dict[str, Any] | None) -> MonteCarloSettings:
        cfg = cfg or {}
        return cls(
            iterations=max(1, int(cfg.get("iterations", 1000))),
            velocity_noise=float(cfg.get("velocity_noise", 0.2)),
            fatigue_min=float(cfg.get("fatigue_min", 0.9)),
            fatigue_max=float(cfg.get("fatigue_max", 1.0)),
        )


def simulate_weeks(
    remaining: float,
    base_velocity: float,
    settings: MonteCarloSettings,
    rng: random.Random,
) -> list[float]:
    """Sorted weeks-to-complete samples."""
    samples: list[float] = []
    for _ in range(settings.iterations):
        variation = 1.0 + (rng.random() - 0.5) * 2 * settings.velocity_noise
        fatigue = rng.uniform(settings.fatigue_min, settings.fatigue_max)
        effective = base_velocity * variation * fatigue
        samples.append(remaining / max(MIN_VELOCITY, effective))
    samples.sort()
    return samples


def scenarios_from_samples(samples: Sequence[float], now: datetime) -> TrajectoryScenarios:
    count = len(samples)

    def at(fraction: float) -> datetime:
        weeks = samples[min(count - 1, int(count * fraction))]
        return now + timedelta(weeks=weeks)

    return TrajectoryScenarios(
        optimistic=ScenarioOutcome(completion=at(0.1), probability=0.9),
        realistic=ScenarioOutcome(completion=at(0.5), probability=0.5),
        conservative=ScenarioOutcome(completion=at(0.9), probability=0.1),
    )


def run_monte_carlo(
    progress: float,
    velocities: Sequence[float],
    now: datetime,
    settings: MonteCarloSettings,
    rng: random.Random,
) -> TrajectoryScenarios:
    base = velocities[-1] if velocities and velocities[-1] > 0 else DEFAULT_BASE_VELOCITY
    remaining = max(0.0, 1.0 - progress)
    return scenarios_from_samples(simulate_weeks(remaining, base, settings, rng), now)


def predict_key_milestones(
    scenarios: TrajectoryScenarios, progress: float, now: datetime
) -> list[PredictedMilestone]:
    """Interpolate 25/50/75/90% dates against the realistic timeline."""
    remaining = 1.0 - progress
    if remaining <= 0:
        return []
    span = scenarios.realistic.completion - now
    milestones: list[PredictedMilestone] = []
    for fraction in MILESTONE_FRACTIONS:
        if fraction > progress:
            milestones.append(
                PredictedMilestone(
                    milestone=f"{fraction:.0%} Complete",
                    predicted_date=now + span * ((fraction - progress) / remaining),
                )
            )
    return milestones


def predict_blockers(goal: Goal, context: PredictionContext, scenarios: TrajectoryScenarios) -> list[str]:
    blockers: list[str] = []
    if context.constraints.weekly_hours < 15:
        blockers.append("Time allocation shortage will likely cause delays")
    if context.constraints.skill_level < 0.6:
        blockers.append("Skill gaps may require additional learning time")
    if goal.due is not None and scenarios.realistic.completion > goal.due:
        blockers.append("Current velocity insufficient to meet deadline")
    return blockers
