"""Deadline risk assessment and trajectory prediction for goals."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any

from core.cache import TTLCache
from core.errors import RiskAssessmentError
from core.models import Goal, KeyResult, Task, utc_now
from risk.bottlenecks import analyze_bottlenecks, bottleneck_factors
from risk.context import PredictionContext, RiskPattern, build_prediction_context, default_constraints
from risk.models import (
    GoalRiskAssessment,
    PredictedMilestone,
    ResourceConstraints,
    RiskFactor,
    ScenarioOutcome,
    TrajectoryPrediction,
    TrajectoryScenarios,
)
from risk.scoring import consolidate_factors, recommendations, score_risk
from risk.simulation import detect_patterns, run_risk_simulations
from risk.trajectory import (
    MonteCarloSettings,
    predict_blockers,
    predict_key_milestones,
    run_monte_carlo,
)
from risk.velocity import MIN_VELOCITY, analyze_velocity

logger = logging.getLogger("planwise.risk")


class RiskPredictor:
    """Estimate deadline risk from progress history and constraints.

    Public operations never raise: any internal failure is logged and
    replaced by a fixed low-confidence fallback.
    """

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        rng: random.Random | None = None,
        risk_patterns: Sequence[RiskPattern] | None = None,
    ) -> None:
        cfg = config or {}
        self.config = cfg
        self.risk_patterns = list(risk_patterns) if risk_patterns is not None else None
        self.max_sustainable = float(cfg.get("max_sustainable_velocity", 0.25))
        self.historical_accuracy = float(cfg.get("historical_accuracy", 0.75))
        self.cold_start_cap = float(cfg.get("cold_start_confidence_cap", 0.5))
        self.default_horizon_days = int(cfg.get("default_horizon_days", 90))
        mc_cfg = cfg.get("monte_carlo") or {}
        self.monte_carlo = MonteCarloSettings.from_config(mc_cfg)
        self.rng = rng or random.Random(mc_cfg.get("seed"))
        ttl = cfg.get("cache_ttl_seconds")
        self.cache = TTLCache(float(ttl)) if ttl else None

    # ── Public operations ────────────────────────────────────────────

    def build_context(
        self,
        goal: Goal,
        key_results: Sequence[KeyResult] = (),
        historical_data: Sequence[Any] | None = None,
        constraints: ResourceConstraints | None = None,
    ) -> PredictionContext:
        return build_prediction_context(
            goal,
            key_results,
            historical_data,
            constraints=constraints,
            config=self.config,
            risk_patterns=self.risk_patterns,
        )

    def assess_goal_risk(
        self,
        goal: Goal,
        key_results: Sequence[KeyResult] = (),
        historical_data: Sequence[Any] | None = None,
        tasks: Sequence[Task] | None = None,
        constraints: ResourceConstraints | None = None,
        now: datetime | None = None,
    ) -> GoalRiskAssessment:
        current = utc_now(now)
        goal_id = getattr(goal, "id", "unknown")
        if self.cache is not None:
            cached = self.cache.get(f"assessment:{goal_id}")
            if cached is not None:
                logger.debug("Risk assessment cache hit for %s", goal_id)
                return cached
        try:
            assessment = self._assess(goal, key_results, historical_data, tasks or [], constraints, current)
        except Exception as exc:
            logger.warning("Risk assessment for goal %s failed, using fallback: %s", goal_id, exc)
            return self.fallback_assessment(goal_id, current)
        if self.cache is not None:
            self.cache.set(f"assessment:{goal_id}", assessment)
        return assessment

    def predict_trajectory(
        self,
        goal: Goal,
        current_progress: float,
        historical_data: Sequence[Any] | None = None,
        now: datetime | None = None,
    ) -> TrajectoryPrediction:
        current = utc_now(now)
        goal_id = getattr(goal, "id", "unknown")
        try:
            progress = float(current_progress)
            if not 0.0 <= progress <= 1.0:
                raise RiskAssessmentError(f"Progress must be a fraction in [0, 1], got {progress}")
            context = self.build_context(goal, (), historical_data)
            scenarios = run_monte_carlo(progress, context.velocities, current, self.monte_carlo, self.rng)
            prediction = TrajectoryPrediction(
                goal_id=goal.id,
                scenarios=scenarios,
                key_milestones=predict_key_milestones(scenarios, progress, current),
                blockers=predict_blockers(goal, context, scenarios),
            )
        except Exception as exc:
            logger.warning("Trajectory prediction for goal %s failed, using fallback: %s", goal_id, exc)
            return self.fallback_trajectory(goal_id, current)
        logger.info(
            "Trajectory for %s: realistic completion %s",
            goal_id,
            prediction.scenarios.realistic.completion.date().isoformat(),
        )
        return prediction

    def identify_bottlenecks(
        self,
        goal: Goal,
        tasks: Sequence[Task],
        constraints: ResourceConstraints | None = None,
    ) -> list[RiskFactor]:
        try:
            analysis = analyze_bottlenecks(goal, tasks, constraints or default_constraints(goal, self.config))
        except Exception as exc:
            logger.warning("Bottleneck analysis for goal %s failed: %s", getattr(goal, "id", "unknown"), exc)
            return []
        return bottleneck_factors(analysis)

    def invalidate(self, goal_id: str) -> None:
        if self.cache is not None:
            self.cache.invalidate(f"assessment:{goal_id}")

    # ── Internals ────────────────────────────────────────────────────

    def _assess(
        self,
        goal: Goal,
        key_results: Sequence[KeyResult],
        historical_data: Sequence[Any] | None,
        tasks: Sequence[Task],
        constraints: ResourceConstraints | None,
        now: datetime,
    ) -> GoalRiskAssessment:
        context = self.build_context(goal, key_results, historical_data, constraints)
        velocity = analyze_velocity(goal, context, now, self.max_sustainable, self.default_horizon_days)
        bottlenecks = analyze_bottlenecks(goal, tasks, context.constraints)
        simulations = run_risk_simulations(context, velocity)
        patterns = detect_patterns(goal, context, now)
        cap = self.cold_start_cap if context.cold_start else 0.95
        risk = score_risk(velocity, bottlenecks, simulations, patterns, self.historical_accuracy, cap)

        weeks_left = (1.0 - context.progress) / max(MIN_VELOCITY, velocity.current)
        assessment = GoalRiskAssessment(
            goal_id=goal.id,
            risk_level=risk.level,  # type: ignore[arg-type]
            confidence=risk.confidence,
            current_velocity=velocity.current,
            required_velocity=velocity.required,
            estimated_completion=now + timedelta(weeks=weeks_left),
            risk_factors=consolidate_factors(velocity, bottlenecks, simulations, patterns),
            recommendations=recommendations(velocity, bottlenecks, simulations, risk.level),
            velocity_source=context.velocity_source,  # type: ignore[arg-type]
        )
        logger.info(
            "Goal %s risk %s (score %.2f, confidence %.2f, velocity from %s)",
            goal.id,
            risk.level,
            risk.score,
            risk.confidence,
            context.velocity_source,
        )
        return assessment

    @staticmethod
    def fallback_assessment(goal_id: str, now: datetime) -> GoalRiskAssessment:
        return GoalRiskAssessment(
            goal_id=goal_id,
            risk_level="medium",
            confidence=0.3,
            current_velocity=0.1,
            required_velocity=0.15,
            estimated_completion=now + timedelta(days=60),
            risk_factors=[
                RiskFactor(
                    type="velocity",
                    description="Insufficient data for accurate risk assessment",
                    impact="medium",
                    mitigation="Collect more progress data and establish tracking metrics",
                )
            ],
            recommendations=["Set up proper progress tracking", "Define measurable milestones"],
            velocity_source="fallback",
        )

    @staticmethod
    def fallback_trajectory(goal_id: str, now: datetime) -> TrajectoryPrediction:
        realistic = now + timedelta(days=90)
        return TrajectoryPrediction(
            goal_id=goal_id,
            scenarios=TrajectoryScenarios(
                optimistic=ScenarioOutcome(completion=realistic - timedelta(days=30), probability=0.9),
                realistic=ScenarioOutcome(completion=realistic, probability=0.5),
                conservative=ScenarioOutcome(completion=realistic + timedelta(days=30), probability=0.1),
            ),
            key_milestones=[PredictedMilestone(milestone="50% Complete", predicted_date=now + timedelta(days=45))],
            blockers=["Insufficient progress data for accurate prediction"],
        )
