"""Risk predictor inputs and outputs."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from core.models import TrackerModel, UtcDatetime

RiskLevel = Literal["low", "medium", "high", "critical"]
Impact = Literal["low", "medium", "high"]
RiskFactorType = Literal["velocity", "consistency", "dependencies", "resource", "scope"]

RISK_LEVELS: tuple[str, ...] = ("low", "medium", "high", "critical")


class ResourceConstraints(TrackerModel):
    """Capacity available to a goal."""

    weekly_hours: float = 10.0
    energy_capacity: float = Field(default=0.8, ge=0.0, le=1.0)
    skill_level: float = Field(default=0.7, ge=0.0, le=1.0)
    external_factors: list[str] = Field(
        default_factory=lambda: ["stakeholder_availability", "resource_competition"]
    )


class RiskFactor(TrackerModel):
    type: RiskFactorType
    description: str
    impact: Impact
    mitigation: str = ""


class GoalRiskAssessment(TrackerModel):
    """Deadline risk for one goal."""

    goal_id: str
    risk_level: RiskLevel
    confidence: float = Field(ge=0.0, le=0.95)
    current_velocity: float
    required_velocity: float
    estimated_completion: UtcDatetime
    risk_factors: list[RiskFactor] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    velocity_source: Literal["history", "cold_start", "fallback"] = "history"


class ScenarioOutcome(TrackerModel):
    completion: UtcDatetime
    probability: float = Field(ge=0.0, le=1.0)


class TrajectoryScenarios(TrackerModel):
    conservative: ScenarioOutcome
    realistic: ScenarioOutcome
    optimistic: ScenarioOutcome


class PredictedMilestone(TrackerModel):
    milestone: str
    predicted_date: UtcDatetime


class TrajectoryPrediction(TrackerModel):
    """Completion-date distribution summarized into three scenarios."""

    goal_id: str
    scenarios: TrajectoryScenarios
    key_milestones: list[PredictedMilestone] = Field(default_factory=list)
    blockers: list[str] = Field(default_factory=list)
