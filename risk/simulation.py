"""Named risk scenarios and keyword/seasonal pattern risks."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import datetime

from core.models import Goal
from risk.context import PredictionContext
from risk.velocity import VelocityAnalysis

SHORTAGE_WEEKLY_HOURS = 20
PATTERN_IMPACT_WEIGHTS = {"high": 0.9, "medium": 0.6, "low": 0.3}
HIGH_IMPACT_TIERS = {"catastrophic", "major"}


@dataclass
class RiskSimulation:
    scenario: str
    probability: float
    impact: str
    days_to_impact: int
    prevention: list[str] = field(default_factory=list)
    contingency: list[str] = field(default_factory=list)
    early_warnings: list[str] = field(default_factory=list)

    @property
    def high_impact(self) -> bool:
        return self.impact in HIGH_IMPACT_TIERS


@dataclass
class PatternRisk:
    pattern: str
    risk: float
    evidence: list[str] = field(default_factory=list)


def _decline_impact(velocity: VelocityAnalysis) -> str:
    if velocity.current < velocity.required * 0.5:
        return "catastrophic"
    if velocity.current < velocity.required * 0.7:
        return "major"
    return "moderate"


def run_risk_simulations(context: PredictionContext, velocity: VelocityAnalysis) -> list[RiskSimulation]:
    simulations: list[RiskSimulation] = []
    if velocity.trend < 0:
        simulations.append(
            RiskSimulation(
                scenario="Continued Velocity Decline",
                probability=min(1.0, abs(velocity.trend) * 0.7),
                impact=_decline_impact(velocity),
                days_to_impact=14,
                prevention=[
                    "Identify and address root causes of slowdown",
                    "Simplify approach or reduce scope",
                    "Add resources or support",
                    "Improve processes and remove blockers",
                ],
                contingency=[
                    "Extend deadline with stakeholder approval",
                    "Reduce scope to core deliverables",
                    "Bring in additional resources",
                    "Switch to minimum viable approach",
                ],
                early_warnings=[
                    "Two consecutive weeks of declining progress",
                    "Increasing task completion times",
                    "Rising stress levels",
                    "Missed intermediate milestones",
                ],
            )
        )

    if context.constraints.weekly_hours < SHORTAGE_WEEKLY_HOURS:
        simulations.append(
            RiskSimulation(
                scenario="Time Resource Shortage",
                probability=0.6,
                impact="major",
                days_to_impact=7,
                prevention=[
                    "Negotiate for more time allocation",
                    "Eliminate non-essential activities",
                    "Improve efficiency through better tools and processes",
                    "Outsource or delegate where possible",
                ],
                contingency=[
                    "Extend timeline",
                    "Reduce deliverable scope",
                    "Pause other projects temporarily",
                ],
                early_warnings=[
                    "Calendar consistently over 80% booked",
                    "Frequent overtime or weekend work",
                    "Other projects falling behind",
                ],
            )
        )

    simulations.append(
        RiskSimulation(
            scenario="External Dependency Delay",
            probability=0.3,
            impact="moderate",
            days_to_impact=21,
            prevention=[
                "Build buffer time into dependencies",
                "Maintain regular communication with stakeholders",
                "Develop backup plans for critical dependencies",
                "Start dependency requests early",
            ],
            contingency=[
                "Escalate to the dependency owner",
                "Find alternative providers or approaches",
                "Work around the dependency temporarily",
                "Adjust timeline to accommodate delay",
            ],
            early_warnings=[
                "Stakeholder communication slowing down",
                "Missed dependency milestones",
                "Changes in external priorities",
            ],
        )
    )
    return simulations


def detect_patterns(goal: Goal, context: PredictionContext, now: datetime) -> list[PatternRisk]:
    """Keyword-triggered risk patterns plus unusual seasonal performance."""
    found: list[PatternRisk] = []
    text = goal.text
    for pattern in context.risk_patterns:
        matches = [trigger for trigger in pattern.triggers if trigger.lower() in text]
        if matches:
            weight = PATTERN_IMPACT_WEIGHTS.get(pattern.impact, 0.3)
            found.append(PatternRisk(pattern.pattern, pattern.frequency * weight, matches))

    seasonal = context.seasonal_factors.get(now.month, 0.5)
    if seasonal > 0.7 or seasonal < 0.3:
        label = "high" if seasonal > 0.7 else "low"
        found.append(
            PatternRisk(
                "Seasonal Performance Variation",
                abs(seasonal - 0.5) * 2,
                [f"Historical {label} performance in {calendar.month_name[now.month]}"],
            )
        )
    return found
