"""Composite risk score, confidence and recommendations."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from risk.bottlenecks import BottleneckAnalysis, bottleneck_factors
from risk.models import RiskFactor
from risk.simulation import PatternRisk, RiskSimulation
from risk.velocity import MIN_VELOCITY, VelocityAnalysis

MAX_RECOMMENDATIONS = 8
HISTORICAL_ACCURACY = 0.75

# (threshold, level) checked from the top; the score must exceed the threshold.
LEVEL_THRESHOLDS: list[tuple[float, str]] = [(0.8, "critical"), (0.6, "high"), (0.3, "medium")]


@dataclass(frozen=True)
class RiskScore:
    score: float
    level: str
    confidence: float


def velocity_term(velocity: VelocityAnalysis) -> float:
    shortfall = max(0.0, velocity.required / max(MIN_VELOCITY, velocity.current) - 1.0)
    return min(0.4, shortfall * 0.4)


def bottleneck_term(bottlenecks: BottleneckAnalysis) -> float:
    return min(0.3, bottlenecks.count * 0.1)


def simulation_term(simulations: Sequence[RiskSimulation]) -> float:
    if not simulations:
        return 0.0
    high = sum(sim.probability for sim in simulations if sim.high_impact)
    return min(0.2, high / len(simulations) * 0.2)


def pattern_term(patterns: Sequence[PatternRisk]) -> float:
    mean = sum(p.risk for p in patterns) / max(1, len(patterns))
    return min(0.1, mean * 0.1)


def level_for(score: float) -> str:
    for threshold, level in LEVEL_THRESHOLDS:
        if score > threshold:
            return level
    return "low"


def score_risk(
    velocity: VelocityAnalysis,
    bottlenecks: BottleneckAnalysis,
    simulations: Sequence[RiskSimulation],
    patterns: Sequence[PatternRisk],
    historical_accuracy: float = HISTORICAL_ACCURACY,
    confidence_cap: float = 0.95,
) -> RiskScore:
    score = (
        velocity_term(velocity)
        + bottleneck_term(bottlenecks)
        + simulation_term(simulations)
        + pattern_term(patterns)
    )
    confidence = velocity.confidence * 0.6 + historical_accuracy * 0.4
    confidence = max(0.0, min(0.95, confidence_cap, confidence))
    return RiskScore(score=score, level=level_for(score), confidence=confidence)


def recommendations(
    velocity: VelocityAnalysis,
    bottlenecks: BottleneckAnalysis,
    simulations: Sequence[RiskSimulation],
    level: str,
) -> list[str]:
    """Recommendations in fixed priority order, truncated."""
    recs: list[str] = []
    if velocity.current < velocity.required * 0.8:
        increase = round((velocity.required / max(MIN_VELOCITY, velocity.current) - 1) * 100)
        recs.append(f"Increase velocity by {increase}% to stay on track")
        recs.append("Focus on highest-impact activities only")
        recs.append("Consider scope reduction or timeline extension")
    if velocity.consistency < 0.6:
        recs.append("Improve consistency: establish a regular work rhythm and remove blockers")
    if velocity.sustainability < 0.7:
        recs.append("Current pace is unsustainable; plan for recovery periods")
        recs.append("Consider distributing work more evenly over time")
    if bottlenecks.time:
        recs.append("Critical time constraints detected; prioritize ruthlessly")
        recs.append("Eliminate non-essential activities")
    if bottlenecks.skill:
        top = bottlenecks.skill[0]
        recs.append(f"Address skill gap: {top.skill} ({top.learning_hours:.0f}h learning time)")
        recs.append(f"Consider: {', '.join(top.alternatives)}")
    if bottlenecks.dependency:
        recs.append("Proactively manage external dependencies")
        recs.append("Escalate critical blockers to stakeholders")
    if level == "critical":
        recs.append("Critical: immediate intervention required")
        recs.append("Focus on the minimum viable outcome only")
        recs.append("Escalate for additional resources")
    elif level == "high":
        recs.append("High risk: review progress weekly")
        recs.append("Prepare contingency plans")
    likely = [sim for sim in simulations if sim.probability > 0.5]
    if likely:
        recs.append(f"Prepare for likely scenario: {likely[0].scenario}")
        if likely[0].early_warnings:
            recs.append(f"Watch for early warning: {likely[0].early_warnings[0]}")
    return recs[:MAX_RECOMMENDATIONS]


def consolidate_factors(
    velocity: VelocityAnalysis,
    bottlenecks: BottleneckAnalysis,
    simulations: Sequence[RiskSimulation],
    patterns: Sequence[PatternRisk],
) -> list[RiskFactor]:
    factors: list[RiskFactor] = []
    if velocity.current < velocity.required:
        factors.append(
            RiskFactor(
                type="velocity",
                description=(
                    f"Current velocity {velocity.current:.1%}/week is below "
                    f"the required {velocity.required:.1%}/week"
                ),
                impact="high" if velocity.current < velocity.required * 0.5 else "medium",
                mitigation="Increase weekly time allocation or reduce scope",
            )
        )
    if velocity.consistency < 0.6:
        factors.append(
            RiskFactor(
                type="consistency",
                description=f"Irregular weekly progress ({velocity.consistency:.0%} consistency)",
                impact="medium",
                mitigation="Schedule recurring work sessions",
            )
        )
    factors.extend(bottleneck_factors(bottlenecks))
    for sim in simulations:
        if sim.probability > 0.4:
            factors.append(
                RiskFactor(
                    type="dependencies",
                    description=sim.scenario,
                    impact="high" if sim.high_impact else "medium",
                    mitigation=", ".join(sim.prevention),
                )
            )
    for pattern in patterns:
        factors.append(
            RiskFactor(
                type="scope",
                description=f"Risk pattern: {pattern.pattern} ({', '.join(pattern.evidence)})",
                impact="medium" if pattern.risk >= 0.3 else "low",
                mitigation="Monitor early and adjust the plan when the pattern appears",
            )
        )
    return factors
