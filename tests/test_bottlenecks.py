"""Bottleneck, scenario, pattern and score-term tests."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from core.models import Goal, Task
from risk.bottlenecks import (
    BottleneckAnalysis,
    EnergyBottleneck,
    SkillBottleneck,
    TimeBottleneck,
    bottleneck_factors,
    energy_bottlenecks,
    time_bottlenecks,
)
from risk.context import PredictionContext
from risk.models import ResourceConstraints
from risk.scoring import bottleneck_term, level_for, pattern_term, simulation_term, velocity_term
from risk.simulation import PatternRisk, detect_patterns, run_risk_simulations
from risk.velocity import VelocityAnalysis

MARCH = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)


def velocity(current: float = 0.1, required: float = 0.1, trend: float = 0.0) -> VelocityAnalysis:
    return VelocityAnalysis(
        current=current, required=required, trend=trend, consistency=1.0, sustainability=1.0, confidence=0.9
    )


def context(weekly_hours: float = 25, seasonal: dict[int, float] | None = None) -> PredictionContext:
    ctx = PredictionContext(
        goal_id="g1",
        progress=0.0,
        velocities=[0.1, 0.1],
        velocity_source="history",
        constraints=ResourceConstraints(weekly_hours=weekly_hours),
        risk_patterns=[],
    )
    if seasonal is not None:
        ctx.seasonal_factors = seasonal
    return ctx


def test_deep_work_bottleneck() -> None:
    tasks = [Task(id="a", title="Design landing page", estimated_minutes=300)]
    found = time_bottlenecks(tasks, ResourceConstraints(weekly_hours=10))

    assert [b.resource for b in found] == ["Deep Work Time"]
    assert found[0].severity == pytest.approx(0.25)
    factor = bottleneck_factors(BottleneckAnalysis(time=found))[0]
    assert factor.description == "Time constraint: Deep Work Time (25% severity)"
    assert factor.impact == "low"


def test_deep_work_within_allowance_is_fine() -> None:
    tasks = [Task(id="a", title="Analyze survey", estimated_minutes=180)]
    assert time_bottlenecks(tasks, ResourceConstraints(weekly_hours=10)) == []


def test_overallocation_and_deep_work_together() -> None:
    tasks = [Task(id=str(i), title="Create course module", estimated_minutes=120) for i in range(8)]
    found = time_bottlenecks(tasks, ResourceConstraints(weekly_hours=10))

    assert [b.resource for b in found] == ["Total Time Allocation", "Deep Work Time"]
    assert found[0].severity == pytest.approx(1.0)
    assert found[1].severity == pytest.approx(1.0)


def test_energy_bottleneck_for_intense_goal() -> None:
    goal = Goal(id="g1", title="Finish thesis", priority="critical", complexity="expert")
    found = energy_bottlenecks(goal, ResourceConstraints(energy_capacity=0.5))

    assert len(found) == 1
    assert found[0].energy_impact == pytest.approx(0.5)
    factor = bottleneck_factors(BottleneckAnalysis(energy=found))[0]
    assert factor.type == "resource"
    assert factor.description == "Energy risk: High Intensity vs Energy Capacity Mismatch"
    assert factor.impact == "high"


def test_energy_within_capacity() -> None:
    goal = Goal(id="g1", title="Finish thesis", priority="high", complexity="complex")
    assert energy_bottlenecks(goal, ResourceConstraints(energy_capacity=0.8)) == []


def test_bottleneck_term_counts_every_kind() -> None:
    analysis = BottleneckAnalysis(
        time=[TimeBottleneck("Total Time Allocation", 0.5)],
        skill=[SkillBottleneck("design", 0.3, 12)],
        energy=[EnergyBottleneck("mismatch", 0.8, 0.2)],
    )
    assert analysis.count == 3
    assert bottleneck_term(analysis) == pytest.approx(0.3)
    assert bottleneck_term(BottleneckAnalysis(time=analysis.time)) == pytest.approx(0.1)
    analysis.skill.append(SkillBottleneck("writing", 0.3, 12))
    assert bottleneck_term(analysis) == pytest.approx(0.3)


@pytest.mark.parametrize(
    ("current", "impact"),
    [(0.05, "catastrophic"), (0.12, "major"), (0.15, "moderate")],
)
def test_velocity_decline_scenario(current: float, impact: str) -> None:
    sims = run_risk_simulations(context(), velocity(current=current, required=0.2, trend=-0.5))

    assert [s.scenario for s in sims] == ["Continued Velocity Decline", "External Dependency Delay"]
    assert sims[0].probability == pytest.approx(0.35)
    assert sims[0].impact == impact
    assert sims[0].days_to_impact == 14


def test_steep_decline_probability_is_capped() -> None:
    sims = run_risk_simulations(context(), velocity(trend=-2.0))
    assert sims[0].probability == 1.0


def test_time_shortage_scenario() -> None:
    sims = run_risk_simulations(context(weekly_hours=12), velocity())

    assert [s.scenario for s in sims] == ["Time Resource Shortage", "External Dependency Delay"]
    assert sims[0].probability == 0.6
    assert sims[0].high_impact
    assert sims[1].probability == 0.3
    assert not sims[1].high_impact
    assert simulation_term(sims) == pytest.approx(0.06)


def test_no_shortage_at_twenty_hours() -> None:
    sims = run_risk_simulations(context(weekly_hours=20), velocity())
    assert [s.scenario for s in sims] == ["External Dependency Delay"]
    assert simulation_term(sims) == 0.0


@pytest.mark.parametrize(
    ("factor", "label", "risk"),
    [(0.9, "high", 0.8), (0.1, "low", 0.8), (0.75, "high", 0.5)],
)
def test_seasonal_pattern(factor: float, label: str, risk: float) -> None:
    goal = Goal(id="g1", title="Write a novel")
    found = detect_patterns(goal, context(seasonal={3: factor}), MARCH)

    assert [p.pattern for p in found] == ["Seasonal Performance Variation"]
    assert found[0].risk == pytest.approx(risk)
    assert found[0].evidence == [f"Historical {label} performance in March"]
    assert pattern_term(found) == pytest.approx(risk * 0.1)


@pytest.mark.parametrize("factor", [0.3, 0.5, 0.7])
def test_ordinary_season_adds_no_pattern(factor: float) -> None:
    goal = Goal(id="g1", title="Write a novel")
    assert detect_patterns(goal, context(seasonal={3: factor}), MARCH) == []


def test_default_seasonal_table_flags_june() -> None:
    goal = Goal(id="g1", title="Write a novel")
    ctx = PredictionContext(
        goal_id="g1",
        progress=0.0,
        velocities=[0.1, 0.1],
        velocity_source="history",
        constraints=ResourceConstraints(),
        risk_patterns=[],
    )
    found = detect_patterns(goal, ctx, datetime(2026, 6, 1, tzinfo=UTC))
    assert found[0].evidence == ["Historical high performance in June"]
    assert found[0].risk == pytest.approx(0.8)


def test_velocity_term() -> None:
    assert velocity_term(velocity(current=0.1, required=0.05)) == 0.0
    assert velocity_term(velocity(current=0.1, required=0.12)) == pytest.approx(0.08)
    assert velocity_term(velocity(current=0.1, required=0.5)) == pytest.approx(0.4)


def test_pattern_term_is_capped() -> None:
    assert pattern_term([]) == 0.0
    assert pattern_term([PatternRisk("a", 0.4), PatternRisk("b", 0.2)]) == pytest.approx(0.03)
    assert pattern_term([PatternRisk("a", 2.0)]) == pytest.approx(0.1)


@pytest.mark.parametrize(
    ("score", "level"),
    [(0.81, "critical"), (0.8, "high"), (0.61, "high"), (0.6, "medium"), (0.31, "medium"), (0.3, "low")],
)
def test_level_thresholds(score: float, level: str) -> None:
    assert level_for(score) == level
