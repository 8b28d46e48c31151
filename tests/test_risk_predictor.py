"""Deadline risk assessment tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from core.models import Goal, KeyResult, Task
from risk.context import RiskPattern, snapshot_deltas, velocity_history
from risk.models import ResourceConstraints
from risk.risk_predictor import RiskPredictor

NOW = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)
STEADY = [{"velocity": 0.1}, {"velocity": 0.1}, {"velocity": 0.1}, {"velocity": 0.1}]


def halfway_goal(days: int = 70, **extra: object) -> tuple[Goal, list[KeyResult]]:
    goal = Goal(id="g1", title="Run a marathon", deadline=NOW + timedelta(days=days), **extra)
    krs = [
        KeyResult(id="k1", goal_id="g1", title="Distance", progress=40),
        KeyResult(id="k2", goal_id="g1", title="Pace", progress=60),
    ]
    return goal, krs


def sessions(count: int, minutes: int = 60) -> list[Task]:
    return [Task(id=f"t{i}", title="Training session", estimated_minutes=minutes) for i in range(count)]


def test_required_velocity_from_progress_and_deadline() -> None:
    goal, krs = halfway_goal(days=70)
    assessment = RiskPredictor().assess_goal_risk(goal, krs, STEADY, now=NOW)

    assert assessment.required_velocity == pytest.approx(0.05)
    assert assessment.current_velocity == pytest.approx(0.1)
    assert assessment.velocity_source == "history"


def test_steady_ahead_of_schedule_is_low_risk() -> None:
    goal, krs = halfway_goal(days=70)
    assessment = RiskPredictor().assess_goal_risk(goal, krs, STEADY, now=NOW)

    assert assessment.risk_level == "low"
    assert assessment.confidence == pytest.approx(0.78)
    assert abs(assessment.estimated_completion - (NOW + timedelta(weeks=5))) < timedelta(seconds=1)
    assert not [f for f in assessment.risk_factors if f.type == "velocity"]


def test_falling_behind_with_overload_is_high_risk() -> None:
    goal = Goal(
        id="g2",
        title="Finish thesis",
        deadline=NOW + timedelta(days=28),
        priority="critical",
        complexity="expert",
    )
    krs = [KeyResult(id="k", goal_id="g2", title="Chapters", progress=10)]
    history = [{"velocity": v} for v in (0.05, 0.04, 0.03, 0.02)]
    assessment = RiskPredictor().assess_goal_risk(goal, krs, history, tasks=sessions(20), now=NOW)

    # velocity 0.4 + two bottlenecks 0.2 + shortage scenario ~0.04
    assert assessment.risk_level == "high"
    assert assessment.required_velocity == pytest.approx(0.225)
    assert assessment.current_velocity == pytest.approx(0.025)
    velocity = [f for f in assessment.risk_factors if f.type == "velocity"]
    assert velocity and velocity[0].impact == "high"
    by_description = {f.description: f for f in assessment.risk_factors}
    assert by_description["Time constraint: Total Time Allocation (100% severity)"].impact == "high"
    assert by_description["Energy risk: High Intensity vs Energy Capacity Mismatch"].impact == "medium"
    assert by_description["Time Resource Shortage"].impact == "high"
    assert "Continued Velocity Decline" not in by_description
    assert assessment.recommendations[0].startswith("Increase velocity by")
    assert len(assessment.recommendations) <= 8


def test_empty_inputs_use_cold_start() -> None:
    goal = Goal(id="g3", title="Something")
    assessment = RiskPredictor().assess_goal_risk(goal, [], [], now=NOW)

    assert assessment.risk_level in {"low", "medium", "high", "critical"}
    assert 0.0 <= assessment.confidence <= 0.5
    assert assessment.velocity_source == "cold_start"


def test_malformed_history_falls_back() -> None:
    goal, krs = halfway_goal()
    history = [{"timestamp": "not a date", "progress": 10}, {"velocity": 0.1}]
    assessment = RiskPredictor().assess_goal_risk(goal, krs, history, now=NOW)

    assert assessment.velocity_source == "fallback"
    assert assessment.risk_level == "medium"
    assert assessment.confidence == pytest.approx(0.3)
    assert assessment.estimated_completion == NOW + timedelta(days=60)
    assert assessment.recommendations == ["Set up proper progress tracking", "Define measurable milestones"]


def test_snapshots_become_weekly_deltas() -> None:
    history = [
        {"timestamp": NOW.isoformat(), "progress": 10},
        {"timestamp": (NOW + timedelta(days=7)).isoformat(), "progress": 20},
        {"timestamp": (NOW + timedelta(days=8)).isoformat(), "progress": 25},
        {"timestamp": (NOW + timedelta(days=21)).isoformat(), "progress": 45},
        {"goalId": "other", "velocity": 0.9},
    ]
    velocities, source = velocity_history(history, "g1")

    assert source == "history"
    assert velocities == pytest.approx([0.15, 0.1])


def test_snapshot_deltas_empty() -> None:
    assert snapshot_deltas([]) == []


def test_single_point_history_is_cold_start() -> None:
    velocities, source = velocity_history([{"velocity": 0.2}], "g1", cold_start=[0.01, 0.02])
    assert source == "cold_start"
    assert velocities == [0.01, 0.02]


def test_time_bottleneck_severity() -> None:
    goal, _ = halfway_goal()
    factors = RiskPredictor().identify_bottlenecks(goal, sessions(10, 120), ResourceConstraints(weekly_hours=10))

    assert factors[0].description == "Time constraint: Total Time Allocation (100% severity)"
    assert factors[0].impact == "high"


def test_skill_and_dependency_bottlenecks() -> None:
    goal = Goal(id="g4", title="Launch programming course")
    tasks = [
        Task(id="a", title="Record videos", description="needs approval from editor", estimated_minutes=60),
        Task(id="b", title="Edit videos", estimated_minutes=60),
    ]
    factors = RiskPredictor().identify_bottlenecks(goal, tasks, ResourceConstraints(weekly_hours=40, skill_level=0.5))
    descriptions = [f.description for f in factors]

    assert "Skill gap: programming (30% gap)" in descriptions
    assert "Dependency risk: External Stakeholder Approvals blocking 1 tasks" in descriptions
    dependency = next(f for f in factors if f.type == "dependencies")
    assert dependency.impact == "high"


def test_cache_returns_same_assessment_until_invalidated() -> None:
    predictor = RiskPredictor(config={"cache_ttl_seconds": 300})
    goal, krs = halfway_goal()

    first = predictor.assess_goal_risk(goal, krs, STEADY, now=NOW)
    assert predictor.assess_goal_risk(goal, krs, [], now=NOW) is first

    predictor.invalidate("g1")
    refreshed = predictor.assess_goal_risk(goal, krs, [], now=NOW)
    assert refreshed is not first
    assert refreshed.velocity_source == "cold_start"


def test_cache_disabled_by_default() -> None:
    predictor = RiskPredictor()
    goal, krs = halfway_goal()

    first = predictor.assess_goal_risk(goal, krs, STEADY, now=NOW)
    second = predictor.assess_goal_risk(goal, krs, STEADY, now=NOW)
    assert first is not second
    assert first == second


def test_risk_patterns_are_injectable() -> None:
    goal = Goal(id="g5", title="Migrate legacy billing", deadline=NOW + timedelta(days=70))
    predictor = RiskPredictor(risk_patterns=[RiskPattern("legacy_debt", 0.5, "high", ("legacy",))])
    assessment = predictor.assess_goal_risk(goal, [], STEADY, now=NOW)

    assert any("legacy_debt" in f.description for f in assessment.risk_factors)
