"""Command line tests."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from ui.cli.cli import app

runner = CliRunner()
NOW = "2026-03-02T08:00:00"


def write_json(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def goal_file(tmp_path: Path, title: str = "Learn Spanish") -> Path:
    return write_json(
        tmp_path / "goal.json",
        {"goal": {"id": "g1", "title": title, "targetDate": "2026-05-31T00:00:00Z"}, "keyResults": []},
    )


def records_file(tmp_path: Path) -> Path:
    return write_json(
        tmp_path / "records.json",
        [
            {"type": "task", "record": {"id": "t1", "title": "Prepare Acme pitch deck"}},
            {"type": "note", "record": {"id": "n1", "title": "Call with Acme"}},
            {"type": "goal", "record": {"id": "g1", "title": "Learn Spanish"}},
            "ignored",
        ],
    )


def test_decompose_prints_plan(tmp_path: Path) -> None:
    result = runner.invoke(app, ["decompose", str(goal_file(tmp_path)), "--now", NOW])

    assert result.exit_code == 0, result.output
    plan = json.loads(result.stdout)
    assert plan["strategy"] == "skill_based"
    assert len(plan["milestones"]) == 4
    assert plan["weeklySchedule"]["riskLevel"] in {"low", "medium", "high", "critical"}


def test_decompose_rejects_blank_title(tmp_path: Path) -> None:
    result = runner.invoke(app, ["decompose", str(goal_file(tmp_path, title=" ")), "--now", NOW])
    assert result.exit_code == 1


def test_invalid_json_exits_with_usage_code(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    result = runner.invoke(app, ["risk", str(broken)])
    assert result.exit_code == 2


def test_risk_reports_assessment(tmp_path: Path) -> None:
    result = runner.invoke(app, ["risk", str(goal_file(tmp_path)), "--now", NOW])

    assert result.exit_code == 0, result.output
    assessment = json.loads(result.stdout)
    assert assessment["goalId"] == "g1"
    assert assessment["velocitySource"] == "cold_start"


def test_trajectory_reports_scenarios(tmp_path: Path) -> None:
    result = runner.invoke(app, ["trajectory", str(goal_file(tmp_path)), "--progress", "0.3", "--now", NOW])

    assert result.exit_code == 0, result.output
    scenarios = json.loads(result.stdout)["scenarios"]
    assert set(scenarios) == {"optimistic", "realistic", "conservative"}


def test_index_reports_counts(tmp_path: Path) -> None:
    result = runner.invoke(app, ["index", str(records_file(tmp_path))])

    assert result.exit_code == 0, result.output
    assert "Published 3 records; indexed 3." in result.stdout


def test_search_filters_by_type(tmp_path: Path) -> None:
    result = runner.invoke(app, ["search", str(records_file(tmp_path)), "Acme pitch deck", "--type", "task"])

    assert result.exit_code == 0, result.output
    hits = json.loads(result.stdout)
    assert [hit["id"] for hit in hits] == ["t1"]


def test_ask_without_matches_apologizes(tmp_path: Path) -> None:
    empty = write_json(tmp_path / "empty.json", [])
    result = runner.invoke(app, ["ask", str(empty), "How productive am I?"])

    assert result.exit_code == 0, result.output
    assert "I don't have enough data" in result.stdout
    assert "confidence=0.20 sources=0" in result.stdout


def test_config_show_applies_override(tmp_path: Path) -> None:
    override = tmp_path / "local.yaml"
    override.write_text("planner:\n  weekly_hours_cap: 6\n", encoding="utf-8")

    result = runner.invoke(app, ["--config", str(override), "config", "show"])

    assert result.exit_code == 0, result.output
    config = json.loads(result.stdout)
    assert config["planner"]["weekly_hours_cap"] == 6
    assert config["planner"]["min_spacing_days"] == 14
