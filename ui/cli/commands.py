"""Typer command handlers."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import typer
from pydantic import BaseModel, ValidationError

from core.errors import DecompositionError
from core.models import Goal, KeyResult, Task, as_utc
from core.orchestrator import EngineBundle, Orchestrator
from memory.types import SearchFilters

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _runtime(config_path: Path | None = None, verbose: bool = False) -> EngineBundle:
    bundle = Orchestrator(config_path=config_path).build()
    level = "DEBUG" if verbose else str(bundle.config.get("logging", {}).get("level", "WARNING")).upper()
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    return bundle


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        typer.echo(f"Cannot read {path}: {exc}", err=True)
        raise typer.Exit(code=2) from exc


def _echo(value: Any) -> None:
    if isinstance(value, BaseModel):
        typer.echo(value.model_dump_json(by_alias=True, indent=2))
    else:
        typer.echo(json.dumps(value, indent=2, default=str))


def _goal_input(path: Path) -> dict[str, Any]:
    """Read ``{"goal": {...}, "keyResults": [...], "tasks": [...], "historicalData": [...]}``."""
    data = _read_json(path)
    if not isinstance(data, dict) or "goal" not in data:
        typer.echo(f"{path} must contain an object with a 'goal' key", err=True)
        raise typer.Exit(code=2)
    try:
        return {
            "goal": Goal.model_validate(data["goal"]),
            "key_results": [KeyResult.model_validate(kr) for kr in data.get("keyResults", [])],
            "tasks": [Task.model_validate(task) for task in data.get("tasks", [])],
            "historical_data": list(data.get("historicalData", [])),
        }
    except ValidationError as exc:
        typer.echo(f"Invalid input in {path}:\n{exc}", err=True)
        raise typer.Exit(code=2) from exc


def _replay(bundle: EngineBundle, records_path: Path) -> int:
    """Publish every ``{"type": ..., "record": {...}}`` item as a mutation."""
    items = _read_json(records_path)
    if not isinstance(items, list):
        typer.echo(f"{records_path} must contain a list of records", err=True)
        raise typer.Exit(code=2)
    published = 0
    for item in items:
        if not isinstance(item, dict):
            continue
        bundle.event_bus.publish_mutation(item.get("record", {}), str(item.get("type", "")))
        published += 1
    return published


def decompose(goal_path: Path, now: datetime | None, config_path: Path | None, verbose: bool) -> None:
    """Print the decomposition of a goal."""
    bundle = _runtime(config_path, verbose)
    inputs = _goal_input(goal_path)
    try:
        plan = bundle.decomposer.decompose(inputs["goal"], inputs["key_results"], now=now)
    except DecompositionError as exc:
        typer.echo(f"Decomposition failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    _echo(plan)


def risk(goal_path: Path, now: datetime | None, config_path: Path | None, verbose: bool) -> None:
    bundle = _runtime(config_path, verbose)
    inputs = _goal_input(goal_path)
    assessment = bundle.predictor.assess_goal_risk(
        inputs["goal"],
        inputs["key_results"],
        inputs["historical_data"],
        tasks=inputs["tasks"],
        now=now,
    )
    _echo(assessment)


def trajectory(
    goal_path: Path, progress: float, now: datetime | None, config_path: Path | None, verbose: bool
) -> None:
    bundle = _runtime(config_path, verbose)
    inputs = _goal_input(goal_path)
    _echo(bundle.predictor.predict_trajectory(inputs["goal"], progress, inputs["historical_data"], now=now))


def index(records_path: Path, config_path: Path | None, verbose: bool) -> None:
    """Index records and print index statistics."""
    bundle = _runtime(config_path, verbose)
    published = _replay(bundle, records_path)
    typer.echo(f"Published {published} records; indexed {len(bundle.index)}.")
    _echo(bundle.index.stats())


def search(
    records_path: Path,
    query: str,
    types: list[str] | None,
    threshold: float | None,
    config_path: Path | None,
    verbose: bool,
) -> None:
    bundle = _runtime(config_path, verbose)
    _replay(bundle, records_path)
    filters = SearchFilters(data_types=types or None, relevance_threshold=threshold)
    results = bundle.index.semantic_search(query, filters)
    _echo([result.model_dump(mode="json", by_alias=True) for result in results])


def ask(records_path: Path, question: str, config_path: Path | None, verbose: bool) -> None:
    bundle = _runtime(config_path, verbose)
    _replay(bundle, records_path)
    response = bundle.index.ask_question(question)
    typer.echo(response.answer)
    for follow_up in response.follow_up_questions:
        typer.echo(f"- {follow_up}")
    typer.echo(f"confidence={response.confidence:.2f} sources={len(response.sources)}")


def summary(records_path: Path, start: datetime, end: datetime, config_path: Path | None, verbose: bool) -> None:
    bundle = _runtime(config_path, verbose)
    _replay(bundle, records_path)
    typer.echo(bundle.index.generate_summary(as_utc(start), as_utc(end)))


def config_show(config_path: Path | None) -> None:
    """Show effective engine config."""
    bundle = _runtime(config_path)
    _echo(bundle.config)
