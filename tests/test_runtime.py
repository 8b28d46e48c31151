"""Config, cache, event bus and engine wiring tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.cache import TTLCache
from core.event_bus import ENTITY_MUTATED, EventBus
from core.orchestrator import Orchestrator
from core.policy_runtime import load_effective_config, merge_dicts, section


def write_yaml(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_override_merges_over_defaults(tmp_path: Path) -> None:
    write_yaml(
        tmp_path / "config" / "default.yaml",
        "risk:\n  historical_accuracy: 0.75\n  monte_carlo:\n    iterations: 1000\n",
    )
    override = write_yaml(tmp_path / "local.yaml", "risk:\n  monte_carlo:\n    iterations: 50\n")

    config = load_effective_config(tmp_path, override)

    assert config["risk"] == {"historical_accuracy": 0.75, "monte_carlo": {"iterations": 50}}
    assert config["planner"] == {}
    assert config["memory"] == {}


def test_missing_config_gives_empty_sections(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path)
    assert section(config, "planner") == {}
    assert section(config, "unknown") == {}


def test_non_mapping_section_is_rejected(tmp_path: Path) -> None:
    write_yaml(tmp_path / "config" / "default.yaml", "memory: 3\n")
    with pytest.raises(ValueError):
        load_effective_config(tmp_path)


def test_merge_dicts_does_not_mutate_base() -> None:
    base = {"a": {"b": 1}}
    merged = merge_dicts(base, {"a": {"c": 2}})
    assert merged == {"a": {"b": 1, "c": 2}}
    assert base == {"a": {"b": 1}}


def test_cache_expires_after_ttl() -> None:
    ticks = [0.0]
    cache = TTLCache(10, clock=lambda: ticks[0])
    cache.set("k", "v")

    ticks[0] = 9.0
    assert cache.get("k") == "v"
    ticks[0] = 10.5
    assert cache.get("k") is None
    assert len(cache) == 0


def test_cache_invalidate() -> None:
    cache = TTLCache(10, clock=lambda: 0.0)
    cache.set("k", 1)
    cache.invalidate("k")
    cache.invalidate("missing")
    assert cache.get("k", "default") == "default"


def test_event_bus_dispatches_in_order() -> None:
    bus = EventBus()
    seen: list[str] = []
    bus.subscribe(ENTITY_MUTATED, lambda payload: seen.append(f"first:{payload['type']}"))
    bus.subscribe(ENTITY_MUTATED, lambda payload: seen.append(f"second:{payload['type']}"))

    bus.publish_mutation({"id": "t1"}, "task")
    bus.emit("unrelated", {})

    assert seen == ["first:task", "second:task"]


def test_orchestrator_routes_mutations_into_index(tmp_path: Path) -> None:
    write_yaml(tmp_path / "config" / "default.yaml", "memory:\n  max_results: 5\n")
    bundle = Orchestrator(root=tmp_path).build()

    bundle.event_bus.publish_mutation({"id": "g1", "title": "Learn Spanish"}, "goal")
    bundle.event_bus.publish_mutation({"id": "g1", "title": "Learn Spanish", "status": "active"}, "goal")

    assert len(bundle.index) == 1
    assert bundle.index.max_results == 5
    assert bundle.decomposer.risk_predictor is bundle.predictor


def test_default_config_ships_with_project() -> None:
    bundle = Orchestrator().build()
    assert bundle.config["planner"]["min_spacing_days"] == 14
    assert bundle.predictor.cache is not None
