"""Top-level engine wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from core.event_bus import ENTITY_MUTATED, EventBus
from core.policy_runtime import load_effective_config, section
from memory.semantic_index import SemanticIndex
from planner.goal_decomposer import GoalDecomposer
from risk.risk_predictor import RiskPredictor

logger = logging.getLogger("planwise.orchestrator")


@dataclass
class EngineBundle:
    """Holds initialized engines."""

    config: dict[str, Any]
    event_bus: EventBus
    index: SemanticIndex
    predictor: RiskPredictor
    decomposer: GoalDecomposer


class Orchestrator:
    """Creates and wires the engines for CLI or host use."""

    def __init__(self, root: Path | None = None, config_path: Path | None = None) -> None:
        default_root = Path(__file__).resolve().parents[1]
        self.root = (root or default_root).resolve()
        self.config_path = config_path

    def build(self) -> EngineBundle:
        config = load_effective_config(self.root, self.config_path)
        event_bus = EventBus()
        index = SemanticIndex(config=section(config, "memory"))
        event_bus.subscribe(ENTITY_MUTATED, index.handle_mutation)
        predictor = RiskPredictor(config=section(config, "risk"))
        decomposer = GoalDecomposer(config=section(config, "planner"), risk_predictor=predictor)
        logger.debug("Engines built from %s", self.root)
        return EngineBundle(
            config=config,
            event_bus=event_bus,
            index=index,
            predictor=predictor,
            decomposer=decomposer,
        )
