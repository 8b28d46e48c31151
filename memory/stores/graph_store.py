"""Knowledge graph of entity co-occurrence."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from itertools import combinations

logger = logging.getLogger("planwise.memory")

SEED_CONCEPTS = ("productivity", "goals", "habits", "focus", "energy", "time management")


@dataclass
class GraphNode:
    name: str
    kind: str = "entity"
    weight: float = 0.0
    entry_ids: set[str] = field(default_factory=set)


class KnowledgeGraph:
    """In-memory entity graph with undirected, accumulating edge weights.

    Edge weights only grow. When ``max_edges`` is set, the lowest-weight
    edges are dropped once the limit is exceeded.
    """

    def __init__(self, max_edges: int | None = None, seed_concepts: Iterable[str] = SEED_CONCEPTS) -> None:
        self.max_edges = max_edges
        self.nodes: dict[str, GraphNode] = {}
        self.edges: dict[tuple[str, str], float] = {}
        self._adjacency: dict[str, dict[str, float]] = {}
        for concept in seed_concepts:
            self.nodes[concept] = GraphNode(name=concept, kind="concept", weight=1.0)

    @staticmethod
    def edge_key(a: str, b: str) -> tuple[str, str]:
        return (a, b) if a <= b else (b, a)

    def add_entry(self, entry_id: str, entities: Sequence[str]) -> None:
        """Record an entry's entities and their pairwise co-occurrence."""
        for entity in entities:
            node = self.nodes.setdefault(entity, GraphNode(name=entity))
            node.weight += 1
            node.entry_ids.add(entry_id)
        for a, b in combinations(entities, 2):
            if a == b:
                continue
            key = self.edge_key(a, b)
            weight = self.edges.get(key, 0.0) + 1.0
            self.edges[key] = weight
            self._adjacency.setdefault(a, {})[b] = weight
            self._adjacency.setdefault(b, {})[a] = weight
        self._prune()

    def detach_entry(self, entry_id: str, entities: Iterable[str]) -> None:
        """Forget which entities an overwritten entry mentioned; weights stay."""
        for entity in entities:
            node = self.nodes.get(entity)
            if node is not None:
                node.entry_ids.discard(entry_id)

    def neighbors(self, entity: str) -> list[tuple[str, float]]:
        """Connected entities, heaviest edge first."""
        found = list(self._adjacency.get(entity, {}).items())
        found.sort(key=lambda item: (-item[1], item[0]))
        return found

    def connected_concepts(self, entities: Sequence[str], limit: int = 5) -> list[str]:
        weights: dict[str, float] = {}
        for entity in entities:
            for other, weight in self.neighbors(entity):
                if other not in entities:
                    weights[other] = weights.get(other, 0.0) + weight
        ranked = sorted(weights, key=lambda name: (-weights[name], name))
        return ranked[:limit]

    def connected_entries(self, entry_id: str, entities: Sequence[str], limit: int = 3) -> list[str]:
        """Other entries sharing an entity, then entries of neighboring entities."""
        scores: dict[str, float] = {}
        for entity in entities:
            node = self.nodes.get(entity)
            if node is None:
                continue
            for other_id in node.entry_ids:
                scores[other_id] = scores.get(other_id, 0.0) + node.weight
        for entity in entities:
            for neighbor, weight in self.neighbors(entity):
                node = self.nodes.get(neighbor)
                if node is None:
                    continue
                for other_id in node.entry_ids:
                    scores.setdefault(other_id, weight)
        scores.pop(entry_id, None)
        ranked = sorted(scores, key=lambda other: (-scores[other], other))
        return ranked[:limit]

    def _prune(self) -> None:
        if self.max_edges is None or len(self.edges) <= self.max_edges:
            return
        ranked = sorted(self.edges.items(), key=lambda item: item[1], reverse=True)
        dropped = len(ranked) - self.max_edges
        self.edges = dict(ranked[: self.max_edges])
        for (a, b), _weight in ranked[self.max_edges :]:
            self._adjacency[a].pop(b, None)
            self._adjacency[b].pop(a, None)
        logger.debug("Pruned %d low-weight graph edges", dropped)
