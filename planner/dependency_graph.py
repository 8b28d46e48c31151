"""Milestone dependency graph."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class DependencyGraph:
    """Directed dependencies among plan items; an edge (a, b) means b depends on a."""

    nodes: list[str] = field(default_factory=list)
    edges: list[tuple[str, str]] = field(default_factory=list)

    def add_node(self, node: str) -> None:
        if node not in self.nodes:
            self.nodes.append(node)

    def add_edge(self, prerequisite: str, dependent: str) -> None:
        self.add_node(prerequisite)
        self.add_node(dependent)
        if (prerequisite, dependent) not in self.edges:
            self.edges.append((prerequisite, dependent))

    def dependencies_of(self, node: str) -> list[str]:
        return [src for src, dst in self.edges if dst == node]

    @classmethod
    def linear_chain(cls, nodes: list[str]) -> DependencyGraph:
        """Chain nodes so each one depends on its predecessor."""
        graph = cls()
        for node in nodes:
            graph.add_node(node)
        for previous, current in zip(nodes, nodes[1:]):
            graph.add_edge(previous, current)
        return graph

    def is_linear(self) -> bool:
        """True when every node after the first depends on exactly its predecessor."""
        for index, node in enumerate(self.nodes):
            expected = [self.nodes[index - 1]] if index else []
            if self.dependencies_of(node) != expected:
                return False
        return True
