"""Data models for the aggregated file graph."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class FileNode:
    """One file, sized by the number of symbols it contains."""

    path: str
    label: str
    symbol_count: int


@dataclass(frozen=True)
class FileEdge:
    """Undirected relation between two files, weighted by reference count."""

    source: str
    target: str
    relation_count: int

    def connects(self, a: str, b: str) -> bool:
        return {self.source, self.target} == {a, b}


@dataclass
class FileGraph:
    """File-level dependency graph, ready for a renderer."""

    nodes: list[FileNode] = field(default_factory=list)
    edges: list[FileEdge] = field(default_factory=list)

    def get_node(self, path: str) -> FileNode | None:
        return next((n for n in self.nodes if n.path == path), None)

    def get_edge(self, a: str, b: str) -> FileEdge | None:
        """Find the edge between two files, in either direction."""
        return next((e for e in self.edges if e.connects(a, b)), None)

    @property
    def num_nodes(self) -> int:
        return len(self.nodes)

    @property
    def num_edges(self) -> int:
        return len(self.edges)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "nodes": [asdict(n) for n in self.nodes],
            "edges": [asdict(e) for e in self.edges],
        }

    def __repr__(self) -> str:
        return f"FileGraph(nodes={self.num_nodes}, edges={self.num_edges})"


class GraphRenderer(Protocol):
    """Draws a file graph. Receives the aggregator's output verbatim."""

    def render(self, nodes: Sequence[FileNode], edges: Sequence[FileEdge]) -> None: ...
