"""Collapse symbol trees and references into a file-level graph."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from codedeps.core.diagnostics import DiagnosticSink, Severity
from codedeps.core.graph.models import FileEdge, FileGraph, FileNode
from codedeps.core.models import SymbolKind, SymbolNode, SymbolReference
from codedeps.core.tree import count_descendants

CONTAINS = "contains"


def aggregate_file_graph(
    roots: Iterable[SymbolNode],
    references: Iterable[SymbolReference],
    sink: DiagnosticSink | None = None,
) -> FileGraph:
    """Build one node per file root and one weighted edge per file pair. O(V + E).

    References are counted per unordered pair of paths: the first direction
    seen for a pair becomes the edge's source/target and later references in
    either direction add to it. Edges whose files are not both present as
    nodes are skipped.
    """
    graph = FileGraph()
    known: set[str] = set()
    for root in roots:
        if root.kind != SymbolKind.FILE or root.path in known:
            continue
        known.add(root.path)
        graph.nodes.append(
            FileNode(
                path=root.path,
                label=root.path.rsplit("/", 1)[-1],
                symbol_count=count_descendants(root),
            )
        )

    counts: dict[tuple[str, str], int] = {}
    for ref in references:
        if ref.from_path == ref.to_path:
            continue
        key = (ref.from_path, ref.to_path)
        if key not in counts:
            reverse = (ref.to_path, ref.from_path)
            if reverse in counts:
                key = reverse
            else:
                counts[key] = 0
        counts[key] += 1

    for (source, target), count in counts.items():
        if source not in known or target not in known:
            if sink is not None:
                sink.report(
                    Severity.WARNING,
                    f"Skipping edge {source} -- {target}: file not in graph",
                )
            continue
        graph.edges.append(FileEdge(source=source, target=target, relation_count=count))

    return graph


def build_symbol_elements(
    roots: Iterable[SymbolNode], references: Iterable[SymbolReference]
) -> dict[str, list[dict[str, Any]]]:
    """Symbol-level view: every symbol, containment edges, and reference edges."""
    nodes: list[dict[str, Any]] = []
    edges: list[dict[str, Any]] = []

    for root in roots:
        stack = [root]
        while stack:
            symbol = stack.pop()
            label = symbol.path.rsplit("/", 1)[-1] if symbol.kind == SymbolKind.FILE else symbol.name
            nodes.append(
                {
                    "id": symbol.id,
                    "label": label,
                    "kind": symbol.kind.label,
                    "path": symbol.path,
                }
            )
            for child in symbol.children:
                edges.append(
                    {
                        "id": f"{symbol.id}-{child.id}",
                        "source": symbol.id,
                        "target": child.id,
                        "reference_type": CONTAINS,
                    }
                )
            stack.extend(reversed(symbol.children))

    for ref in references:
        edges.append(
            {
                "id": ref.id,
                "source": ref.from_symbol_id,
                "target": ref.to_symbol_id,
                "reference_type": ref.reference_type,
            }
        )

    return {"nodes": nodes, "edges": edges}
