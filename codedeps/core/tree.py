"""Conversion between symbol trees and flat, parent-pointer rows."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from codedeps.core.diagnostics import DiagnosticSink, IntegrityViolation, Severity
from codedeps.core.exceptions import CyclicTreeError
from codedeps.core.models import SymbolNode


def flatten(roots: SymbolNode | Iterable[SymbolNode]) -> list[tuple[SymbolNode, str | None]]:
    """Flatten a forest into ``(node, parent_id)`` pairs, depth-first pre-order.

    Each node's ``parent_id`` is assigned here. A node reached twice (shared
    between two children lists, or part of a cycle) raises CyclicTreeError.
    """
    if isinstance(roots, SymbolNode):
        roots = [roots]

    pairs: list[tuple[SymbolNode, str | None]] = []
    seen: set[str] = set()
    stack: list[tuple[SymbolNode, str | None]] = [(root, None) for root in reversed(list(roots))]

    while stack:
        node, parent_id = stack.pop()
        if node.id in seen:
            raise CyclicTreeError(f"Symbol {node.id} ({node.name}) reached twice while flattening")
        seen.add(node.id)

        node.parent_id = parent_id
        pairs.append((node, parent_id))
        for child in reversed(node.children):
            stack.append((child, node.id))

    return pairs


def rebuild(rows: Iterable[SymbolNode], sink: DiagnosticSink | None = None) -> list[SymbolNode]:
    """Rebuild a forest from unordered rows carrying parent ids.

    Roots and siblings come out in ascending ``start_line`` order. Rows whose
    parent is missing, or that sit on a parent cycle, are promoted to roots.
    """
    nodes = sorted(rows, key=lambda n: n.start_line)
    by_id: dict[str, SymbolNode] = {}
    for node in nodes:
        node.children = []
        by_id.setdefault(node.id, node)

    effective: dict[str, str | None] = {}
    for node in nodes:
        parent_id = node.parent_id
        if parent_id is None:
            effective[node.id] = None
        elif parent_id == node.id:
            _report_cycle(node, sink)
            effective[node.id] = None
        elif parent_id not in by_id:
            if sink is not None:
                violation = IntegrityViolation(node.id, parent_id, node.path)
                sink.report(Severity.WARNING, str(violation))
            effective[node.id] = None
        else:
            effective[node.id] = parent_id

    for node in nodes:
        if _on_cycle(node.id, effective):
            _report_cycle(node, sink)
            effective[node.id] = None

    roots: list[SymbolNode] = []
    for node in nodes:
        parent_id = effective[node.id]
        node.parent_id = parent_id
        if parent_id is None:
            roots.append(node)
        else:
            by_id[parent_id].children.append(node)
    return roots


def _on_cycle(node_id: str, effective: dict[str, str | None]) -> bool:
    visited: set[str] = set()
    current = effective.get(node_id)
    while current is not None:
        if current == node_id:
            return True
        if current in visited:
            return False
        visited.add(current)
        current = effective.get(current)
    return False


def _report_cycle(node: SymbolNode, sink: DiagnosticSink | None) -> None:
    if sink is not None:
        sink.report(
            Severity.WARNING,
            f"Symbol {node.id} in {node.path} is its own ancestor; promoted to root",
        )


def walk(roots: Iterable[SymbolNode]) -> Iterator[SymbolNode]:
    """Pre-order traversal over a forest."""
    for root in roots:
        yield from root


def count_descendants(node: SymbolNode) -> int:
    """Number of nodes under ``node``, excluding itself."""
    return sum(1 for _ in node) - 1


def find_enclosing(root: SymbolNode, line: int) -> SymbolNode | None:
    """Innermost symbol whose line range contains ``line``."""
    if not root.start_line <= line <= root.end_line:
        return None
    current = root
    while True:
        for child in current.children:
            if child.start_line <= line <= child.end_line:
                current = child
                break
        else:
            return current
