"""Graph renderers for the terminal and for JSON consumers."""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from dataclasses import asdict
from typing import TextIO

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from codedeps.core.graph import FileEdge, FileNode
from codedeps.core.models import SymbolNode


class TableRenderer:
    """Prints files and their weighted relations as rich tables."""

    def __init__(self, console: Console) -> None:
        self._console = console

    def render(self, nodes: Sequence[FileNode], edges: Sequence[FileEdge]) -> None:
        files = Table(title="Files")
        files.add_column("File", style="cyan")
        files.add_column("Symbols", justify="right")
        for node in sorted(nodes, key=lambda n: n.path):
            files.add_row(node.path, str(node.symbol_count))
        self._console.print(files)

        if not edges:
            self._console.print("[dim]No cross-file references[/]")
            return

        relations = Table(title="Relations")
        relations.add_column("Source", style="cyan")
        relations.add_column("Target", style="cyan")
        relations.add_column("References", justify="right")
        for edge in sorted(edges, key=lambda e: (-e.relation_count, e.source, e.target)):
            relations.add_row(edge.source, edge.target, str(edge.relation_count))
        self._console.print(relations)


class JsonRenderer:
    """Writes ``{"nodes": [...], "edges": [...]}`` to a stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout

    def render(self, nodes: Sequence[FileNode], edges: Sequence[FileEdge]) -> None:
        payload = {"nodes": [asdict(n) for n in nodes], "edges": [asdict(e) for e in edges]}
        self._stream.write(json.dumps(payload))
        self._stream.write("\n")


def symbol_tree(roots: Sequence[SymbolNode]) -> Tree:
    """Build a rich Tree showing nested symbols with their line ranges."""

    def add(branch: Tree, node: SymbolNode) -> None:
        stack = [(branch, node)]
        while stack:
            parent, current = stack.pop()
            child = parent.add(
                f"[cyan]{current.name}[/] [dim]{current.kind.label} "
                f"{current.start_line + 1}-{current.end_line + 1}[/]"
            )
            stack.extend((child, c) for c in reversed(current.children))

    if len(roots) == 1:
        top = Tree(f"[bold]{roots[0].name}[/] [dim]{roots[0].kind.label}[/]")
        for node in roots[0].children:
            add(top, node)
        return top

    top = Tree("[bold]symbols[/]")
    for root in roots:
        add(top, root)
    return top


def symbol_to_dict(node: SymbolNode) -> dict[str, object]:
    """Convert a SymbolNode (and children) to a JSON-serializable dict."""

    def fields(symbol: SymbolNode, children: list[dict[str, object]]) -> dict[str, object]:
        return {
            "id": symbol.id,
            "name": symbol.name,
            "kind": symbol.kind.label,
            "path": symbol.path,
            "start_line": symbol.start_line,
            "end_line": symbol.end_line,
            "children": children,
        }

    top_children: list[dict[str, object]] = []
    top = fields(node, top_children)
    stack = [(node, top_children)]
    while stack:
        current, siblings = stack.pop()
        for child in current.children:
            grandchildren: list[dict[str, object]] = []
            siblings.append(fields(child, grandchildren))
            stack.append((child, grandchildren))
    return top
