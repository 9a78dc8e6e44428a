"""Load graphs from IndexRepository."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from codedeps.core.graph.aggregate import aggregate_file_graph, build_symbol_elements
from codedeps.core.graph.models import FileGraph

if TYPE_CHECKING:
    from codedeps.core.diagnostics import DiagnosticSink
    from codedeps.core.storage import IndexRepository


async def load_graph(repo: IndexRepository, sink: DiagnosticSink | None = None) -> FileGraph:
    """Load every symbol tree and reference and aggregate them per file."""
    roots = await repo.symbols.load_all_trees(sink)
    references = await repo.references.load_all()
    return aggregate_file_graph(roots, references, sink)


async def load_symbol_elements(
    repo: IndexRepository, sink: DiagnosticSink | None = None
) -> dict[str, list[dict[str, Any]]]:
    """Load the symbol-level view (containment and reference edges)."""
    roots = await repo.symbols.load_all_trees(sink)
    references = await repo.references.load_all()
    return build_symbol_elements(roots, references)
