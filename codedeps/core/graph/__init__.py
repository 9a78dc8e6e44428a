"""
File graph aggregation.

This module collapses the symbol-level index into a graph for visualization:

Data Structures:
    - FileGraph: Plain node/edge lists
    - FileNode: One file, sized by its symbol count
    - FileEdge: One unordered file pair, weighted by reference count

Algorithms:
    - aggregate_file_graph(): Undirected, deduplicated pair counting
    - build_symbol_elements(): Symbol-level containment and reference edges

Loading:
    - load_graph(): Aggregate the whole store
    - load_symbol_elements(): Symbol-level view of the whole store
"""

from codedeps.core.graph.aggregate import aggregate_file_graph, build_symbol_elements
from codedeps.core.graph.loader import load_graph, load_symbol_elements
from codedeps.core.graph.models import FileEdge, FileGraph, FileNode, GraphRenderer

__all__ = [
    "FileEdge",
    "FileGraph",
    "FileNode",
    "GraphRenderer",
    "aggregate_file_graph",
    "build_symbol_elements",
    "load_graph",
    "load_symbol_elements",
]
