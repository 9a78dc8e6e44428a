"""
MCP server for codedeps.

Exposes the file dependency graph to LLMs via the Model Context Protocol.

Tools:
    - codedeps_graph: File graph (or symbol-level elements)
    - codedeps_symbols: Symbol tree of one indexed file
    - codedeps_stats: Get index statistics

Usage:
    Run: codedeps-mcp (from an indexed project root)
"""

import asyncio

from codedeps.mcp.server import serve as _serve


def serve() -> None:
    """Entry point for the MCP server."""
    asyncio.run(_serve())


__all__ = ["serve"]
