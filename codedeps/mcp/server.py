"""MCP server implementation for codedeps."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from codedeps.core.diagnostics import LoggingDiagnosticSink
from codedeps.core.exceptions import CodeDepsError
from codedeps.core.graph import load_graph, load_symbol_elements
from codedeps.core.storage import IndexRepository, get_default_db_path
from codedeps.render import symbol_to_dict

logger = logging.getLogger(__name__)

server = Server("codedeps")


def _get_repo(root: Path | None = None) -> IndexRepository:
    """Get repository for the given root (default: current directory)."""
    db_path = get_default_db_path(root or Path.cwd())
    if not db_path.exists():
        raise FileNotFoundError(
            f"No codedeps index found. Run 'codedeps index .' first.\nExpected: {db_path}"
        )
    return IndexRepository(db_path)


@server.list_tools()  # type: ignore[no-untyped-call, untyped-decorator]
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="codedeps_graph",
            description=(
                "Get the file dependency graph of the indexed project. "
                "Each edge joins two files and counts the references between them, "
                "in either direction."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "symbols": {
                        "type": "boolean",
                        "description": "Return symbol-level nodes and edges instead of files",
                        "default": False,
                    },
                },
            },
        ),
        Tool(
            name="codedeps_symbols",
            description="Get the nested symbol tree of one indexed file.",
            inputSchema={
                "type": "object",
                "properties": {
                    "file": {
                        "type": "string",
                        "description": "Path of the file relative to the project root",
                    },
                },
                "required": ["file"],
            },
        ),
        Tool(
            name="codedeps_stats",
            description="Get statistics about the indexed codebase.",
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
    ]


@server.call_tool()  # type: ignore[untyped-decorator]
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "codedeps_graph":
            result = await _handle_graph(bool(arguments.get("symbols", False)))
        elif name == "codedeps_symbols":
            result = await _handle_symbols(arguments["file"])
        elif name == "codedeps_stats":
            result = await _handle_stats()
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    except (FileNotFoundError, CodeDepsError) as e:
        return [TextContent(type="text", text=json.dumps({"error": str(e)}))]


async def _handle_graph(symbols: bool, root: Path | None = None) -> dict[str, Any]:
    """Handle codedeps_graph tool."""
    sink = LoggingDiagnosticSink(logger)
    async with _get_repo(root) as repo:
        if symbols:
            return await load_symbol_elements(repo, sink)
        file_graph = await load_graph(repo, sink)
        return file_graph.to_dict()


async def _handle_symbols(file: str, root: Path | None = None) -> dict[str, Any]:
    """Handle codedeps_symbols tool."""
    async with _get_repo(root) as repo:
        roots = await repo.symbols.load_tree(file, LoggingDiagnosticSink(logger))

    if not roots:
        return {"error": f"No symbols for '{file}'", "results": []}
    return {"results": [symbol_to_dict(r) for r in roots]}


async def _handle_stats(root: Path | None = None) -> dict[str, Any]:
    """Handle codedeps_stats tool."""
    async with _get_repo(root) as repo:
        stats = await repo.get_stats()

    last_updated = stats["last_updated"]
    return {
        "files": stats["files"],
        "symbols": stats["symbols"],
        "references": stats["references"],
        "last_updated": str(last_updated) if last_updated else None,
    }


async def serve() -> None:
    """Run the MCP server over stdio."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )
