"""Symbol storage operations."""

from __future__ import annotations

import asyncio

import aiosqlite

from codedeps.core.diagnostics import DiagnosticSink
from codedeps.core.exceptions import SymbolNotFoundError
from codedeps.core.models import Position, SymbolNode, normalize_path
from codedeps.core.storage.connection import ConnectionFactory, store_errors, transaction
from codedeps.core.tree import flatten, rebuild

_INSERT = """
INSERT INTO symbols (id, parent_id, name, kind, path, start_line, end_line,
                     update_id, pos_x, pos_y)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""


class SymbolStorage:
    """Storage operations for symbol trees."""

    def __init__(self, get_connection: ConnectionFactory, write_lock: asyncio.Lock) -> None:
        self._get_connection = get_connection
        self._write_lock = write_lock

    async def replace_tree(self, root: SymbolNode) -> int:
        """Replace every symbol of ``root.path`` with the given tree.

        References touching the path are deleted with the old symbols. The
        delete and the insert share one transaction. Returns the number of
        symbols inserted.
        """
        path = root.path
        rows = [_to_params(node, parent_id) for node, parent_id in flatten(root)]
        for params in rows:
            if params[4] != path:
                raise ValueError(f"Symbol {params[0]} belongs to {params[4]}, not {path}")

        async with self._write_lock:
            conn = await self._get_connection()
            async with transaction(conn, f"Replacing symbols of {path}"):
                await _delete_path(conn, path)
                await conn.executemany(_INSERT, rows)
        return len(rows)

    async def delete_for_path(self, path: str) -> int:
        """Delete all symbols of a file and every reference to or from it.

        Returns the number of symbols deleted.
        """
        path = normalize_path(path)
        async with self._write_lock:
            conn = await self._get_connection()
            async with transaction(conn, f"Deleting symbols of {path}"):
                return await _delete_path(conn, path)

    async def get_in_file(self, path: str) -> list[SymbolNode]:
        """Get all symbols in a file as flat rows, ordered by start line."""
        conn = await self._get_connection()
        async with store_errors(f"Loading symbols of {path}"):
            cursor = await conn.execute(
                "SELECT * FROM symbols WHERE path = ? ORDER BY start_line",
                (normalize_path(path),),
            )
            rows = await cursor.fetchall()
        return [SymbolNode.from_row(row) for row in rows]

    async def load_tree(self, path: str, sink: DiagnosticSink | None = None) -> list[SymbolNode]:
        """Load the root symbols of a file with their children attached."""
        return rebuild(await self.get_in_file(path), sink)

    async def load_all_trees(self, sink: DiagnosticSink | None = None) -> list[SymbolNode]:
        """Load the symbol forests of every file, ordered by path."""
        conn = await self._get_connection()
        async with store_errors("Loading all symbols"):
            cursor = await conn.execute("SELECT * FROM symbols ORDER BY path, start_line")
            rows = await cursor.fetchall()

        by_path: dict[str, list[SymbolNode]] = {}
        for row in rows:
            node = SymbolNode.from_row(row)
            by_path.setdefault(node.path, []).append(node)

        roots: list[SymbolNode] = []
        for nodes in by_path.values():
            roots.extend(rebuild(nodes, sink))
        return roots

    async def find_id(self, path: str, name: str, start_line: int) -> str | None:
        """Find a symbol id by (path, name, start line); first hit wins."""
        conn = await self._get_connection()
        async with store_errors(f"Looking up {path}:{name}:{start_line}"):
            cursor = await conn.execute(
                """
                SELECT id FROM symbols
                WHERE path = ? AND name = ? AND start_line = ?
                ORDER BY rowid
                LIMIT 1
                """,
                (normalize_path(path), name, start_line),
            )
            row = await cursor.fetchone()
        return row["id"] if row is not None else None

    async def get_by_id(self, symbol_id: str) -> SymbolNode:
        """Get a symbol (without children) by its ID."""
        conn = await self._get_connection()
        async with store_errors(f"Loading symbol {symbol_id}"):
            cursor = await conn.execute("SELECT * FROM symbols WHERE id = ?", (symbol_id,))
            row = await cursor.fetchone()
        if row is None:
            raise SymbolNotFoundError(f"Symbol with id {symbol_id} not found")
        return SymbolNode.from_row(row)

    async def set_position(self, symbol_id: str, position: Position | None) -> None:
        """Persist a layout position for one symbol."""
        x, y = (position.x, position.y) if position is not None else (None, None)
        async with self._write_lock:
            conn = await self._get_connection()
            async with transaction(conn, f"Positioning symbol {symbol_id}"):
                cursor = await conn.execute(
                    "UPDATE symbols SET pos_x = ?, pos_y = ? WHERE id = ?", (x, y, symbol_id)
                )
                if cursor.rowcount == 0:
                    raise SymbolNotFoundError(f"Symbol with id {symbol_id} not found")

    async def clear(self) -> None:
        """Delete all symbols."""
        async with self._write_lock:
            conn = await self._get_connection()
            async with transaction(conn, "Clearing symbols"):
                await conn.execute("DELETE FROM symbols")


async def _delete_path(conn: aiosqlite.Connection, path: str) -> int:
    # References go first so no edge is left pointing at a deleted symbol.
    await conn.execute(
        "DELETE FROM symbol_references WHERE from_path = ? OR to_path = ?", (path, path)
    )
    cursor = await conn.execute("DELETE FROM symbols WHERE path = ?", (path,))
    return cursor.rowcount


def _to_params(node: SymbolNode, parent_id: str | None) -> tuple[object, ...]:
    pos_x, pos_y = (node.position.x, node.position.y) if node.position else (None, None)
    return (
        node.id,
        parent_id,
        node.name,
        int(node.kind),
        node.path,
        node.start_line,
        node.end_line,
        node.update_id,
        pos_x,
        pos_y,
    )
