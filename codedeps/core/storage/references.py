"""Symbol reference storage operations."""

from __future__ import annotations

import asyncio

from codedeps.core.exceptions import StoreError
from codedeps.core.models import SymbolReference, normalize_path
from codedeps.core.storage.connection import ConnectionFactory, store_errors, transaction


class ReferenceStorage:
    """Storage operations for references between symbols."""

    def __init__(self, get_connection: ConnectionFactory, write_lock: asyncio.Lock) -> None:
        self._get_connection = get_connection
        self._write_lock = write_lock

    async def upsert(self, ref: SymbolReference) -> None:
        """Insert a reference, or update the existing row with the same id.

        Both endpoints must already exist as symbols.
        """
        async with self._write_lock:
            conn = await self._get_connection()
            async with transaction(conn, f"Upsert of reference {ref.id}"):
                cursor = await conn.execute(
                    "SELECT id FROM symbols WHERE id IN (?, ?)",
                    (ref.from_symbol_id, ref.to_symbol_id),
                )
                found = {row["id"] for row in await cursor.fetchall()}
                missing = {ref.from_symbol_id, ref.to_symbol_id} - found
                if missing:
                    raise StoreError(
                        f"Reference {ref.id} points at unknown symbols: {', '.join(sorted(missing))}"
                    )
                await conn.execute(
                    """
                    INSERT INTO symbol_references (id, from_symbol_id, to_symbol_id, from_path,
                                                   to_path, reference_type, line_number)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        from_symbol_id = excluded.from_symbol_id,
                        to_symbol_id = excluded.to_symbol_id,
                        from_path = excluded.from_path,
                        to_path = excluded.to_path,
                        reference_type = excluded.reference_type,
                        line_number = excluded.line_number
                    """,
                    (
                        ref.id,
                        ref.from_symbol_id,
                        ref.to_symbol_id,
                        normalize_path(ref.from_path),
                        normalize_path(ref.to_path),
                        ref.reference_type,
                        ref.line_number,
                    ),
                )

    async def load_all(self) -> list[SymbolReference]:
        """Load every stored reference."""
        conn = await self._get_connection()
        async with store_errors("Loading references"):
            cursor = await conn.execute("SELECT * FROM symbol_references")
            rows = await cursor.fetchall()
        return [SymbolReference.from_row(row) for row in rows]

    async def get_for_path(self, path: str) -> list[SymbolReference]:
        """Get references that start or end in a file, ordered by line."""
        path = normalize_path(path)
        conn = await self._get_connection()
        async with store_errors(f"Loading references of {path}"):
            cursor = await conn.execute(
                """
                SELECT * FROM symbol_references
                WHERE from_path = ? OR to_path = ?
                ORDER BY from_path, line_number
                """,
                (path, path),
            )
            rows = await cursor.fetchall()
        return [SymbolReference.from_row(row) for row in rows]

    async def delete_for_path(self, path: str) -> int:
        """Delete all references from or to a file."""
        path = normalize_path(path)
        async with self._write_lock:
            conn = await self._get_connection()
            async with transaction(conn, f"Deleting references of {path}"):
                cursor = await conn.execute(
                    "DELETE FROM symbol_references WHERE from_path = ? OR to_path = ?",
                    (path, path),
                )
                return cursor.rowcount

    async def clear(self) -> None:
        """Delete all references."""
        async with self._write_lock:
            conn = await self._get_connection()
            async with transaction(conn, "Clearing references"):
                await conn.execute("DELETE FROM symbol_references")
