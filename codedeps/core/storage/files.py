"""File snapshot storage operations."""

from __future__ import annotations

import asyncio
from datetime import datetime

from codedeps.core.models import FileRecord, normalize_path
from codedeps.core.storage.connection import ConnectionFactory, store_errors, transaction


class FileStorage:
    """Storage operations for indexed files."""

    def __init__(self, get_connection: ConnectionFactory, write_lock: asyncio.Lock) -> None:
        self._get_connection = get_connection
        self._write_lock = write_lock

    async def upsert(self, path: str, updated_at: datetime) -> None:
        """Insert a file record, or update its timestamp if it exists."""
        path = normalize_path(path)
        async with self._write_lock:
            conn = await self._get_connection()
            async with transaction(conn, f"Upsert of file {path}"):
                cursor = await conn.execute(
                    "SELECT COUNT(*) FROM files WHERE relative_path = ?", (path,)
                )
                row = await cursor.fetchone()
                if row is not None and row[0] > 0:
                    await conn.execute(
                        "UPDATE files SET updated_at = ? WHERE relative_path = ?",
                        (updated_at.isoformat(), path),
                    )
                else:
                    await conn.execute(
                        "INSERT INTO files (relative_path, updated_at) VALUES (?, ?)",
                        (path, updated_at.isoformat()),
                    )

    async def get(self, path: str) -> FileRecord | None:
        """Get a file record, or None if not indexed."""
        records = await self.query(path)
        return records[0] if records else None

    async def query(self, path: str | None = None) -> list[FileRecord]:
        """Get one file record by path, or every record when path is None.

        Order is unspecified.
        """
        conn = await self._get_connection()
        async with store_errors("File query"):
            if path is None:
                cursor = await conn.execute("SELECT * FROM files")
            else:
                cursor = await conn.execute(
                    "SELECT * FROM files WHERE relative_path = ?", (normalize_path(path),)
                )
            rows = await cursor.fetchall()
        return [FileRecord.from_row(row) for row in rows]

    async def delete(self, path: str) -> None:
        """Delete a file record."""
        path = normalize_path(path)
        async with self._write_lock:
            conn = await self._get_connection()
            async with transaction(conn, f"Delete of file {path}"):
                await conn.execute("DELETE FROM files WHERE relative_path = ?", (path,))

    async def clear(self) -> None:
        """Delete all file records."""
        async with self._write_lock:
            conn = await self._get_connection()
            async with transaction(conn, "Clearing files"):
                await conn.execute("DELETE FROM files")
