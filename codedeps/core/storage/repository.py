"""Repository that coordinates all storage operations."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from codedeps.core.models import normalize_path
from codedeps.core.storage.connection import store_errors, transaction
from codedeps.core.storage.files import FileStorage
from codedeps.core.storage.references import ReferenceStorage
from codedeps.core.storage.symbols import SymbolStorage

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS files (
    relative_path TEXT PRIMARY KEY,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS symbols (
    id TEXT PRIMARY KEY,
    parent_id TEXT,
    name TEXT NOT NULL,
    kind INTEGER NOT NULL,
    path TEXT NOT NULL,
    start_line INTEGER NOT NULL CHECK (start_line >= 0),
    end_line INTEGER NOT NULL CHECK (end_line >= start_line),
    update_id TEXT NOT NULL DEFAULT '',
    pos_x REAL,
    pos_y REAL,
    FOREIGN KEY (parent_id) REFERENCES symbols(id)
);

CREATE TABLE IF NOT EXISTS symbol_references (
    id TEXT PRIMARY KEY,
    from_symbol_id TEXT NOT NULL,
    to_symbol_id TEXT NOT NULL,
    from_path TEXT NOT NULL,
    to_path TEXT NOT NULL,
    reference_type TEXT NOT NULL DEFAULT 'reference',
    line_number INTEGER NOT NULL,
    FOREIGN KEY (from_symbol_id) REFERENCES symbols(id),
    FOREIGN KEY (to_symbol_id) REFERENCES symbols(id)
);

CREATE INDEX IF NOT EXISTS idx_symbols_path ON symbols(path);
CREATE INDEX IF NOT EXISTS idx_symbols_lookup ON symbols(path, name, start_line);
CREATE INDEX IF NOT EXISTS idx_references_from_path ON symbol_references(from_path);
CREATE INDEX IF NOT EXISTS idx_references_to_path ON symbol_references(to_path);
"""


class IndexRepository:
    """Facade that coordinates files, symbols, and references storage."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._conn: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()
        self._connect_lock = asyncio.Lock()

        self.files = FileStorage(self._get_connection, self._write_lock)
        self.symbols = SymbolStorage(self._get_connection, self._write_lock)
        self.references = ReferenceStorage(self._get_connection, self._write_lock)

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create a database connection."""
        async with self._connect_lock:
            if self._conn is None:
                async with store_errors(f"Opening {self._db_path}"):
                    self._db_path.parent.mkdir(parents=True, exist_ok=True)
                    conn = await aiosqlite.connect(self._db_path)
                    conn.row_factory = sqlite3.Row
                    self._conn = conn
        return self._conn

    async def ensure_schema(self) -> None:
        """Create missing tables and indexes. Never drops existing rows."""
        async with self._write_lock:
            conn = await self._get_connection()
            async with store_errors("Creating schema"):
                await conn.executescript(_SCHEMA)
                await conn.commit()
        logger.debug("Schema ready at %s", self._db_path)

    async def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    async def __aenter__(self) -> IndexRepository:
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: Exception | None, exc_tb: object
    ) -> None:
        await self.close()

    async def remove_file(self, path: str) -> None:
        """Delete a file with all its symbols and the references touching it."""
        path = normalize_path(path)
        await self.symbols.delete_for_path(path)
        await self.files.delete(path)

    async def get_stats(self) -> dict[str, int | datetime | None]:
        """Get index statistics."""
        conn = await self._get_connection()

        async with store_errors("Reading statistics"):
            file_count = await _scalar(conn, "SELECT COUNT(*) FROM files")
            symbol_count = await _scalar(conn, "SELECT COUNT(*) FROM symbols")
            reference_count = await _scalar(conn, "SELECT COUNT(*) FROM symbol_references")
            last_updated_row = await _scalar(conn, "SELECT MAX(updated_at) FROM files")

        return {
            "files": file_count,
            "symbols": symbol_count,
            "references": reference_count,
            "last_updated": datetime.fromisoformat(last_updated_row) if last_updated_row else None,
        }

    async def clear(self) -> None:
        """Clear all data from the database."""
        async with self._write_lock:
            conn = await self._get_connection()
            async with transaction(conn, "Clearing index"):
                await conn.execute("DELETE FROM symbol_references")
                await conn.execute("DELETE FROM symbols")
                await conn.execute("DELETE FROM files")


async def _scalar(conn: aiosqlite.Connection, sql: str) -> Any:
    rows = list(await conn.execute_fetchall(sql))
    return rows[0][0] if rows else None


def get_default_db_path(project_root: Path) -> Path:
    """Get the default database path for a project."""
    return project_root / ".codedeps" / "index.db"
