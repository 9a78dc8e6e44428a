"""Connection helpers shared by the storage classes."""

from __future__ import annotations

import contextlib
import sqlite3
from collections.abc import AsyncIterator, Awaitable, Callable

import aiosqlite

from codedeps.core.exceptions import StoreError

ConnectionFactory = Callable[[], Awaitable[aiosqlite.Connection]]


@contextlib.asynccontextmanager
async def store_errors(operation: str) -> AsyncIterator[None]:
    """Re-raise database and I/O failures as StoreError."""
    try:
        yield
    except (sqlite3.Error, OSError) as e:
        raise StoreError(f"{operation} failed: {e}") from e


@contextlib.asynccontextmanager
async def transaction(conn: aiosqlite.Connection, operation: str) -> AsyncIterator[None]:
    """Commit on success, roll back and raise StoreError on failure."""
    try:
        yield
        await conn.commit()
    except BaseException as e:
        with contextlib.suppress(sqlite3.Error):
            await conn.rollback()
        if isinstance(e, (sqlite3.Error, OSError)):
            raise StoreError(f"{operation} failed: {e}") from e
        raise
