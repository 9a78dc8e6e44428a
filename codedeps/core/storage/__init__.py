"""
Storage layer: SQLite persistence for symbol trees and references.

This module provides asynchronous database operations split by concern:

Components:
    - IndexRepository: Main facade that coordinates all storage
    - FileStorage: File snapshots (relative path, last-known timestamp)
    - SymbolStorage: Symbol trees flattened into parent-pointer rows
    - ReferenceStorage: Resolved references between symbols

Database Schema:
    files: relative_path, updated_at
    symbols: id, parent_id, name, kind, path, start_line, end_line, update_id, pos_x, pos_y
    symbol_references: id, from_symbol_id, to_symbol_id, from_path, to_path,
                       reference_type, line_number

The database is stored at .codedeps/index.db relative to the project root.
"""

from codedeps.core.storage.files import FileStorage
from codedeps.core.storage.references import ReferenceStorage
from codedeps.core.storage.repository import IndexRepository, get_default_db_path
from codedeps.core.storage.symbols import SymbolStorage

__all__ = [
    "IndexRepository",
    "FileStorage",
    "SymbolStorage",
    "ReferenceStorage",
    "get_default_db_path",
]
