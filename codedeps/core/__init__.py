"""
Core module: data models, exceptions, diagnostics, and storage.

This module provides the foundational types and persistence layer:

Models (models.py):
    - SymbolNode: A symbol and its children, owned by one file
    - SymbolReference: A resolved reference between two symbols
    - RawReference: An unresolved reference candidate
    - FileRecord / FileEntry: Persisted and enumerated file snapshots
    - SymbolKind: Closed, versioned enum of symbol kinds

Exceptions (exceptions.py):
    - CodeDepsError: Base exception for all codedeps errors
    - StoreError: Persistent store failure
    - ExtractionError: An extractor failed for one file
    - SymbolNotFoundError: Requested symbol doesn't exist
    - CyclicTreeError: A symbol would become its own ancestor

Diagnostics (diagnostics.py):
    - DiagnosticSink: Injected channel for non-fatal conditions
    - ResolutionMiss / IntegrityViolation: Reported, never raised

Storage (storage/):
    - IndexRepository: Facade for all database operations
    - Uses SQLite (through aiosqlite) in .codedeps/index.db
"""

from codedeps.core.diagnostics import (
    CollectingDiagnosticSink,
    DiagnosticSink,
    IntegrityViolation,
    LoggingDiagnosticSink,
    ResolutionMiss,
    Severity,
)
from codedeps.core.exceptions import (
    CodeDepsError,
    CyclicTreeError,
    ExtractionError,
    StoreError,
    SymbolNotFoundError,
)
from codedeps.core.models import (
    FileEntry,
    FileRecord,
    IndexStats,
    Position,
    RawReference,
    SymbolKind,
    SymbolNode,
    SymbolReference,
)
from codedeps.core.storage import IndexRepository, get_default_db_path

__all__ = [
    # Models
    "SymbolNode",
    "SymbolReference",
    "RawReference",
    "FileRecord",
    "FileEntry",
    "IndexStats",
    "Position",
    "SymbolKind",
    # Exceptions
    "CodeDepsError",
    "StoreError",
    "ExtractionError",
    "SymbolNotFoundError",
    "CyclicTreeError",
    # Diagnostics
    "DiagnosticSink",
    "LoggingDiagnosticSink",
    "CollectingDiagnosticSink",
    "ResolutionMiss",
    "IntegrityViolation",
    "Severity",
    # Storage
    "IndexRepository",
    "get_default_db_path",
]
