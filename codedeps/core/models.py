"""Data models for codedeps."""

from __future__ import annotations

import sqlite3
import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from pathlib import PurePath

from codedeps.core.exceptions import CyclicTreeError, ExtractionError

# Bumped whenever a member is added to SymbolKind; stored values never change.
SYMBOL_KIND_VERSION = 1

REFERENCE_TYPE = "reference"


class SymbolKind(IntEnum):
    """Kinds of symbols that can be indexed."""

    FILE = 1
    MODULE = 2
    NAMESPACE = 3
    PACKAGE = 4
    CLASS = 5
    METHOD = 6
    PROPERTY = 7
    FIELD = 8
    CONSTRUCTOR = 9
    ENUM = 10
    INTERFACE = 11
    FUNCTION = 12
    VARIABLE = 13
    CONSTANT = 14
    STRING = 15
    NUMBER = 16
    BOOLEAN = 17
    ARRAY = 18
    OBJECT = 19
    KEY = 20
    NULL = 21
    ENUM_MEMBER = 22
    STRUCT = 23
    EVENT = 24
    OPERATOR = 25
    TYPE_PARAMETER = 26

    @classmethod
    def from_lsp(cls, value: int) -> SymbolKind:
        """Map a Language Server Protocol SymbolKind (1-based)."""
        try:
            return _LSP_SYMBOL_KINDS[value]
        except KeyError:
            raise ExtractionError(f"Unknown LSP symbol kind: {value}") from None

    @classmethod
    def from_vscode(cls, value: int) -> SymbolKind:
        """Map a VS Code API SymbolKind (0-based)."""
        try:
            return _VSCODE_SYMBOL_KINDS[value]
        except KeyError:
            raise ExtractionError(f"Unknown VS Code symbol kind: {value}") from None

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title().replace(" ", "")


_LSP_SYMBOL_KINDS: dict[int, SymbolKind] = {
    1: SymbolKind.FILE,
    2: SymbolKind.MODULE,
    3: SymbolKind.NAMESPACE,
    4: SymbolKind.PACKAGE,
    5: SymbolKind.CLASS,
    6: SymbolKind.METHOD,
    7: SymbolKind.PROPERTY,
    8: SymbolKind.FIELD,
    9: SymbolKind.CONSTRUCTOR,
    10: SymbolKind.ENUM,
    11: SymbolKind.INTERFACE,
    12: SymbolKind.FUNCTION,
    13: SymbolKind.VARIABLE,
    14: SymbolKind.CONSTANT,
    15: SymbolKind.STRING,
    16: SymbolKind.NUMBER,
    17: SymbolKind.BOOLEAN,
    18: SymbolKind.ARRAY,
    19: SymbolKind.OBJECT,
    20: SymbolKind.KEY,
    21: SymbolKind.NULL,
    22: SymbolKind.ENUM_MEMBER,
    23: SymbolKind.STRUCT,
    24: SymbolKind.EVENT,
    25: SymbolKind.OPERATOR,
    26: SymbolKind.TYPE_PARAMETER,
}

_VSCODE_SYMBOL_KINDS: dict[int, SymbolKind] = {
    lsp_value - 1: kind for lsp_value, kind in _LSP_SYMBOL_KINDS.items()
}


def normalize_path(path: str | PurePath) -> str:
    """Normalize a relative path to forward slashes."""
    normalized = str(path).replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Position:
    """Layout position chosen by a renderer."""

    x: float
    y: float

    def set(self, x: float, y: float) -> None:
        self.x = x
        self.y = y


@dataclass
class SymbolNode:
    """A symbol and its children, owned by the file at ``path``."""

    name: str
    kind: SymbolKind
    path: str
    start_line: int
    end_line: int
    update_id: str = ""
    position: Position | None = None
    id: str = field(default_factory=new_id)
    parent_id: str | None = None
    children: list[SymbolNode] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if self.start_line < 0:
            raise ValueError(f"start_line must be >= 0, got {self.start_line}")
        if self.end_line < self.start_line:
            raise ValueError(
                f"end_line ({self.end_line}) must be >= start_line ({self.start_line})"
            )
        self.path = normalize_path(self.path)

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    def add_child(self, child: SymbolNode) -> None:
        """Append a child, refusing to make a node its own ancestor."""
        if child is self or any(node is self for node in child):
            raise CyclicTreeError(f"Symbol {child.id} cannot be a descendant of itself")
        self.children.append(child)

    def set_position(self, x: float, y: float) -> None:
        if self.position is None:
            self.position = Position(x, y)
        else:
            self.position.set(x, y)

    def __iter__(self) -> Iterator[SymbolNode]:
        """Pre-order traversal."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> SymbolNode:
        """Create a SymbolNode (without children) from a database row."""
        position = None
        if row["pos_x"] is not None and row["pos_y"] is not None:
            position = Position(row["pos_x"], row["pos_y"])
        return cls(
            id=row["id"],
            parent_id=row["parent_id"],
            name=row["name"],
            kind=SymbolKind(row["kind"]),
            path=row["path"],
            start_line=row["start_line"],
            end_line=row["end_line"],
            update_id=row["update_id"] or "",
            position=position,
        )


@dataclass
class SymbolReference:
    """A resolved, directed reference between two symbols."""

    id: str
    from_symbol_id: str
    to_symbol_id: str
    from_path: str
    to_path: str
    reference_type: str
    line_number: int

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> SymbolReference:
        """Create a SymbolReference from a database row."""
        return cls(
            id=row["id"],
            from_symbol_id=row["from_symbol_id"],
            to_symbol_id=row["to_symbol_id"],
            from_path=row["from_path"],
            to_path=row["to_path"],
            reference_type=row["reference_type"],
            line_number=row["line_number"],
        )


@dataclass
class RawReference:
    """A reference candidate located by an extractor, not yet resolved."""

    from_symbol_id: str
    from_path: str
    to_path: str
    to_symbol_name: str
    to_start_line: int
    line_number: int


@dataclass
class FileRecord:
    """A persisted file snapshot."""

    relative_path: str
    updated_at: datetime

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> FileRecord:
        """Create a FileRecord from a database row."""
        return cls(
            relative_path=row["relative_path"],
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


@dataclass(frozen=True)
class FileEntry:
    """A file found by enumeration."""

    relative_path: str
    updated_at: datetime
    language_id: str


class IndexStats:
    """Statistics from an indexing run."""

    def __init__(self) -> None:
        self.files: int = 0
        self.unchanged: int = 0
        self.removed: int = 0
        self.symbols: int = 0
        self.references: int = 0
        self.misses: int = 0
        self.failed: list[str] = []
        self.errors: list[str] = []

    @property
    def succeeded(self) -> int:
        return self.files

    def __repr__(self) -> str:
        return (
            f"IndexStats(files={self.files}, unchanged={self.unchanged}, "
            f"removed={self.removed}, symbols={self.symbols}, "
            f"references={self.references}, misses={self.misses}, "
            f"failed={len(self.failed)})"
        )
