"""Protocols for symbol and reference extractors."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from codedeps.core.exceptions import ExtractionError
from codedeps.core.models import FileEntry, RawReference, SymbolNode


@dataclass
class SourceDocument:
    """An opened source file handed to extractors."""

    relative_path: str
    absolute_path: Path
    language_id: str
    text: str

    @property
    def line_count(self) -> int:
        return len(self.text.splitlines())


def load_document(root: Path, entry: FileEntry) -> SourceDocument:
    """Read an enumerated file; unreadable files raise ExtractionError."""
    absolute_path = root / entry.relative_path
    try:
        text = absolute_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ExtractionError(f"Cannot read {entry.relative_path}: {e}") from e
    return SourceDocument(
        relative_path=entry.relative_path,
        absolute_path=absolute_path,
        language_id=entry.language_id,
        text=text,
    )


class SymbolExtractor(Protocol):
    """Builds the symbol tree of one document."""

    async def extract_symbol_tree(self, relative_path: str, document: SourceDocument) -> SymbolNode:
        """Return a FILE-kind root spanning the document. Raises ExtractionError."""
        ...


class ReferenceExtractor(Protocol):
    """Finds references from one document's symbols to other files."""

    async def extract_references(
        self, document: SourceDocument, root: SymbolNode
    ) -> list[RawReference]:
        """Return unresolved candidates originating in ``root``. Raises ExtractionError."""
        ...


@dataclass
class LanguageSupport:
    symbols: SymbolExtractor
    references: ReferenceExtractor


class ExtractorRegistry:
    """Extractors keyed by language id."""

    def __init__(self) -> None:
        self._languages: dict[str, LanguageSupport] = {}

    def register(
        self, language_id: str, symbols: SymbolExtractor, references: ReferenceExtractor
    ) -> None:
        self._languages[language_id] = LanguageSupport(symbols, references)

    def get(self, language_id: str) -> LanguageSupport:
        try:
            return self._languages[language_id]
        except KeyError:
            raise ExtractionError(f"No extractor registered for language '{language_id}'") from None

    def __contains__(self, language_id: object) -> bool:
        return language_id in self._languages
