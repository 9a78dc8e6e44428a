"""
Language extractors: Build symbol trees and reference candidates.

This module provides the extraction layer that turns source documents into
symbol trees (for storage) and raw reference candidates (for resolution).

Components:
    - SymbolExtractor / ReferenceExtractor: Protocols for extractors
    - ExtractorRegistry: Extractors keyed by language id
    - SourceDocument: An opened source file
    - PythonSymbolExtractor / PythonReferenceExtractor: ast-based extractors

Adding a new language:
    1. Implement extract_symbol_tree() returning a FILE-kind root
    2. Implement extract_references() returning RawReference candidates
    3. Register both under the language id used in the file associations
"""

from __future__ import annotations

from pathlib import Path

from codedeps.core.diagnostics import DiagnosticSink
from codedeps.languages.base import (
    ExtractorRegistry,
    LanguageSupport,
    ReferenceExtractor,
    SourceDocument,
    SymbolExtractor,
    load_document,
)
from codedeps.languages.python import (
    LANGUAGE_ID as PYTHON,
    PythonReferenceExtractor,
    PythonSymbolExtractor,
)


def default_registry(root: Path, sink: DiagnosticSink | None = None) -> ExtractorRegistry:
    """Registry with every built-in language."""
    registry = ExtractorRegistry()
    registry.register(PYTHON, PythonSymbolExtractor(), PythonReferenceExtractor(root, sink))
    return registry


__all__ = [
    "ExtractorRegistry",
    "LanguageSupport",
    "PythonReferenceExtractor",
    "PythonSymbolExtractor",
    "ReferenceExtractor",
    "SourceDocument",
    "SymbolExtractor",
    "default_registry",
    "load_document",
]
