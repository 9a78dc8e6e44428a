"""codedeps custom exceptions."""


class CodeDepsError(Exception):
    """Base exception for codedeps errors."""


class StoreError(CodeDepsError):
    """I/O or constraint failure in the persistent store."""


class ExtractionError(CodeDepsError):
    """A symbol or reference extractor failed for one file."""


class SymbolNotFoundError(CodeDepsError):
    """Symbol not found in the index."""


class CyclicTreeError(CodeDepsError):
    """A symbol would become its own ancestor."""


class ConfigError(CodeDepsError):
    """Invalid project configuration."""
