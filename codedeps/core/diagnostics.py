"""Diagnostic sinks: where non-fatal conditions are reported.

Components never log through a global channel. Each one receives a
``DiagnosticSink`` and reports through it; the CLI wires a sink that
forwards to ``logging``, tests wire one that collects reports.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class Severity(Enum):
    """Severity of a diagnostic report."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LOGGING_LEVELS = {
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class DiagnosticSink(Protocol):
    """Receives diagnostic reports."""

    def report(self, severity: Severity, message: str) -> None:
        """Report a message with the given severity."""
        ...


class LoggingDiagnosticSink:
    """Forwards reports to a ``logging.Logger``."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("codedeps")

    def report(self, severity: Severity, message: str) -> None:
        self._logger.log(_LOGGING_LEVELS[severity], message)


@dataclass
class Diagnostic:
    severity: Severity
    message: str


class CollectingDiagnosticSink:
    """Keeps every report in memory, optionally forwarding to another sink."""

    def __init__(self, forward: DiagnosticSink | None = None) -> None:
        self.diagnostics: list[Diagnostic] = []
        self._forward = forward

    def report(self, severity: Severity, message: str) -> None:
        self.diagnostics.append(Diagnostic(severity, message))
        if self._forward is not None:
            self._forward.report(severity, message)

    def messages(self, severity: Severity | None = None) -> list[str]:
        return [d.message for d in self.diagnostics if severity is None or d.severity == severity]


class NullDiagnosticSink:
    """Discards every report."""

    def report(self, severity: Severity, message: str) -> None:
        pass


@dataclass(frozen=True)
class ResolutionMiss:
    """A reference candidate whose target symbol is not in the store."""

    from_path: str
    to_path: str
    to_symbol_name: str
    to_start_line: int

    def __str__(self) -> str:
        return (
            f"Target symbol not found: {self.to_path}:{self.to_symbol_name}:"
            f"{self.to_start_line} (referenced from {self.from_path})"
        )


@dataclass(frozen=True)
class IntegrityViolation:
    """A stored symbol whose parent id does not resolve."""

    symbol_id: str
    parent_id: str
    path: str

    def __str__(self) -> str:
        return (
            f"Symbol {self.symbol_id} in {self.path} references missing parent "
            f"{self.parent_id}; promoted to root"
        )
