"""Resolve raw reference candidates to persisted symbol identities."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from codedeps.core.diagnostics import DiagnosticSink, ResolutionMiss, Severity
from codedeps.core.exceptions import StoreError
from codedeps.core.models import REFERENCE_TYPE, RawReference, SymbolReference, new_id, normalize_path


class SymbolLookup(Protocol):
    async def find_id(self, path: str, name: str, start_line: int) -> str | None: ...


@dataclass
class ResolutionResult:
    """Outcome of resolving a batch of candidates."""

    references: list[SymbolReference] = field(default_factory=list)
    misses: list[ResolutionMiss] = field(default_factory=list)
    failures: list[RawReference] = field(default_factory=list)
    unresolved: list[RawReference] = field(default_factory=list)


class ReferenceResolver:
    """Maps (path, name, start line) targets onto stored symbol ids."""

    def __init__(self, symbols: SymbolLookup, sink: DiagnosticSink) -> None:
        self._symbols = symbols
        self._sink = sink

    async def resolve(
        self, candidate: RawReference, report_misses: bool = True
    ) -> SymbolReference | None:
        """Resolve one candidate; a miss returns None.

        A miss is reported as a warning unless ``report_misses`` is off.
        Raises StoreError if the lookup itself fails.
        """
        to_path = normalize_path(candidate.to_path)
        to_symbol_id = await self._symbols.find_id(
            to_path, candidate.to_symbol_name, candidate.to_start_line
        )
        if to_symbol_id is None:
            if report_misses:
                self._sink.report(Severity.WARNING, str(_miss(candidate)))
            return None

        return SymbolReference(
            id=new_id(),
            from_symbol_id=candidate.from_symbol_id,
            to_symbol_id=to_symbol_id,
            from_path=normalize_path(candidate.from_path),
            to_path=to_path,
            reference_type=REFERENCE_TYPE,
            line_number=candidate.line_number,
        )

    async def resolve_all(
        self, candidates: Iterable[RawReference], report_misses: bool = True
    ) -> ResolutionResult:
        """Resolve candidates one by one; a failure never stops the rest."""
        result = ResolutionResult()
        for candidate in candidates:
            try:
                ref = await self.resolve(candidate, report_misses)
            except StoreError as e:
                self._sink.report(
                    Severity.ERROR,
                    f"Error looking up {candidate.to_path}:{candidate.to_symbol_name}: {e}",
                )
                result.failures.append(candidate)
                continue

            if ref is None:
                result.misses.append(_miss(candidate))
                result.unresolved.append(candidate)
            else:
                result.references.append(ref)
        return result


def _miss(candidate: RawReference) -> ResolutionMiss:
    return ResolutionMiss(
        from_path=normalize_path(candidate.from_path),
        to_path=normalize_path(candidate.to_path),
        to_symbol_name=candidate.to_symbol_name,
        to_start_line=candidate.to_start_line,
    )
