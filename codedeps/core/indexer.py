"""Indexer that coordinates change detection, extraction, and storage."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from codedeps.core.changes import FileDiff, diff_files
from codedeps.core.diagnostics import DiagnosticSink, LoggingDiagnosticSink, Severity
from codedeps.core.exceptions import ExtractionError, StoreError
from codedeps.core.graph import FileGraph, load_graph
from codedeps.core.models import FileEntry, IndexStats, RawReference, SymbolNode, new_id, normalize_path
from codedeps.core.resolver import ReferenceResolver
from codedeps.core.storage import IndexRepository
from codedeps.languages import ExtractorRegistry, default_registry, load_document

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


@dataclass
class FileResult:
    """What one re-indexed file contributed."""

    path: str
    symbols: int = 0
    references: int = 0
    misses: int = 0
    unresolved: list[RawReference] = field(default_factory=list)


class Indexer:
    """Re-indexes changed files and keeps the store consistent.

    Each file goes through the same steps, in order: delete its symbols and
    every reference touching it, extract its tree, insert the tree, extract
    and resolve its references, insert them, and finally record its
    timestamp. A crash part-way leaves the old timestamp, so the file is
    picked up again on the next run.
    """

    def __init__(
        self,
        repo: IndexRepository,
        extractors: ExtractorRegistry,
        sink: DiagnosticSink | None = None,
    ) -> None:
        self._repo = repo
        self._extractors = extractors
        self._sink = sink or LoggingDiagnosticSink(logger)
        self._resolver = ReferenceResolver(repo.symbols, self._sink)
        self._path_locks: dict[str, asyncio.Lock] = {}

    @classmethod
    def for_root(
        cls, repo: IndexRepository, root: Path, sink: DiagnosticSink | None = None
    ) -> Indexer:
        """Indexer using the built-in extractors for a project root."""
        sink = sink or LoggingDiagnosticSink(logger)
        return cls(repo, default_registry(root, sink), sink)

    async def ensure_schema(self) -> None:
        await self._repo.ensure_schema()

    async def diff(self, entries: Iterable[FileEntry]) -> FileDiff:
        """Compare enumerated files against the stored snapshots."""
        persisted = await self._repo.files.query()
        return diff_files(entries, persisted)

    async def reindex_file(
        self,
        path: str,
        tree: SymbolNode,
        raw_references: Iterable[RawReference],
        updated_at: datetime,
    ) -> FileResult:
        """Replace a file's symbols and references with an extracted tree."""
        path = normalize_path(path)
        if tree.path != path:
            raise ValueError(f"Tree belongs to {tree.path}, not {path}")

        async with self._lock_for(path):
            await self._repo.symbols.delete_for_path(path)
            result = FileResult(path=path)
            result.symbols = await self._repo.symbols.replace_tree(tree)
            await self._store_references(raw_references, result)
            await self._repo.files.upsert(path, updated_at)
        return result

    async def remove_file(self, path: str) -> None:
        """Forget a file, its symbols, and every reference touching it."""
        path = normalize_path(path)
        async with self._lock_for(path):
            await self._repo.remove_file(path)

    async def index(
        self,
        entries: Iterable[FileEntry],
        root: Path,
        on_progress: ProgressCallback | None = None,
        retry_misses: bool = False,
    ) -> IndexStats:
        """Index every new or changed file and drop removed ones.

        A failure on one file is recorded and the pass continues; files
        indexed before it stay committed. With ``retry_misses`` the
        references that missed their target are resolved once more after
        all files are indexed.

        Returns:
            IndexStats with counts and the paths that failed
        """
        stats = IndexStats()
        file_diff = await self.diff(entries)
        stats.unchanged = file_diff.unchanged

        for path in file_diff.removals:
            try:
                await self.remove_file(path)
            except StoreError as e:
                self._record_failure(stats, path, e)
            else:
                stats.removed += 1

        update_id = new_id()
        deferred: list[RawReference] = []
        total = len(file_diff.upserts)

        for i, entry in enumerate(file_diff.upserts, start=1):
            try:
                result = await self._index_entry(entry, root, update_id)
            except (ExtractionError, StoreError) as e:
                self._record_failure(stats, entry.relative_path, e)
            else:
                stats.files += 1
                stats.symbols += result.symbols
                stats.references += result.references
                stats.misses += result.misses
                deferred.extend(result.unresolved)

            if on_progress:
                on_progress(entry.relative_path, i, total)

        if retry_misses and deferred:
            # Each of these was already reported as a miss on the first pass
            retry = FileResult(path="")
            await self._store_references(deferred, retry, report_misses=False)
            stats.references += retry.references
            stats.misses -= retry.references
            self._sink.report(
                Severity.INFO,
                f"Second pass resolved {retry.references} of {len(deferred)} references",
            )

        return stats

    async def load_graph(self) -> FileGraph:
        return await load_graph(self._repo, self._sink)

    async def _index_entry(self, entry: FileEntry, root: Path, update_id: str) -> FileResult:
        path = normalize_path(entry.relative_path)
        async with self._lock_for(path):
            await self._repo.symbols.delete_for_path(path)

            language = self._extractors.get(entry.language_id)
            document = await asyncio.to_thread(load_document, root, entry)
            tree = await language.symbols.extract_symbol_tree(path, document)
            for node in tree:
                node.update_id = update_id

            result = FileResult(path=path)
            result.symbols = await self._repo.symbols.replace_tree(tree)

            try:
                raw_references = await language.references.extract_references(document, tree)
            except ExtractionError:
                await self._repo.symbols.delete_for_path(path)
                raise

            await self._store_references(raw_references, result)
            await self._repo.files.upsert(path, entry.updated_at)

        self._sink.report(
            Severity.DEBUG,
            f"Indexed {path}: {result.symbols} symbols, {result.references} references",
        )
        return result

    async def _store_references(
        self,
        candidates: Iterable[RawReference],
        result: FileResult,
        report_misses: bool = True,
    ) -> None:
        resolution = await self._resolver.resolve_all(candidates, report_misses)
        result.misses += len(resolution.misses)
        result.unresolved.extend(resolution.unresolved)
        for ref in resolution.references:
            try:
                await self._repo.references.upsert(ref)
            except StoreError as e:
                self._sink.report(Severity.ERROR, f"Cannot store reference {ref.id}: {e}")
            else:
                result.references += 1

    def _record_failure(self, stats: IndexStats, path: str, error: Exception) -> None:
        self._sink.report(Severity.ERROR, f"Failed to index {path}: {error}")
        stats.failed.append(path)
        stats.errors.append(str(error))

    def _lock_for(self, path: str) -> asyncio.Lock:
        lock = self._path_locks.get(path)
        if lock is None:
            lock = self._path_locks[path] = asyncio.Lock()
        return lock
