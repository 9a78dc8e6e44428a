"""Change detection between enumerated files and persisted snapshots."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from codedeps.core.models import FileEntry, FileRecord, normalize_path


@dataclass
class FileDiff:
    """Files to (re-)index and paths to drop."""

    upserts: list[FileEntry] = field(default_factory=list)
    removals: list[str] = field(default_factory=list)
    unchanged: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.upserts and not self.removals


def diff_files(enumerated: Iterable[FileEntry], persisted: Iterable[FileRecord]) -> FileDiff:
    """Classify enumerated files against persisted snapshots. O(n + m).

    A file is upserted when it is new or its timestamp differs at full
    precision, removed when it was persisted but not enumerated, and
    otherwise left alone. A path enumerated twice is considered once.
    """
    by_path = {normalize_path(record.relative_path): record for record in persisted}
    removals = set(by_path)
    result = FileDiff()
    seen: set[str] = set()

    for entry in enumerated:
        path = normalize_path(entry.relative_path)
        if path in seen:
            continue
        seen.add(path)

        record = by_path.get(path)
        if record is None:
            result.upserts.append(_normalized(entry, path))
            continue

        removals.discard(path)
        if record.updated_at != entry.updated_at:
            result.upserts.append(_normalized(entry, path))
        else:
            result.unchanged += 1

    result.removals = sorted(removals)
    return result


def _normalized(entry: FileEntry, path: str) -> FileEntry:
    if entry.relative_path == path:
        return entry
    return FileEntry(relative_path=path, updated_at=entry.updated_at, language_id=entry.language_id)
