"""Enumerate source files from glob patterns."""

from __future__ import annotations

import fnmatch
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path

from codedeps.core.models import FileEntry, normalize_path

DEFAULT_EXCLUDES = [
    "__pycache__",
    "*.egg-info",
    "node_modules",
    "build",
    "dist",
    "venv",
    ".venv",
]


def enumerate_files(
    root: Path,
    associations: Mapping[str, str],
    exclude_patterns: list[str] | None = None,
) -> list[FileEntry]:
    """List files matching each ``pattern -> language id`` association.

    Paths are POSIX-style and relative to ``root``; the result is sorted by
    path. A file matched by several patterns keeps the first pattern's
    language.
    """
    all_excludes = DEFAULT_EXCLUDES + (exclude_patterns or [])
    found: dict[str, FileEntry] = {}

    for pattern, language_id in associations.items():
        for file in root.glob(pattern):
            if not file.is_file():
                continue
            relative_path = normalize_path(file.relative_to(root).as_posix())
            if relative_path in found or _should_exclude(relative_path, all_excludes):
                continue
            stat = file.stat()
            found[relative_path] = FileEntry(
                relative_path=relative_path,
                updated_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                language_id=language_id,
            )

    return [found[path] for path in sorted(found)]


def _should_exclude(path: str, patterns: list[str]) -> bool:
    """Check if a path matches any exclusion pattern.

    Excludes:
    - Any path component starting with '.' (hidden files/directories)
    - Any path component matching the exclusion patterns
    - The whole path matching an exclusion pattern (e.g. "tests/*")
    """
    for part in path.split("/"):
        if part.startswith("."):
            return True
        for pattern in patterns:
            if fnmatch.fnmatch(part, pattern):
                return True
    return any(fnmatch.fnmatch(path, pattern) for pattern in patterns)
