"""Unit tests for change detection."""

from datetime import datetime, timedelta, timezone

from codedeps.core.changes import diff_files
from codedeps.core.models import FileEntry, FileRecord

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def entry(path: str, updated_at: datetime = T0) -> FileEntry:
    return FileEntry(relative_path=path, updated_at=updated_at, language_id="python")


def record(path: str, updated_at: datetime = T0) -> FileRecord:
    return FileRecord(relative_path=path, updated_at=updated_at)


class TestDiffFiles:
    """Tests for classifying enumerated files against snapshots."""

    def test_new_files_are_upserted(self) -> None:
        result = diff_files([entry("a.py"), entry("b.py")], [])

        assert [e.relative_path for e in result.upserts] == ["a.py", "b.py"]
        assert result.removals == []
        assert result.unchanged == 0

    def test_unchanged_files_are_skipped(self) -> None:
        result = diff_files([entry("a.py")], [record("a.py")])

        assert result.upserts == []
        assert result.removals == []
        assert result.unchanged == 1
        assert result.is_empty

    def test_touched_file_is_upserted(self) -> None:
        later = T0 + timedelta(seconds=5)
        result = diff_files([entry("a.py", later)], [record("a.py")])

        assert [e.relative_path for e in result.upserts] == ["a.py"]

    def test_sub_second_change_is_detected(self) -> None:
        later = T0 + timedelta(microseconds=1)
        result = diff_files([entry("a.py", later)], [record("a.py")])

        assert len(result.upserts) == 1

    def test_older_timestamp_is_also_a_change(self) -> None:
        earlier = T0 - timedelta(days=1)
        result = diff_files([entry("a.py", earlier)], [record("a.py")])

        assert len(result.upserts) == 1

    def test_missing_files_are_removed(self) -> None:
        result = diff_files([entry("a.py")], [record("c.py"), record("a.py"), record("b.py")])

        assert result.removals == ["b.py", "c.py"]
        assert result.upserts == []

    def test_mixed(self) -> None:
        result = diff_files(
            [entry("keep.py"), entry("touch.py", T0 + timedelta(seconds=1)), entry("new.py")],
            [record("keep.py"), record("touch.py"), record("gone.py")],
        )

        assert sorted(e.relative_path for e in result.upserts) == ["new.py", "touch.py"]
        assert result.removals == ["gone.py"]
        assert result.unchanged == 1

    def test_applying_a_diff_makes_it_idempotent(self) -> None:
        enumerated = [entry("a.py"), entry("b.py", T0 + timedelta(hours=1))]
        persisted = [record("a.py", T0 - timedelta(hours=1)), record("z.py")]

        first = diff_files(enumerated, persisted)
        applied = {r.relative_path: r for r in persisted}
        for path in first.removals:
            del applied[path]
        for e in first.upserts:
            applied[e.relative_path] = record(e.relative_path, e.updated_at)

        second = diff_files(enumerated, applied.values())
        assert second.is_empty
        assert second.unchanged == 2

    def test_duplicate_enumeration_first_wins(self) -> None:
        later = T0 + timedelta(seconds=1)
        result = diff_files([entry("a.py"), entry("a.py", later)], [record("a.py")])

        assert result.upserts == []
        assert result.unchanged == 1

    def test_paths_are_normalized(self) -> None:
        result = diff_files([entry("pkg\\mod.py")], [record("pkg/mod.py")])

        assert result.unchanged == 1
        assert result.removals == []

    def test_normalized_entries_are_returned(self) -> None:
        result = diff_files([entry("./pkg/mod.py")], [])

        assert result.upserts[0].relative_path == "pkg/mod.py"

    def test_empty_inputs(self) -> None:
        result = diff_files([], [])
        assert result.is_empty
