"""Tests for error handling paths."""

import sqlite3

import pytest

from codedeps.core.diagnostics import (
    CollectingDiagnosticSink,
    IntegrityViolation,
    LoggingDiagnosticSink,
    NullDiagnosticSink,
    ResolutionMiss,
    Severity,
)
from codedeps.core.exceptions import (
    CodeDepsError,
    ConfigError,
    CyclicTreeError,
    ExtractionError,
    StoreError,
    SymbolNotFoundError,
)
from codedeps.core.storage.connection import store_errors


class TestExceptionHierarchy:
    """Every codedeps error can be caught through the base class."""

    @pytest.mark.parametrize(
        "error",
        [StoreError, ExtractionError, SymbolNotFoundError, CyclicTreeError, ConfigError],
    )
    def test_subclass_of_base(self, error: type[Exception]) -> None:
        assert issubclass(error, CodeDepsError)

        with pytest.raises(CodeDepsError):
            raise error("boom")

    def test_diagnostic_records_are_not_exceptions(self) -> None:
        assert not issubclass(ResolutionMiss, BaseException)
        assert not issubclass(IntegrityViolation, BaseException)


class TestStoreErrors:
    @pytest.mark.asyncio
    async def test_sqlite_error_wrapped(self) -> None:
        with pytest.raises(StoreError) as exc_info:
            async with store_errors("Reading"):
                raise sqlite3.OperationalError("database is locked")

        assert "Reading failed" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)

    @pytest.mark.asyncio
    async def test_other_errors_pass_through(self) -> None:
        with pytest.raises(KeyError):
            async with store_errors("Reading"):
                raise KeyError("id")


class TestDiagnosticSinks:
    """Tests for diagnostic sinks and records."""

    def test_collecting_sink_filters_by_severity(self) -> None:
        sink = CollectingDiagnosticSink()
        sink.report(Severity.WARNING, "first")
        sink.report(Severity.ERROR, "second")

        assert sink.messages() == ["first", "second"]
        assert sink.messages(Severity.ERROR) == ["second"]

    def test_collecting_sink_forwards(self) -> None:
        inner = CollectingDiagnosticSink()
        sink = CollectingDiagnosticSink(forward=inner)

        sink.report(Severity.INFO, "hello")

        assert inner.messages() == ["hello"]

    def test_logging_sink(self, caplog: pytest.LogCaptureFixture) -> None:
        sink = LoggingDiagnosticSink()

        with caplog.at_level("DEBUG", logger="codedeps"):
            sink.report(Severity.WARNING, "Target symbol not found")

        assert caplog.records[0].levelname == "WARNING"
        assert caplog.records[0].getMessage() == "Target symbol not found"

    def test_null_sink(self) -> None:
        NullDiagnosticSink().report(Severity.ERROR, "ignored")

    def test_resolution_miss_message(self) -> None:
        miss = ResolutionMiss("a.py", "b.py", "g", 4)

        assert str(miss) == "Target symbol not found: b.py:g:4 (referenced from a.py)"

    def test_integrity_violation_message(self) -> None:
        violation = IntegrityViolation("child", "parent", "a.py")

        assert "missing parent parent" in str(violation)
