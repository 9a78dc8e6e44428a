"""Shared fixtures and helpers for tests."""

import tempfile
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
import pytest_asyncio

from codedeps.core.diagnostics import CollectingDiagnosticSink
from codedeps.core.storage import IndexRepository, get_default_db_path

_TESTS_ROOT = Path(__file__).parent


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        rel = Path(str(item.fspath)).relative_to(_TESTS_ROOT)
        if rel.parts and rel.parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


@pytest.fixture
def sink() -> CollectingDiagnosticSink:
    return CollectingDiagnosticSink()


@pytest_asyncio.fixture
async def repository(temp_dir: Path) -> AsyncIterator[IndexRepository]:
    """Create a repository with its schema for testing."""
    repo = IndexRepository(get_default_db_path(temp_dir))
    await repo.ensure_schema()
    yield repo
    await repo.close()

