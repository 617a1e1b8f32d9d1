"""
Shared pytest fixtures and configuration for sqlspine tests.

This module provides:
- An in-memory SQLite engine for end-to-end behaviour
- A recording executor per backend for generated-SQL assertions
- Automatic ``unit`` / ``integration`` marking by location

Usage:
    def test_create(sqlite_engine):
        sqlite_engine.create_tables(Depot)
"""

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

# Ensure sqlspine package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlspine.core.adapters import SQLiteAdapter
from sqlspine.core.engine import Engine

from tests._support.recording import RecordingExecutor


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo level filters set by open_engine or configure_logging."""
    yield
    structlog.reset_defaults()


# =============================================================================
# Engines
# =============================================================================


@pytest.fixture
def sqlite_adapter() -> Iterator[SQLiteAdapter]:
    adapter = SQLiteAdapter(":memory:")
    adapter.connect()
    yield adapter
    adapter.disconnect()


@pytest.fixture
def sqlite_engine(sqlite_adapter: SQLiteAdapter) -> Engine:
    return Engine(sqlite_adapter)


@pytest.fixture(params=["postgres", "mysql", "mssql", "hdb"])
def recording(request: pytest.FixtureRequest) -> RecordingExecutor:
    """Parametric fixture: a recording executor for each server dialect."""
    return RecordingExecutor(request.param)


@pytest.fixture
def make_recording():
    """Factory for a recording executor of a given backend."""

    def _make(name: str) -> RecordingExecutor:
        return RecordingExecutor(name)

    return _make
