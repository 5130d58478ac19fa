"""
Shared pytest fixtures and configuration for schemaledger tests.

This module provides:
- Settings-cache and structlog cleanup for test isolation
- A file-backed SQLite store per test
- A ``write_unit`` helper that drops migration units into a temp directory

Usage:
    def test_something(store, migrations_dir, write_unit):
        write_unit("001_init.sql", "CREATE TABLE t (id INTEGER);")
        ...
"""

import sys
import textwrap
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog

# Ensure schemaledger package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from schemaledger.core.adapters import SQLiteAdapter
from schemaledger.core.settings import clear_settings_cache

_SETTINGS_ENV = (
    "DB_BACKEND",
    "DB_HOST",
    "DB_PORT",
    "DB_USER",
    "DB_PASSWORD",
    "DB_NAME",
    "DB_POOL_SIZE",
    "DB_PATH",
    "MIGRATIONS_DIR",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """
    Run each test from an empty directory with no ``DB_*`` variables set.

    Keeps a developer's ``.env`` or exported settings from leaking into
    tests, and resets cached settings and structlog configuration.
    """
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    clear_settings_cache()
    yield
    clear_settings_cache()
    structlog.reset_defaults()


# =============================================================================
# Store and Unit Fixtures
# =============================================================================


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "ledger.db"


@pytest.fixture
def store(db_path: Path) -> Generator[SQLiteAdapter, None, None]:
    """Connected SQLite store backed by a temp file."""
    adapter = SQLiteAdapter(str(db_path))
    adapter.connect()
    yield adapter
    adapter.disconnect()


@pytest.fixture
def migrations_dir(tmp_path: Path) -> Path:
    d = tmp_path / "migrations"
    d.mkdir()
    return d


@pytest.fixture
def write_unit(migrations_dir: Path) -> Callable[[str, str], Path]:
    """
    Write a migration unit into ``migrations_dir``.

    The body is dedented, so tests can use indented triple-quoted strings.
    """

    def _write(name: str, body: str) -> Path:
        path = migrations_dir / name
        path.write_text(textwrap.dedent(body), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def table_names(store: SQLiteAdapter) -> Callable[[], set[str]]:
    """Return a callable listing user tables currently in ``store``."""

    def _names() -> set[str]:
        rows = store.query("SELECT name FROM sqlite_master WHERE type = 'table'")
        return {row["name"] for row in rows} - {"sqlite_sequence"}

    return _names
