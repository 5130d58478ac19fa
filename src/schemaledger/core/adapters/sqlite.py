"""SQLite store adapter."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from schemaledger.core.errors import IntegrityError, LedgerError, StoreUnavailableError
from schemaledger.core.logging import get_logger
from schemaledger.core.protocols import Connection

from .base import DatabaseAdapter, default_translate
from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)

MEMORY = ":memory:"


class SQLiteAdapter(DatabaseAdapter):
    """
    Single-connection adapter over the stdlib :mod:`sqlite3` driver.

    ``path`` is ``:memory:``, a ``file:`` URI, or a file path whose parent
    directory is created on connect.  Used for local development, tests and
    applications that ship a single database file.
    """

    def __init__(self, path: str = MEMORY, *, timeout: float = 5.0):
        super().__init__(DatabaseConfig(db_type=DatabaseType.SQLITE, path=path))
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None

    @property
    def path(self) -> str:
        return self._config.path

    def connect(self) -> None:
        """Open the database file.

        Raises:
            StoreUnavailableError: The file or its directory cannot be opened.
        """
        if self._conn is not None:
            return

        path = self.path
        is_uri = path.startswith("file:")
        try:
            if path != MEMORY and not is_uri:
                Path(path).expanduser().parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(path, timeout=self._timeout, uri=is_uri)
            conn.execute("PRAGMA foreign_keys = ON")
        except (sqlite3.Error, OSError) as exc:
            raise StoreUnavailableError(
                f"Cannot open SQLite database {path}: {exc}", cause=exc
            ) from exc

        self._conn = conn
        self._connected = True
        logger.debug("store.connected", backend="sqlite", path=path)

    def disconnect(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        self._connected = False

    def get_connection(self) -> Connection:
        if self._conn is None:
            self.connect()
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Commit when the block exits cleanly, roll back if it raises."""
        conn = self.get_connection()
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        else:
            conn.commit()

    def execute_script(self, script: str) -> None:
        # executescript() commits any pending transaction before it starts
        conn = self.get_connection()
        try:
            conn.executescript(script)
        except sqlite3.Error as exc:
            raise self._translate_error(exc, script) from exc

    def _translate_error(self, exc: Exception, sql: str) -> LedgerError:
        if isinstance(exc, sqlite3.IntegrityError):
            return IntegrityError(str(exc), cause=exc).with_context(sql=sql.strip()[:200])
        return default_translate(exc, sql)


__all__ = [
    "SQLiteAdapter",
]
