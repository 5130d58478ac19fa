"""Store adapter contract.

Manifesto:
    The ledger store and every migration unit talk to the target store through
    one handle.  This base class fixes that handle's shape so neither depends
    on a specific driver, and it is the single seam where driver exceptions
    become schemaledger errors.

Features:
    - Abstract lifecycle: ``connect()``, ``disconnect()``, ``get_connection()``
    - Abstract ``transaction()``: commit on success, roll back on error
    - ``execute()`` / ``query()`` / ``execute_script()`` built on ``transaction()``
    - ``with store:`` opens and always closes the connection

Tags:
    schemaledger, database, abstract-base, adapter-pattern

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from schemaledger.core.dialect import Dialect, get_dialect
from schemaledger.core.errors import LedgerError, QueryError
from schemaledger.core.protocols import Connection

from .types import DatabaseConfig, DatabaseType


class DatabaseAdapter(ABC):
    """
    Handle passed to the ledger store and to every callable migration unit.

    Every write goes through :meth:`transaction`, so ``execute()`` is durable
    once it returns.  Driver exceptions never escape: they are translated by
    :meth:`_translate_error`.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._connected = False
        self._dialect: Dialect = get_dialect(config.db_type.value)

    @property
    def dialect(self) -> Dialect:
        """Placeholder style and ledger DDL for this backend."""
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        return self._config.db_type

    @property
    def is_connected(self) -> bool:
        return self._connected

    def describe(self) -> str:
        """Target with credentials masked, for logs and errors."""
        return self._config.redacted()

    @abstractmethod
    def connect(self) -> None:
        """Open the store (idempotent).

        Raises:
            StoreUnavailableError: The store cannot be reached.
        """

    @abstractmethod
    def disconnect(self) -> None:
        """Release every connection; safe to call when not connected."""

    @abstractmethod
    def get_connection(self) -> Connection:
        """Return a DB-API connection, connecting first if needed."""

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Yield a connection; commit on clean exit, roll back on error."""

    @abstractmethod
    def _translate_error(self, exc: Exception, sql: str) -> LedgerError:
        """Map a driver exception onto the schemaledger hierarchy."""

    @contextmanager
    def _statement(self, sql: str) -> Iterator[Any]:
        # one cursor inside one transaction; failures leave as LedgerError
        try:
            with self.transaction() as conn:
                cursor = conn.cursor()
                try:
                    yield cursor
                finally:
                    cursor.close()
        except LedgerError:
            raise
        except Exception as exc:
            raise self._translate_error(exc, sql) from exc

    def execute(self, sql: str, params: tuple = ()) -> int:
        """Run one statement and commit it; returns the affected row count."""
        with self._statement(sql) as cursor:
            cursor.execute(sql, params)
            return cursor.rowcount

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Run a SELECT and return its rows keyed by column name."""
        with self._statement(sql) as cursor:
            cursor.execute(sql, params)
            names = [column[0] for column in cursor.description]
            return [dict(zip(names, row)) for row in cursor.fetchall()]

    def execute_script(self, script: str) -> None:
        """Run every statement of ``script`` in a single transaction.

        MySQL commits implicitly around DDL, so there the script is atomic
        only for DML.
        """
        statements = self._dialect.split_script(script)
        if not statements:
            return
        # errors are reported against the whole script, not one statement
        with self._statement(script) as cursor:
            for statement in statements:
                cursor.execute(statement)

    def __enter__(self) -> DatabaseAdapter:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()


def default_translate(exc: Exception, sql: str) -> LedgerError:
    """Any statement failure a driver does not classify becomes a ``QueryError``."""
    return QueryError(str(exc), cause=exc).with_context(sql=sql.strip()[:200])


__all__ = [
    "DatabaseAdapter",
    "default_translate",
]
