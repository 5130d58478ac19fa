"""Ledger store: the persisted record of which units have been applied.

The ledger is one table (``_migrations`` by default) holding
``{id, name UNIQUE, applied_at}``.  This module is its only owner: it creates
the table if absent, never drops it, and never updates or deletes rows.
"""

from __future__ import annotations

from datetime import datetime

from schemaledger.core.adapters.base import DatabaseAdapter
from schemaledger.core.errors import DuplicateEntryError, IntegrityError
from schemaledger.core.logging import get_logger

logger = get_logger(__name__)

LEDGER_TABLE = "_migrations"


class LedgerStore:
    """Reads and writes ledger rows through a store adapter.

    Parameters
    ----------
    store
        A connected (or lazily connecting) :class:`DatabaseAdapter`.
    table
        Ledger table name.  Defaults to ``_migrations``.

    Example::

        ledger = LedgerStore(store)
        ledger.ensure_ledger()
        ledger.record_applied("001_create_users.sql")
    """

    def __init__(self, store: DatabaseAdapter, table: str = LEDGER_TABLE) -> None:
        self._store = store
        self._table = table

    @property
    def table(self) -> str:
        return self._table

    def ensure_ledger(self) -> None:
        """Create the ledger table if it doesn't exist.

        Raises ``StoreUnavailableError`` when the store cannot be reached.
        """
        self._store.execute(self._store.dialect.ledger_table_ddl(self._table))
        logger.debug("ledger.ensured", table=self._table)

    def list_applied(self) -> dict[str, datetime | str]:
        """Return ``{name: applied_at}`` for every ledger row, ordered by name."""
        rows = self._store.query(
            f"SELECT name, applied_at FROM {self._table} ORDER BY name"
        )
        return {row["name"]: row["applied_at"] for row in sorted(rows, key=lambda r: r["name"])}

    def record_applied(self, name: str) -> None:
        """Insert one ledger row for ``name``.

        Raises:
            DuplicateEntryError: A row for ``name`` already exists.
        """
        ph = self._store.dialect.placeholder(0)
        try:
            self._store.execute(f"INSERT INTO {self._table} (name) VALUES ({ph})", (name,))
        except IntegrityError as exc:
            raise DuplicateEntryError(name, cause=exc) from exc
        logger.debug("ledger.recorded", migration=name)


__all__ = [
    "LEDGER_TABLE",
    "LedgerStore",
]
