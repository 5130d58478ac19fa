"""
Protocol definitions shared by the store adapters.

Connection is the DB-API 2.0 subset schemaledger relies on.  Both
``sqlite3.Connection`` and ``mysql.connector`` pooled connections satisfy it
structurally, so adapters and migration units type against the protocol
rather than a driver.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """
    Minimal synchronous DB-API connection.

    Examples:
        >>> with store.transaction() as conn:
        ...     cur = conn.cursor()
        ...     cur.execute("UPDATE settings SET value = 1 WHERE key = 'x'")
    """

    def cursor(self) -> Any:
        """Open a cursor."""
        ...

    def commit(self) -> None:
        """Commit current transaction."""
        ...

    def rollback(self) -> None:
        """Rollback current transaction."""
        ...

    def close(self) -> None:
        """Close (or return to pool)."""
        ...


__all__ = [
    "Connection",
]
