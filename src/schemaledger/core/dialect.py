"""
SQL dialect abstraction for the ledger's target stores.

Manifesto:
    The ledger table and its statements are the only SQL schemaledger writes
    itself.  Placeholder style, the "now" expression and the ledger DDL differ
    between SQLite and MySQL; a small dialect object keeps those differences
    out of the ledger store.

Features:
    - ``placeholder()`` / ``placeholders()`` for parameter binding
    - ``now()`` for timestamp defaults
    - ``ledger_table_ddl()`` for the ``_migrations`` table
    - ``split_script()`` to run ``.sql`` units statement by statement

Tags:
    schemaledger, sql, dialect, portability, sqlite, mysql

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .errors import ConfigError


@runtime_checkable
class Dialect(Protocol):
    """Contract every dialect implements."""

    @property
    def name(self) -> str: ...

    def placeholder(self, index: int) -> str:
        """Placeholder for the parameter at 0-based ``index``."""
        ...

    def placeholders(self, count: int) -> str:
        """Comma-separated placeholders for ``count`` parameters."""
        ...

    def now(self) -> str:
        """SQL expression for the current timestamp."""
        ...

    def ledger_table_ddl(self, table: str) -> str:
        """``CREATE TABLE IF NOT EXISTS`` statement for the ledger table."""
        ...

    def split_script(self, script: str) -> list[str]:
        """Split a multi-statement script into individual statements."""
        ...


def _split_statements(script: str) -> list[str]:
    """Split on ``;`` outside quotes, dropping comments and empty statements."""
    statements: list[str] = []
    buf: list[str] = []
    quote: str | None = None
    i = 0
    n = len(script)

    while i < n:
        ch = script[i]
        nxt = script[i + 1] if i + 1 < n else ""

        if quote:
            buf.append(ch)
            if ch == "\\" and quote != "`" and nxt:
                buf.append(nxt)
                i += 2
                continue
            if ch == quote:
                quote = None
            i += 1
            continue

        if ch == "-" and nxt == "-" or ch == "#":
            end = script.find("\n", i)
            i = n if end == -1 else end
            continue
        if ch == "/" and nxt == "*":
            end = script.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue
        if ch in ("'", '"', "`"):
            quote = ch
        if ch == ";":
            stmt = "".join(buf).strip()
            if stmt:
                statements.append(stmt)
            buf = []
        else:
            buf.append(ch)
        i += 1

    tail = "".join(buf).strip()
    if tail:
        statements.append(tail)
    return statements


class _ParamStyleDialect:
    """Shared behaviour for dialects with one fixed placeholder token."""

    name = ""
    param = "?"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return self.param

    def placeholders(self, count: int) -> str:
        return ", ".join([self.param] * count)

    def split_script(self, script: str) -> list[str]:
        return _split_statements(script)


class SQLiteDialect(_ParamStyleDialect):
    """``?`` placeholders, timestamps stored as ISO text."""

    name = "sqlite"
    param = "?"

    def now(self) -> str:
        return "datetime('now')"

    def ledger_table_ddl(self, table: str) -> str:
        columns = [
            "id INTEGER PRIMARY KEY AUTOINCREMENT",
            "name TEXT NOT NULL UNIQUE",
            f"applied_at TEXT NOT NULL DEFAULT ({self.now()})",
        ]
        return f"CREATE TABLE IF NOT EXISTS {table} ({', '.join(columns)})"


class MySQLDialect(_ParamStyleDialect):
    """``%s`` placeholders (``mysql.connector`` format paramstyle)."""

    name = "mysql"
    param = "%s"

    def now(self) -> str:
        return "NOW()"

    def ledger_table_ddl(self, table: str) -> str:
        # same shape as the _migrations table applications create by hand
        columns = [
            "id INT AUTO_INCREMENT PRIMARY KEY",
            "name VARCHAR(255) NOT NULL UNIQUE",
            "applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP",
        ]
        return (
            f"CREATE TABLE IF NOT EXISTS {table} ({', '.join(columns)}) "
            "ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci"
        )


_BY_BACKEND: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "mysql": MySQLDialect(),
    "mariadb": MySQLDialect(),
}


def get_dialect(name: str) -> Dialect:
    """Look up the dialect for a backend name (case-insensitive).

    Raises:
        ConfigError: The backend has no dialect.
    """
    dialect = _BY_BACKEND.get(name.lower())
    if dialect is None:
        raise ConfigError(f"No SQL dialect for database backend: {name}")
    return dialect


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "get_dialect",
]
