"""Store backends and their connection parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DatabaseType(str, Enum):
    """Backends a ledger can live in."""

    SQLITE = "sqlite"
    MYSQL = "mysql"


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Connection parameters for one target store.

    SQLite reads only ``path``; MySQL reads the network, credential and pool
    fields.  The password never appears in ``repr()`` or :meth:`redacted`.
    """

    db_type: DatabaseType
    path: str = ":memory:"
    host: str = "localhost"
    port: int = 3306
    database: str = ""
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    pool_size: int = 5
    connect_timeout: int = 10
    charset: str = "utf8mb4"

    def redacted(self) -> str:
        """Human-readable target with credentials masked, for logs and errors."""
        if self.db_type is DatabaseType.SQLITE:
            return self.path
        user = self.username or ""
        return f"mysql://{user}:***@{self.host}:{self.port}/{self.database}"


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
]
