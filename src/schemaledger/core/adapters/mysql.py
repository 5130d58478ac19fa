"""MySQL store adapter.

Talks to MySQL or MariaDB through a ``mysql.connector`` connection pool, the
same kind of pool the migrated application itself runs on.  Statements use the
driver's **format** paramstyle (``%s``).

The driver is imported when the pool is created, so SQLite-only installs that
lack ``mysql-connector-python`` get a :class:`~schemaledger.core.errors.ConfigError`
from ``connect()`` instead of an import failure.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from schemaledger.core.errors import (
    ConfigError,
    IntegrityError,
    LedgerError,
    StoreUnavailableError,
)
from schemaledger.core.logging import get_logger
from schemaledger.core.protocols import Connection

from .base import DatabaseAdapter, default_translate
from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)

POOL_NAME = "schemaledger_pool"


class MySQLAdapter(DatabaseAdapter):
    """MySQL / MariaDB store adapter.

    Each transaction borrows one pooled connection and hands it back on exit,
    so a unit's statements never hold a connection between calls.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3306,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        pool_size: int = 5,
        charset: str = "utf8mb4",
    ):
        super().__init__(
            DatabaseConfig(
                db_type=DatabaseType.MYSQL,
                host=host,
                port=port,
                database=database,
                username=username,
                password=password,
                pool_size=pool_size,
                charset=charset,
            )
        )
        self._pool: Any = None

    def _pool_options(self) -> dict[str, Any]:
        cfg = self._config
        return {
            "pool_name": POOL_NAME,
            "pool_size": cfg.pool_size,
            "host": cfg.host,
            "port": cfg.port,
            "database": cfg.database,
            "user": cfg.username,
            "password": cfg.password or "",
            "charset": cfg.charset,
            "connect_timeout": cfg.connect_timeout,
            "autocommit": False,
        }

    def connect(self) -> None:
        """Create the pool, opening its first connection.

        Raises:
            ConfigError: ``mysql-connector-python`` is not installed.
            StoreUnavailableError: The server refused or could not be reached.
        """
        if self._pool is not None:
            return
        try:
            from mysql.connector import pooling
        except ImportError as exc:
            raise ConfigError(
                "The mysql backend needs mysql-connector-python "
                "(pip install mysql-connector-python)",
                cause=exc,
            ) from exc

        try:
            self._pool = pooling.MySQLConnectionPool(**self._pool_options())
        except Exception as exc:
            raise StoreUnavailableError(
                f"Cannot reach MySQL at {self.describe()}: {exc}", cause=exc
            ) from exc

        self._connected = True
        logger.debug("store.connected", backend="mysql", target=self.describe())

    def disconnect(self) -> None:
        """Forget the pool.

        Borrowed connections are already back in the pool: ``transaction()``
        closes each one on exit.
        """
        self._pool = None
        self._connected = False

    def get_connection(self) -> Connection:
        if self._pool is None:
            self.connect()
        try:
            return self._pool.get_connection()
        except Exception as exc:
            raise StoreUnavailableError(
                f"No pooled MySQL connection available: {exc}", cause=exc
            ) from exc

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Borrow a connection; commit or roll back, then return it to the pool."""
        conn = self.get_connection()
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        else:
            conn.commit()
        finally:
            conn.close()

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        # dictionary cursors hand back rows keyed by column name
        try:
            with self.transaction() as conn:
                cursor = conn.cursor(dictionary=True)
                try:
                    cursor.execute(sql, params)
                    return cursor.fetchall()
                finally:
                    cursor.close()
        except LedgerError:
            raise
        except Exception as exc:
            raise self._translate_error(exc, sql) from exc

    def _translate_error(self, exc: Exception, sql: str) -> LedgerError:
        from mysql.connector import errors as mysql_errors

        if isinstance(exc, mysql_errors.IntegrityError):
            return IntegrityError(str(exc), cause=exc).with_context(sql=sql.strip()[:200])
        if isinstance(exc, mysql_errors.InterfaceError):
            return StoreUnavailableError(f"Lost connection to MySQL: {exc}", cause=exc)
        return default_translate(exc, sql)


__all__ = [
    "MySQLAdapter",
]
