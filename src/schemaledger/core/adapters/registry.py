"""Store adapter lookup.

``adapter_from_settings()`` is the entry point the CLI uses: it reads
:class:`~schemaledger.core.settings.LedgerSettings` and returns an
*unconnected* adapter for the configured backend.  Underneath, a registry maps
backend names (``sqlite``, ``mysql`` and the ``mariadb`` alias) to adapter
classes, so nothing else hard-codes adapter class names.

Tags:
    schemaledger, database, registry, factory

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from schemaledger.core.errors import ConfigError

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .sqlite import SQLiteAdapter
from .types import DatabaseType

if TYPE_CHECKING:
    from schemaledger.core.settings import LedgerSettings


class AdapterRegistry:
    """Backend name to adapter class."""

    def __init__(self) -> None:
        self._classes: dict[str, type[DatabaseAdapter]] = {
            DatabaseType.SQLITE.value: SQLiteAdapter,
            DatabaseType.MYSQL.value: MySQLAdapter,
            "mariadb": MySQLAdapter,
        }

    def names(self) -> list[str]:
        return sorted(self._classes)

    def create(self, name: str, **params: Any) -> DatabaseAdapter:
        """Instantiate the adapter registered as ``name``.

        Raises:
            ConfigError: No adapter is registered under ``name``.
        """
        try:
            adapter_class = self._classes[name.lower()]
        except KeyError:
            known = ", ".join(self.names())
            raise ConfigError(f"Unknown database adapter: {name} (known: {known})") from None
        return adapter_class(**params)


adapter_registry = AdapterRegistry()


def get_adapter(db_type: DatabaseType | str, **params: Any) -> DatabaseAdapter:
    """
    Build an adapter by backend.

    Usage:
        store = get_adapter(DatabaseType.SQLITE, path="data/app.db")
        store = get_adapter("mysql", host="db.internal", database="shop")
    """
    name = db_type.value if isinstance(db_type, DatabaseType) else db_type
    return adapter_registry.create(name, **params)


def adapter_from_settings(settings: LedgerSettings) -> DatabaseAdapter:
    """Build the (unconnected) adapter described by ``settings``."""
    if settings.db_backend == DatabaseType.SQLITE.value:
        return get_adapter(DatabaseType.SQLITE, path=settings.db_path)
    return get_adapter(
        settings.db_backend,
        host=settings.db_host,
        port=settings.db_port,
        database=settings.db_name,
        username=settings.db_user,
        password=settings.db_password.get_secret_value(),
        pool_size=settings.db_pool_size,
    )


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
    "adapter_from_settings",
]
