"""Store adapters -- one handle shape for SQLite and MySQL targets.

Each adapter is **import-guarded**: the MySQL driver is only required at
``connect()`` time, not at import time.

Architecture::

    DatabaseAdapter (base.py)        Abstract base with connect/execute/query
        |-- SQLiteAdapter            stdlib sqlite3
        |-- MySQLAdapter             mysql.connector pool

    AdapterRegistry (registry.py)    Backend name -> adapter class
    DatabaseConfig (types.py)        Connection parameters
    DatabaseType (types.py)          Enum of supported backends

Guardrails:
    ❌ ``store.execute("SELECT * FROM t WHERE id=" + value)``
    ✅ ``store.execute(f"SELECT * FROM t WHERE id={store.dialect.placeholder(0)}", (value,))``

Tags:
    schemaledger, database, adapters, import-guarded, registry-pattern

Doc-Types:
    package-overview, module-index
"""

from schemaledger.core.protocols import Connection

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .registry import AdapterRegistry, adapter_from_settings, adapter_registry, get_adapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    "DatabaseType",
    "DatabaseConfig",
    "Connection",
    "DatabaseAdapter",
    "SQLiteAdapter",
    "MySQLAdapter",
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
    "adapter_from_settings",
]
