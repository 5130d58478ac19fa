"""
schemaledger core: store adapters, the migration ledger and its runner.

Sub-packages
------------
adapters     SQLite / MySQL store adapters and registry
migrations   Ledger store, discovery, unit adapter, runner, reporter

Modules
-------
errors       Typed error hierarchy
logging      structlog configuration
settings     pydantic-settings configuration (DB_* environment)
dialect      SQL dialects for the ledger table
protocols    DB-API connection protocol
"""
