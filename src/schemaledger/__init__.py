"""
schemaledger: forward-only schema migration ledger and runner.

Discovers migration units in a directory, records applied ones in a
``_migrations`` ledger table, and applies the rest in filename order,
halting on the first failure.

Entry point::

    schemaledger --help
"""

__version__ = "0.1.0"
