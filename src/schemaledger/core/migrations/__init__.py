"""Schema migration ledger and runner.

Manifesto:
    Schema changes must be applied in a known order, exactly once, and a
    failure must never leave the ledger claiming work that did not happen.
    Units are discovered from a directory, compared against the
    ``_migrations`` ledger table, and applied strictly in filename order,
    halting on the first failure.

Modules
-------
ledger      LedgerStore: ensure_ledger() / list_applied() / record_applied()
discovery   MigrationUnit + list_units() (pure, filename order)
units       UnitKind probe + invoke() (callable vs self-contained units)
runner      MigrationRunner state machine + RunResult
reporter    LedgerReporter: status() and adopt()

Tags:
    schemaledger, migrations, schema, database, ledger, DDL

Doc-Types:
    package-overview
"""

from schemaledger.core.migrations.discovery import MigrationUnit, list_units, pending_units
from schemaledger.core.migrations.ledger import LEDGER_TABLE, LedgerStore
from schemaledger.core.migrations.reporter import (
    AdoptResult,
    LedgerReporter,
    StatusEntry,
    StatusReport,
    format_applied_at,
)
from schemaledger.core.migrations.runner import (
    MigrationRunner,
    RunListener,
    RunResult,
    RunState,
    UnitFailure,
)
from schemaledger.core.migrations.units import LoadedUnit, UnitKind, invoke, load_unit, probe

__all__ = [
    "LEDGER_TABLE",
    "LedgerStore",
    "MigrationUnit",
    "list_units",
    "pending_units",
    "UnitKind",
    "LoadedUnit",
    "probe",
    "load_unit",
    "invoke",
    "MigrationRunner",
    "RunListener",
    "RunResult",
    "RunState",
    "UnitFailure",
    "LedgerReporter",
    "StatusEntry",
    "StatusReport",
    "AdoptResult",
    "format_applied_at",
]
