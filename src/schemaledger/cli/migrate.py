"""
CLI: ``run`` / ``status`` / ``adopt`` implementations.

Each function opens the store for the duration of one command, delegates to
the runner or reporter, renders the outcome and returns the exit code.
"""

from __future__ import annotations

import json

from rich.markup import escape
from rich.table import Table

from schemaledger.core.migrations import (
    LedgerReporter,
    MigrationRunner,
    MigrationUnit,
    RunListener,
    UnitFailure,
    format_applied_at,
)
from schemaledger.core.settings import LedgerSettings

from .exit_codes import ERROR_RUN_HALTED, SUCCESS
from .utils import console, err_console, open_store

RULE = "─" * 50


class ConsoleRunListener(RunListener):
    """Per-unit progress lines for ``run``."""

    def run_started(self, pending: list[MigrationUnit]) -> None:
        if pending:
            console.print(f"Found {len(pending)} pending migration(s).\n")

    def unit_started(self, unit: MigrationUnit) -> None:
        console.print(f"Running: {escape(unit.name)} ...", soft_wrap=True)

    def unit_applied(self, unit: MigrationUnit) -> None:
        console.print("  [green]OK[/green]\n")

    def unit_failed(self, unit: MigrationUnit, failure: UnitFailure) -> None:
        if failure.unsupported:
            err_console.print(f"  [yellow]Warning:[/yellow] {escape(failure.message)}\n", soft_wrap=True)
        else:
            err_console.print(f"  [red]FAILED:[/red] {escape(failure.message)}\n", soft_wrap=True)
        err_console.print("Stopping migration runner due to failure.")


def run_migrations(settings: LedgerSettings) -> int:
    """Apply pending units; exit code 0 only if none failed."""
    with open_store(settings) as store:
        runner = MigrationRunner(
            store,
            settings.resolved_migrations_dir(),
            listener=ConsoleRunListener(),
        )
        result = runner.run()

    if not result.applied and result.success:
        console.print("All migrations are up to date. Nothing to run.")
        return SUCCESS

    console.print(RULE)
    console.print(result.summary())
    return SUCCESS if result.success else ERROR_RUN_HALTED


def show_status(settings: LedgerSettings, *, as_json: bool = False) -> int:
    """Print applied vs pending units. Always succeeds once the store is up."""
    migrations_dir = settings.resolved_migrations_dir()
    with open_store(settings) as store:
        report = LedgerReporter(store, migrations_dir).status()

    if as_json:
        console.print_json(json.dumps(report.to_dict(), default=str))
        return SUCCESS

    if report.total == 0:
        console.print(f"No migration files found in {escape(str(migrations_dir))}", soft_wrap=True)
    else:
        console.print(f"\n{report.summary()}\n")
        table = Table(show_lines=False, pad_edge=False, box=None)
        table.add_column("Status")
        table.add_column("Applied At")
        table.add_column("Name", overflow="fold")
        for entry in report.entries:
            applied_at = format_applied_at(entry.applied_at) if entry.applied else "-"
            status = entry.label if entry.applied else f"[yellow]{entry.label}[/yellow]"
            table.add_row(status, applied_at, escape(entry.name))
        console.print(table)

    for name in report.orphans:
        err_console.print(
            f"[yellow]Warning:[/yellow] ledger entry {escape(name)} has no matching migration file",
            soft_wrap=True,
        )
    return SUCCESS


def adopt_pending(settings: LedgerSettings) -> int:
    """Mark every pending unit as applied without running it."""

    def _announce(name: str) -> None:
        console.print(f"  marked: {escape(name)}", soft_wrap=True)

    with open_store(settings) as store:
        reporter = LedgerReporter(store, settings.resolved_migrations_dir())
        result = reporter.adopt(on_adopted=_announce)

    if result.count == 0:
        console.print("All migrations are already marked as applied.")
    else:
        console.print(f"\nDone. {result.count} migration(s) marked as applied.")
    return SUCCESS
