"""
Root Typer application for the schemaledger CLI.

Commands::

    schemaledger run      Apply all pending migrations
    schemaledger status   Show applied vs pending migrations
    schemaledger adopt    Mark pending migrations as applied without running them

The legacy flags ``--status`` and ``--mark-existing`` are accepted on the root
command, and a bare ``schemaledger`` runs pending migrations.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import typer
from typer import Typer

from schemaledger import __version__
from schemaledger.core.logging import bind_context, clear_context, configure_logging
from schemaledger.core.settings import LedgerSettings

from .migrate import adopt_pending, run_migrations, show_status
from .utils import handle_errors, resolve_settings, setup_logging

app = Typer(
    name="schemaledger",
    help="Forward-only schema migration ledger and runner.",
    no_args_is_help=False,
    invoke_without_command=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("schemaledger")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"schemaledger {v}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    legacy_status: bool = typer.Option(
        False, "--status", help="Same as the 'status' command.", hidden=True
    ),
    legacy_mark_existing: bool = typer.Option(
        False, "--mark-existing", help="Same as the 'adopt' command.", hidden=True
    ),
) -> None:
    """Apply, inspect and adopt schema migrations."""
    if ctx.invoked_subcommand is not None:
        if legacy_status or legacy_mark_existing:
            raise typer.BadParameter(
                "--status/--mark-existing cannot be combined with a command."
            )
        return

    if legacy_status and legacy_mark_existing:
        raise typer.BadParameter("Use only one of --status or --mark-existing.")

    if legacy_status:
        code = _dispatch("status", show_status)
    elif legacy_mark_existing:
        code = _dispatch("adopt", adopt_pending)
    else:
        code = _dispatch("run", run_migrations)
    raise typer.Exit(code=code)


def _dispatch(
    operation: str,
    action: Callable[[LedgerSettings], int],
    database: str | None = None,
    migrations_dir: Path | None = None,
) -> int:
    """Resolve settings, configure logging and run one operation."""
    configure_logging(json_format=False)
    bind_context(operation=operation)
    try:
        with handle_errors(operation):
            settings = resolve_settings(database, migrations_dir)
            setup_logging(settings)
            return action(settings)
    finally:
        clear_context()


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def run(
    migrations_dir: Path | None = typer.Option(
        None, "--migrations-dir", "-m", help="Directory containing migration units"
    ),
    database: str | None = typer.Option(
        None, "--database", "-d", help="SQLite database path (selects the sqlite backend)"
    ),
) -> None:
    """Apply all pending migrations in filename order; stop at the first failure."""
    code = _dispatch("run", run_migrations, database, migrations_dir)
    raise typer.Exit(code=code)


@app.command()
def status(
    migrations_dir: Path | None = typer.Option(
        None, "--migrations-dir", "-m", help="Directory containing migration units"
    ),
    database: str | None = typer.Option(
        None, "--database", "-d", help="SQLite database path (selects the sqlite backend)"
    ),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show applied vs pending migrations."""
    code = _dispatch(
        "status", lambda s: show_status(s, as_json=json_out), database, migrations_dir
    )
    raise typer.Exit(code=code)


@app.command()
def adopt(
    migrations_dir: Path | None = typer.Option(
        None, "--migrations-dir", "-m", help="Directory containing migration units"
    ),
    database: str | None = typer.Option(
        None, "--database", "-d", help="SQLite database path (selects the sqlite backend)"
    ),
) -> None:
    """Mark all pending migrations as applied without running them."""
    code = _dispatch("adopt", adopt_pending, database, migrations_dir)
    raise typer.Exit(code=code)
