"""
CLI helpers for settings resolution, store lifetime and error mapping.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from schemaledger.core.adapters import DatabaseAdapter, adapter_from_settings
from schemaledger.core.errors import ConfigError, LedgerError
from schemaledger.core.logging import configure_logging, get_logger
from schemaledger.core.settings import LedgerSettings, get_settings

from .exit_codes import ERROR_INTERNAL, exit_code_for, get_exit_code_name

console = Console()
err_console = Console(stderr=True)

logger = get_logger(__name__)


# ── Settings ─────────────────────────────────────────────────────────────


def resolve_settings(
    database: str | None = None,
    migrations_dir: Path | None = None,
) -> LedgerSettings:
    """Environment settings with CLI overrides applied.

    ``--database`` selects the SQLite backend at the given path.
    """
    settings = get_settings()
    updates: dict[str, object] = {}
    if database:
        updates["db_backend"] = "sqlite"
        updates["db_path"] = database
    if migrations_dir is not None:
        updates["migrations_dir"] = migrations_dir
    return settings.model_copy(update=updates) if updates else settings


def setup_logging(settings: LedgerSettings) -> None:
    try:
        configure_logging(level=settings.log_level, json_format=settings.log_format == "json")
    except ValueError as exc:
        raise ConfigError(str(exc), cause=exc) from exc


# ── Store lifetime ───────────────────────────────────────────────────────


@contextmanager
def open_store(settings: LedgerSettings) -> Iterator[DatabaseAdapter]:
    """Connect the configured store for one command; always disconnects."""
    store = adapter_from_settings(settings)
    store.connect()
    try:
        yield store
    finally:
        store.disconnect()


# ── Error handling ───────────────────────────────────────────────────────


@contextmanager
def handle_errors(operation: str) -> Iterator[None]:
    """Report any error and exit with its mapped code.

    ``LedgerError`` maps by type; anything else is an internal error.
    """
    try:
        yield
    except LedgerError as exc:
        code = exit_code_for(exc)
        logger.error(
            "command.failed",
            operation=operation,
            exit_code=get_exit_code_name(code),
            **exc.to_dict(),
        )
        err_console.print(
            f"[bold red]Error[/bold red] ({exc.category.value}): {escape(exc.message)}",
            soft_wrap=True,
        )
        raise typer.Exit(code=code) from exc
    except typer.Exit:
        raise
    except Exception as exc:
        logger.exception(
            "command.crashed",
            operation=operation,
            exit_code=get_exit_code_name(ERROR_INTERNAL),
            error_type=type(exc).__name__,
        )
        err_console.print(
            f"[bold red]Internal error[/bold red] ({type(exc).__name__}): {escape(str(exc))}",
            soft_wrap=True,
        )
        raise typer.Exit(code=ERROR_INTERNAL) from exc
