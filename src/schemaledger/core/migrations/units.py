"""Migration unit adapter.

Every unit is one of two kinds, decided once by a capability probe:

``CALLABLE``
    The runner can invoke it with the store handle.  ``.sql`` files are
    callable (their script is run through ``store.execute_script``), and so
    are ``.py`` files whose module defines a top-level ``up``::

        def up(store):
            store.execute("ALTER TABLE users ADD COLUMN email VARCHAR(255)")

    ``async def up(store)`` is accepted and awaited.

``SELF_CONTAINED``
    A ``.py`` script that opens its own connection and runs on its own.
    The runner refuses to invoke it; it can only be adopted.

The probe for ``.py`` files reads the module with :mod:`ast` and never
executes it, so probing a self-contained script has no side effects.
"""

from __future__ import annotations

import ast
import asyncio
import importlib.util
import inspect
import re
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from types import ModuleType
from typing import Any

from schemaledger.core.adapters.base import DatabaseAdapter
from schemaledger.core.errors import LedgerError, UnitExecutionError, UnsupportedUnitError
from schemaledger.core.logging import get_logger

from .discovery import MigrationUnit

logger = get_logger(__name__)

ENTRY_POINT = "up"
_MODULE_PREFIX = "schemaledger_units"


class UnitKind(str, Enum):
    """Execution protocol of a unit."""

    CALLABLE = "callable"
    SELF_CONTAINED = "self-contained"


@dataclass(frozen=True)
class LoadedUnit:
    """A unit tagged with its kind."""

    unit: MigrationUnit
    kind: UnitKind

    @property
    def name(self) -> str:
        return self.unit.name


def _read_source(unit: MigrationUnit) -> str:
    try:
        return unit.path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise UnitExecutionError(unit.name, f"Cannot read {unit.name}: {exc}", cause=exc) from exc


def _defines_entry_point(tree: ast.Module) -> bool:
    """True when the module body binds ``up`` at top level."""
    for node in tree.body:
        if isinstance(node, ast.FunctionDef | ast.AsyncFunctionDef) and node.name == ENTRY_POINT:
            return True
        if isinstance(node, ast.Assign):
            if any(isinstance(t, ast.Name) and t.id == ENTRY_POINT for t in node.targets):
                return True
        if isinstance(node, ast.AnnAssign | ast.AugAssign):
            if isinstance(node.target, ast.Name) and node.target.id == ENTRY_POINT:
                return True
        if isinstance(node, ast.ImportFrom | ast.Import):
            if any((alias.asname or alias.name) == ENTRY_POINT for alias in node.names):
                return True
    return False


def probe(unit: MigrationUnit) -> UnitKind:
    """Decide the unit's kind without executing it.

    Raises:
        UnitExecutionError: The source cannot be read or parsed.
    """
    if unit.suffix == ".sql":
        return UnitKind.CALLABLE

    source = _read_source(unit)
    try:
        tree = ast.parse(source, filename=str(unit.path))
    except SyntaxError as exc:
        raise UnitExecutionError(
            unit.name, f"Syntax error in {unit.name}: {exc.msg} (line {exc.lineno})", cause=exc
        ) from exc

    return UnitKind.CALLABLE if _defines_entry_point(tree) else UnitKind.SELF_CONTAINED


def load_unit(unit: MigrationUnit) -> LoadedUnit:
    """Probe ``unit`` and tag it with its :class:`UnitKind`."""
    kind = probe(unit)
    logger.debug("unit.loaded", migration=unit.name, kind=kind.value)
    return LoadedUnit(unit=unit, kind=kind)


def _module_name(unit: MigrationUnit) -> str:
    stem = re.sub(r"\W", "_", unit.path.stem)
    return f"{_MODULE_PREFIX}.{stem}"


@contextmanager
def _imported(unit: MigrationUnit) -> Iterator[ModuleType]:
    """Import the unit from its path for the duration of the block.

    No bytecode is written, so a unit edited after a failed run is always
    re-read from source.
    """
    module_name = _module_name(unit)
    spec = importlib.util.spec_from_file_location(module_name, unit.path)
    if spec is None or spec.loader is None:
        raise UnitExecutionError(unit.name, f"Cannot load module from {unit.path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    write_bytecode = sys.dont_write_bytecode
    sys.dont_write_bytecode = True
    try:
        spec.loader.exec_module(module)
        yield module
    finally:
        sys.dont_write_bytecode = write_bytecode
        sys.modules.pop(module_name, None)


def _describe(exc: BaseException) -> str:
    if isinstance(exc, SystemExit):
        return f"unit called exit({exc.code})"
    return str(exc) or exc.__class__.__name__


def _run_python(loaded: LoadedUnit, store: DatabaseAdapter) -> None:
    with _imported(loaded.unit) as module:
        entry = getattr(module, ENTRY_POINT, None)
        if not callable(entry):
            raise UnsupportedUnitError(loaded.name)
        outcome: Any = entry(store)
        if inspect.isawaitable(outcome):
            asyncio.run(_await(outcome))


async def _await(awaitable: Any) -> Any:
    return await awaitable


def invoke(loaded: LoadedUnit, store: DatabaseAdapter) -> None:
    """Run one unit against ``store``.

    Returns normally on success.

    Raises:
        UnsupportedUnitError: The unit is self-contained (adopt it instead).
        UnitExecutionError: The unit's own logic failed.
    """
    match loaded.kind:
        case UnitKind.SELF_CONTAINED:
            raise UnsupportedUnitError(loaded.name)
        case UnitKind.CALLABLE:
            try:
                if loaded.unit.suffix == ".sql":
                    store.execute_script(_read_source(loaded.unit))
                else:
                    _run_python(loaded, store)
            except UnitExecutionError:
                raise
            except LedgerError as exc:
                raise UnitExecutionError(loaded.name, exc.message, cause=exc) from exc
            except (Exception, SystemExit) as exc:
                raise UnitExecutionError(loaded.name, _describe(exc), cause=exc) from exc


__all__ = [
    "ENTRY_POINT",
    "UnitKind",
    "LoadedUnit",
    "probe",
    "load_unit",
    "invoke",
]
