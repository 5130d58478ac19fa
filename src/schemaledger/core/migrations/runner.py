"""Migration runner.

Applies pending units strictly one at a time in filename order, recording
each in the ledger only after it succeeded, and halts on the first failure
so the ledger always holds a contiguous prefix of the sorted units.

State machine::

    IDLE → COMPUTING_PENDING → EXECUTING(unit) → RECORDING(unit) ─┬→ next unit
                                     │                           └→ DONE
                                     └→ HALTED (first failure; rest skipped)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from schemaledger.core.adapters.base import DatabaseAdapter
from schemaledger.core.errors import LedgerError, UnitExecutionError, UnsupportedUnitError
from schemaledger.core.logging import get_logger

from .discovery import MigrationUnit, list_units, pending_units
from .ledger import LedgerStore
from .units import invoke, load_unit

logger = get_logger(__name__)


class RunState(str, Enum):
    """Runner lifecycle states."""

    IDLE = "idle"
    COMPUTING_PENDING = "computing_pending"
    EXECUTING = "executing"
    RECORDING = "recording"
    HALTED = "halted"
    DONE = "done"


@dataclass(frozen=True)
class UnitFailure:
    """Why the run halted."""

    name: str
    message: str
    unsupported: bool = False

    @classmethod
    def from_error(cls, error: UnitExecutionError) -> UnitFailure:
        return cls(
            name=error.name,
            message=error.message,
            unsupported=isinstance(error, UnsupportedUnitError),
        )


@dataclass
class RunResult:
    """Outcome of one ``run()``.

    ``skipped`` holds the pending units left untouched after a failure; units
    already in the ledger are not counted anywhere.
    """

    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failure: UnitFailure | None = None
    state: RunState = RunState.IDLE

    @property
    def failed_count(self) -> int:
        return 0 if self.failure is None else 1

    @property
    def success(self) -> bool:
        return self.failure is None

    def summary(self) -> str:
        return (
            f"Results: {len(self.applied)} succeeded, "
            f"{self.failed_count} failed, {len(self.skipped)} skipped"
        )


class RunListener:
    """Progress callbacks; the default implementation ignores them."""

    def run_started(self, pending: list[MigrationUnit]) -> None:
        pass

    def unit_started(self, unit: MigrationUnit) -> None:
        pass

    def unit_applied(self, unit: MigrationUnit) -> None:
        pass

    def unit_failed(self, unit: MigrationUnit, failure: UnitFailure) -> None:
        pass


class MigrationRunner:
    """Applies pending migration units from a directory.

    Parameters
    ----------
    store
        Target-store adapter.  Passed to every callable unit as its handle.
    migrations_dir
        Directory scanned by :func:`list_units`.
    listener
        Optional :class:`RunListener` for progress output.

    Example::

        from schemaledger.core.adapters import SQLiteAdapter
        from schemaledger.core.migrations import MigrationRunner

        with SQLiteAdapter("app.db") as store:
            result = MigrationRunner(store, "migrations").run()
            print(result.summary())
    """

    def __init__(
        self,
        store: DatabaseAdapter,
        migrations_dir: Path | str,
        *,
        ledger: LedgerStore | None = None,
        listener: RunListener | None = None,
    ) -> None:
        self._store = store
        self._migrations_dir = Path(migrations_dir)
        self._ledger = ledger or LedgerStore(store)
        self._listener = listener or RunListener()
        self._state = RunState.IDLE

    @property
    def state(self) -> RunState:
        return self._state

    def _transition(self, state: RunState, unit: str | None = None) -> None:
        logger.debug("runner.transition", src=self._state.value, dst=state.value, migration=unit)
        self._state = state

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_pending(self) -> list[MigrationUnit]:
        """Ensure the ledger and return the pending units in order."""
        self._ledger.ensure_ledger()
        return pending_units(list_units(self._migrations_dir), self._ledger.list_applied())

    def run(self) -> RunResult:
        """Apply every pending unit, stopping at the first failure.

        Unit failures are captured in the result.  Ledger and store errors
        (``DuplicateEntryError``, ``StoreUnavailableError``) propagate.
        """
        self._state = RunState.IDLE
        result = RunResult()

        self._transition(RunState.COMPUTING_PENDING)
        pending = self.get_pending()
        self._listener.run_started(pending)

        if not pending:
            self._transition(RunState.DONE)
            result.state = self._state
            logger.info("migration.nothing_pending", directory=str(self._migrations_dir))
            return result

        for index, unit in enumerate(pending):
            self._transition(RunState.EXECUTING, unit.name)
            self._listener.unit_started(unit)
            try:
                invoke(load_unit(unit), self._store)
            except UnitExecutionError as exc:
                failure = UnitFailure.from_error(exc)
                result.failure = failure
                result.skipped = [u.name for u in pending[index + 1 :]]
                logger.error(
                    "migration.failed",
                    migration=unit.name,
                    error=exc.message,
                    unsupported=failure.unsupported,
                )
                self._listener.unit_failed(unit, failure)
                self._transition(RunState.HALTED, unit.name)
                break

            self._transition(RunState.RECORDING, unit.name)
            try:
                self._ledger.record_applied(unit.name)
            except LedgerError:
                self._transition(RunState.HALTED, unit.name)
                raise
            result.applied.append(unit.name)
            logger.info("migration.applied", migration=unit.name)
            self._listener.unit_applied(unit)
        else:
            self._transition(RunState.DONE)

        result.state = self._state
        return result


__all__ = [
    "RunState",
    "UnitFailure",
    "RunResult",
    "RunListener",
    "MigrationRunner",
]
