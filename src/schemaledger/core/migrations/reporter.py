"""Status and adoption.

``status()`` is a read: which discovered units are in the ledger and when
they were applied, plus ledger rows that no longer match any unit.

``adopt()`` writes ledger rows for every pending unit *without running it*.
It exists for units that were applied out of band (self-contained scripts
run by hand) and trusts the operator completely.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from schemaledger.core.adapters.base import DatabaseAdapter
from schemaledger.core.logging import get_logger

from .discovery import list_units, pending_units
from .ledger import LedgerStore

logger = get_logger(__name__)


def format_applied_at(value: datetime | str | None) -> str:
    """Render a ledger timestamp as ``YYYY-MM-DD HH:MM:SS``."""
    if value is None or value == "":
        return "N/A"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return str(value).replace("T", " ")[:19]


@dataclass(frozen=True)
class StatusEntry:
    name: str
    applied: bool = False
    applied_at: datetime | str | None = None

    @property
    def label(self) -> str:
        return "applied" if self.applied else "PENDING"

    def to_dict(self) -> dict[str, str | bool | None]:
        return {
            "name": self.name,
            "status": self.label,
            "applied_at": format_applied_at(self.applied_at) if self.applied else None,
        }


@dataclass
class StatusReport:
    """Per-unit ledger state, ordered by unit name."""

    entries: list[StatusEntry] = field(default_factory=list)
    orphans: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.entries)

    @property
    def applied_count(self) -> int:
        return sum(1 for e in self.entries if e.applied)

    @property
    def pending_count(self) -> int:
        return self.total - self.applied_count

    def summary(self) -> str:
        return (
            f"Migration Status: {self.applied_count} applied, "
            f"{self.pending_count} pending, {self.total} total"
        )

    def to_dict(self) -> dict:
        return {
            "applied": self.applied_count,
            "pending": self.pending_count,
            "total": self.total,
            "migrations": [e.to_dict() for e in self.entries],
            "orphans": list(self.orphans),
        }


@dataclass
class AdoptResult:
    adopted: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.adopted)


class LedgerReporter:
    """Reports and adopts against one store and migrations directory."""

    def __init__(
        self,
        store: DatabaseAdapter,
        migrations_dir: Path | str,
        *,
        ledger: LedgerStore | None = None,
    ) -> None:
        self._migrations_dir = Path(migrations_dir)
        self._ledger = ledger or LedgerStore(store)

    def status(self) -> StatusReport:
        """Applied vs pending for every discovered unit. Never writes rows."""
        self._ledger.ensure_ledger()
        applied = self._ledger.list_applied()
        units = list_units(self._migrations_dir)

        known = {u.name for u in units}
        orphans = [name for name in applied if name not in known]
        for name in orphans:
            logger.warning("ledger.orphan", migration=name)

        return StatusReport(
            entries=[
                StatusEntry(name=u.name, applied=u.name in applied, applied_at=applied.get(u.name))
                for u in units
            ],
            orphans=orphans,
        )

    def adopt(self, on_adopted: Callable[[str], None] | None = None) -> AdoptResult:
        """Record every pending unit as applied without invoking it.

        Idempotent: with nothing pending it adopts nothing.
        """
        self._ledger.ensure_ledger()
        pending = pending_units(list_units(self._migrations_dir), self._ledger.list_applied())

        result = AdoptResult()
        for unit in pending:
            self._ledger.record_applied(unit.name)
            result.adopted.append(unit.name)
            logger.info("migration.adopted", migration=unit.name)
            if on_adopted is not None:
                on_adopted(unit.name)
        return result


__all__ = [
    "format_applied_at",
    "StatusEntry",
    "StatusReport",
    "AdoptResult",
    "LedgerReporter",
]
