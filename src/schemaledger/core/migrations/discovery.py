"""Migration discovery.

Lists unit files in the migrations directory in filename order.  Filename
order is the only ordering there is, so units are expected to carry a
sortable prefix (``001_``, ``2024-05-01_``, ...).  Discovery never imports,
parses or runs a unit.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

UNIT_SUFFIXES = (".py", ".sql")


@dataclass(frozen=True)
class MigrationUnit:
    """One discovered unit: its ledger name and where its source lives."""

    name: str
    path: Path

    @property
    def suffix(self) -> str:
        return self.path.suffix.lower()


def list_units(directory: Path | str) -> list[MigrationUnit]:
    """Return the units in ``directory`` sorted by name.

    A missing directory is not an error; it yields an empty list.
    """
    root = Path(directory)
    if not root.is_dir():
        return []
    units = [
        MigrationUnit(name=entry.name, path=entry)
        for entry in root.iterdir()
        if entry.is_file()
        and entry.suffix.lower() in UNIT_SUFFIXES
        and not entry.name.startswith(("_", "."))
    ]
    return sorted(units, key=lambda u: u.name)


def pending_units(
    units: Iterable[MigrationUnit],
    applied: Mapping[str, object],
) -> list[MigrationUnit]:
    """Units not yet in the ledger, keeping discovery order."""
    return [u for u in units if u.name not in applied]


__all__ = [
    "UNIT_SUFFIXES",
    "MigrationUnit",
    "list_units",
    "pending_units",
]
