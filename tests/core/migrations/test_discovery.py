"""Tests for migration unit discovery."""

from __future__ import annotations

from schemaledger.core.migrations import MigrationUnit, list_units, pending_units


class TestListUnits:
    def test_sorted_by_name(self, migrations_dir, write_unit):
        write_unit("010_c.py", "def up(store): pass\n")
        write_unit("002_b.sql", "SELECT 1;")
        write_unit("001_a.py", "def up(store): pass\n")

        units = list_units(migrations_dir)
        assert [u.name for u in units] == ["001_a.py", "002_b.sql", "010_c.py"]
        assert units[0].path == migrations_dir / "001_a.py"

    def test_ignores_other_files(self, migrations_dir, write_unit):
        write_unit("001_a.py", "def up(store): pass\n")
        write_unit("README.md", "# notes")
        write_unit("__init__.py", "")
        write_unit("_helpers.py", "def helper(): pass\n")
        write_unit(".002_hidden.sql", "SELECT 1;")
        (migrations_dir / "003_dir.py").mkdir()

        assert [u.name for u in list_units(migrations_dir)] == ["001_a.py"]

    def test_suffix_case_insensitive(self, migrations_dir, write_unit):
        write_unit("001_A.SQL", "SELECT 1;")
        (unit,) = list_units(migrations_dir)
        assert unit.suffix == ".sql"

    def test_missing_directory_is_empty(self, tmp_path):
        assert list_units(tmp_path / "nope") == []

    def test_empty_directory(self, migrations_dir):
        assert list_units(migrations_dir) == []

    def test_accepts_str(self, migrations_dir, write_unit):
        write_unit("001_a.sql", "SELECT 1;")
        assert len(list_units(str(migrations_dir))) == 1


class TestPendingUnits:
    def test_excludes_applied_keeps_order(self, tmp_path):
        units = [MigrationUnit(n, tmp_path / n) for n in ("001_a.py", "002_b.py", "003_c.py")]
        pending = pending_units(units, {"002_b.py": "2024-01-01 00:00:00"})
        assert [u.name for u in pending] == ["001_a.py", "003_c.py"]

    def test_unknown_ledger_names_ignored(self, tmp_path):
        units = [MigrationUnit("001_a.py", tmp_path / "001_a.py")]
        assert pending_units(units, {"999_gone.py": None}) == units
