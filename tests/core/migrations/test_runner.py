"""Tests for the migration runner."""

from __future__ import annotations

import pytest

from schemaledger.core.errors import DuplicateEntryError
from schemaledger.core.migrations import (
    LEDGER_TABLE,
    LedgerStore,
    MigrationRunner,
    RunListener,
    RunResult,
    RunState,
    UnitFailure,
)

OK_UNIT = "def up(store):\n    store.execute('CREATE TABLE {table} (id INTEGER)')\n"
FAILING_UNIT = "def up(store):\n    raise RuntimeError('boom')\n"


class RecordingListener(RunListener):
    def __init__(self):
        self.events: list[tuple[str, str]] = []

    def run_started(self, pending):
        self.events.append(("started", ",".join(u.name for u in pending)))

    def unit_started(self, unit):
        self.events.append(("unit", unit.name))

    def unit_applied(self, unit):
        self.events.append(("applied", unit.name))

    def unit_failed(self, unit, failure):
        self.events.append(("failed", unit.name))


def _applied(store) -> list[str]:
    return list(LedgerStore(store).list_applied())


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture()
def three_units(write_unit):
    write_unit("001_users.py", OK_UNIT.format(table="users"))
    write_unit("002_orders.sql", "CREATE TABLE orders (id INTEGER);")
    write_unit("003_items.py", OK_UNIT.format(table="items"))


# ── RunResult ─────────────────────────────────────────────────────────


class TestRunResult:
    def test_summary(self):
        result = RunResult(
            applied=["a", "b"],
            skipped=["d"],
            failure=UnitFailure(name="c", message="x"),
        )
        assert result.summary() == "Results: 2 succeeded, 1 failed, 1 skipped"
        assert not result.success

    def test_empty_success(self):
        result = RunResult()
        assert result.success
        assert result.summary() == "Results: 0 succeeded, 0 failed, 0 skipped"


# ── Runner ────────────────────────────────────────────────────────────


class TestMigrationRunner:
    def test_initial_state(self, store, migrations_dir):
        assert MigrationRunner(store, migrations_dir).state is RunState.IDLE

    def test_applies_all_in_order(self, store, migrations_dir, three_units, table_names):
        listener = RecordingListener()
        result = MigrationRunner(store, migrations_dir, listener=listener).run()

        assert result.success
        assert result.state is RunState.DONE
        assert result.applied == ["001_users.py", "002_orders.sql", "003_items.py"]
        assert result.skipped == []
        assert _applied(store) == result.applied
        assert {"users", "orders", "items"} <= table_names()
        assert listener.events == [
            ("started", "001_users.py,002_orders.sql,003_items.py"),
            ("unit", "001_users.py"),
            ("applied", "001_users.py"),
            ("unit", "002_orders.sql"),
            ("applied", "002_orders.sql"),
            ("unit", "003_items.py"),
            ("applied", "003_items.py"),
        ]

    def test_second_run_is_noop(self, store, migrations_dir, three_units):
        MigrationRunner(store, migrations_dir).run()
        result = MigrationRunner(store, migrations_dir).run()

        assert result.applied == []
        assert result.success
        assert result.state is RunState.DONE
        assert len(_applied(store)) == 3

    def test_halts_on_first_failure(self, store, migrations_dir, write_unit, table_names):
        write_unit("001_a.py", OK_UNIT.format(table="a"))
        write_unit("002_b.py", FAILING_UNIT)
        write_unit("003_c.py", OK_UNIT.format(table="c"))
        write_unit("004_d.sql", "CREATE TABLE d (id INTEGER);")

        listener = RecordingListener()
        runner = MigrationRunner(store, migrations_dir, listener=listener)
        result = runner.run()

        assert not result.success
        assert result.state is RunState.HALTED
        assert runner.state is RunState.HALTED
        assert result.applied == ["001_a.py"]
        assert result.failure == UnitFailure(name="002_b.py", message="boom")
        assert result.skipped == ["003_c.py", "004_d.sql"]
        assert result.summary() == "Results: 1 succeeded, 1 failed, 2 skipped"
        assert _applied(store) == ["001_a.py"]
        assert "c" not in table_names()
        assert ("unit", "003_c.py") not in listener.events
        assert listener.events[-1] == ("failed", "002_b.py")

    def test_fixed_unit_resumes(self, store, migrations_dir, write_unit):
        write_unit("001_a.py", OK_UNIT.format(table="a"))
        write_unit("002_b.py", FAILING_UNIT)
        write_unit("003_c.py", OK_UNIT.format(table="c"))
        MigrationRunner(store, migrations_dir).run()

        write_unit("002_b.py", OK_UNIT.format(table="b"))
        result = MigrationRunner(store, migrations_dir).run()

        assert result.success
        assert result.applied == ["002_b.py", "003_c.py"]
        assert _applied(store) == ["001_a.py", "002_b.py", "003_c.py"]

    def test_ledger_is_contiguous_prefix(self, store, migrations_dir, write_unit):
        write_unit("001_a.py", OK_UNIT.format(table="a"))
        write_unit("002_b.py", OK_UNIT.format(table="b"))
        write_unit("003_c.py", FAILING_UNIT)
        write_unit("004_d.py", OK_UNIT.format(table="d"))
        MigrationRunner(store, migrations_dir).run()

        names = sorted(p.name for p in migrations_dir.iterdir())
        assert _applied(store) == names[:2]

    def test_self_contained_unit_halts(self, store, migrations_dir, write_unit, tmp_path):
        marker = tmp_path / "ran"
        write_unit("001_a.py", OK_UNIT.format(table="a"))
        write_unit("002_script.py", f"open({str(marker)!r}, 'w').close()\n")
        write_unit("003_c.py", OK_UNIT.format(table="c"))

        result = MigrationRunner(store, migrations_dir).run()

        assert result.failure is not None
        assert result.failure.unsupported
        assert "schemaledger adopt" in result.failure.message
        assert result.skipped == ["003_c.py"]
        assert _applied(store) == ["001_a.py"]
        assert not marker.exists()

    def test_broken_sql_halts(self, store, migrations_dir, write_unit):
        write_unit("001_a.sql", "CREATE TABLE a (id INTEGER);")
        write_unit("002_b.sql", "CREATE TABLE (;")

        result = MigrationRunner(store, migrations_dir).run()

        assert result.applied == ["001_a.sql"]
        assert result.failure is not None
        assert result.failure.name == "002_b.sql"
        assert not result.failure.unsupported

    def test_syntax_error_halts(self, store, migrations_dir, write_unit):
        write_unit("001_a.py", "def up(store)\n")
        result = MigrationRunner(store, migrations_dir).run()
        assert result.failure is not None
        assert "Syntax error" in result.failure.message
        assert _applied(store) == []

    def test_empty_directory(self, store, migrations_dir, table_names):
        listener = RecordingListener()
        result = MigrationRunner(store, migrations_dir, listener=listener).run()

        assert result.success
        assert result.applied == []
        assert result.state is RunState.DONE
        assert LEDGER_TABLE in table_names()
        assert listener.events == [("started", "")]

    def test_missing_directory(self, store, tmp_path):
        result = MigrationRunner(store, tmp_path / "absent").run()
        assert result.success
        assert result.applied == []

    def test_get_pending(self, store, migrations_dir, three_units):
        LedgerStore(store).ensure_ledger()
        LedgerStore(store).record_applied("002_orders.sql")
        pending = MigrationRunner(store, migrations_dir).get_pending()
        assert [u.name for u in pending] == ["001_users.py", "003_items.py"]

    def test_duplicate_entry_propagates(self, store, migrations_dir, write_unit):
        # The unit records itself, so the runner's own insert collides
        write_unit(
            "001_a.py",
            f"def up(store):\n    store.execute(\"INSERT INTO {LEDGER_TABLE} (name) VALUES ('001_a.py')\")\n",
        )
        write_unit("002_b.py", OK_UNIT.format(table="b"))
        runner = MigrationRunner(store, migrations_dir)

        with pytest.raises(DuplicateEntryError):
            runner.run()
        assert runner.state is RunState.HALTED
        assert _applied(store) == ["001_a.py"]
