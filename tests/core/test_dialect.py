"""Tests for SQL dialects and script splitting."""

from __future__ import annotations

import pytest

from schemaledger.core.dialect import Dialect, MySQLDialect, SQLiteDialect, get_dialect
from schemaledger.core.errors import ConfigError


class TestGetDialect:
    @pytest.mark.parametrize(
        ("name", "cls"),
        [("sqlite", SQLiteDialect), ("mysql", MySQLDialect), ("MariaDB", MySQLDialect)],
    )
    def test_known(self, name, cls):
        dialect = get_dialect(name)
        assert isinstance(dialect, cls)
        assert isinstance(dialect, Dialect)

    def test_unknown_raises_config_error(self):
        with pytest.raises(ConfigError, match="oracle"):
            get_dialect("oracle")


class TestPlaceholders:
    def test_sqlite(self):
        d = SQLiteDialect()
        assert d.placeholder(0) == "?"
        assert d.placeholders(3) == "?, ?, ?"
        assert d.now() == "datetime('now')"

    def test_mysql(self):
        d = MySQLDialect()
        assert d.placeholder(2) == "%s"
        assert d.placeholders(2) == "%s, %s"
        assert d.now() == "NOW()"


class TestLedgerDDL:
    def test_sqlite_unique_name(self):
        ddl = SQLiteDialect().ledger_table_ddl("_migrations")
        assert ddl.startswith("CREATE TABLE IF NOT EXISTS _migrations")
        assert "name TEXT NOT NULL UNIQUE" in ddl

    def test_mysql_matches_application_schema(self):
        ddl = MySQLDialect().ledger_table_ddl("_migrations")
        assert "id INT AUTO_INCREMENT PRIMARY KEY" in ddl
        assert "name VARCHAR(255) NOT NULL UNIQUE" in ddl
        assert "applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP" in ddl
        assert "ENGINE=InnoDB" in ddl


class TestSplitScript:
    split = staticmethod(SQLiteDialect().split_script)

    def test_basic(self):
        assert self.split("CREATE TABLE a (x INT); CREATE TABLE b (y INT);") == [
            "CREATE TABLE a (x INT)",
            "CREATE TABLE b (y INT)",
        ]

    def test_trailing_statement_without_semicolon(self):
        assert self.split("SELECT 1;\nSELECT 2") == ["SELECT 1", "SELECT 2"]

    def test_semicolon_inside_quotes(self):
        script = "INSERT INTO t VALUES ('a;b'); INSERT INTO t VALUES (\"c;d\");"
        assert self.split(script) == [
            "INSERT INTO t VALUES ('a;b')",
            'INSERT INTO t VALUES ("c;d")',
        ]

    def test_escaped_quote(self):
        assert self.split("INSERT INTO t VALUES ('it\\'s; fine');") == [
            "INSERT INTO t VALUES ('it\\'s; fine')"
        ]

    def test_comments_dropped(self):
        script = """
            -- create the table; carefully
            CREATE TABLE a (x INT); # trailing comment
            /* block; comment */
            DROP TABLE b;
        """
        assert self.split(script) == ["CREATE TABLE a (x INT)", "DROP TABLE b"]

    def test_empty(self):
        assert self.split("  ;\n-- only a comment\n") == []
