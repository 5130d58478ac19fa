"""Tests for CLI exit-code mapping."""

from __future__ import annotations

import pytest

from schemaledger.cli.exit_codes import (
    ERROR_CONFIG,
    ERROR_INTERNAL,
    ERROR_RUN_HALTED,
    ERROR_STORE_UNAVAILABLE,
    SUCCESS,
    exit_code_for,
    get_exit_code_name,
)
from schemaledger.core.errors import (
    ConfigError,
    DuplicateEntryError,
    LedgerError,
    QueryError,
    StoreUnavailableError,
    UnitExecutionError,
    UnsupportedUnitError,
)


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (StoreUnavailableError("down"), ERROR_STORE_UNAVAILABLE),
        (ConfigError("bad"), ERROR_CONFIG),
        (UnitExecutionError("001_a.py", "boom"), ERROR_RUN_HALTED),
        (UnsupportedUnitError("001_a.py"), ERROR_RUN_HALTED),
        (DuplicateEntryError("001_a.py"), ERROR_INTERNAL),
        (QueryError("bad sql"), ERROR_INTERNAL),
        (LedgerError("?"), ERROR_INTERNAL),
    ],
)
def test_exit_code_for(error, code):
    assert exit_code_for(error) == code


def test_codes_are_distinct():
    codes = [SUCCESS, ERROR_RUN_HALTED, ERROR_STORE_UNAVAILABLE, ERROR_INTERNAL, ERROR_CONFIG]
    assert len(set(codes)) == len(codes)


def test_exit_code_names():
    assert get_exit_code_name(SUCCESS) == "SUCCESS"
    assert get_exit_code_name(ERROR_STORE_UNAVAILABLE) == "ERROR_STORE_UNAVAILABLE"
    assert get_exit_code_name(99) == "UNKNOWN(99)"
