"""
Exit codes for the schemaledger CLI.

Each failure kind gets its own code so deploy scripts can tell a broken
migration from an unreachable database.
"""

from __future__ import annotations

from schemaledger.core.errors import (
    ConfigError,
    StoreUnavailableError,
    UnitExecutionError,
)

# Success
SUCCESS = 0

# A unit failed; the run halted
ERROR_RUN_HALTED = 1

# Unknown command or invalid arguments (Click's own usage-error code)
ERROR_USAGE = 2

# Target store unreachable or credentials rejected
ERROR_STORE_UNAVAILABLE = 3

# Ledger invariant violated (duplicate entry) or other internal error
ERROR_INTERNAL = 4

# Invalid settings or missing database driver
ERROR_CONFIG = 5


def exit_code_for(error: BaseException) -> int:
    """Map an error to the process exit code."""
    if isinstance(error, StoreUnavailableError):
        return ERROR_STORE_UNAVAILABLE
    if isinstance(error, ConfigError):
        return ERROR_CONFIG
    if isinstance(error, UnitExecutionError):
        return ERROR_RUN_HALTED
    return ERROR_INTERNAL


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_RUN_HALTED: "ERROR_RUN_HALTED",
        ERROR_USAGE: "ERROR_USAGE",
        ERROR_STORE_UNAVAILABLE: "ERROR_STORE_UNAVAILABLE",
        ERROR_INTERNAL: "ERROR_INTERNAL",
        ERROR_CONFIG: "ERROR_CONFIG",
    }
    return code_names.get(code, f"UNKNOWN({code})")
