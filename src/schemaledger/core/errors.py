"""
Structured error types for schemaledger.

Every failure the ledger and runner can produce is a typed ``LedgerError``
carrying a category, a retry hint, structured context (which unit, which
operation) and the chained driver exception.  The CLI maps error *types* to
process exit codes in one place, so nothing below it ever calls ``sys.exit``.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure kind the operator must
      tell apart (store down, unit broke, unit unsupported, ledger corrupt)
    - **Rich Context:** Errors carry the unit name for logging
    - **Error Chaining:** Driver exceptions are preserved as ``cause``

Architecture:
    ::

        LedgerError (category, retryable, context, cause)
        ├── ConfigError            (CONFIG)
        ├── DatabaseError          (DATABASE)
        │   ├── StoreUnavailableError
        │   ├── QueryError
        │   └── IntegrityError
        │       └── DuplicateEntryError
        └── UnitExecutionError     (UNIT)
            └── UnsupportedUnitError

Guardrails:
    ❌ DON'T: Raise plain Exception from adapters
    ✅ DO: Translate driver errors and pass the original as cause=

    ❌ DON'T: Catch DuplicateEntryError to keep going
    ✅ DO: Let it reach the CLI handler; it means the ledger invariant broke

Tags:
    error-handling, exception-hierarchy, error-context, schemaledger

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Broad failure class; the CLI routes exit codes on the error type."""

    DATABASE = "DATABASE"         # store unreachable, statement or constraint failure
    UNIT = "UNIT"                 # a migration unit's own failure
    CONFIG = "CONFIG"             # settings, backend name, driver
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Where a failure happened.

    ``unit`` is the migration file name, ``operation`` the CLI operation
    (``run``, ``status``, ``adopt``).  Anything else goes in ``metadata``.
    """

    unit: str | None = None
    operation: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        located = {"unit": self.unit, "operation": self.operation}
        data = {key: value for key, value in located.items() if value is not None}
        data.update(self.metadata)
        return data


class LedgerError(Exception):
    """
    Base exception for all schemaledger errors.

    Subclasses override the ``category`` / ``retryable`` class attributes;
    call sites pass a message and, when wrapping a driver error, ``cause=``.

    Examples:
        >>> err = LedgerError("ledger table is missing")
        >>> err.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> err.with_context(unit="001_init.py").context.unit
        '001_init.py'
    """

    category: ErrorCategory = ErrorCategory.INTERNAL
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        if category is not None:
            self.category = category
        if retryable is not None:
            self.retryable = retryable
        self.context = context if context is not None else ErrorContext()
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **fields: Any) -> LedgerError:
        """Attach location fields; unknown keys land in ``context.metadata``.

        Usage:
            raise QueryError(str(exc)).with_context(sql=statement)
        """
        for key, value in fields.items():
            if key in ("unit", "operation"):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Flat representation for structured log events."""
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context = self.context.to_dict()
        if context:
            data["context"] = context
        if self.cause is not None:
            data["cause"] = str(self.cause)
        return data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigError(LedgerError):
    """Invalid settings, unknown backend or missing database driver."""

    category = ErrorCategory.CONFIG


# =============================================================================
# TARGET STORE
# =============================================================================


class DatabaseError(LedgerError):
    """Base class for target-store errors."""

    category = ErrorCategory.DATABASE


class StoreUnavailableError(DatabaseError):
    """The target store cannot be reached or authenticated against.

    Fatal for every operation: no partial work is attempted.
    """


class QueryError(DatabaseError):
    """A statement the store rejected."""


class IntegrityError(DatabaseError):
    """A uniqueness or foreign-key constraint fired."""


class DuplicateEntryError(IntegrityError):
    """A ledger row for this unit name already exists.

    Never retryable: it means two writers raced or a unit was recorded twice.
    """

    def __init__(self, name: str, *, cause: BaseException | None = None):
        super().__init__(
            f"Ledger already contains an entry for {name!r}",
            context=ErrorContext(unit=name),
            cause=cause,
        )
        self.name = name


# =============================================================================
# MIGRATION UNITS
# =============================================================================


class UnitExecutionError(LedgerError):
    """A migration unit raised while being loaded or invoked."""

    category = ErrorCategory.UNIT

    def __init__(self, name: str, message: str, *, cause: BaseException | None = None):
        super().__init__(message, context=ErrorContext(unit=name), cause=cause)
        self.name = name


class UnsupportedUnitError(UnitExecutionError):
    """The unit exposes no ``up()`` entry point the runner can call."""

    def __init__(self, name: str):
        super().__init__(
            name,
            f"{name} has no up() export. If it is a self-contained script, "
            "use 'schemaledger adopt' to mark it as applied without re-running.",
        )


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "LedgerError",
    "ConfigError",
    "DatabaseError",
    "StoreUnavailableError",
    "QueryError",
    "IntegrityError",
    "DuplicateEntryError",
    "UnitExecutionError",
    "UnsupportedUnitError",
]
