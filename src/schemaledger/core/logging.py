"""
Structured logging for schemaledger.

Manifesto:
    The runner is an operator tool: its stdout belongs to the human-readable
    progress report, so structured logs go to stderr.  Every log line is an
    event name plus keyword context, rendered as JSON for log shippers or as
    coloured console output when a person is watching.

Architecture:
    ::

        configure_logging(level="INFO", json_format=False, service="schemaledger")
             ↓
        structlog processor chain:
          1. TimeStamper (iso)
          2. add_log_level
          3. service.name tag
          4. JSONRenderer | ConsoleRenderer
             ↓
        PrintLoggerFactory(file=sys.stderr)

Examples:
    >>> from schemaledger.core.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO", json_format=True)
    >>> logger = get_logger(__name__)
    >>> logger.info("migration.applied", migration="001_init.sql")

Tags:
    logging, structlog, observability, json-logging, schemaledger

Doc-Types:
    - API Reference
    - Configuration Documentation
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


class _ServiceTag:
    """Processor stamping every event with ``service.name``."""

    def __init__(self, service: str):
        self.service = service

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", self.service)
        return event_dict


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ValueError(f"Unknown log level: {level}")
    return number


def _build_processors(service: str, json_format: bool, add_timestamp: bool) -> list[Processor]:
    processors: list[Processor] = []
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        _ServiceTag(service),
    ]
    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_logging(
    level: str = "WARNING",
    json_format: bool | None = None,
    service: str = "schemaledger",
    add_timestamp: bool = True,
) -> None:
    """Route structlog events to stderr at ``level`` and above.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        json_format: JSON lines when True, console rendering when False; when
            None, JSON unless stderr is a terminal.
        service: Value of the ``service.name`` key on every event.
        add_timestamp: Prefix events with an ISO timestamp.

    Raises:
        ValueError: ``level`` is not a logging level name.
    """
    threshold = _level_number(level)
    if json_format is None:
        json_format = not sys.stderr.isatty()

    structlog.configure(
        processors=_build_processors(service, json_format, add_timestamp),
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Logger for ``name`` (usually ``__name__``), bound under the ``logger_name`` key."""
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(logger_name=name)


def bind_context(**kwargs: Any) -> None:
    """Attach ``kwargs`` to every event logged from this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
