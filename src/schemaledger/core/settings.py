"""
Centralized settings for schemaledger.

Manifesto:
    Connection parameters for the target store come from the environment
    (or a ``.env`` file next to the operator's working directory), validated
    once at startup.  Field names map one-to-one onto the ``DB_*`` variables
    the application being migrated already uses, so the runner needs no
    configuration of its own.

Examples:
    >>> from schemaledger.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.db_backend
    'mysql'

Tags:
    schemaledger, configuration, settings, pydantic, environment

Doc-Types:
    api-reference
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError


class LedgerSettings(BaseSettings):
    """Target-store and runner configuration.

    Fields
    ──────
    db_backend      : ``mysql`` (default) or ``sqlite``
    db_host/db_port : MySQL server address
    db_user         : MySQL user
    db_password     : MySQL password
    db_name         : MySQL database name
    db_pool_size    : Connection pool size
    db_path         : SQLite database file
    migrations_dir  : Directory scanned for migration units
    log_level       : Structlog log level
    log_format      : ``console`` or ``json``
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Store ────────────────────────────────────────────────────
    db_backend: Literal["mysql", "sqlite"] = Field(default="mysql")
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=3306, ge=1, le=65535)
    db_user: str = Field(default="root")
    db_password: SecretStr = Field(default=SecretStr(""))
    db_name: str = Field(default="business_manager")
    db_pool_size: int = Field(default=5, ge=1)
    db_path: str = Field(default="data/schemaledger.db")

    # ── Runner ───────────────────────────────────────────────────
    migrations_dir: Path = Field(
        default=Path("migrations"),
        description="Directory scanned for migration units",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="WARNING")
    log_format: Literal["console", "json"] = Field(default="console")

    def resolved_migrations_dir(self) -> Path:
        """Absolute migrations directory (relative paths resolve against cwd)."""
        return self.migrations_dir.expanduser().resolve()


_settings_cache: dict[str, LedgerSettings] = {}


def get_settings(*, _force_reload: bool = False) -> LedgerSettings:
    """Load, validate, and cache a :class:`LedgerSettings` instance.

    Raises:
        ConfigError: If any environment value fails validation.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    try:
        settings = LedgerSettings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}", cause=exc) from exc

    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "LedgerSettings",
    "get_settings",
    "clear_settings_cache",
]
