"""
CLI layer for schemaledger.

Provides a Typer application whose commands delegate to
``schemaledger.core.migrations``.  This package handles only terminal
transport: argument parsing, coloured output, and exit codes.

Entry point::

    schemaledger --help
"""

from schemaledger.cli.app import app

__all__ = ["app"]
