"""CLI module for benchtrail.

This module provides the command-line interface using Typer.
"""

from __future__ import annotations

from benchtrail.cli.main import app

__all__ = ["app"]
