"""Reporters module for benchtrail.

This module provides output formatters for query results and
regression reports:
- Console: Terminal output with tables and colors
- JSON: Machine-readable format
"""

from __future__ import annotations

from benchtrail.reporters.console import ConsoleReporter
from benchtrail.reporters.json import JSONReporter

__all__ = [
    "ConsoleReporter",
    "JSONReporter",
]
