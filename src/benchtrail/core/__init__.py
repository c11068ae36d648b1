"""Core module for benchtrail.

This module contains the value types, validation, exceptions,
and configuration used throughout the library.
"""

from __future__ import annotations

from benchtrail.core.config import Settings
from benchtrail.core.exceptions import (
    BenchtrailError,
    ConfigurationError,
    InvalidMetricError,
    InvalidRunError,
    StorageError,
    ValidationFailure,
)
from benchtrail.core.types import (
    BenchRun,
    History,
    Metric,
    Person,
    Revision,
)
from benchtrail.core.validation import validate_history, validate_metric, validate_run

__all__ = [
    "BenchRun",
    "BenchtrailError",
    "ConfigurationError",
    "History",
    "InvalidMetricError",
    "InvalidRunError",
    "Metric",
    "Person",
    "Revision",
    "Settings",
    "StorageError",
    "ValidationFailure",
    "validate_history",
    "validate_metric",
    "validate_run",
]
