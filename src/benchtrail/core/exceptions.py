"""Custom exceptions for benchtrail.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from BenchtrailError for easy catching.
"""

from __future__ import annotations


class BenchtrailError(Exception):
    """Base exception for all benchtrail errors.

    Example:
        >>> try:
        ...     # benchtrail operations
        ...     pass
        ... except BenchtrailError as e:
        ...     print(f"benchtrail error: {e}")
    """


class ValidationFailure(BenchtrailError):
    """Raised when a measurement value is structurally malformed.

    Validation failures are rejected at ingestion and never stored.
    """


class InvalidMetricError(ValidationFailure):
    """Raised when a metric has an empty name or a negative error margin.

    Example:
        >>> raise InvalidMetricError("Metric 'load' has negative error margin: -1.0")
    """


class InvalidRunError(ValidationFailure):
    """Raised when a benchmark run is missing its tool, its metrics, or holds a bad metric.

    Example:
        >>> raise InvalidRunError("Run for revision abc123 has no metrics")
    """


class StorageError(BenchtrailError):
    """Raised when a persisted history cannot be read or decoded.

    Example:
        >>> raise StorageError("Malformed history file: .benchtrail/history.json")
    """


class ConfigurationError(BenchtrailError):
    """Raised when configuration is invalid or missing.

    Example:
        >>> raise ConfigurationError("Unknown direction 'sideways' for metric 'load'")
    """
