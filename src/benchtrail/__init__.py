"""benchtrail: Benchmark history tracking and regression detection."""

from __future__ import annotations

from benchtrail.core.exceptions import (
    BenchtrailError,
    InvalidMetricError,
    InvalidRunError,
    StorageError,
)
from benchtrail.core.types import BenchRun, History, Metric, Person, Revision
from benchtrail.query import QueryEngine, Series, SeriesPoint
from benchtrail.regression import (
    Classification,
    DetectorConfig,
    Direction,
    MetricPolicy,
    RegressionDetector,
    RegressionReport,
    Verdict,
)
from benchtrail.store import AppendResult, AppendStatus, HistoryStore, RejectionReason
from benchtrail.tracker import BenchmarkTracker, Submission

__version__ = "0.3.0"
__all__ = [
    # Measurement model
    "BenchRun",
    "History",
    "Metric",
    "Person",
    "Revision",
    # Append store
    "AppendResult",
    "AppendStatus",
    "HistoryStore",
    "RejectionReason",
    # Queries
    "QueryEngine",
    "Series",
    "SeriesPoint",
    # Regression detection
    "Classification",
    "DetectorConfig",
    "Direction",
    "MetricPolicy",
    "RegressionDetector",
    "RegressionReport",
    "Verdict",
    # High-level API
    "BenchmarkTracker",
    "Submission",
    # Errors
    "BenchtrailError",
    "InvalidMetricError",
    "InvalidRunError",
    "StorageError",
    # Version
    "__version__",
]
