"""Regression detection module for benchtrail.

This module classifies newly recorded benchmark values against a
rolling baseline of the values that preceded them.

Example:
    >>> from benchtrail.regression import DetectorConfig, RegressionDetector
    >>>
    >>> detector = RegressionDetector(DetectorConfig(tolerance=0.2))
    >>> report = detector.detect(store.snapshot(), "Track benchmarks", run)
    >>> if report.has_alerts:
    ...     print(report.summary())
"""

from __future__ import annotations

from benchtrail.regression.detector import RegressionDetector
from benchtrail.regression.models import (
    Classification,
    DetectorConfig,
    Direction,
    MetricPolicy,
    RegressionReport,
    TrackingState,
    Verdict,
)

__all__ = [
    "Classification",
    "DetectorConfig",
    "Direction",
    "MetricPolicy",
    "RegressionDetector",
    "RegressionReport",
    "TrackingState",
    "Verdict",
]
