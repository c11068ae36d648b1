"""JSON reporter for benchtrail.

This module provides JSON output for series and regression reports,
suitable for dashboards, CI pipelines and machine processing.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

    from benchtrail.query import SeriesPoint
    from benchtrail.regression import RegressionReport


class JSONReporter:
    """Reporter that outputs series and regression reports as JSON.

    Attributes:
        indent: JSON indentation level (None for compact).

    Example:
        >>> reporter = JSONReporter()
        >>> print(reporter.report_series(series, "Track benchmarks", "uncontended/load"))
        {
          "timestamp": "2024-01-15T10:30:00+00:00",
          "group": "Track benchmarks",
          "metric": "uncontended/load",
          "points": [...]
        }
    """

    def __init__(self, indent: int | None = 2) -> None:
        """Initialize JSONReporter.

        Args:
            indent: JSON indentation level. Defaults to 2. Use None for compact output.
        """
        self.indent = indent

    def _get_timestamp(self) -> str:
        """Get current timestamp in ISO 8601 format."""
        return datetime.now(timezone.utc).isoformat(timespec="seconds")

    @staticmethod
    def point_to_dict(point: SeriesPoint) -> dict[str, Any]:
        """Convert a series point to a dictionary."""
        return {
            "revision": point.revision.model_dump(mode="json"),
            "value": point.value,
            "error_margin": point.error_margin,
            "unit": point.unit,
        }

    def series_to_dict(self, points: Iterable[SeriesPoint], group: str, metric: str) -> dict[str, Any]:
        """Convert series points to a report dictionary.

        Args:
            points: Points in stored order.
            group: Group label.
            metric: Metric name.

        Returns:
            Dictionary with the group, metric and points.
        """
        return {
            "timestamp": self._get_timestamp(),
            "group": group,
            "metric": metric,
            "points": [self.point_to_dict(p) for p in points],
        }

    def report_series(self, points: Iterable[SeriesPoint], group: str, metric: str) -> str:
        """Generate a JSON report for series points.

        Args:
            points: Points in stored order.
            group: Group label.
            metric: Metric name.

        Returns:
            JSON string.
        """
        return json.dumps(self.series_to_dict(points, group, metric), indent=self.indent)

    def report_regression(self, report: RegressionReport) -> str:
        """Generate a JSON report for a regression report.

        Args:
            report: Report produced by the regression detector.

        Returns:
            JSON string.
        """
        return json.dumps(report.to_dict(), indent=self.indent)

    def report_regression_to_file(self, report: RegressionReport, path: Path | str) -> None:
        """Write a regression report to a JSON file.

        Args:
            report: Report produced by the regression detector.
            path: Path to the output file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.report_regression(report))
