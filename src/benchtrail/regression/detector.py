"""Regression detector for benchmark series.

This module provides the RegressionDetector class, which classifies a
new value against the mean of the preceding points of its series.
Classification is advisory: the detector never touches the store.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Literal

from benchtrail.query.engine import QueryEngine
from benchtrail.regression.models import (
    Classification,
    DetectorConfig,
    Direction,
    RegressionReport,
    TrackingState,
    Verdict,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from benchtrail.core.types import BenchRun, History


class RegressionDetector:
    """Classify benchmark values as pass or alert against a rolling baseline.

    For each metric the baseline is the mean of the ``window_size``
    preceding values. A larger-is-worse metric alerts when the new value
    exceeds ``baseline * (1 + tolerance)``; a smaller-is-worse metric
    alerts when it falls below ``baseline * (1 - tolerance)``. A metric
    with no prior values is in BASELINE state and always passes.

    Attributes:
        config: Detector configuration.

    Example:
        >>> detector = RegressionDetector(DetectorConfig(tolerance=0.2))
        >>> detector.classify("store", 115, [100, 110, 105, 95, 100]).verdict
        <Verdict.PASS: 'pass'>
    """

    def __init__(self, config: DetectorConfig | None = None) -> None:
        """Initialize the detector.

        Args:
            config: Detector configuration. Defaults to DetectorConfig().
        """
        self.config = config or DetectorConfig()

    def _severity(self, change: float, tolerance: float) -> Literal["warning", "critical"]:
        if change > tolerance * self.config.critical_multiplier:
            return "critical"
        return "warning"

    def classify(self, metric: str, value: float, window: Sequence[float]) -> Classification:
        """Classify a value against the values that preceded it.

        Args:
            metric: Metric name, used to look up its direction and tolerance.
            value: The new value.
            window: Preceding values, oldest first. Only the last
                ``window_size`` are used.

        Returns:
            Classification of the value.
        """
        direction = self.config.direction_for(metric)
        tolerance = self.config.tolerance_for(metric)
        values = tuple(window[-self.config.window_size :]) if window else ()

        if not values:
            return Classification(
                metric=metric,
                value=value,
                state=TrackingState.BASELINE,
                verdict=Verdict.PASS,
                direction=direction,
                tolerance=tolerance,
            )

        baseline = sum(values) / len(values)
        epsilon = self.config.zero_epsilon

        if baseline == 0:
            if direction is Direction.LARGER_IS_WORSE:
                threshold = epsilon
                regressed = value > epsilon
                ratio = math.inf
            else:
                threshold = -epsilon
                regressed = value < -epsilon
                ratio = -math.inf
            return Classification(
                metric=metric,
                value=value,
                state=TrackingState.TRACKING,
                verdict=Verdict.ALERT if regressed else Verdict.PASS,
                direction=direction,
                tolerance=tolerance,
                window=values,
                baseline=baseline,
                threshold=threshold,
                ratio=ratio if regressed else None,
                severity="critical" if regressed else None,
            )

        # Scale by |baseline| so a negative baseline still widens toward "better".
        margin = abs(baseline) * tolerance
        if direction is Direction.LARGER_IS_WORSE:
            threshold = baseline + margin
            regressed = value > threshold
            change = (value - baseline) / abs(baseline)
        else:
            threshold = baseline - margin
            regressed = value < threshold
            change = (baseline - value) / abs(baseline)

        return Classification(
            metric=metric,
            value=value,
            state=TrackingState.TRACKING,
            verdict=Verdict.ALERT if regressed else Verdict.PASS,
            direction=direction,
            tolerance=tolerance,
            window=values,
            baseline=baseline,
            threshold=threshold,
            ratio=value / baseline if regressed else None,
            severity=self._severity(change, tolerance) if regressed else None,
        )

    def preceding_values(self, engine: QueryEngine, group: str, run: BenchRun, metric: str) -> list[float]:
        """Collect the values of a metric that precede a run in its group.

        If the run is stored in the group, only points appended before it
        count. If it is not stored yet, every point of the series counts.

        Args:
            engine: Query engine over the history.
            group: Group label.
            run: The run being classified.
            metric: Metric name.

        Returns:
            Values in stored order.
        """
        values: list[float] = []
        for point in engine.series(group, metric):
            if point.revision.id == run.revision.id:
                break
            values.append(point.value)
        return values

    def detect(self, history: History | QueryEngine, group: str, run: BenchRun) -> RegressionReport:
        """Classify every metric of a run against the history of its group.

        Args:
            history: History snapshot, or a query engine over one.
            group: Group the run belongs to.
            run: Run to classify.

        Returns:
            RegressionReport with one classification per metric.

        Example:
            >>> store.append("Track benchmarks", run)
            >>> report = detector.detect(store.snapshot(), "Track benchmarks", run)
            >>> report.has_alerts
            False
        """
        engine = history if isinstance(history, QueryEngine) else QueryEngine(history)

        classifications = [
            self.classify(
                metric.name,
                metric.value,
                self.preceding_values(engine, group, run, metric.name),
            )
            for metric in run.metrics
        ]

        return RegressionReport(
            group=group,
            revision_id=run.revision.id,
            classifications=classifications,
        )
