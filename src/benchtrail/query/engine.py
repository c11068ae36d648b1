"""Read-only views over a history snapshot.

This module provides QueryEngine, which turns the runs of a group into
per-metric series. Series follow the stored arrival order exactly and are
never re-sorted by timestamp.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from benchtrail.core.types import History, Revision


@dataclass(frozen=True)
class SeriesPoint:
    """One value of a metric, taken from one run.

    Attributes:
        revision: Revision of the run the value came from.
        value: Measured value.
        error_margin: Reported uncertainty.
        unit: Unit label.
    """

    revision: Revision
    value: float
    error_margin: float
    unit: str = ""


class Series:
    """Lazy, restartable sequence of points for one metric of one group.

    Every iteration walks the snapshot from the start, so a Series can be
    consumed any number of times. Runs that lack the metric are skipped.

    Example:
        >>> series = engine.series("Track benchmarks", "uncontended/load")
        >>> [p.value for p in series]
        [17.0, 18.0]
        >>> len(list(series))
        2
    """

    def __init__(self, history: History, group: str, metric_name: str) -> None:
        self._history = history
        self.group = group
        self.metric_name = metric_name

    def __iter__(self) -> Iterator[SeriesPoint]:
        for run in self._history.runs(self.group):
            metric = run.metric(self.metric_name)
            if metric is None:
                continue
            yield SeriesPoint(
                revision=run.revision,
                value=metric.value,
                error_margin=metric.error_margin,
                unit=metric.unit,
            )

    def __repr__(self) -> str:
        return f"Series(group={self.group!r}, metric_name={self.metric_name!r})"


class QueryEngine:
    """Answer series, latest and window queries over a history snapshot.

    Unknown groups and metric names give empty results rather than errors,
    since benchmark suites gain and lose metrics over time.

    Example:
        >>> engine = QueryEngine(store.snapshot())
        >>> point = engine.latest("Track benchmarks", "uncontended/store")
        >>> point.value if point else None
        121.0
    """

    def __init__(self, history: History) -> None:
        """Initialize with a snapshot.

        Args:
            history: History snapshot to query.
        """
        self._history = history

    @property
    def history(self) -> History:
        """The snapshot this engine reads."""
        return self._history

    def groups(self) -> tuple[str, ...]:
        """Return the group labels of the snapshot."""
        return tuple(self._history.groups)

    def metric_names(self, group: str) -> list[str]:
        """Return distinct metric names of a group in first-seen order.

        Args:
            group: Group label.

        Returns:
            Metric names, empty for an unknown group.
        """
        names: dict[str, None] = {}
        for run in self._history.runs(group):
            for metric in run.metrics:
                names.setdefault(metric.name, None)
        return list(names)

    def series(self, group: str, metric_name: str) -> Series:
        """Return the series of a metric within a group.

        Args:
            group: Group label.
            metric_name: Metric name, compared exactly.

        Returns:
            A restartable Series in stored order.
        """
        return Series(self._history, group, metric_name)

    def latest(self, group: str, metric_name: str) -> SeriesPoint | None:
        """Return the last point of a series.

        Args:
            group: Group label.
            metric_name: Metric name.

        Returns:
            The most recently appended point, or None if no run carries the metric.
        """
        point = None
        for point in self.series(group, metric_name):  # noqa: B007
            pass
        return point

    def window(self, group: str, metric_name: str, n: int) -> list[SeriesPoint]:
        """Return the last n points of a series.

        Args:
            group: Group label.
            metric_name: Metric name.
            n: Number of points, at least 1.

        Returns:
            Up to n points in stored order; all points if fewer exist.

        Raises:
            ValueError: If n is less than 1.
        """
        if n < 1:
            raise ValueError(f"Window size must be >= 1, got {n}")
        return list(deque(self.series(group, metric_name), maxlen=n))
