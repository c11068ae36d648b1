"""Structural validation of measurement values.

These checks are pure: they inspect a value and either return or raise.
The store calls :func:`validate_run` before anything is appended.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from benchtrail.core.exceptions import InvalidMetricError, InvalidRunError

if TYPE_CHECKING:
    from benchtrail.core.types import BenchRun, History, Metric


def validate_metric(metric: Metric) -> None:
    """Check that a metric is well formed.

    Args:
        metric: The metric to check.

    Raises:
        InvalidMetricError: If the name is empty, the value is not finite, or the
            error margin is negative or not finite.
    """
    if not metric.name:
        raise InvalidMetricError("Metric name must not be empty")
    if not math.isfinite(metric.value):
        raise InvalidMetricError(f"Metric '{metric.name}' has a non-finite value: {metric.value}")
    if not math.isfinite(metric.error_margin):
        raise InvalidMetricError(f"Metric '{metric.name}' has a non-finite error margin: {metric.error_margin}")
    if metric.error_margin < 0:
        raise InvalidMetricError(f"Metric '{metric.name}' has negative error margin: {metric.error_margin}")


def validate_run(run: BenchRun) -> None:
    """Check that a benchmark run is well formed.

    Args:
        run: The run to check.

    Raises:
        InvalidRunError: If the revision id or tool is empty, the run has no
            metrics, a metric name repeats, or any metric is malformed.
    """
    if not run.revision.id:
        raise InvalidRunError("Run revision id must not be empty")
    if not run.tool:
        raise InvalidRunError(f"Run for revision {run.revision.id} has an empty tool")
    if not run.metrics:
        raise InvalidRunError(f"Run for revision {run.revision.id} has no metrics")

    seen: set[str] = set()
    for metric in run.metrics:
        try:
            validate_metric(metric)
        except InvalidMetricError as e:
            raise InvalidRunError(f"Run for revision {run.revision.id} holds an invalid metric: {e}") from e
        if metric.name in seen:
            raise InvalidRunError(f"Run for revision {run.revision.id} repeats metric '{metric.name}'")
        seen.add(metric.name)


def validate_history(history: History) -> None:
    """Check that every group of a history could have been built by appends.

    Args:
        history: The history to check, typically one just loaded from disk.

    Raises:
        InvalidRunError: If a stored run is malformed or a group records the
            same revision more than once.
    """
    for group, runs in history.groups.items():
        seen: set[str] = set()
        for run in runs:
            try:
                validate_run(run)
            except InvalidRunError as e:
                raise InvalidRunError(f"Group '{group}' holds an invalid run: {e}") from e
            if run.revision.id in seen:
                raise InvalidRunError(f"Group '{group}' records revision {run.revision.id} more than once")
            seen.add(run.revision.id)
