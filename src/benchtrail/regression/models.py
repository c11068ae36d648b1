"""Models for regression detection.

This module provides the detector configuration, per-metric policies,
and the classification and report dataclasses returned by the detector.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field, ValidationError

from benchtrail.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from benchtrail.core.config import Settings


class Direction(str, Enum):
    """Which way a metric moves when performance gets worse."""

    LARGER_IS_WORSE = "larger_is_worse"
    SMALLER_IS_WORSE = "smaller_is_worse"


class TrackingState(str, Enum):
    """Detector state for one (group, metric) pair."""

    BASELINE = "baseline"
    TRACKING = "tracking"


class Verdict(str, Enum):
    """Classification of a new value."""

    PASS = "pass"
    ALERT = "alert"


class MetricPolicy(BaseModel):
    """Per-metric override of the detector defaults.

    Attributes:
        direction: Which way is worse. Never inferred from the metric name.
        tolerance: Allowed relative deviation; None uses the detector default.
    """

    model_config = {"frozen": True}

    direction: Direction = Field(default=Direction.LARGER_IS_WORSE, description="Which way is worse")
    tolerance: float | None = Field(default=None, ge=0, description="Allowed relative deviation")


class DetectorConfig(BaseModel):
    """Configuration for the regression detector.

    Attributes:
        window_size: Number of preceding points averaged into the baseline.
        tolerance: Default allowed relative deviation (0.2 = 20%).
        critical_multiplier: Alerts deviating more than tolerance times this are critical.
        zero_epsilon: Absolute slack used when the baseline is zero.
        policies: Per-metric overrides keyed by metric name.

    Example:
        >>> config = DetectorConfig(
        ...     tolerance=0.1,
        ...     policies={"throughput": MetricPolicy(direction=Direction.SMALLER_IS_WORSE)},
        ... )
        >>> config.direction_for("throughput")
        <Direction.SMALLER_IS_WORSE: 'smaller_is_worse'>
    """

    model_config = {"frozen": True}

    window_size: int = Field(default=5, ge=1, description="Baseline window size")
    tolerance: float = Field(default=0.2, ge=0, description="Default relative tolerance")
    critical_multiplier: float = Field(default=2.0, ge=1, description="Critical severity multiplier")
    zero_epsilon: float = Field(default=1e-9, ge=0, description="Zero-baseline slack")
    policies: dict[str, MetricPolicy] = Field(default_factory=dict, description="Per-metric overrides")

    def direction_for(self, metric_name: str) -> Direction:
        """Return the configured direction of a metric."""
        policy = self.policies.get(metric_name)
        return policy.direction if policy else Direction.LARGER_IS_WORSE

    def tolerance_for(self, metric_name: str) -> float:
        """Return the tolerance of a metric, falling back to the default."""
        policy = self.policies.get(metric_name)
        if policy is not None and policy.tolerance is not None:
            return policy.tolerance
        return self.tolerance

    @classmethod
    def from_settings(cls, settings: Settings) -> DetectorConfig:
        """Build a configuration from application settings.

        Args:
            settings: Loaded settings.

        Returns:
            DetectorConfig without per-metric policies.
        """
        return cls(
            window_size=settings.window_size,
            tolerance=settings.tolerance,
            critical_multiplier=settings.critical_multiplier,
            zero_epsilon=settings.zero_epsilon,
        )

    @classmethod
    def from_yaml(cls, path: Path | str, defaults: DetectorConfig | None = None) -> DetectorConfig:
        """Load detector configuration from a YAML file.

        The file may hold the settings at the top level or under a
        ``detector`` key. Keys missing from the file keep the values of
        ``defaults``.

        Args:
            path: Path to the YAML configuration file.
            defaults: Configuration supplying values the file omits.

        Returns:
            DetectorConfig loaded from the file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ConfigurationError: If the file content is invalid.
        """
        import yaml

        path = Path(path)
        if not path.exists():
            msg = f"Configuration file not found: {path}"
            raise FileNotFoundError(msg)

        try:
            data = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        base = (defaults or cls()).model_dump()
        if data is None:
            return cls(**base)
        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping in {path}")

        detector_data = data.get("detector", data)
        if detector_data is None:
            detector_data = {}
        if not isinstance(detector_data, dict):
            raise ConfigurationError(f"Expected a mapping under 'detector' in {path}")
        try:
            return cls.model_validate({**base, **detector_data})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid detector configuration in {path}: {e}") from e

    def to_yaml(self, path: Path | str) -> None:
        """Save detector configuration to a YAML file.

        Args:
            path: Path to the output YAML file.
        """
        import yaml

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {"detector": self.model_dump(mode="json")}
        path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))


@dataclass(frozen=True)
class Classification:
    """Classification of one metric value against its rolling baseline.

    Attributes:
        metric: Metric name.
        value: The new value.
        state: BASELINE if there was no prior data, TRACKING otherwise.
        verdict: PASS or ALERT.
        direction: Which way is worse for this metric.
        tolerance: Relative tolerance that was applied.
        window: Preceding values the baseline was computed from.
        baseline: Mean of the window, None in BASELINE state.
        threshold: Value beyond which an alert is raised, None in BASELINE state.
        ratio: value / baseline for alerts, None otherwise.
        severity: "warning" or "critical" for alerts, None otherwise.

    Example:
        >>> c = detector.classify("store", 130, [100, 110, 105, 95, 100])
        >>> c.verdict, round(c.ratio, 2)
        (<Verdict.ALERT: 'alert'>, 1.27)
    """

    metric: str
    value: float
    state: TrackingState
    verdict: Verdict
    direction: Direction
    tolerance: float
    window: tuple[float, ...] = ()
    baseline: float | None = None
    threshold: float | None = None
    ratio: float | None = None
    severity: Literal["warning", "critical"] | None = None

    @property
    def is_alert(self) -> bool:
        """True if the value was classified as a regression."""
        return self.verdict is Verdict.ALERT

    @property
    def message(self) -> str:
        """Human-readable description of the classification."""
        if self.state is TrackingState.BASELINE:
            return f"{self.metric}: first value {self.value:g} recorded as baseline"
        if not self.is_alert:
            return f"{self.metric}: {self.value:g} within tolerance of baseline {self.baseline:g}"
        if self.ratio is not None and math.isinf(self.ratio):
            return f"{self.metric}: {self.value:g} against a zero baseline"
        return (
            f"{self.metric}: {self.value:g} is {self.ratio:.2f}x baseline {self.baseline:g} "
            f"(threshold: {self.threshold:g}, tolerance: {self.tolerance * 100:.1f}%)"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        ratio = self.ratio
        if ratio is not None and math.isinf(ratio):
            ratio = None
        return {
            "metric": self.metric,
            "value": self.value,
            "state": self.state.value,
            "verdict": self.verdict.value,
            "direction": self.direction.value,
            "tolerance": self.tolerance,
            "window": list(self.window),
            "baseline": self.baseline,
            "threshold": self.threshold,
            "ratio": ratio,
            "severity": self.severity,
        }


@dataclass
class RegressionReport:
    """Classifications of every metric of one run.

    Attributes:
        group: Group the run belongs to.
        revision_id: Revision of the classified run.
        classifications: One classification per metric, in run order.
        timestamp: When the detection was performed.

    Example:
        >>> report = detector.detect(store.snapshot(), "Track benchmarks", run)
        >>> if report.has_alerts:
        ...     print(report.summary())
    """

    group: str
    revision_id: str
    classifications: list[Classification]
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def alerts(self) -> list[Classification]:
        """Classifications that raised an alert."""
        return [c for c in self.classifications if c.is_alert]

    @property
    def has_alerts(self) -> bool:
        """Check if any metric regressed."""
        return len(self.alerts) > 0

    @property
    def has_critical(self) -> bool:
        """Check if any alert is critical."""
        return any(c.severity == "critical" for c in self.classifications)

    @property
    def warning_count(self) -> int:
        """Count of warning-level alerts."""
        return sum(1 for c in self.classifications if c.severity == "warning")

    @property
    def critical_count(self) -> int:
        """Count of critical-level alerts."""
        return sum(1 for c in self.classifications if c.severity == "critical")

    def get(self, metric: str) -> Classification | None:
        """Return the classification of a metric, or None."""
        for classification in self.classifications:
            if classification.metric == metric:
                return classification
        return None

    def summary(self) -> str:
        """Generate a human-readable summary.

        Returns:
            Multi-line summary string.
        """
        if not self.alerts:
            return f"No regressions detected for {self.revision_id[:7]} in {self.group}."

        lines = [
            f"Regression Detection Summary ({self.timestamp.strftime('%Y-%m-%d %H:%M:%S')})",
            f"  Group: {self.group}, Revision: {self.revision_id[:7]}",
            f"  Critical: {self.critical_count}, Warnings: {self.warning_count}",
            "",
            "Alerts:",
        ]
        for alert in self.alerts:
            marker = "[CRITICAL]" if alert.severity == "critical" else "[WARNING]"
            lines.append(f"  {marker} {alert.message}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "group": self.group,
            "revision_id": self.revision_id,
            "timestamp": self.timestamp.isoformat(),
            "has_alerts": self.has_alerts,
            "critical_count": self.critical_count,
            "warning_count": self.warning_count,
            "classifications": [c.to_dict() for c in self.classifications],
        }
