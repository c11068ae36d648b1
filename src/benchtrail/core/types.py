"""Core type definitions for benchtrail.

This module defines the value types of the benchmark history: revisions,
metrics, benchmark runs and the history aggregate that groups them.

All types are frozen pydantic models. Structural checks that decide whether
a run may enter the history (empty names, negative error margins) live in
:mod:`benchtrail.core.validation` so that a malformed run can still be
constructed, submitted and rejected with a reason.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from collections.abc import Iterator


class Person(BaseModel):
    """An author or committer of a revision.

    Attributes:
        name: Display name.
        handle: Optional account handle on the hosting service.
        email: Optional e-mail address.

    Example:
        >>> person = Person(name="Jane Doe", handle="jdoe")
    """

    model_config = {"frozen": True}

    name: str = Field(..., description="Display name")
    handle: str | None = Field(default=None, description="Account handle on the hosting service")
    email: str | None = Field(default=None, description="E-mail address")


class Revision(BaseModel):
    """A point in the tracked source history.

    Revision timestamps come from the revision-control system and are not
    guaranteed to increase in the order runs arrive (merges and direct
    commits interleave).

    Attributes:
        id: Unique revision identifier (e.g. a commit hash).
        author: Who wrote the change.
        committer: Who recorded the change.
        message: Human-readable revision message.
        timestamp: Revision time in Unix epoch seconds.
        url: Optional link to the revision on the hosting service.

    Example:
        >>> rev = Revision(
        ...     id="18cacb53",
        ...     author=Person(name="jdoe"),
        ...     committer=Person(name="jdoe"),
        ...     message="Speed up load path",
        ...     timestamp=1609614832,
        ... )
    """

    model_config = {"frozen": True}

    id: str = Field(..., description="Unique revision identifier")
    author: Person = Field(..., description="Author of the revision")
    committer: Person = Field(..., description="Committer of the revision")
    message: str = Field(default="", description="Revision message")
    timestamp: int = Field(..., description="Revision time (epoch seconds)")
    url: str | None = Field(default=None, description="Link to the revision")

    @property
    def short_id(self) -> str:
        """First seven characters of the identifier, for display."""
        return self.id[:7]


class Metric(BaseModel):
    """One named measurement within a benchmark run.

    Attributes:
        name: Metric name, unique within its run.
        value: Measured value (unit-less at this layer).
        error_margin: Reported uncertainty. 0 means no measured variance.
        unit: Unit label, e.g. ``ns/iter``.

    Example:
        >>> metric = Metric(name="uncontended/load", value=17, error_margin=1, unit="ns/iter")
    """

    model_config = {"frozen": True}

    name: str = Field(..., description="Metric name")
    value: float = Field(..., description="Measured value")
    error_margin: float = Field(default=0.0, description="Reported uncertainty")
    unit: str = Field(default="", description="Unit label")


class BenchRun(BaseModel):
    """One complete benchmark execution tied to one revision.

    Attributes:
        revision: The revision the benchmarks ran against.
        tool: Name of the measurement harness (e.g. ``cargo``).
        timestamp: Ingestion time in Unix epoch seconds.
        metrics: Measurements in the order the harness reported them.

    Example:
        >>> run = BenchRun(revision=rev, tool="cargo", timestamp=1609689524, metrics=[metric])
        >>> run.metric("uncontended/load").value
        17.0
    """

    model_config = {"frozen": True}

    revision: Revision = Field(..., description="Revision under test")
    tool: str = Field(..., description="Measurement harness identifier")
    timestamp: int = Field(..., description="Ingestion time (epoch seconds)")
    metrics: tuple[Metric, ...] = Field(default=(), description="Measurements in reported order")

    def metric(self, name: str) -> Metric | None:
        """Return the metric with the given name, or None if absent."""
        for metric in self.metrics:
            if metric.name == name:
                return metric
        return None

    def __iter__(self) -> Iterator[Metric]:  # type: ignore[override]
        """Iterate over metrics in reported order."""
        return iter(self.metrics)

    def __len__(self) -> int:
        """Return the number of metrics in the run."""
        return len(self.metrics)


class History(BaseModel):
    """The complete benchmark history.

    Each group (a logical benchmark suite) holds its runs in arrival order.
    That order is the canonical timeline. A History is never changed in
    place: the store publishes a new instance on every accepted append.

    Attributes:
        last_update: Time of the most recent mutation (epoch seconds).
        groups: Mapping from group label to runs in arrival order.
        repo_url: Optional URL of the tracked repository.

    Example:
        >>> history = History()
        >>> history.runs("Track benchmarks")
        ()
    """

    model_config = {"frozen": True}

    last_update: int = Field(default=0, ge=0, description="Time of the most recent mutation")
    groups: dict[str, tuple[BenchRun, ...]] = Field(
        default_factory=dict,
        description="Runs per group, in arrival order",
    )
    repo_url: str | None = Field(default=None, description="URL of the tracked repository")

    def runs(self, group: str) -> tuple[BenchRun, ...]:
        """Return the runs of a group, or an empty tuple for an unknown group."""
        return self.groups.get(group, ())

    def latest_timestamp(self) -> int:
        """Return the time covering every stored run.

        Returns:
            The larger of last_update and the newest run timestamp.
        """
        return max([self.last_update, *(run.timestamp for runs in self.groups.values() for run in runs)])

    def to_dict(self) -> dict[str, Any]:
        """Convert the history to a JSON-compatible dictionary.

        Returns:
            Dictionary in the persisted history layout.
        """
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> History:
        """Create a history from a dictionary in the persisted layout.

        Args:
            data: Dictionary produced by :meth:`to_dict`.

        Returns:
            History instance.
        """
        return cls.model_validate(data)
