"""Shared fixtures for benchtrail unit tests."""

from __future__ import annotations

from typing import Callable

import pytest

from benchtrail.core.types import BenchRun, Metric, Person, Revision

RunFactory = Callable[..., BenchRun]


def _make_revision(revision_id: str, timestamp: int = 1609614832, message: str = "Change") -> Revision:
    person = Person(name="vorner", handle="vorner")
    return Revision(id=revision_id, author=person, committer=person, message=message, timestamp=timestamp)


def _make_run(
    revision_id: str,
    metrics: dict[str, float] | None = None,
    timestamp: int = 1609689524,
    tool: str = "cargo",
    revision_timestamp: int = 1609614832,
    message: str = "Change",
) -> BenchRun:
    values = {"uncontended/load": 17.0} if metrics is None else metrics
    return BenchRun(
        revision=_make_revision(revision_id, timestamp=revision_timestamp, message=message),
        tool=tool,
        timestamp=timestamp,
        metrics=[Metric(name=name, value=value, error_margin=1.0, unit="ns/iter") for name, value in values.items()],
    )


@pytest.fixture
def make_run() -> RunFactory:
    """Factory for runs whose metrics are given as name -> value."""
    return _make_run


@pytest.fixture
def sample_run() -> BenchRun:
    """A well-formed run with three metrics."""
    return _make_run(
        "18cacb53939503210e7598993eef6b87fc8834b2",
        {"uncontended/load": 17, "uncontended/store": 121, "uncontended/cache": 0},
    )
