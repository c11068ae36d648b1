"""Unit tests for the query engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from benchtrail.core.types import History
from benchtrail.query import QueryEngine, SeriesPoint

if TYPE_CHECKING:
    from tests.unit.conftest import RunFactory

GROUP = "Track benchmarks"

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def engine(make_run: RunFactory) -> QueryEngine:
    """Engine over a group where the second run lacks 'store'."""
    history = History(
        last_update=1609691274,
        groups={
            GROUP: (
                make_run("r1", {"load": 17, "store": 121}),
                make_run("r2", {"load": 18}),
                make_run("r3", {"load": 16, "store": 125}),
            ),
            "other": (make_run("x1", {"load": 500}),),
        },
    )
    return QueryEngine(history)


# ============================================================================
# Series
# ============================================================================


class TestSeries:
    """Tests for QueryEngine.series()."""

    def test_series_in_stored_order(self, engine: QueryEngine) -> None:
        """Values follow arrival order."""
        assert [p.value for p in engine.series(GROUP, "load")] == [17.0, 18.0, 16.0]

    def test_runs_without_metric_are_skipped(self, engine: QueryEngine) -> None:
        """Runs lacking the metric contribute no point."""
        points = list(engine.series(GROUP, "store"))

        assert [p.revision.id for p in points] == ["r1", "r3"]
        assert [p.value for p in points] == [121.0, 125.0]

    def test_points_carry_margin_and_unit(self, engine: QueryEngine) -> None:
        """Each point keeps its metric's margin and unit."""
        point = next(iter(engine.series(GROUP, "load")))

        assert isinstance(point, SeriesPoint)
        assert point.error_margin == 1.0
        assert point.unit == "ns/iter"

    def test_series_is_restartable(self, engine: QueryEngine) -> None:
        """A series can be consumed more than once with the same result."""
        series = engine.series(GROUP, "load")
        assert list(series) == list(series)

    def test_series_does_not_mix_groups(self, engine: QueryEngine) -> None:
        """Groups are independent namespaces."""
        assert [p.value for p in engine.series("other", "load")] == [500.0]

    def test_unknown_group(self, engine: QueryEngine) -> None:
        """An unknown group gives an empty series."""
        assert list(engine.series("missing", "load")) == []

    def test_unknown_metric(self, engine: QueryEngine) -> None:
        """Metric names are compared exactly."""
        assert list(engine.series(GROUP, "Load")) == []

    def test_out_of_order_timestamps_not_resorted(self, make_run: RunFactory) -> None:
        """Revision timestamps never reorder a series."""
        history = History(
            groups={
                GROUP: (
                    make_run("late", {"load": 1}, revision_timestamp=2000),
                    make_run("early", {"load": 2}, revision_timestamp=1000),
                )
            }
        )
        engine = QueryEngine(history)
        assert [p.revision.id for p in engine.series(GROUP, "load")] == ["late", "early"]


# ============================================================================
# Latest / Window
# ============================================================================


class TestLatest:
    """Tests for QueryEngine.latest()."""

    def test_latest(self, engine: QueryEngine) -> None:
        """latest() is the last point of the series."""
        point = engine.latest(GROUP, "load")
        assert point is not None
        assert point.revision.id == "r3"
        assert point.value == 16.0

    def test_latest_skips_runs_without_metric(self, make_run: RunFactory) -> None:
        """A final run without the metric does not hide earlier values."""
        history = History(groups={GROUP: (make_run("a", {"store": 3}), make_run("b", {"load": 1}))})
        point = QueryEngine(history).latest(GROUP, "store")
        assert point is not None
        assert point.revision.id == "a"

    def test_latest_absent(self, engine: QueryEngine) -> None:
        """No point at all gives None."""
        assert engine.latest(GROUP, "missing") is None
        assert engine.latest("missing", "load") is None


class TestWindow:
    """Tests for QueryEngine.window()."""

    def test_window_takes_last_n(self, engine: QueryEngine) -> None:
        """Window keeps the most recent points in stored order."""
        assert [p.value for p in engine.window(GROUP, "load", 2)] == [18.0, 16.0]

    def test_window_larger_than_series(self, engine: QueryEngine) -> None:
        """Fewer points than n returns them all."""
        assert [p.revision.id for p in engine.window(GROUP, "store", 10)] == ["r1", "r3"]

    def test_window_of_one(self, engine: QueryEngine) -> None:
        """A window of one matches latest()."""
        assert engine.window(GROUP, "load", 1) == [engine.latest(GROUP, "load")]

    def test_window_unknown_metric(self, engine: QueryEngine) -> None:
        """An unknown metric gives an empty window."""
        assert engine.window(GROUP, "missing", 3) == []

    @pytest.mark.parametrize("n", [0, -1])
    def test_window_rejects_non_positive(self, engine: QueryEngine, n: int) -> None:
        """n must be at least 1."""
        with pytest.raises(ValueError, match="Window size"):
            engine.window(GROUP, "load", n)


class TestIntrospection:
    """Tests for groups() and metric_names()."""

    def test_groups(self, engine: QueryEngine) -> None:
        """groups() lists every group of the snapshot."""
        assert engine.groups() == (GROUP, "other")

    def test_metric_names_first_seen_order(self, engine: QueryEngine) -> None:
        """Metric names are distinct and in first-seen order."""
        assert engine.metric_names(GROUP) == ["load", "store"]

    def test_metric_names_unknown_group(self, engine: QueryEngine) -> None:
        """An unknown group has no metrics."""
        assert engine.metric_names("missing") == []
