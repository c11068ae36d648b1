"""Unit tests for BenchmarkTracker."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
import time_machine

from benchtrail.core.exceptions import StorageError
from benchtrail.core.types import BenchRun
from benchtrail.regression import DetectorConfig, TrackingState, Verdict
from benchtrail.storage import DataJSStore, JSONFileStore
from benchtrail.store import RejectionReason
from benchtrail.tracker import BenchmarkTracker

if TYPE_CHECKING:
    from tests.unit.conftest import RunFactory

GROUP = "Track benchmarks"


@pytest.fixture
def tracker(tmp_path: Path) -> BenchmarkTracker:
    """Tracker over an empty JSON history in tmp_path."""
    return BenchmarkTracker(JSONFileStore(tmp_path / "history.json"), DetectorConfig(tolerance=0.2))


async def _seed(tracker: BenchmarkTracker, make_run: RunFactory, values: list[float]) -> None:
    for i, value in enumerate(values):
        await tracker.submit(GROUP, make_run(f"rev{i}", {"store": value}, timestamp=1000 + i))


class TestSubmit:
    """Tests for BenchmarkTracker.submit()."""

    @pytest.mark.asyncio
    async def test_first_run_is_baseline(self, tracker: BenchmarkTracker, sample_run: BenchRun) -> None:
        """The first run of a group is accepted and recorded as baseline."""
        submission = await tracker.submit(GROUP, sample_run)

        assert submission.result.accepted
        assert submission.report is not None
        assert all(c.state is TrackingState.BASELINE for c in submission.report.classifications)
        assert not submission.has_alerts

    @pytest.mark.asyncio
    async def test_regression_is_reported(self, tracker: BenchmarkTracker, make_run: RunFactory) -> None:
        """A slow run after a steady history alerts."""
        await _seed(tracker, make_run, [100, 110, 105, 95, 100])

        submission = await tracker.submit(GROUP, make_run("slow", {"store": 130}))

        assert submission.result.accepted
        assert submission.has_alerts
        assert submission.report is not None
        c = submission.report.get("store")
        assert c is not None
        assert c.verdict is Verdict.ALERT
        assert c.severity == "warning"

    @pytest.mark.asyncio
    async def test_alert_is_logged(
        self, tracker: BenchmarkTracker, make_run: RunFactory, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Alerts are logged at warning level."""
        await _seed(tracker, make_run, [100, 100])

        with caplog.at_level("WARNING", logger="benchtrail.tracker"):
            await tracker.submit(GROUP, make_run("slow", {"store": 200}))

        assert "Regression Detection Summary" in caplog.text

    @pytest.mark.asyncio
    async def test_duplicate_has_no_report(self, tracker: BenchmarkTracker, make_run: RunFactory) -> None:
        """A re-submitted revision is rejected without detection."""
        await tracker.submit(GROUP, make_run("abc"))
        submission = await tracker.submit(GROUP, make_run("abc"))

        assert submission.result.reason is RejectionReason.DUPLICATE_REVISION
        assert submission.report is None
        assert not submission.has_alerts

    @pytest.mark.asyncio
    async def test_invalid_run_rejected(self, tmp_path: Path, tracker: BenchmarkTracker, make_run: RunFactory) -> None:
        """An invalid run is rejected and nothing is saved."""
        submission = await tracker.submit(GROUP, make_run("abc", tool=""))

        assert submission.result.reason is RejectionReason.INVALID_RUN
        assert not (tmp_path / "history.json").exists()
        assert tracker.store.get(GROUP) == ()

    @pytest.mark.asyncio
    async def test_accepted_run_is_persisted(self, tmp_path: Path, make_run: RunFactory) -> None:
        """Accepted runs reach the storage backend."""
        path = tmp_path / "history.json"
        tracker = BenchmarkTracker(JSONFileStore(path))
        await tracker.submit(GROUP, make_run("abc", timestamp=1609689524))

        data = json.loads(path.read_text())
        assert data["last_update"] == 1609689524
        assert data["groups"][GROUP][0]["revision"]["id"] == "abc"

        reloaded = BenchmarkTracker(JSONFileStore(path))
        await reloaded.load()
        assert [r.revision.id for r in reloaded.store.get(GROUP)] == ["abc"]

    @pytest.mark.asyncio
    async def test_persist_false(self, tmp_path: Path, make_run: RunFactory) -> None:
        """persist=False keeps the run in memory only."""
        path = tmp_path / "history.json"
        tracker = BenchmarkTracker(JSONFileStore(path))

        submission = await tracker.submit(GROUP, make_run("abc"), persist=False)

        assert submission.result.accepted
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_duplicate_survives_reload(self, tmp_path: Path, make_run: RunFactory) -> None:
        """At-most-once holds across processes sharing a history file."""
        path = tmp_path / "history.json"
        await BenchmarkTracker(JSONFileStore(path)).submit(GROUP, make_run("abc"))

        tracker = BenchmarkTracker(JSONFileStore(path))
        await tracker.load()
        submission = await tracker.submit(GROUP, make_run("abc"))

        assert submission.result.is_duplicate

    @pytest.mark.asyncio
    async def test_report_timestamp(self, tracker: BenchmarkTracker, make_run: RunFactory) -> None:
        """Reports are stamped with the detection time."""
        with time_machine.travel(datetime(2021, 1, 3, 17, 30), tick=False):
            submission = await tracker.submit(GROUP, make_run("abc"))

        assert submission.report is not None
        assert submission.report.timestamp == datetime(2021, 1, 3, 17, 30)


class TestCheck:
    """Tests for BenchmarkTracker.check()."""

    @pytest.mark.asyncio
    async def test_check_latest(self, tracker: BenchmarkTracker, make_run: RunFactory) -> None:
        """Without a revision the latest run is checked."""
        await _seed(tracker, make_run, [100, 110, 105, 95, 100, 130])

        report = await tracker.check(GROUP)

        assert report is not None
        assert report.revision_id == "rev5"
        assert report.has_alerts

    @pytest.mark.asyncio
    async def test_check_by_revision(self, tracker: BenchmarkTracker, make_run: RunFactory) -> None:
        """A given revision is checked against the runs before it."""
        await _seed(tracker, make_run, [100, 110, 105, 95, 100, 130])

        report = await tracker.check(GROUP, "rev2")

        assert report is not None
        c = report.get("store")
        assert c is not None
        assert c.window == (100, 110)

    @pytest.mark.asyncio
    async def test_check_by_prefix(self, tracker: BenchmarkTracker, make_run: RunFactory) -> None:
        """An unambiguous prefix selects the run."""
        await tracker.submit(GROUP, make_run("18cacb53939503210e7598993eef6b87fc8834b2"))
        await tracker.submit(GROUP, make_run("10355d69139fa2615b5d8a8b4d2ed60fc12e5b04"))

        report = await tracker.check(GROUP, "18cacb5")

        assert report is not None
        assert report.revision_id.startswith("18cacb5")

    @pytest.mark.asyncio
    async def test_check_ambiguous_prefix(self, tracker: BenchmarkTracker, make_run: RunFactory) -> None:
        """A prefix matching several runs selects none."""
        await tracker.submit(GROUP, make_run("abc1"))
        await tracker.submit(GROUP, make_run("abc2"))

        assert await tracker.check(GROUP, "abc") is None

    @pytest.mark.asyncio
    async def test_check_unknown(self, tracker: BenchmarkTracker, make_run: RunFactory) -> None:
        """Unknown groups and revisions give None."""
        await tracker.submit(GROUP, make_run("abc"))

        assert await tracker.check("missing") is None
        assert await tracker.check(GROUP, "zzz") is None


class TestLoad:
    """Tests for BenchmarkTracker.load()."""

    @pytest.mark.asyncio
    async def test_load_replaces_store(self, tmp_path: Path, make_run: RunFactory) -> None:
        """load() swaps in the persisted history."""
        path = tmp_path / "data.js"
        writer = BenchmarkTracker(DataJSStore(path))
        await writer.submit(GROUP, make_run("abc", timestamp=1609689524))

        tracker = BenchmarkTracker(DataJSStore(path))
        history = await tracker.load()

        assert history.last_update == 1609689524
        assert tracker.store.last_update == 1609689524
        assert tracker.query().latest(GROUP, "uncontended/load") is not None

    @pytest.mark.asyncio
    async def test_load_corrupt(self, tmp_path: Path) -> None:
        """A corrupt history raises StorageError."""
        path = tmp_path / "history.json"
        path.write_text("{oops")

        with pytest.raises(StorageError):
            await BenchmarkTracker(JSONFileStore(path)).load()
