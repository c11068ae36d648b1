"""High-level API for benchmark tracking.

This module provides BenchmarkTracker, the main interface for submitting
runs, classifying them against history and persisting the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from benchtrail.regression import DetectorConfig, RegressionDetector
from benchtrail.storage import JSONFileStore, StorageProtocol
from benchtrail.store import AppendResult, HistoryStore

if TYPE_CHECKING:
    from benchtrail.core.types import BenchRun, History
    from benchtrail.query import QueryEngine
    from benchtrail.regression import RegressionReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Submission:
    """Outcome of submitting a run through the tracker.

    Attributes:
        result: Append outcome from the store.
        report: Regression report for an accepted run, None if rejected.
    """

    result: AppendResult
    report: RegressionReport | None = None

    @property
    def has_alerts(self) -> bool:
        """True if the run was accepted and regressed."""
        return self.report is not None and self.report.has_alerts


class BenchmarkTracker:
    """High-level API for benchmark tracking.

    Ties the append store, the regression detector and a storage backend
    together: a submitted run is appended, classified against the runs
    before it and, when accepted, persisted.

    Example:
        >>> tracker = BenchmarkTracker(JSONFileStore(".benchtrail/history.json"))
        >>> await tracker.load()
        >>> submission = await tracker.submit("Track benchmarks", run)
        >>> if submission.has_alerts:
        ...     print(submission.report.summary())
    """

    def __init__(
        self,
        storage: StorageProtocol | None = None,
        config: DetectorConfig | None = None,
    ) -> None:
        """Initialize with a storage backend and detector configuration.

        Args:
            storage: Storage backend (default: JSONFileStore).
            config: Detector configuration (default: DetectorConfig()).
        """
        self._storage: StorageProtocol = storage or JSONFileStore()
        self._detector = RegressionDetector(config)
        self._store = HistoryStore()

    @property
    def store(self) -> HistoryStore:
        """The in-memory append store."""
        return self._store

    @property
    def detector(self) -> RegressionDetector:
        """The regression detector."""
        return self._detector

    async def load(self) -> History:
        """Replace the in-memory history with the persisted one.

        Returns:
            The loaded snapshot.

        Raises:
            StorageError: If the persisted history cannot be decoded.
        """
        history = await self._storage.load()
        self._store = HistoryStore.from_history(history)
        return history

    async def save(self) -> None:
        """Persist the current snapshot."""
        await self._storage.save(self._store.snapshot())

    async def submit(self, group: str, run: BenchRun, persist: bool = True) -> Submission:
        """Append a run and classify it against the preceding runs.

        Args:
            group: Target group label.
            run: Run to submit.
            persist: Save the history after an accepted append.

        Returns:
            The append outcome and, if accepted, its regression report.
        """
        result = self._store.append(group, run)
        if not result.accepted:
            return Submission(result=result)

        report = self._detector.detect(self._store.query(), group, run)
        if report.has_alerts:
            logger.warning(report.summary())

        if persist:
            await self.save()

        return Submission(result=result, report=report)

    async def check(self, group: str, revision_id: str | None = None) -> RegressionReport | None:
        """Classify a stored run against the runs appended before it.

        Args:
            group: Group label.
            revision_id: Revision to check (default: the most recent run).

        Returns:
            The regression report, or None if the group has no such run.
        """
        runs = self._store.get(group)
        if not runs:
            return None

        if revision_id is None:
            run = runs[-1]
        else:
            matches = [r for r in runs if r.revision.id == revision_id]
            if not matches:
                # Accept an unambiguous short id.
                matches = [r for r in runs if r.revision.id.startswith(revision_id)]
            if len(matches) != 1:
                return None
            run = matches[0]

        return self._detector.detect(self._store.query(), group, run)

    def query(self) -> QueryEngine:
        """Return a query engine over the current snapshot."""
        return self._store.query()
