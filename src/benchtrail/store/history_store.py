"""Append store owning the canonical benchmark history.

This module provides HistoryStore, the only component allowed to mutate
the history. Runs are validated, checked for duplicate revisions and
appended in arrival order.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from benchtrail.core.exceptions import InvalidRunError
from benchtrail.core.types import BenchRun, History
from benchtrail.core.validation import validate_history, validate_run
from benchtrail.query.engine import QueryEngine
from benchtrail.store.models import AppendResult, RejectionReason

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


class HistoryStore:
    """In-memory owner of the benchmark history.

    Each group holds an immutable tuple of runs that is replaced, never
    changed, when a run is appended. Appends to one group are serialized
    by that group's lock so the duplicate check and the insert happen as
    one unit; appends to different groups take different locks. Readers
    never take a group lock: they see whichever tuple was last published.

    Example:
        >>> store = HistoryStore()
        >>> result = store.append("Track benchmarks", run)
        >>> result.accepted
        True
        >>> store.get("Track benchmarks")[-1] is run
        True
    """

    def __init__(
        self,
        groups: Mapping[str, tuple[BenchRun, ...]] | None = None,
        last_update: int = 0,
        repo_url: str | None = None,
    ) -> None:
        """Initialize the store, empty or with previously stored groups.

        Args:
            groups: Runs per group in arrival order.
            last_update: Time of the most recent mutation (epoch seconds).
            repo_url: Optional URL of the tracked repository.
        """
        self._groups: dict[str, tuple[BenchRun, ...]] = {name: tuple(runs) for name, runs in (groups or {}).items()}
        self._last_update = last_update
        self._repo_url = repo_url
        self._group_locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._clock_lock = threading.Lock()

    @classmethod
    def from_history(cls, history: History) -> HistoryStore:
        """Create a store from a loaded history snapshot.

        Args:
            history: Snapshot to start from.

        Returns:
            A store holding the snapshot's groups, with last_update covering
            every run.

        Raises:
            InvalidRunError: If a run is malformed or a group repeats a revision.
        """
        validate_history(history)
        return cls(groups=history.groups, last_update=history.latest_timestamp(), repo_url=history.repo_url)

    def _lock_for(self, group: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._group_locks.get(group)
            if lock is None:
                lock = self._group_locks[group] = threading.Lock()
            return lock

    def _advance_clock(self, timestamp: int) -> None:
        with self._clock_lock:
            if timestamp > self._last_update:
                self._last_update = timestamp

    def append(self, group: str, run: BenchRun) -> AppendResult:
        """Validate a run and append it to a group.

        A run whose revision id is already stored in the group is rejected
        and the stored data is left untouched, so CI may safely re-submit.
        Revision timestamps are not checked for order: arrival order is
        the canonical timeline.

        Args:
            group: Target group label. Created if absent.
            run: Run to append.

        Returns:
            Accepted, or rejected with DUPLICATE_REVISION or INVALID_RUN.
        """
        revision_id = run.revision.id
        try:
            validate_run(run)
        except InvalidRunError as e:
            logger.info(f"Rejected run for {revision_id!r} in group {group!r}: {e}")
            return AppendResult.reject(group, revision_id, RejectionReason.INVALID_RUN, str(e))

        with self._lock_for(group):
            runs = self._groups.get(group, ())
            if any(stored.revision.id == revision_id for stored in runs):
                logger.info(f"Ignored duplicate revision {revision_id!r} in group {group!r}")
                return AppendResult.reject(
                    group,
                    revision_id,
                    RejectionReason.DUPLICATE_REVISION,
                    f"Revision {revision_id} already recorded in group {group}",
                )

            # Clock first: a run visible to readers is always covered by last_update.
            self._advance_clock(run.timestamp)
            self._groups[group] = (*runs, run)

        logger.debug(f"Appended run for {revision_id!r} to group {group!r} ({len(runs) + 1} runs)")
        return AppendResult.accept(group, revision_id)

    def get(self, group: str) -> tuple[BenchRun, ...]:
        """Return a group's runs in stored order.

        Args:
            group: Group label.

        Returns:
            Runs in arrival order, or an empty tuple for an unknown group.
        """
        return self._groups.get(group, ())

    def groups(self) -> tuple[str, ...]:
        """Return group labels in creation order."""
        return tuple(self._groups)

    @property
    def last_update(self) -> int:
        """Time of the most recent accepted append (epoch seconds)."""
        return self._last_update

    @property
    def repo_url(self) -> str | None:
        """URL of the tracked repository, if known."""
        return self._repo_url

    @repo_url.setter
    def repo_url(self, value: str | None) -> None:
        self._repo_url = value

    def snapshot(self) -> History:
        """Return an immutable snapshot of the whole history.

        Returns:
            History holding every group as currently published.
        """
        groups = dict(self._groups)
        # Read after the groups so every run in the copy is covered.
        last_update = self._last_update
        return History.model_construct(last_update=last_update, groups=groups, repo_url=self._repo_url)

    def query(self) -> QueryEngine:
        """Return a query engine over a fresh snapshot."""
        return QueryEngine(self.snapshot())

    def __len__(self) -> int:
        """Return the total number of stored runs across all groups."""
        return sum(len(runs) for runs in tuple(self._groups.values()))
