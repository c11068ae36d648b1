"""Append store for benchtrail.

This module owns the canonical benchmark history and mediates
every mutation of it.

Example:
    >>> from benchtrail.store import HistoryStore
    >>>
    >>> store = HistoryStore()
    >>> result = store.append("Track benchmarks", run)
    >>> store.get("Track benchmarks")
"""

from __future__ import annotations

from benchtrail.store.history_store import HistoryStore
from benchtrail.store.models import AppendResult, AppendStatus, RejectionReason

__all__ = [
    "AppendResult",
    "AppendStatus",
    "HistoryStore",
    "RejectionReason",
]
