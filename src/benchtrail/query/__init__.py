"""Query engine for benchtrail.

Example:
    >>> from benchtrail.query import QueryEngine
    >>>
    >>> engine = QueryEngine(store.snapshot())
    >>> for point in engine.series("Track benchmarks", "uncontended/load"):
    ...     print(point.revision.short_id, point.value)
"""

from __future__ import annotations

from benchtrail.query.engine import QueryEngine, Series, SeriesPoint

__all__ = [
    "QueryEngine",
    "Series",
    "SeriesPoint",
]
