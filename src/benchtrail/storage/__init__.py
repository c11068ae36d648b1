"""Storage backends for benchmark history.

This module provides storage protocols and implementations for
persisting the history around the in-memory store.

Example:
    >>> from benchtrail.storage import JSONFileStore
    >>> store = JSONFileStore(".benchtrail/history.json")
    >>> history = await store.load()
"""

from __future__ import annotations

from benchtrail.storage.base import StorageProtocol
from benchtrail.storage.data_js import DataJSStore, format_range, parse_range
from benchtrail.storage.json_store import JSONFileStore

__all__ = [
    "DataJSStore",
    "JSONFileStore",
    "StorageProtocol",
    "format_range",
    "parse_range",
]
