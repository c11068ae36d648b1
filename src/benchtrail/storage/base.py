"""Base protocol for history storage backends.

This module defines the StorageProtocol that all storage backends must implement.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from benchtrail.core.types import History


@runtime_checkable
class StorageProtocol(Protocol):
    """Protocol for history storage backends.

    A backend loads and saves a whole history snapshot. The in-memory
    store decides what the history contains; backends only move it to and
    from disk.

    Example:
        >>> class MyStorage:
        ...     async def load(self) -> History: ...
        ...     async def save(self, history: History) -> None: ...
        >>> isinstance(MyStorage(), StorageProtocol)
        True
    """

    async def load(self) -> History:
        """Load the persisted history.

        Returns:
            The stored history, or an empty history if nothing is stored yet.

        Raises:
            StorageError: If the stored data cannot be decoded.
        """
        ...

    async def save(self, history: History) -> None:
        """Persist a history snapshot, replacing what was stored.

        Args:
            history: Snapshot to persist.
        """
        ...
