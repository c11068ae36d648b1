"""JSON file storage for benchmark history.

This module provides a JSON file-based storage backend holding the
history in its native layout.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from benchtrail.core.exceptions import InvalidRunError, StorageError
from benchtrail.core.types import History
from benchtrail.core.validation import validate_history

logger = logging.getLogger(__name__)


def check_loaded(history: History, source: str) -> History:
    """Check a decoded history and bring last_update up to its newest run.

    Args:
        history: History as decoded from disk.
        source: Where the history came from, for error messages.

    Returns:
        The history, with last_update covering every stored run.

    Raises:
        StorageError: If a run is malformed or a group repeats a revision.
    """
    try:
        validate_history(history)
    except InvalidRunError as e:
        raise StorageError(f"Inconsistent history in {source}: {e}") from e

    latest = history.latest_timestamp()
    if latest != history.last_update:
        logger.warning(f"{source}: last_update {history.last_update} predates its newest run, using {latest}")
        history = history.model_copy(update={"last_update": latest})
    return history


def write_atomic(path: Path, content: str) -> None:
    """Write text to a file through a temp file and an atomic rename.

    The temp file is removed if anything fails before the rename.

    Args:
        path: Destination file. Parent directories are created.
        content: Text to write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.stem}_",
        suffix=".tmp",
    )
    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            f.write(content)
        Path(temp_path).replace(path)
    except BaseException:
        Path(temp_path).unlink(missing_ok=True)
        raise


class JSONFileStore:
    """JSON file storage for benchmark history.

    Uses atomic writes (temp file + rename) so a failed save never leaves
    a truncated history behind.

    Example:
        >>> store = JSONFileStore(".benchtrail/history.json")
        >>> history = await store.load()
        >>> await store.save(history)
    """

    def __init__(self, path: str | Path = ".benchtrail/history.json") -> None:
        """Initialize the JSON file store.

        Args:
            path: Path to the JSON file.
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Path of the backing file."""
        return self._path

    def _decode(self, data: Any) -> History:
        if not isinstance(data, dict):
            raise StorageError(f"Expected a JSON object in {self._path}")
        try:
            history = History.from_dict(data)
        except ValidationError as e:
            raise StorageError(f"Malformed history in {self._path}: {e}") from e
        return check_loaded(history, str(self._path))

    async def load(self) -> History:
        """Load the history from the JSON file.

        Returns:
            The stored history, or an empty history if the file is missing or empty.

        Raises:
            StorageError: If the file holds invalid JSON or an invalid history.
        """
        if not self._path.exists():
            logger.debug(f"No history at {self._path}, starting empty")
            return History()

        content = self._path.read_text(encoding="utf-8")
        if not content.strip():
            return History()

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageError(f"Failed to decode history from {self._path}: {e}") from e

        history = self._decode(data)
        logger.debug(f"Loaded {sum(len(r) for r in history.groups.values())} runs from {self._path}")
        return history

    async def save(self, history: History) -> None:
        """Save the history to the JSON file with an atomic write.

        Args:
            history: Snapshot to persist.
        """
        content = json.dumps(history.to_dict(), indent=2, ensure_ascii=False)
        write_atomic(self._path, content)
        logger.debug(f"Saved history to {self._path}")
