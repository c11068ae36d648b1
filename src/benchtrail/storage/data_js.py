"""Storage for the github-action-benchmark ``data.js`` page format.

Benchmark dashboards published to GitHub Pages keep their history in a
script that assigns one object to ``window.BENCHMARK_DATA``. This module
converts between that layout and :class:`~benchtrail.core.types.History`:

- ``lastUpdate`` and run ``date`` are milliseconds; History uses seconds.
- Commit timestamps are ISO-8601 strings; Revision uses epoch seconds.
- ``benches[].range`` is a display string such as ``"± 10"`` (cargo),
  ``"±1.23%"`` (benchmark.js, relative to the value) or
  ``"stddev: 0.01"`` (pytest-benchmark); Metric keeps the absolute number.
- ``commit.author.username`` maps to Person.handle.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from benchtrail.core.exceptions import StorageError
from benchtrail.core.types import BenchRun, History, Metric, Person, Revision
from benchtrail.storage.json_store import check_loaded, write_atomic

logger = logging.getLogger(__name__)

DATA_JS_PREFIX = "window.BENCHMARK_DATA = "

_ASSIGNMENT_PATTERN = re.compile(r"^window\.BENCHMARK_DATA\s*=\s*")
_RANGE_PATTERN = re.compile(
    r"^\s*(?:±|\+/-|\+-|stddev:?)?\s*([-+]?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)\s*(%)?\s*$",
    re.IGNORECASE,
)


def parse_range(text: str | None, value: float | None = None) -> float:
    """Parse a ``range`` display string into an error margin.

    Args:
        text: String such as ``"± 10"``, ``"+/- 0.5"``, ``"stddev: 0.01"``,
            ``"±1.23%"`` or ``"3"``. Empty or None means 0.
        value: Measured value that a percentage range is relative to.

    Returns:
        The absolute numeric margin.

    Raises:
        ValueError: If the string holds no number, or is a percentage and
            no value is given.

    Example:
        >>> parse_range("± 413")
        413.0
        >>> parse_range("±2%", value=50)
        1.0
    """
    if text is None or not text.strip():
        return 0.0
    match = _RANGE_PATTERN.match(text)
    if match is None:
        raise ValueError(f"Unrecognized range: {text!r}")
    margin = abs(float(match.group(1)))
    if match.group(2):
        if value is None:
            raise ValueError(f"Percentage range {text!r} needs the measured value")
        margin = abs(value) * margin / 100
    return margin


def format_range(margin: float) -> str:
    """Format an error margin as a ``range`` display string.

    Example:
        >>> format_range(10.0)
        '± 10'
    """
    return f"± {margin:g}"


def parse_timestamp(text: str) -> int:
    """Convert an ISO-8601 timestamp to epoch seconds (naive times are UTC)."""
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp())


def format_timestamp(seconds: int) -> str:
    """Convert epoch seconds to an ISO-8601 UTC timestamp."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _number(value: float) -> float | int:
    return int(value) if value.is_integer() else value


def _person_from_js(data: dict[str, Any]) -> Person:
    return Person(name=data.get("name", ""), handle=data.get("username"), email=data.get("email"))


def _person_to_js(person: Person) -> dict[str, Any]:
    data: dict[str, Any] = {"name": person.name}
    if person.email is not None:
        data["email"] = person.email
    if person.handle is not None:
        data["username"] = person.handle
    return data


def _bench_margin(bench: dict[str, Any]) -> float:
    value = bench.get("value")
    try:
        return parse_range(bench.get("range"), value=value if isinstance(value, (int, float)) else None)
    except ValueError:
        logger.warning(f"Ignoring unrecognized range {bench.get('range')!r} of benchmark {bench.get('name')!r}")
        return 0.0


def _run_from_js(entry: dict[str, Any]) -> BenchRun:
    commit = entry["commit"]
    revision = Revision(
        id=commit["id"],
        author=_person_from_js(commit.get("author", {})),
        committer=_person_from_js(commit.get("committer", {})),
        message=commit.get("message", ""),
        timestamp=parse_timestamp(commit["timestamp"]),
        url=commit.get("url"),
    )
    metrics = [
        Metric(
            name=bench["name"],
            value=bench["value"],
            error_margin=_bench_margin(bench),
            unit=bench.get("unit", ""),
        )
        for bench in entry.get("benches", [])
    ]
    return BenchRun(
        revision=revision,
        tool=entry.get("tool", ""),
        timestamp=int(entry["date"]) // 1000,
        metrics=metrics,
    )


def _run_to_js(run: BenchRun) -> dict[str, Any]:
    commit: dict[str, Any] = {
        "author": _person_to_js(run.revision.author),
        "committer": _person_to_js(run.revision.committer),
        "id": run.revision.id,
        "message": run.revision.message,
        "timestamp": format_timestamp(run.revision.timestamp),
    }
    if run.revision.url is not None:
        commit["url"] = run.revision.url
    return {
        "commit": commit,
        "date": run.timestamp * 1000,
        "tool": run.tool,
        "benches": [
            {
                "name": metric.name,
                "value": _number(metric.value),
                "range": format_range(metric.error_margin),
                "unit": metric.unit,
            }
            for metric in run.metrics
        ],
    }


def loads(content: str) -> History:
    """Decode ``data.js`` content into a history.

    Runs are decoded as written; duplicate revisions and malformed runs are
    left for the caller to check.

    Args:
        content: Script text, with or without the ``window.BENCHMARK_DATA`` assignment.

    Returns:
        The decoded history. Entry order is preserved.

    Raises:
        StorageError: If the content is not a valid benchmark data page.
    """
    text = _ASSIGNMENT_PATTERN.sub("", content.strip(), count=1).rstrip().rstrip(";")

    try:
        data = json.loads(text)
        groups = {
            name: tuple(_run_from_js(entry) for entry in entries) for name, entries in data.get("entries", {}).items()
        }
        return History(
            last_update=int(data.get("lastUpdate", 0)) // 1000,
            groups=groups,
            repo_url=data.get("repoUrl"),
        )
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError, ValueError, ValidationError) as e:
        raise StorageError(f"Invalid benchmark data: {e}") from e


def dumps(history: History) -> str:
    """Encode a history as ``data.js`` content.

    Args:
        history: History to encode.

    Returns:
        Script text assigning the data to ``window.BENCHMARK_DATA``.
    """
    data: dict[str, Any] = {"lastUpdate": history.last_update * 1000}
    if history.repo_url is not None:
        data["repoUrl"] = history.repo_url
    data["entries"] = {name: [_run_to_js(run) for run in runs] for name, runs in history.groups.items()}
    return DATA_JS_PREFIX + json.dumps(data, indent=2, ensure_ascii=False) + "\n"


class DataJSStore:
    """Storage backend reading and writing a ``data.js`` benchmark page.

    Example:
        >>> store = DataJSStore("dev/bench/data.js")
        >>> history = await store.load()
        >>> history.runs("Track benchmarks")[0].tool
        'cargo'
    """

    def __init__(self, path: str | Path = "dev/bench/data.js") -> None:
        """Initialize the store.

        Args:
            path: Path to the ``data.js`` file.
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Path of the backing file."""
        return self._path

    async def load(self) -> History:
        """Load the history from the ``data.js`` file.

        Returns:
            The decoded history, or an empty history if the file is missing or empty.

        Raises:
            StorageError: If the file content is invalid, a run is malformed or a
                group repeats a revision.
        """
        if not self._path.exists():
            logger.debug(f"No benchmark data at {self._path}, starting empty")
            return History()

        content = self._path.read_text(encoding="utf-8")
        if not content.strip():
            return History()

        try:
            history = loads(content)
        except StorageError as e:
            raise StorageError(f"{self._path}: {e}") from e
        return check_loaded(history, str(self._path))

    async def save(self, history: History) -> None:
        """Save the history as a ``data.js`` file with an atomic write.

        Args:
            history: Snapshot to persist.
        """
        write_atomic(self._path, dumps(history))
        logger.debug(f"Saved benchmark data to {self._path}")
