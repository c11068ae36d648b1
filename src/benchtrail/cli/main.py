"""Main CLI entry point for benchtrail.

This module defines the Typer application and all CLI commands.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
import time
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from benchtrail import __version__
from benchtrail.core.config import Settings
from benchtrail.core.exceptions import BenchtrailError
from benchtrail.core.types import BenchRun
from benchtrail.regression import DetectorConfig
from benchtrail.reporters import ConsoleReporter, JSONReporter
from benchtrail.storage import DataJSStore, JSONFileStore, data_js
from benchtrail.tracker import BenchmarkTracker

# Create the main Typer app
app = typer.Typer(
    name="benchtrail",
    help="benchtrail: Benchmark history tracking and regression detection.",
    add_completion=False,
    no_args_is_help=True,
)

# Global state for options
state: dict[str, Any] = {
    "json": False,
    "no_color": False,
    "history": None,
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"benchtrail v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
    no_color: Annotated[
        bool,
        typer.Option(
            "--no-color",
            help="Disable colored output.",
        ),
    ] = False,
    history: Annotated[
        str | None,
        typer.Option(
            "--history",
            "-H",
            help="Path to the history file (default: BENCHTRAIL_HISTORY_PATH).",
        ),
    ] = None,
) -> None:
    """benchtrail: Benchmark history tracking and regression detection.

    Record benchmark runs per revision, query metric series, and flag regressions.
    """
    try:
        settings = Settings()
    except ValidationError as e:
        typer.echo(f"Error: Invalid settings: {e}", err=True)
        raise typer.Exit(2) from e
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    state["json"] = json_output
    state["no_color"] = no_color
    state["history"] = history or settings.history_path
    state["settings"] = settings


def _settings() -> Settings:
    settings = state.get("settings")
    return settings if isinstance(settings, Settings) else Settings()


def _reporter() -> ConsoleReporter:
    return ConsoleReporter(use_colors=not state["no_color"])


def _load_tracker(config: DetectorConfig | None = None) -> BenchmarkTracker:
    """Create a tracker over the history file and load it."""
    settings = _settings()
    tracker = BenchmarkTracker(
        storage=JSONFileStore(state["history"] or settings.history_path),
        config=config or DetectorConfig.from_settings(settings),
    )
    try:
        asyncio.run(tracker.load())
    except BenchtrailError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2) from e
    return tracker


def _read_run(path: Path) -> BenchRun:
    """Read a benchmark run from a JSON file, stamping ingestion time if absent."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        typer.echo(f"Error: Run file not found: {path}", err=True)
        raise typer.Exit(2) from e
    except OSError as e:
        typer.echo(f"Error: Cannot read run file {path}: {e}", err=True)
        raise typer.Exit(2) from e
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        typer.echo(f"Error: Invalid JSON in {path}: {e}", err=True)
        raise typer.Exit(2) from e

    if isinstance(data, dict):
        data.setdefault("timestamp", int(time.time()))

    try:
        return BenchRun.model_validate(data)
    except ValidationError as e:
        typer.echo(f"Error: Invalid run in {path}: {e}", err=True)
        raise typer.Exit(2) from e


@app.command()
def version() -> None:
    """Show the current version."""
    typer.echo(f"benchtrail v{__version__}")


@app.command()
def append(
    group: Annotated[str, typer.Argument(help="Group (benchmark suite) to append to.")],
    run_file: Annotated[Path, typer.Argument(help="JSON file holding one benchmark run.")],
    fail_on_alert: Annotated[
        bool,
        typer.Option(
            "--fail-on-alert",
            help="Exit with code 1 if the appended run regressed.",
        ),
    ] = False,
) -> None:
    """Append a benchmark run to a group and check it for regressions.

    Re-submitting a revision that is already recorded is reported and ignored.

    Examples:
        benchtrail append "Track benchmarks" run.json
        benchtrail --json append "Track benchmarks" run.json --fail-on-alert
    """
    run = _read_run(run_file)
    tracker = _load_tracker()
    submission = asyncio.run(tracker.submit(group, run))
    result = submission.result

    if state["json"]:
        output: dict[str, Any] = {
            "status": result.status.value,
            "group": result.group,
            "revision_id": result.revision_id,
            "reason": result.reason.value if result.reason else None,
            "detail": result.detail,
            "report": submission.report.to_dict() if submission.report else None,
        }
        typer.echo(json.dumps(output, indent=2))
    else:
        reporter = _reporter()
        if result.accepted:
            reporter.print_success(f"Appended {run.revision.short_id} to {group}")
        elif result.is_duplicate:
            reporter.print_warning(f"Revision {run.revision.short_id} already recorded in {group}, ignored")
        else:
            reporter.print_error(f"Rejected run: {result.detail}")
        if submission.report is not None:
            reporter.report_regression(submission.report)

    if not result.accepted and not result.is_duplicate:
        sys.exit(1)
    if fail_on_alert and submission.has_alerts:
        sys.exit(1)


@app.command()
def groups() -> None:
    """List the groups recorded in the history."""
    engine = _load_tracker().query()
    names = engine.groups()

    if state["json"]:
        typer.echo(json.dumps({"groups": [{"name": n, "runs": len(engine.history.runs(n))} for n in names]}, indent=2))
        return

    if not names:
        typer.echo("No groups recorded.")
        return
    for name in names:
        typer.echo(f"{name} ({len(engine.history.runs(name))} runs)")


@app.command()
def series(
    group: Annotated[str, typer.Argument(help="Group to query.")],
    metric: Annotated[str, typer.Argument(help="Metric name.")],
) -> None:
    """Show every recorded value of a metric, in arrival order.

    Example:
        benchtrail series "Track benchmarks" uncontended/load
    """
    points = _load_tracker().query().series(group, metric)

    if state["json"]:
        typer.echo(JSONReporter().report_series(points, group, metric))
    else:
        _reporter().report_series(points, title=f"{group} / {metric}")


@app.command()
def latest(
    group: Annotated[str, typer.Argument(help="Group to query.")],
    metric: Annotated[str, typer.Argument(help="Metric name.")],
) -> None:
    """Show the most recently recorded value of a metric."""
    point = _load_tracker().query().latest(group, metric)

    if state["json"]:
        typer.echo(json.dumps({"point": JSONReporter.point_to_dict(point) if point else None}, indent=2))
        return

    if point is None:
        typer.echo(f"No values recorded for {metric} in {group}.")
        return
    _reporter().report_series([point], title=f"{group} / {metric} (latest)")


@app.command()
def window(
    group: Annotated[str, typer.Argument(help="Group to query.")],
    metric: Annotated[str, typer.Argument(help="Metric name.")],
    n: Annotated[
        int,
        typer.Option(
            "--count",
            "-n",
            min=1,
            help="Number of most recent values to show.",
        ),
    ] = 5,
) -> None:
    """Show the last N recorded values of a metric."""
    points = _load_tracker().query().window(group, metric, n)

    if state["json"]:
        typer.echo(JSONReporter().report_series(points, group, metric))
    else:
        _reporter().report_series(points, title=f"{group} / {metric} (last {n})")


@app.command()
def check(
    group: Annotated[str, typer.Argument(help="Group to check.")],
    revision: Annotated[
        str | None,
        typer.Option(
            "--revision",
            "-r",
            help="Revision id (or unambiguous prefix) to check. Defaults to the latest run.",
        ),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="YAML file with detector settings and per-metric policies.",
        ),
    ] = None,
    fail_on_alert: Annotated[
        bool,
        typer.Option(
            "--fail-on-alert",
            help="Exit with code 1 if a regression is detected.",
        ),
    ] = False,
) -> None:
    """Check a recorded run against the runs before it.

    Examples:
        benchtrail check "Track benchmarks"
        benchtrail check "Track benchmarks" --revision 10355d6 --config detector.yaml
    """
    detector_config = None
    if config is not None:
        try:
            detector_config = DetectorConfig.from_yaml(config, defaults=DetectorConfig.from_settings(_settings()))
        except (FileNotFoundError, BenchtrailError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(2) from e

    tracker = _load_tracker(detector_config)
    report = asyncio.run(tracker.check(group, revision))

    if report is None:
        target = f"revision {revision}" if revision else "runs"
        typer.echo(f"Error: No {target} found in group {group}.", err=True)
        raise typer.Exit(2)

    if state["json"]:
        typer.echo(JSONReporter().report_regression(report))
    else:
        _reporter().report_regression(report)

    if fail_on_alert and report.has_alerts:
        sys.exit(1)


@app.command("import-js")
def import_js(
    source: Annotated[Path, typer.Argument(help="data.js benchmark page to import.")],
) -> None:
    """Merge a github-action-benchmark data.js page into the history.

    Each entry is appended in page order. Revisions already recorded and
    malformed runs are skipped.

    Example:
        benchtrail import-js dev/bench/data.js
    """
    if not source.exists():
        typer.echo(f"Error: File not found: {source}", err=True)
        raise typer.Exit(2)

    tracker = _load_tracker()
    try:
        imported = data_js.loads(source.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        typer.echo(f"Error: Cannot read {source}: {e}", err=True)
        raise typer.Exit(2) from e
    except BenchtrailError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2) from e

    if tracker.store.repo_url is None:
        tracker.store.repo_url = imported.repo_url

    accepted = 0
    skipped = 0
    for group_name, runs in imported.groups.items():
        for run in runs:
            if tracker.store.append(group_name, run).accepted:
                accepted += 1
            else:
                skipped += 1
    asyncio.run(tracker.save())

    if state["json"]:
        typer.echo(json.dumps({"accepted": accepted, "skipped": skipped}, indent=2))
    else:
        _reporter().print_success(f"Imported {accepted} run(s), skipped {skipped}")


@app.command("export-js")
def export_js(
    destination: Annotated[Path, typer.Argument(help="Path of the data.js file to write.")],
) -> None:
    """Write the history as a github-action-benchmark data.js page.

    Example:
        benchtrail export-js gh-pages/dev/bench/data.js
    """
    tracker = _load_tracker()
    asyncio.run(DataJSStore(destination).save(tracker.store.snapshot()))

    if state["json"]:
        typer.echo(json.dumps({"path": str(destination), "runs": len(tracker.store)}, indent=2))
    else:
        _reporter().print_success(f"Exported {len(tracker.store)} run(s) to {destination}")


if __name__ == "__main__":
    app()
