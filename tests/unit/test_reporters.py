"""Unit tests for the console and JSON reporters."""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from benchtrail.core.types import History
from benchtrail.query import QueryEngine
from benchtrail.regression import DetectorConfig, RegressionDetector, RegressionReport
from benchtrail.reporters import ConsoleReporter, JSONReporter
from benchtrail.reporters.console import Colors

if TYPE_CHECKING:
    from tests.unit.conftest import RunFactory

GROUP = "Track benchmarks"


@pytest.fixture
def engine(make_run: RunFactory) -> QueryEngine:
    """Engine over two runs of 'uncontended/load'."""
    history = History(
        groups={
            GROUP: (
                make_run(
                    "18cacb53939503210e7598993eef6b87fc8834b2",
                    {"uncontended/load": 17},
                    message="Keep benchmarks in GH pages",
                ),
                make_run(
                    "10355d69139fa2615b5d8a8b4d2ed60fc12e5b04",
                    {"uncontended/load": 16},
                    message="Merge pull request #51\n\nbody",
                ),
            )
        }
    )
    return QueryEngine(history)


@pytest.fixture
def report() -> RegressionReport:
    """Report with one warning, one critical and one passing metric."""
    detector = RegressionDetector(DetectorConfig(tolerance=0.2))
    window = [100, 110, 105, 95, 100]
    return RegressionReport(
        group=GROUP,
        revision_id="10355d69139fa2615b5d8a8b4d2ed60fc12e5b04",
        classifications=[
            detector.classify("uncontended/load", 130, window),
            detector.classify("uncontended/store", 150, window),
            detector.classify("uncontended/cache", 100, window),
            detector.classify("uncontended/new", 5, []),
        ],
    )


# ============================================================================
# Console
# ============================================================================


class TestConsoleReporter:
    """Tests for ConsoleReporter."""

    def test_no_colors_on_non_tty(self) -> None:
        """Colors are disabled when output is not a terminal."""
        reporter = ConsoleReporter(use_colors=True, output=io.StringIO())
        assert reporter.use_colors is False

    def test_report_series(self, engine: QueryEngine) -> None:
        """Series rows show short id, value with unit, margin and first message line."""
        output = io.StringIO()
        ConsoleReporter(output=output).report_series(engine.series(GROUP, "uncontended/load"), title="load")
        text = output.getvalue()

        assert "load" in text
        assert "Revision" in text
        assert "18cacb5" in text
        assert "17 ns/iter" in text
        assert "± 1" in text
        assert "Merge pull request #51" in text
        assert "body" not in text
        assert "┌" in text and "┘" in text

    def test_report_empty_series(self) -> None:
        """An empty series prints a placeholder."""
        output = io.StringIO()
        ConsoleReporter(output=output).report_series([])
        assert "No data points." in output.getvalue()

    def test_report_regression(self, report: RegressionReport) -> None:
        """Each metric gets a status and the footer counts alerts."""
        output = io.StringIO()
        ConsoleReporter(output=output).report_regression(report)
        text = output.getvalue()

        assert "Track benchmarks @ 10355d6" in text
        assert "warning" in text
        assert "CRITICAL" in text
        assert "pass" in text
        assert "1.27x" in text
        assert "2 regression(s) detected" in text
        assert Colors.RESET not in text

    def test_report_regression_clean(self) -> None:
        """A clean report says so."""
        detector = RegressionDetector()
        clean = RegressionReport(group=GROUP, revision_id="abc", classifications=[detector.classify("x", 1, [1])])
        output = io.StringIO()
        ConsoleReporter(output=output).report_regression(clean)
        assert "No regressions detected" in output.getvalue()

    def test_colors_applied_when_enabled(self) -> None:
        """Forcing colors on wraps text in ANSI codes."""
        output = io.StringIO()
        reporter = ConsoleReporter(output=output)
        reporter.use_colors = True
        reporter.print_error("boom")
        assert Colors.RED in output.getvalue()
        assert Colors.RESET in output.getvalue()

    def test_status_lines(self) -> None:
        """Success, warning and error lines carry their markers and no info helper remains."""
        output = io.StringIO()
        reporter = ConsoleReporter(output=output, use_colors=False)
        reporter.print_success("saved")
        reporter.print_warning("slow")
        reporter.print_error("boom")

        lines = output.getvalue().splitlines()
        assert len(lines) == 3
        assert [line.split()[-1] for line in lines] == ["saved", "slow", "boom"]
        assert not hasattr(reporter, "print_info")


# ============================================================================
# JSON
# ============================================================================


class TestJSONReporter:
    """Tests for JSONReporter."""

    def test_report_series(self, engine: QueryEngine) -> None:
        """Series output lists points with their revision."""
        points = engine.series(GROUP, "uncontended/load")
        data = json.loads(JSONReporter().report_series(points, GROUP, "uncontended/load"))

        assert data["group"] == GROUP
        assert data["metric"] == "uncontended/load"
        assert "timestamp" in data
        assert [p["value"] for p in data["points"]] == [17.0, 16.0]
        assert data["points"][0]["revision"]["id"].startswith("18cacb5")
        assert data["points"][0]["error_margin"] == 1.0
        assert data["points"][0]["unit"] == "ns/iter"

    def test_report_regression(self, report: RegressionReport) -> None:
        """Regression output carries counts and classifications."""
        data = json.loads(JSONReporter().report_regression(report))

        assert data["has_alerts"] is True
        assert data["critical_count"] == 1
        assert data["warning_count"] == 1
        assert [c["verdict"] for c in data["classifications"]] == ["alert", "alert", "pass", "pass"]
        assert data["classifications"][3]["state"] == "baseline"

    def test_compact_output(self, report: RegressionReport) -> None:
        """indent=None gives single-line output."""
        assert "\n" not in JSONReporter(indent=None).report_regression(report)

    def test_report_regression_to_file(self, report: RegressionReport, tmp_path: Path) -> None:
        """Reports can be written to a file."""
        path = tmp_path / "out" / "report.json"
        JSONReporter().report_regression_to_file(report, path)

        assert json.loads(path.read_text())["revision_id"] == report.revision_id
