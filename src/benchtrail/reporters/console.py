"""Console reporter for benchtrail.

This module provides terminal output for series and regression reports,
with box-drawn tables and colored status indicators.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from benchtrail.storage.data_js import format_range

if TYPE_CHECKING:
    from collections.abc import Iterable

    from benchtrail.query import SeriesPoint
    from benchtrail.regression import Classification, RegressionReport


# ANSI color codes
class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    CYAN = "\033[36m"


class ConsoleReporter:
    """Reporter that writes series and regression reports to the terminal.

    Attributes:
        use_colors: Whether to use ANSI colors in output.
        output: Output stream (defaults to stdout).

    Example:
        >>> reporter = ConsoleReporter()
        >>> reporter.report_series(engine.series("Track benchmarks", "uncontended/load"))
        ┌──────────┬────────────┬────────┬─────────────────────────────┐
        │ Revision │ Value      │ Margin │ Message                     │
        ├──────────┼────────────┼────────┼─────────────────────────────┤
        │ 18cacb5  │ 17 ns/iter │ ± 1    │ Keep benchmarks in GH pages │
        └──────────┴────────────┴────────┴─────────────────────────────┘
    """

    def __init__(
        self,
        use_colors: bool = True,
        output: TextIO | None = None,
    ) -> None:
        """Initialize ConsoleReporter.

        Args:
            use_colors: Whether to use ANSI colors. Defaults to True.
            output: Output stream. Defaults to sys.stdout.
        """
        self.use_colors = use_colors and _supports_color(output or sys.stdout)
        self.output = output or sys.stdout

    def _color(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if self.use_colors:
            return f"{color}{text}{Colors.RESET}"
        return text

    def _print(self, text: str = "") -> None:
        """Print text to output stream."""
        print(text, file=self.output)

    def _print_table(self, headers: list[str], rows: list[list[str]], colors: list[str | None]) -> None:
        """Print a box-drawn table.

        Args:
            headers: Column headers.
            rows: Cell text per row, uncolored.
            colors: Color of each row, or None for plain.
        """
        widths = [max([len(h), *(len(r[i]) for r in rows)]) + 2 for i, h in enumerate(headers)]

        def border(left: str, mid: str, right: str) -> str:
            return "  " + left + mid.join("─" * w for w in widths) + right

        def line(cells: list[str], color: str | None = None) -> str:
            text = "│".join(f" {cell:<{w - 1}}" for cell, w in zip(cells, widths))
            return f"  │{self._color(text, color) if color else text}│"

        self._print(border("┌", "┬", "┐"))
        self._print(line(headers))
        self._print(border("├", "┼", "┤"))
        for row, color in zip(rows, colors):
            self._print(line(row, color))
        self._print(border("└", "┴", "┘"))

    def report_series(self, points: Iterable[SeriesPoint], title: str | None = None) -> None:
        """Report the points of a series.

        Args:
            points: Points in stored order.
            title: Optional title for the report section.
        """
        collected = list(points)
        if title:
            self._print()
            self._print(self._color(f"  {title}", Colors.BOLD))

        if not collected:
            self._print("  No data points.")
            return

        rows = [
            [
                point.revision.short_id,
                f"{point.value:g} {point.unit}".rstrip(),
                format_range(point.error_margin),
                point.revision.message.splitlines()[0] if point.revision.message else "",
            ]
            for point in collected
        ]
        self._print_table(["Revision", "Value", "Margin", "Message"], rows, [None] * len(rows))

    def _status(self, classification: Classification) -> tuple[str, str]:
        if not classification.is_alert:
            return ("pass", Colors.GREEN)
        if classification.severity == "critical":
            return ("CRITICAL", Colors.RED)
        return ("warning", Colors.YELLOW)

    def report_regression(self, report: RegressionReport) -> None:
        """Report the classifications of one run.

        Args:
            report: Report produced by the regression detector.
        """
        self.print_header(f"{report.group} @ {report.revision_id[:7]}")

        rows: list[list[str]] = []
        colors: list[str | None] = []
        for c in report.classifications:
            status, color = self._status(c)
            rows.append(
                [
                    c.metric,
                    f"{c.value:g}",
                    "-" if c.baseline is None else f"{c.baseline:g}",
                    "-" if c.ratio is None else f"{c.ratio:.2f}x",
                    status,
                ]
            )
            colors.append(color)
        self._print_table(["Metric", "Value", "Baseline", "Ratio", "Status"], rows, colors)
        self._print()

        if report.has_alerts:
            self.print_error(f"{len(report.alerts)} regression(s) detected")
        else:
            self.print_success("No regressions detected")

    def print_header(self, text: str) -> None:
        """Print a section header.

        Args:
            text: Header text to display.
        """
        self._print()
        self._print(self._color(f"{'=' * 50}", Colors.DIM))
        self._print(self._color(f"  {text}", Colors.BOLD + Colors.CYAN))
        self._print(self._color(f"{'=' * 50}", Colors.DIM))

    def print_success(self, text: str) -> None:
        """Print a success message."""
        self._print(self._color(f"  ✅ {text}", Colors.GREEN))

    def print_warning(self, text: str) -> None:
        """Print a warning message."""
        self._print(self._color(f"  ⚠️  {text}", Colors.YELLOW))

    def print_error(self, text: str) -> None:
        """Print an error message."""
        self._print(self._color(f"  ❌ {text}", Colors.RED))


def _supports_color(stream: TextIO) -> bool:
    """Check if the output stream supports ANSI colors.

    Args:
        stream: Output stream to check.

    Returns:
        True if colors are supported, False otherwise.
    """
    if not hasattr(stream, "isatty"):
        return False
    if not stream.isatty():
        return False

    import os

    if os.environ.get("NO_COLOR"):
        return False

    return os.environ.get("TERM") != "dumb"
