"""Console report — one line per target plus the output directory."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from svgcheck.models.results import ComparisonOutcome, ComparisonStatus, RunReport

_STYLES = {
    ComparisonStatus.PASS: "green",
    ComparisonStatus.FAIL: "red",
    ComparisonStatus.ERROR: "yellow",
}


def format_outcome(outcome: ComparisonOutcome, baseline_name: str, log_file: str) -> str:
    prefix = f"comparing {baseline_name} with screenshot from {outcome.target.label}"
    if outcome.status == ComparisonStatus.ERROR:
        return f"{prefix}: ERROR! For more information see {log_file} file."
    verdict = "is equal" if outcome.is_equal else "is not equal"
    return f"{prefix}: {verdict}"


def print_report(report: RunReport, console: Console, log_file: str) -> None:
    """Print every outcome, a summary table and the output directory."""
    for outcome in report.outcomes:
        console.print(
            format_outcome(outcome, report.baseline.name, log_file),
            style=_STYLES[outcome.status], markup=False, highlight=False, soft_wrap=True,
        )

    table = Table(title="Results Summary")
    table.add_column("Browser", style="bold")
    table.add_column("Result")
    table.add_column("Differing pixels", justify="right")
    for outcome in report.outcomes:
        count = "-" if outcome.differing_pixel_count is None else str(outcome.differing_pixel_count)
        style = _STYLES[outcome.status]
        table.add_row(outcome.target.label, f"[{style}]{outcome.status.value}[/{style}]", count)
    console.print(table)

    if report.baseline_resized:
        console.print(f"Baseline resized to fit the display: {report.working_baseline}",
                      markup=False, highlight=False, soft_wrap=True)
    console.print(f"Output directory: {report.output_dir}", markup=False, highlight=False, soft_wrap=True)
