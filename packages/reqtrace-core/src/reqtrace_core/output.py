"""Run output formatters.

Rich summary/table and JSON output for completed runs.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from reqtrace_core.export import export_json
from reqtrace_core.models import ModuleStatus, SuiteRun, TraceabilityMatrix

TOP_RECOMMENDATIONS = 3


def _status_icon(status: ModuleStatus) -> str:
    """Get icon for module status."""
    icons = {
        ModuleStatus.PASSED: "✅",
        ModuleStatus.FAILED: "❌",
        ModuleStatus.SKIPPED: "⏭️",
        ModuleStatus.ERROR: "💥",
    }
    return icons.get(status, "❓")


def _status_color(status: ModuleStatus) -> str:
    """Get color for module status."""
    colors = {
        ModuleStatus.PASSED: "green",
        ModuleStatus.FAILED: "red",
        ModuleStatus.SKIPPED: "dim",
        ModuleStatus.ERROR: "red bold",
    }
    return colors.get(status, "white")


def format_run_table(
    run: SuiteRun,
    matrix: TraceabilityMatrix,
    console: Console | None = None,
) -> None:
    """Print the run summary panel, the module table, and top recommendations.

    Args:
        run: Completed run
        matrix: Traceability matrix for the run
        console: Optional Rich console (creates one if not provided)
    """
    if console is None:
        console = Console()

    summary = run.summary
    color = "green" if run.passed else "red"

    header = Text()
    header.append("TEST EXECUTION SUMMARY\n\n", style="bold")
    header.append(f"Overall Score: {summary.overall_score_percent}%", style=f"bold {color}")
    header.append(f"\nDuration: {summary.total_duration_ms / 1000:.2f}s")
    header.append(
        f"\nModules: {summary.total_modules} total, {summary.passed_modules} passed, "
        f"{summary.failed_modules} failed, {summary.skipped_modules} skipped"
    )
    header.append(
        f"\nTests: {summary.total_tests} total, {summary.passed_tests} passed, "
        f"{summary.failed_tests} failed"
    )
    header.append(
        f"\nCoverage: {matrix.covered_requirements}/{matrix.total_requirements} requirements "
        f"({matrix.coverage_percentage}%)"
    )
    header.append(f"\nGaps: {len(run.gaps)}")
    if run.cancelled:
        header.append("\nRun was cancelled", style="yellow")

    console.print(Panel(header, title="[bold]Suite Results[/bold]"))

    table = Table(show_header=True, header_style="bold")
    table.add_column("Status", width=3, justify="center")
    table.add_column("Module", min_width=20)
    table.add_column("Tests", justify="right", width=9)
    table.add_column("Note", min_width=20)
    table.add_column("Duration", justify="right", width=10)

    for result in run.module_results.values():
        tests = f"{result.passed_tests}/{result.total_tests}" if result.executed else "-"
        note = result.error or (result.reason.value if result.reason else "")
        duration = f"{result.duration_ms}ms" if result.duration_ms > 0 else "-"
        table.add_row(
            _status_icon(result.status),
            Text(result.module, style=_status_color(result.status)),
            tests,
            Text(note or "-", style="dim" if not note else ""),
            duration,
        )

    console.print(table)

    if run.recommendations:
        console.print()
        console.print("[bold]Top Recommendations:[/bold]")
        for rec in run.recommendations[:TOP_RECOMMENDATIONS]:
            console.print(f"  [yellow]{rec.priority.value.upper()}[/yellow]: {rec.issue}")


def format_run_json(run: SuiteRun, matrix: TraceabilityMatrix, pretty: bool = True) -> str:
    """Format a run as the JSON report."""
    return export_json(run, matrix, pretty=pretty)


def print_run_summary(
    run: SuiteRun,
    matrix: TraceabilityMatrix,
    output_format: str = "table",
    console: Console | None = None,
) -> None:
    """Print a run in the specified format ("table" or "json")."""
    if console is None:
        console = Console()

    if output_format == "json":
        # Raw JSON, no Rich markup, so the output stays parseable
        json_str = format_run_json(run, matrix, pretty=True)
        if console.file is not None:
            console.file.write(json_str + "\n")
        else:
            print(json_str)
    else:
        format_run_table(run, matrix, console)
