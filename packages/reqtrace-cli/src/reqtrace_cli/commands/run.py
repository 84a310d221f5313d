"""reqtrace run command - Execute the suite and export reports."""

from __future__ import annotations

import asyncio
import contextlib
import signal
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import click

from reqtrace_cli.errors import (
    EXIT_SUCCESS,
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    CLIError,
    handle_configuration_error,
    load_suite_config,
)
from reqtrace_cli.output import info, verdict, warning

if TYPE_CHECKING:
    from reqtrace_core import SuiteConfig, SuiteExecutor, SuiteRun


@dataclass
class RunOptions:
    """Grouped run CLI options."""

    config_path: str | None
    output_format: str
    export_formats: tuple[str, ...]
    output_dir: str | None
    save: bool
    history: bool
    module_timeout: float | None
    log_level: str
    log_json: bool


def _apply_overrides(config: SuiteConfig, opts: RunOptions) -> SuiteConfig:
    """Apply command-line overrides to the loaded configuration."""
    if opts.module_timeout is not None:
        config = config.model_copy(
            update={
                "execution": config.execution.model_copy(
                    update={"module_timeout_seconds": opts.module_timeout}
                )
            }
        )
    reporting_updates: dict[str, object] = {}
    if opts.export_formats:
        reporting_updates["formats"] = list(opts.export_formats)
    if opts.output_dir is not None:
        reporting_updates["destination"] = opts.output_dir
    if not opts.history:
        reporting_updates["save_history"] = False
    if reporting_updates:
        config = config.model_copy(
            update={"reporting": config.reporting.model_copy(update=reporting_updates)}
        )
    return config


async def _execute(executor: SuiteExecutor) -> SuiteRun:
    """Run the suite; the first Ctrl-C skips the modules that have not started."""
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = False
    with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
        installed = True
    try:
        return await executor.execute_all_tests(cancel_event=cancel_event)
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


def _write_reports(executor: SuiteExecutor, run: SuiteRun, config: SuiteConfig) -> list[Path]:
    """Export the run and write it to the configured destination."""
    from reqtrace_core import ExportError, ReportStore

    store = ReportStore(
        Path(config.reporting.destination),
        save_history=config.reporting.save_history,
        max_history_entries=config.reporting.max_history_entries,
    )
    try:
        exports = executor.export_results(config.reporting.formats, run)
        return store.write(exports, timestamp=run.started_at)
    except ExportError as e:
        raise CLIError(e.user_message, exit_code=EXIT_SYSTEM_ERROR) from None


def _run_suite(opts: RunOptions) -> None:
    """Execute the suite, print results, and write reports.

    Raises:
        SystemExit: 0 when the run passed, 1 when modules or requirements failed.
    """
    from reqtrace_core import ConfigurationError, SuiteExecutor, print_run_summary
    from reqtrace_core.observability import configure_logging

    configure_logging(log_level=opts.log_level, json_format=opts.log_json)

    config = _apply_overrides(load_suite_config(opts.config_path), opts)
    executor = SuiteExecutor()
    try:
        executor.initialize(config)
    except ConfigurationError as e:
        handle_configuration_error(e)

    run = asyncio.run(_execute(executor))
    matrix = executor.generate_requirement_traceability_matrix(run)
    print_run_summary(run, matrix, output_format=opts.output_format)

    if opts.save:
        written = _write_reports(executor, run, config)
        if opts.output_format == "table":
            info(f"Reports written to {config.reporting.destination} ({len(written)} files)")

    if run.cancelled and opts.output_format == "table":
        warning("Run cancelled; remaining modules were skipped")

    if opts.output_format == "table":
        verdict(run.passed)
    raise SystemExit(EXIT_SUCCESS if run.passed else EXIT_USER_ERROR)


@click.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Suite configuration (YAML/JSON) [default: bundled suite]",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Console output format [default: table]",
)
@click.option(
    "-e",
    "--export",
    "export_formats",
    type=click.Choice(["json", "csv"]),
    multiple=True,
    help="Report format to write (repeatable) [default: from configuration]",
)
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Report directory [default: from configuration]",
)
@click.option(
    "--save/--no-save",
    default=True,
    help="Write reports to the report directory",
)
@click.option(
    "--history/--no-history",
    default=True,
    help="Keep timestamped reports from previous runs",
)
@click.option(
    "--module-timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Per-module watchdog timeout in seconds",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Log level [default: WARNING]",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Emit logs as JSON",
)
def run(
    config_path: str | None,
    output_format: str,
    export_formats: tuple[str, ...],
    output_dir: str | None,
    save: bool,
    history: bool,
    module_timeout: float | None,
    log_level: str,
    log_json: bool,
) -> None:
    """Execute the test suite.

    Runs every enabled test module one at a time, maps outcomes onto the
    requirement catalog, prints a summary, and writes JSON/CSV reports.

    Examples:

        reqtrace run

        reqtrace run --config suite.yaml --export csv --output-dir reports

        reqtrace run --format json --no-save
    """
    opts = RunOptions(
        config_path=config_path,
        output_format=output_format,
        export_formats=export_formats,
        output_dir=output_dir,
        save=save,
        history=history,
        module_timeout=module_timeout,
        log_level=log_level,
        log_json=log_json,
    )
    _run_suite(opts)
