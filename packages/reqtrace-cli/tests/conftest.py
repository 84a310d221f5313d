"""Shared test fixtures for reqtrace-cli tests.

Provides CliRunner fixtures, suite configuration files, and fake test
modules for exercising CLI commands.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import structlog
import yaml
from click.testing import CliRunner

SUITE_YAML_FILENAME = "suite.yaml"


@pytest.fixture(autouse=True)
def quiet_logging() -> Generator[MagicMock, None, None]:
    """Keep the run command from reconfiguring logging during tests.

    Yields:
        The patched configure_logging mock.
    """
    structlog.configure(
        processors=[structlog.dev.ConsoleRenderer(colors=False)],
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    with patch("reqtrace_core.observability.configure_logging") as mock_configure:
        yield mock_configure


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def suite_data() -> dict[str, Any]:
    """Return a minimal suite: four requirements, two enabled modules."""
    return {
        "environment": {"apiUrl": "https://api.example.test", "spreadsheetId": "sheet-1"},
        "testCategories": {"one": True, "two": True},
        "modules": [
            {"name": "Module One", "category": "one", "requirements": ["A.1", "A.2"]},
            {"name": "Module Two", "category": "two", "requirements": ["B.1"]},
        ],
        "requirements": {
            "A.1": "First A requirement",
            "A.2": "Second A requirement",
            "B.1": "First B requirement",
            "B.2": "Second B requirement",
        },
    }


@pytest.fixture
def write_suite(tmp_path: Path) -> Callable[[dict[str, Any]], Path]:
    """Factory fixture writing a suite configuration to a YAML file.

    Returns:
        Function that writes the given mapping and returns its path.
    """

    def _write(data: dict[str, Any], filename: str = SUITE_YAML_FILENAME) -> Path:
        path = tmp_path / filename
        path.write_text(yaml.safe_dump(data, sort_keys=False))
        return path

    return _write


@pytest.fixture
def suite_file(write_suite: Callable[[dict[str, Any]], Path], suite_data: dict[str, Any]) -> Path:
    """Return the path of the minimal suite written as YAML."""
    return write_suite(suite_data)


class StaticModule:
    """Test module returning a fixed report."""

    def __init__(self, report: dict[str, Any]) -> None:
        self.report = report

    async def run_all_tests(self) -> dict[str, Any]:
        return self.report


@pytest.fixture
def with_modules() -> Callable[..., Any]:
    """Patch SuiteExecutor so the CLI runs with the given module reports.

    Returns:
        Function taking ``category=report`` pairs and returning a patcher.
    """
    from reqtrace_core.executor import SuiteExecutor

    def _with(**reports: dict[str, Any]) -> Any:
        factories = {
            category: (lambda env, r=report: StaticModule(r))
            for category, report in reports.items()
        }
        return patch("reqtrace_core.SuiteExecutor", lambda: SuiteExecutor(factories=factories))

    return _with


def flatten(output: str) -> str:
    return " ".join(output.split())


@pytest.fixture
def text() -> Callable[[str], str]:
    """Return a helper that collapses whitespace in CLI output."""
    return flatten
