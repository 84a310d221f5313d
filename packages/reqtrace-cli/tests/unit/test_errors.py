"""Tests for CLI error handling.

Run with: pytest packages/reqtrace-cli/tests/unit/test_errors.py -v
"""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from reqtrace_cli.errors import (
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    CLIError,
    handle_configuration_error,
    load_suite_config,
)
from reqtrace_core.errors import ConfigurationError


class TestCLIError:
    """Tests for CLIError."""

    def test_is_click_exception(self) -> None:
        """CLIError integrates with click's error handling."""
        error = CLIError("failed")
        assert isinstance(error, click.ClickException)
        assert error.exit_code == EXIT_USER_ERROR

    def test_custom_exit_code(self) -> None:
        """The exit code can be set."""
        assert CLIError("failed", exit_code=EXIT_SYSTEM_ERROR).exit_code == 2

    def test_show_prints_message(self, capsys: pytest.CaptureFixture[str]) -> None:
        """show() prints the message through the Rich console."""
        CLIError("could not write").show()
        assert "could not write" in capsys.readouterr().out


class TestHandleConfigurationError:
    """Tests for handle_configuration_error."""

    def test_issues_printed_and_reraised(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Each issue is printed; a system-error CLIError is raised."""
        err = ConfigurationError("Suite configuration has 2 issue(s)", issues=["a: x", "b: y"])

        with pytest.raises(CLIError) as exc_info:
            handle_configuration_error(err)

        assert exc_info.value.exit_code == EXIT_SYSTEM_ERROR
        assert exc_info.value.message == "Suite configuration has 2 issue(s)"
        out = capsys.readouterr().out
        assert "- a: x" in out
        assert "- b: y" in out


class TestLoadSuiteConfig:
    """Tests for load_suite_config."""

    def test_default(self) -> None:
        """No path loads the bundled suite."""
        assert len(load_suite_config(None).requirements) == 95

    def test_file(self, suite_file: Path) -> None:
        """A path loads that file."""
        assert list(load_suite_config(str(suite_file)).requirements) == [
            "A.1",
            "A.2",
            "B.1",
            "B.2",
        ]

    def test_missing_file(self, tmp_path: Path) -> None:
        """Missing files become CLIError with exit code 2."""
        with pytest.raises(CLIError) as exc_info:
            load_suite_config(str(tmp_path / "missing.yaml"))

        assert exc_info.value.exit_code == EXIT_SYSTEM_ERROR
        assert "not found" in exc_info.value.message
