"""CLI error handling for reqtrace-cli.

Wraps reqtrace-core exceptions into user-friendly messages with
appropriate exit codes.
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import click

from reqtrace_cli.output import bullets, error
from reqtrace_core.config import SuiteConfig, default_config, load_config
from reqtrace_core.errors import ConfigurationError

# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Suite failures, validation issues
EXIT_SYSTEM_ERROR = 2  # Unusable configuration, write failure


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting."""
        error(self.format_message())


def handle_configuration_error(err: ConfigurationError) -> NoReturn:
    """Report a configuration error with its individual issues.

    Raises:
        CLIError: Always, with EXIT_SYSTEM_ERROR.
    """
    bullets(err.issues)
    raise CLIError(err.user_message, exit_code=EXIT_SYSTEM_ERROR)


def load_suite_config(config_path: str | None) -> SuiteConfig:
    """Load the suite configuration named on the command line.

    Args:
        config_path: Path to a YAML/JSON file, or None for the bundled suite.

    Raises:
        CLIError: If the file is missing or malformed.
    """
    try:
        if config_path is None:
            return default_config()
        return load_config(Path(config_path))
    except ConfigurationError as e:
        handle_configuration_error(e)
