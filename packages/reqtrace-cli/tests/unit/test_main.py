"""Tests for the reqtrace CLI entry point.

Run with: pytest packages/reqtrace-cli/tests/unit/test_main.py -v
"""

from __future__ import annotations

import click
import pytest
from click.testing import CliRunner

from reqtrace_cli import __version__
from reqtrace_cli.main import LAZY_COMMANDS, LazyGroup, cli


class TestCLIGroup:
    """Tests for the main CLI group."""

    def test_help_lists_commands(self, cli_runner: CliRunner) -> None:
        """--help shows every command."""
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for name in ("run", "validate", "catalog"):
            assert name in result.output

    def test_version(self, cli_runner: CliRunner) -> None:
        """--version shows the package version."""
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert f"reqtrace, version {__version__}" in result.output

    def test_unknown_command(self, cli_runner: CliRunner) -> None:
        """Unknown commands are usage errors."""
        result = cli_runner.invoke(cli, ["deploy"])
        assert result.exit_code == 2

    def test_no_color_flag(self, cli_runner: CliRunner) -> None:
        """--no-color is accepted before a command."""
        result = cli_runner.invoke(cli, ["--no-color", "validate", "--help"])
        assert result.exit_code == 0


class TestLazyGroup:
    """Tests for lazy command loading."""

    def test_every_lazy_command_resolves(self) -> None:
        """Each registered path imports to a click command."""
        group = cli
        assert isinstance(group, LazyGroup)
        ctx = click.Context(group)

        for name in LAZY_COMMANDS:
            command = group.get_command(ctx, name)
            assert isinstance(command, click.Command)
            assert command.name == name

    def test_unknown_name_returns_none(self) -> None:
        """Names that are not registered resolve to None."""
        ctx = click.Context(cli)
        assert cli.get_command(ctx, "missing") is None

    def test_list_commands_sorted(self) -> None:
        """Commands are listed alphabetically."""
        ctx = click.Context(cli)
        assert cli.list_commands(ctx) == ["catalog", "run", "validate"]

    def test_imported_command_is_reused(self) -> None:
        """A second lookup returns the same command object."""
        ctx = click.Context(cli)
        assert cli.get_command(ctx, "catalog") is cli.get_command(ctx, "catalog")

    def test_target_must_be_command(self) -> None:
        """Targets that are not click commands are rejected."""
        group = LazyGroup(name="broken", lazy_subcommands={"ver": "reqtrace_cli:__version__"})

        with pytest.raises(TypeError, match="is not a click command"):
            group.get_command(click.Context(group), "ver")
