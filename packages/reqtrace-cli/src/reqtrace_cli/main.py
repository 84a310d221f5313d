"""Entry point for the ``reqtrace`` command.

Subcommands live in ``reqtrace_cli.commands`` and are imported only when
they are invoked, so ``reqtrace --help`` never loads reqtrace-core.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from reqtrace_cli import __version__
from reqtrace_cli.output import set_no_color

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True

# command name -> "module:attribute"
LAZY_COMMANDS = {
    "catalog": "reqtrace_cli.commands.catalog:catalog",
    "run": "reqtrace_cli.commands.run:run",
    "validate": "reqtrace_cli.commands.validate:validate",
}


class LazyGroup(rclick.RichGroup):
    """Rich click group whose subcommands are imported on first lookup.

    Attributes:
        lazy_subcommands: Command name to ``"module:attribute"`` target.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted({*super().list_commands(ctx), *self.lazy_subcommands})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if command is None and cmd_name in self.lazy_subcommands:
            command = self._import_command(cmd_name)
            # Later lookups (help pages, completion) reuse the imported command
            self.add_command(command, cmd_name)
        return command

    def _import_command(self, cmd_name: str) -> click.Command:
        module_name, _, attr = self.lazy_subcommands[cmd_name].partition(":")
        command = getattr(importlib.import_module(module_name), attr)
        if not isinstance(command, click.Command):
            raise TypeError(f"{module_name}:{attr} is not a click command")
        return command


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="reqtrace")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
def cli() -> None:
    """reqtrace - Test orchestration with requirement traceability.

    Runs the suite's test modules one at a time, maps their outcomes onto
    the requirement catalog, and writes coverage reports.

    **Getting Started:**

    - `reqtrace validate` - Check the suite configuration
    - `reqtrace catalog` - List requirements and covering modules
    - `reqtrace run` - Execute the suite and write reports
    """


if __name__ == "__main__":
    cli()
