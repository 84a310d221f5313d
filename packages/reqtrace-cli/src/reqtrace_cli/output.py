"""Console output helpers for the reqtrace commands.

All command output goes through the module-level ``console`` so that
``--no-color`` (and the NO_COLOR environment variable) apply everywhere.
Run summaries and tables come from ``reqtrace_core.output``; this module
only prints the one-line status messages around them.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from typing import Any

from rich.console import Console


def create_console(no_color: bool = False) -> Console:
    """Build a console; colors are off when asked or when NO_COLOR is set."""
    plain = no_color or "NO_COLOR" in os.environ
    return Console(force_terminal=False if plain else None, no_color=plain)


console = create_console()


def set_no_color(no_color: bool) -> None:
    """Replace the shared console (used by the ``--no-color`` flag)."""
    global console
    console = create_console(no_color=no_color)


def success(message: str, **kwargs: Any) -> None:
    """Print ``✓ message`` in green.

    Example:
        >>> success("Configuration valid")
        ✓ Configuration valid
    """
    console.print(f"[green]✓[/green] {message}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    console.print(f"[red]✗[/red] {message}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    console.print(f"[yellow]⚠[/yellow] {message}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    console.print(message, **kwargs)


def bullets(items: Iterable[str]) -> None:
    """Print one indented ``- item`` line per item, markup disabled.

    Issue texts quote user input (field names, requirement IDs), so they
    are printed literally.
    """
    for item in items:
        console.print(f"  - {item}", markup=False, highlight=False)


def verdict(passed: bool) -> None:
    """Print the closing pass/fail line of a suite run."""
    if passed:
        success("Suite passed")
    else:
        error("Suite failed")
