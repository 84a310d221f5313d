"""reqtrace catalog command - List requirements and covering modules."""

from __future__ import annotations

import click
from rich.table import Table

from reqtrace_cli import output
from reqtrace_cli.errors import load_suite_config


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
    "--category",
    default=None,
    help="Only show requirements owned by this module category",
)
def catalog(config_path: str | None, category: str | None) -> None:
    """List the requirement catalog.

    Shows every requirement with the modules declared to cover it and
    whether any of those modules is enabled.

    Examples:

        reqtrace catalog

        reqtrace catalog --category apiTesting
    """
    config = load_suite_config(config_path)

    owners: dict[str, list[tuple[str, bool]]] = {}
    for spec in config.modules:
        if category is not None and spec.category != category:
            continue
        enabled = config.test_categories.get(spec.category, False)
        for req_id in spec.requirements:
            owners.setdefault(req_id, []).append((spec.name, enabled))

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", width=6)
    table.add_column("Description", min_width=30)
    table.add_column("Modules", min_width=20)
    table.add_column("Enabled", justify="center", width=7)

    shown = 0
    for req_id, description in config.requirements.items():
        modules = owners.get(req_id, [])
        if category is not None and not modules:
            continue
        names = ", ".join(name for name, _ in modules) or "-"
        enabled = "✓" if any(on for _, on in modules) else "-"
        table.add_row(req_id, description, names, enabled)
        shown += 1

    output.console.print(table)
    output.info(f"{shown} of {len(config.requirements)} requirements")
