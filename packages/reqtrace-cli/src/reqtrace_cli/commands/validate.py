"""reqtrace validate command - Check a suite configuration."""

from __future__ import annotations

import click

from reqtrace_cli.errors import EXIT_USER_ERROR, load_suite_config
from reqtrace_cli.output import bullets, error, success


@click.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Suite configuration (YAML/JSON) [default: bundled suite]",
)
def validate(config_path: str | None) -> None:
    """Validate a suite configuration.

    Reports every configuration issue (missing API URL, no enabled
    categories, non-positive thresholds, ...) and every module declaration
    the registry would reject.

    Examples:

        reqtrace validate

        reqtrace validate --config suite.yaml
    """
    from reqtrace_core import (
        ModuleRegistry,
        RegistrationError,
        RequirementCatalog,
        validate_config,
    )

    config = load_suite_config(config_path)
    problems = [str(issue) for issue in validate_config(config)]

    try:
        ModuleRegistry.from_config(config, RequirementCatalog.from_config(config))
    except RegistrationError as e:
        problems.append(f"modules: {e.user_message}")

    source = config_path or "bundled suite"
    if problems:
        error(f"Configuration has {len(problems)} issue(s) ({source}):")
        bullets(problems)
        raise SystemExit(EXIT_USER_ERROR)

    success(
        f"Configuration valid: {len(config.requirements)} requirements, "
        f"{len(config.modules)} modules, {len(config.enabled_categories)} categories enabled"
    )
