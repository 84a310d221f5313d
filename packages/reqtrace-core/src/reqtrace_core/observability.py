"""Structured logging setup for reqtrace.

Every reqtrace module logs through ``structlog.get_logger(__name__)`` and
binds a ``component`` key. Nothing is configured on import; the CLI (or
any CI wrapper embedding the executor) calls ``configure_logging`` once
before running a suite.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def _resolve_level(log_level: str) -> int:
    levels = logging.getLevelNamesMapping()
    try:
        return levels[log_level.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {log_level}") from None


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Route reqtrace events through structlog onto stderr.

    Suite reports may be printed as JSON on stdout, so log lines always
    go to stderr.

    Args:
        log_level: Minimum stdlib level name, case-insensitive.
        json_format: Render one JSON object per event instead of the
            human-readable console format.
        add_timestamp: Prefix events with an ISO-8601 ``timestamp`` key.

    Raises:
        ValueError: If ``log_level`` is not a stdlib level name.

    Example:
        >>> configure_logging(log_level="debug", json_format=False)
    """
    level = _resolve_level(log_level)

    processors: list[Any] = []
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    processors += [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)
