"""Shared pytest fixtures for reqtrace-core tests.

This module provides the structlog setup, a small four-requirement suite,
and fake test modules used across unit and integration tests.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Callable
from typing import Any

import pytest
import structlog

from reqtrace_core.catalog import RequirementCatalog
from reqtrace_core.config import EnvironmentConfig, SuiteConfig, load_config
from reqtrace_core.registry import ModuleRegistry


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    This fixture ensures structlog outputs to stdout so that capsys
    can capture the output in tests.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


class FakeModule:
    """Test module returning a canned report, raising, or hanging."""

    def __init__(
        self,
        env: EnvironmentConfig,
        *,
        report: Any = None,
        raises: BaseException | None = None,
        delay: float = 0.0,
        calls: list[str] | None = None,
        name: str = "",
    ) -> None:
        self.env = env
        self.report = report
        self.raises = raises
        self.delay = delay
        self.calls = calls
        self.name = name

    async def run_all_tests(self) -> Any:
        if self.calls is not None:
            self.calls.append(self.name)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raises is not None:
            raise self.raises
        return self.report


ModuleFactoryBuilder = Callable[..., Callable[[EnvironmentConfig], FakeModule]]


@pytest.fixture
def make_module() -> ModuleFactoryBuilder:
    """Factory fixture building module factories around FakeModule.

    Returns:
        Function taking FakeModule keyword arguments and returning a factory.
    """

    def _make(**kwargs: Any) -> Callable[[EnvironmentConfig], FakeModule]:
        def factory(env: EnvironmentConfig) -> FakeModule:
            return FakeModule(env, **kwargs)

        return factory

    return _make


def passing_report(total: int = 1, **coverage: str) -> dict[str, Any]:
    return {
        "passed": True,
        "totalTests": total,
        "passedTests": total,
        "failedTests": 0,
        "requirementCoverage": coverage,
    }


def failing_report(total: int = 1, passed: int = 0) -> dict[str, Any]:
    return {
        "passed": False,
        "totalTests": total,
        "passedTests": passed,
        "failedTests": total - passed,
        "requirementCoverage": {},
    }


@pytest.fixture
def reports() -> Any:
    """Return the canned report builders (``reports.passing``, ``reports.failing``)."""

    class _Reports:
        passing = staticmethod(passing_report)
        failing = staticmethod(failing_report)

    return _Reports


@pytest.fixture
def small_suite_data() -> dict[str, Any]:
    """Return a minimal suite: four requirements, two enabled modules.

    Module One covers A.1 and A.2, Module Two covers B.1, and nothing
    covers B.2.
    """
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
def small_config(small_suite_data: dict[str, Any]) -> SuiteConfig:
    """Return the minimal suite as a SuiteConfig."""
    return load_config(small_suite_data)


@pytest.fixture
def small_catalog(small_config: SuiteConfig) -> RequirementCatalog:
    """Return the catalog of the minimal suite."""
    return RequirementCatalog.from_config(small_config)


@pytest.fixture
def small_registry(small_config: SuiteConfig, small_catalog: RequirementCatalog) -> ModuleRegistry:
    """Return the registry of the minimal suite."""
    return ModuleRegistry.from_config(small_config, small_catalog)
