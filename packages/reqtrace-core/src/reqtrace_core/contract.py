"""Test module contract.

Every test module plugged into a suite exposes one coroutine,
``run_all_tests()``, returning a report with pass/fail counts and the
coverage level it claims for each requirement. Modules are created by
factories that receive the suite environment, one fresh instance per run.

Reports may be returned as ``ModuleReport`` instances or as plain mappings
using either camelCase (``totalTests``) or snake_case keys. Modules that
only list individual cases (``tests: [{name, passed}]``) get their counts
derived from that list.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from reqtrace_core.config import EnvironmentConfig


class CaseOutcome(BaseModel):
    """A single test case inside a module report."""

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = ""
    passed: bool


class ModuleReport(BaseModel):
    """What a test module returns from ``run_all_tests()``.

    Attributes:
        passed: Overall module verdict
        total_tests: Tests executed
        passed_tests: Tests passed
        failed_tests: Tests failed
        requirement_coverage: Coverage level claimed per requirement ("full", "partial", ...)
        details: Anything else the module wants to attach to the report
        tests: Optional per-case outcomes, used when counts are omitted

    Example:
        >>> cases = [{"name": "a", "passed": True}, {"name": "b", "passed": False}]
        >>> ModuleReport.model_validate({"passed": False, "tests": cases}).failed_tests
        1
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    passed: bool
    total_tests: int = Field(default=0, ge=0)
    passed_tests: int = Field(default=0, ge=0)
    failed_tests: int = Field(default=0, ge=0)
    requirement_coverage: dict[str, str] = Field(default_factory=dict)
    details: Any = None
    tests: list[CaseOutcome] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _derive_counts(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cases = data.get("tests")
        if not isinstance(cases, list):
            return data

        data = dict(data)
        outcomes = [bool(c.get("passed")) if isinstance(c, dict) else False for c in cases]
        derived = {
            ("totalTests", "total_tests"): len(outcomes),
            ("passedTests", "passed_tests"): sum(outcomes),
            ("failedTests", "failed_tests"): len(outcomes) - sum(outcomes),
        }
        for (camel, snake), value in derived.items():
            if not data.get(camel) and not data.get(snake):
                data[camel] = value
        return data


@runtime_checkable
class TestModule(Protocol):
    """Interface every test module implements."""

    async def run_all_tests(self) -> ModuleReport | dict[str, Any]:
        """Run the module's tests and report the outcome."""
        ...


TestModuleFactory = Callable[[EnvironmentConfig], TestModule]
"""Creates a fresh module instance for the given environment."""
