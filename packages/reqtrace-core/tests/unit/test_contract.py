"""Unit tests for the test module contract and factory loading.

Run with: pytest packages/reqtrace-core/tests/unit/test_contract.py -v
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from reqtrace_core import contract
from reqtrace_core.contract import ModuleReport
from reqtrace_core.errors import ModuleLoadError
from reqtrace_core.loader import load_factory, resolve_factories
from reqtrace_core.registry import ModuleDescriptor


class TestModuleReport:
    """Tests for ModuleReport parsing."""

    def test_camel_case_report(self) -> None:
        """Reports use camelCase keys."""
        report = ModuleReport.model_validate(
            {
                "passed": True,
                "totalTests": 5,
                "passedTests": 5,
                "failedTests": 0,
                "requirementCoverage": {"2.1": "full"},
                "details": {"endpoint": "getBootstrapData"},
            }
        )

        assert report.total_tests == 5
        assert report.requirement_coverage == {"2.1": "full"}
        assert report.details == {"endpoint": "getBootstrapData"}

    def test_snake_case_report(self) -> None:
        """snake_case keys are accepted."""
        report = ModuleReport.model_validate({"passed": False, "total_tests": 2, "failed_tests": 2})
        assert report.failed_tests == 2

    def test_counts_derived_from_cases(self) -> None:
        """Counts come from the case list when omitted."""
        report = ModuleReport.model_validate(
            {
                "passed": False,
                "tests": [
                    {"name": "sheets exist", "passed": True},
                    {"name": "columns match", "passed": False},
                    {"name": "types valid", "passed": True},
                ],
            }
        )

        assert (report.total_tests, report.passed_tests, report.failed_tests) == (3, 2, 1)

    def test_explicit_counts_win_over_cases(self) -> None:
        """Explicit counts are not overwritten."""
        report = ModuleReport.model_validate(
            {"passed": True, "totalTests": 10, "tests": [{"name": "a", "passed": True}]}
        )
        assert report.total_tests == 10
        assert report.passed_tests == 1

    def test_extra_keys_ignored(self) -> None:
        """Unknown report keys are ignored."""
        report = ModuleReport.model_validate({"passed": True, "summary": "fine"})
        assert report.total_tests == 0

    @pytest.mark.parametrize(
        "payload",
        [
            {"totalTests": 1},
            {"passed": True, "totalTests": -1},
            {"passed": True, "requirementCoverage": ["2.1"]},
        ],
    )
    def test_invalid_reports_rejected(self, payload: dict[str, Any]) -> None:
        """Missing verdicts, negative counts, and malformed coverage are rejected."""
        with pytest.raises(ValidationError):
            ModuleReport.model_validate(payload)


class TestTestModuleProtocol:
    """Tests for the TestModule protocol."""

    def test_runtime_check(self) -> None:
        """Objects with run_all_tests() satisfy the protocol."""

        class Module:
            async def run_all_tests(self) -> dict[str, Any]:
                return {"passed": True}

        assert isinstance(Module(), contract.TestModule)
        assert not isinstance(object(), contract.TestModule)


class TestLoadFactory:
    """Tests for load_factory and resolve_factories."""

    def test_colon_path(self) -> None:
        """'module:attr' paths resolve."""
        assert load_factory("reqtrace_core.contract:ModuleReport") is ModuleReport

    def test_dotted_path(self) -> None:
        """'module.attr' paths resolve."""
        assert load_factory("reqtrace_core.contract.ModuleReport") is ModuleReport

    @pytest.mark.parametrize(
        "path",
        [
            "no_such_package.module:Factory",
            "reqtrace_core.contract:NoSuchFactory",
            "reqtrace_core.config:REQUIREMENT_ID_PATTERN_MISSING",
            "reqtrace_core.config:SUPPORTED_FORMATS",
            "Factory",
        ],
    )
    def test_unresolvable_paths(self, path: str) -> None:
        """Unimportable, missing, or non-callable targets raise ModuleLoadError."""
        with pytest.raises(ModuleLoadError) as exc_info:
            load_factory(path)
        assert exc_info.value.factory_path == path

    @pytest.mark.parametrize(
        ("module_name", "body"),
        [
            ("suite_module_raises_on_import", 'raise RuntimeError("backend unreachable")\n'),
            ("suite_module_bad_syntax", "class Factory(:\n"),
            ("suite_module_name_error", "Factory = undefined_name\n"),
        ],
    )
    def test_module_failing_at_import(
        self,
        module_name: str,
        body: str,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Errors raised while importing the factory module become ModuleLoadError."""
        (tmp_path / f"{module_name}.py").write_text(body)
        monkeypatch.syspath_prepend(str(tmp_path))

        with pytest.raises(ModuleLoadError) as exc_info:
            load_factory(f"{module_name}:Factory")

        assert exc_info.value.factory_path == f"{module_name}:Factory"

    def test_resolve_factories_skips_failures(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Failed paths are logged and left out of the map."""
        descriptors = [
            ModuleDescriptor(
                name="Good", category="good", factory="reqtrace_core.contract:ModuleReport"
            ),
            ModuleDescriptor(name="Bad", category="bad", factory="no_such_package:Factory"),
            ModuleDescriptor(name="None", category="none"),
        ]

        factories = resolve_factories(descriptors)

        assert list(factories) == ["good"]
        assert "module_factory_unavailable" in capsys.readouterr().out
