"""Run result models.

Models for module outcomes, requirement coverage, gaps, recommendations,
the traceability matrix, and the per-run summary. All models are frozen:
a run's results are created once and only read afterwards.

Field names are snake_case in Python and camelCase when serialized
(``model_dump(by_alias=True)``), which is the shape of the JSON report.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from reqtrace_core.config import EnvironmentConfig

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    extra="forbid",
    alias_generator=to_camel,
    populate_by_name=True,
)


class ModuleStatus(str, Enum):
    """Outcome of one test module.

    Attributes:
        PASSED: Module ran and reported success
        FAILED: Module ran and reported failure
        ERROR: Module raised, timed out, or returned an invalid report
        SKIPPED: Module did not run (disabled, missing, or cancelled)
    """

    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"
    SKIPPED = "skipped"


class SkipReason(str, Enum):
    """Why a module was skipped."""

    DISABLED = "disabled"
    IMPLEMENTATION_MISSING = "implementation missing"
    CANCELLED = "cancelled"


class ModuleResult(BaseModel):
    """Result of one test module in a run.

    Attributes:
        module: Module name
        category: Module category
        status: Module outcome
        total_tests: Tests the module executed
        passed_tests: Tests that passed
        failed_tests: Tests that failed
        duration_ms: Wall-clock time spent in the module
        requirement_coverage: Coverage level the module reported per requirement
        reason: Skip reason, for skipped modules
        error: Error message, for errored modules
        details: Free-form details the module attached to its report
    """

    model_config = _MODEL_CONFIG

    module: str
    category: str
    status: ModuleStatus
    total_tests: int = Field(default=0, ge=0)
    passed_tests: int = Field(default=0, ge=0)
    failed_tests: int = Field(default=0, ge=0)
    duration_ms: int = Field(default=0, ge=0)
    requirement_coverage: dict[str, str] = Field(default_factory=dict)
    reason: SkipReason | None = None
    error: str | None = None
    details: Any = None

    @property
    def executed(self) -> bool:
        """Whether the module was invoked (anything but skipped)."""
        return self.status != ModuleStatus.SKIPPED

    @property
    def failed(self) -> bool:
        """Whether the module counts as a failure."""
        return self.status in (ModuleStatus.FAILED, ModuleStatus.ERROR)


class CoverageEntry(BaseModel):
    """One module's contribution to one requirement.

    Attributes:
        module: Module name
        status: That module's outcome
        level: Coverage level the module reported ("partial" if it reported none)
    """

    model_config = _MODEL_CONFIG

    module: str
    status: ModuleStatus
    level: str = "partial"


RequirementCoverage = dict[str, list[CoverageEntry]]
"""Requirement ID -> contributions, in execution order."""


class GapKind(str, Enum):
    """Kind of coverage gap."""

    NO_COVERAGE = "no_coverage"
    ALL_FAILING = "all_failing"


class GapSeverity(str, Enum):
    """Severity of a coverage gap."""

    HIGH = "high"
    CRITICAL = "critical"


class Gap(BaseModel):
    """A requirement that is uncovered or only has failing coverage."""

    model_config = _MODEL_CONFIG

    req_id: str
    description: str
    issue_kind: GapKind
    severity: GapSeverity

    @computed_field  # type: ignore[prop-decorator]
    @property
    def issue(self) -> str:
        """Human-readable issue text."""
        if self.issue_kind == GapKind.NO_COVERAGE:
            return "No test coverage"
        return "All tests failed"


class Priority(str, Enum):
    """Recommendation priority, most urgent first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Recommendation(BaseModel):
    """An actionable follow-up derived from a run."""

    model_config = _MODEL_CONFIG

    priority: Priority
    category: str
    issue: str
    action: str
    affected_req_ids: list[str] = Field(default_factory=list)


class TraceabilityStatus(str, Enum):
    """Per-requirement traceability status."""

    PASSING = "passing"
    FAILING = "failing"
    UNCOVERED = "uncovered"


class TraceabilityRecord(BaseModel):
    """Coverage and pass state of one catalog requirement."""

    model_config = _MODEL_CONFIG

    req_id: str
    description: str
    covered: bool
    passing: bool
    contributing_modules: list[str] = Field(default_factory=list)
    status: TraceabilityStatus


class TraceabilityMatrix(BaseModel):
    """One record per catalog requirement, in catalog order.

    Carries no timestamp, so building it twice from the same run gives
    identical output.
    """

    model_config = _MODEL_CONFIG

    total_requirements: int = Field(ge=0)
    covered_requirements: int = Field(ge=0)
    coverage_percentage: int = Field(ge=0, le=100)
    records: list[TraceabilityRecord] = Field(default_factory=list)

    def by_status(self, status: TraceabilityStatus) -> list[TraceabilityRecord]:
        """Records with the given status, in catalog order."""
        return [r for r in self.records if r.status == status]


class RunSummary(BaseModel):
    """Aggregate counts for a run.

    ``passed_modules + failed_modules + skipped_modules == total_modules``;
    errored modules count as failed.
    """

    model_config = _MODEL_CONFIG

    total_modules: int = Field(default=0, ge=0)
    passed_modules: int = Field(default=0, ge=0)
    failed_modules: int = Field(default=0, ge=0)
    skipped_modules: int = Field(default=0, ge=0)
    total_tests: int = Field(default=0, ge=0)
    passed_tests: int = Field(default=0, ge=0)
    failed_tests: int = Field(default=0, ge=0)
    total_duration_ms: int = Field(default=0, ge=0)
    overall_score_percent: int = Field(default=0, ge=0, le=100)


class SuiteRun(BaseModel):
    """Everything one ``execute_all_tests`` call produced.

    Attributes:
        started_at: When the run started
        finished_at: When the run finished
        environment: Environment the modules ran against
        summary: Aggregate counts
        module_results: Results keyed by module category, in registration order
        requirement_coverage: Contributions per requirement, in execution order
        gaps: Coverage gaps over the full catalog
        recommendations: Follow-ups in rule order
        cancelled: Whether the run was cancelled before all modules ran
    """

    model_config = _MODEL_CONFIG

    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    summary: RunSummary = Field(default_factory=RunSummary)
    module_results: dict[str, ModuleResult] = Field(default_factory=dict)
    requirement_coverage: RequirementCoverage = Field(default_factory=dict)
    gaps: list[Gap] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    cancelled: bool = False

    @property
    def passed(self) -> bool:
        """No module failed and no requirement has only failing coverage."""
        return self.summary.failed_modules == 0 and not any(
            g.issue_kind == GapKind.ALL_FAILING for g in self.gaps
        )
