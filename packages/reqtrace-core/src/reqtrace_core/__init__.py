"""reqtrace-core: Test orchestration and requirement traceability.

This package provides:
- SuiteConfig: Pydantic schema for the suite configuration
- ModuleRegistry: Validated test module declarations
- ExecutionCoordinator: Sequential, fault-isolated module execution
- Coverage, gap, and recommendation analysis over a run
- Traceability matrix and JSON/CSV report export
- SuiteExecutor: initialize -> execute_all_tests -> matrix -> export
"""

from __future__ import annotations

__version__ = "0.1.0"

from reqtrace_core.catalog import RequirementCatalog
from reqtrace_core.config import (
    ConfigIssue,
    EnvironmentConfig,
    ExecutionConfig,
    ModuleSpec,
    ReportingConfig,
    SuiteConfig,
    ThresholdsConfig,
    default_config,
    load_config,
    validate_config,
)
from reqtrace_core.contract import ModuleReport, TestModule, TestModuleFactory
from reqtrace_core.coordinator import ExecutionCoordinator, summarize
from reqtrace_core.coverage import analyze_coverage, detect_gaps

# Error types
from reqtrace_core.errors import (
    ConfigurationError,
    ExportError,
    ModuleExecutionError,
    ModuleLoadError,
    RegistrationError,
    ReqtraceError,
    RunNotAvailableError,
)
from reqtrace_core.executor import SuiteExecutor
from reqtrace_core.export import export_csv, export_json, export_results
from reqtrace_core.matrix import build_traceability_matrix
from reqtrace_core.models import (
    CoverageEntry,
    Gap,
    GapKind,
    GapSeverity,
    ModuleResult,
    ModuleStatus,
    Priority,
    Recommendation,
    RunSummary,
    SkipReason,
    SuiteRun,
    TraceabilityMatrix,
    TraceabilityRecord,
    TraceabilityStatus,
)
from reqtrace_core.output import format_run_json, format_run_table, print_run_summary
from reqtrace_core.recommendations import generate_recommendations, sort_by_priority
from reqtrace_core.registry import ModuleDescriptor, ModuleRegistry
from reqtrace_core.report_store import ReportStore

__all__ = [
    "__version__",
    # Configuration
    "SuiteConfig",
    "EnvironmentConfig",
    "ThresholdsConfig",
    "ReportingConfig",
    "ExecutionConfig",
    "ModuleSpec",
    "ConfigIssue",
    "load_config",
    "validate_config",
    "default_config",
    # Catalog and registry
    "RequirementCatalog",
    "ModuleDescriptor",
    "ModuleRegistry",
    # Module contract
    "TestModule",
    "TestModuleFactory",
    "ModuleReport",
    # Execution and analysis
    "ExecutionCoordinator",
    "summarize",
    "analyze_coverage",
    "detect_gaps",
    "generate_recommendations",
    "sort_by_priority",
    "build_traceability_matrix",
    "SuiteExecutor",
    # Export
    "export_json",
    "export_csv",
    "export_results",
    "ReportStore",
    # Console output
    "format_run_table",
    "format_run_json",
    "print_run_summary",
    # Models
    "ModuleStatus",
    "SkipReason",
    "ModuleResult",
    "CoverageEntry",
    "GapKind",
    "GapSeverity",
    "Gap",
    "Priority",
    "Recommendation",
    "TraceabilityStatus",
    "TraceabilityRecord",
    "TraceabilityMatrix",
    "RunSummary",
    "SuiteRun",
    # Errors
    "ReqtraceError",
    "ConfigurationError",
    "RegistrationError",
    "ModuleLoadError",
    "ModuleExecutionError",
    "ExportError",
    "RunNotAvailableError",
]
