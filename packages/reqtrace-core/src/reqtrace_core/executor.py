"""Suite executor.

Public entry point tying the pieces together:

    initialize(config) -> execute_all_tests() -> generate_requirement_traceability_matrix()
                                              -> export_results(formats)

The executor keeps only configuration, catalog, registry, and module
factories between runs. Each ``execute_all_tests`` call builds a fresh
``SuiteRun``; the most recent one is kept so the matrix and exports can be
produced without passing it around.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from reqtrace_core.catalog import RequirementCatalog
from reqtrace_core.config import SuiteConfig, validate_config
from reqtrace_core.coordinator import ExecutionCoordinator
from reqtrace_core.coverage import analyze_coverage, detect_gaps
from reqtrace_core.errors import ConfigurationError, RunNotAvailableError
from reqtrace_core.export import export_results
from reqtrace_core.loader import resolve_factories
from reqtrace_core.matrix import build_traceability_matrix
from reqtrace_core.models import SuiteRun, TraceabilityMatrix
from reqtrace_core.recommendations import generate_recommendations
from reqtrace_core.registry import ModuleRegistry

if TYPE_CHECKING:
    from reqtrace_core.contract import TestModuleFactory

logger = structlog.get_logger(__name__)


class SuiteExecutor:
    """Runs a configured suite and produces its reports.

    Factories passed to the constructor take precedence over factory import
    paths declared in the configuration.

    Example:
        >>> executor = SuiteExecutor(factories={"apiTesting": ApiTestingModule})
        >>> executor.initialize(default_config())
        >>> run = await executor.execute_all_tests()
        >>> matrix = executor.generate_requirement_traceability_matrix()
        >>> reports = executor.export_results(["json", "csv"])
    """

    def __init__(self, factories: Mapping[str, TestModuleFactory] | None = None) -> None:
        self._explicit_factories: dict[str, TestModuleFactory] = dict(factories or {})
        self.config: SuiteConfig | None = None
        self.catalog: RequirementCatalog | None = None
        self.registry: ModuleRegistry | None = None
        self.factories: dict[str, TestModuleFactory] = {}
        self.last_run: SuiteRun | None = None
        self._log = logger.bind(component="suite_executor")

    def initialize(self, config: SuiteConfig) -> None:
        """Validate the configuration and register its modules.

        Raises:
            ConfigurationError: If the configuration has validation issues.
            RegistrationError: If a module declaration is invalid.
        """
        issues = validate_config(config)
        if issues:
            raise ConfigurationError(
                f"Suite configuration has {len(issues)} issue(s)",
                issues=[str(i) for i in issues],
                internal_details="; ".join(str(i) for i in issues),
            )

        catalog = RequirementCatalog.from_config(config)
        registry = ModuleRegistry.from_config(config, catalog)
        factories = resolve_factories(registry.list_modules())
        factories.update(self._explicit_factories)

        self.config = config
        self.catalog = catalog
        self.registry = registry
        self.factories = factories
        self.last_run = None

        self._log.info(
            "executor_initialized",
            modules=len(registry),
            enabled=len(registry.list_modules(enabled_only=True)),
            implementations=len(factories),
            requirements=len(catalog),
        )

    async def execute_all_tests(self, *, cancel_event: asyncio.Event | None = None) -> SuiteRun:
        """Run every registered module and analyze the results.

        Args:
            cancel_event: Checked between modules; once set, remaining
                modules are recorded as skipped (cancelled).

        Returns:
            The completed run.

        Raises:
            RunNotAvailableError: If ``initialize`` has not been called.
        """
        config, catalog, registry = self._require_initialized()
        started_at = datetime.now(UTC)
        coordinator = ExecutionCoordinator(
            registry,
            self.factories,
            config.environment,
            module_timeout_seconds=config.execution.module_timeout_seconds,
        )
        descriptors = registry.list_modules()

        # Module events logged during the run carry its start time
        with structlog.contextvars.bound_contextvars(run_started_at=started_at.isoformat()):
            self._log.info("run_started", modules=len(registry))
            summary, results = await coordinator.execute_all(
                descriptors, cancel_event=cancel_event
            )

        coverage = analyze_coverage(descriptors, results)
        gaps = detect_gaps(catalog, coverage)
        recommendations = generate_recommendations(
            summary,
            gaps,
            success_rate_threshold=config.thresholds.success_rate_percent,
            slow_suite_threshold_ms=config.execution.slow_suite_threshold_ms,
        )

        run = SuiteRun(
            started_at=started_at,
            finished_at=datetime.now(UTC),
            environment=config.environment,
            summary=summary,
            module_results=results,
            requirement_coverage=coverage,
            gaps=gaps,
            recommendations=recommendations,
            cancelled=cancel_event is not None and cancel_event.is_set(),
        )
        self.last_run = run

        self._log.info(
            "run_completed",
            overall_score_percent=summary.overall_score_percent,
            failed_modules=summary.failed_modules,
            gaps=len(gaps),
            recommendations=len(recommendations),
            cancelled=run.cancelled,
        )
        return run

    def generate_requirement_traceability_matrix(
        self,
        run: SuiteRun | None = None,
    ) -> TraceabilityMatrix:
        """Build the traceability matrix for a run (default: the last run).

        Raises:
            RunNotAvailableError: If no run is available.
        """
        _, catalog, _ = self._require_initialized()
        run = self._require_run(run)
        return build_traceability_matrix(catalog, run.requirement_coverage)

    def export_results(
        self,
        formats: Iterable[str] | None = None,
        run: SuiteRun | None = None,
    ) -> dict[str, str]:
        """Export a run (default: the last run).

        Args:
            formats: Any of "json", "csv"; defaults to the configured formats.
            run: Run to export.

        Returns:
            Format -> serialized document.

        Raises:
            RunNotAvailableError: If no run is available.
            ExportError: On an unsupported format or serialization failure.
        """
        config, _, _ = self._require_initialized()
        run = self._require_run(run)
        matrix = self.generate_requirement_traceability_matrix(run)
        return export_results(
            run,
            matrix,
            formats if formats is not None else config.reporting.formats,
            include_matrix_in_json=config.reporting.include_requirement_traceability,
        )

    def _require_initialized(self) -> tuple[SuiteConfig, RequirementCatalog, ModuleRegistry]:
        if self.config is None or self.catalog is None or self.registry is None:
            raise RunNotAvailableError("Executor is not initialized; call initialize() first")
        return self.config, self.catalog, self.registry

    def _require_run(self, run: SuiteRun | None) -> SuiteRun:
        run = run or self.last_run
        if run is None:
            raise RunNotAvailableError("No completed run; call execute_all_tests() first")
        return run
