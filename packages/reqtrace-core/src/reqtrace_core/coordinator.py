"""Execution coordinator.

Runs registered test modules one at a time, in registration order, and
turns each into a ``ModuleResult``. Modules share ambient state (storage,
fixtures, the backend under test), so they never run concurrently.

Every module invocation produces exactly one typed outcome:

- ``Success``: the module returned a valid report
- ``Skipped``: disabled, no implementation registered, or run cancelled
- ``Errored``: the module raised (including cancelling its own work), hit
  the watchdog timeout, or returned an invalid report

A module failure never aborts the run. Only cancellation of the
coordinator task itself propagates. The watchdog covers both coroutine
entry points and blocking ones, which run in a worker thread; a thread
that outlives its watchdog is abandoned, not interrupted.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from reqtrace_core.contract import ModuleReport, TestModuleFactory
from reqtrace_core.errors import ModuleExecutionError
from reqtrace_core.models import ModuleResult, ModuleStatus, RunSummary, SkipReason

if TYPE_CHECKING:
    from reqtrace_core.config import EnvironmentConfig
    from reqtrace_core.registry import ModuleDescriptor, ModuleRegistry

logger = structlog.get_logger(__name__)

DEFAULT_MODULE_TIMEOUT_SECONDS = 300.0


@dataclass(frozen=True)
class Success:
    """Module ran and returned a valid report."""

    report: ModuleReport
    duration_ms: int


@dataclass(frozen=True)
class Skipped:
    """Module was not invoked."""

    reason: SkipReason


@dataclass(frozen=True)
class Errored:
    """Module was invoked and did not produce a usable report."""

    error: ModuleExecutionError
    duration_ms: int


ModuleOutcome = Success | Skipped | Errored


class ExecutionCoordinator:
    """Runs test modules sequentially with fault isolation.

    Attributes:
        registry: Registered module descriptors
        factories: Module factories keyed by category
        environment: Environment handed to every factory
        module_timeout_seconds: Watchdog around each module entry point

    Example:
        >>> coordinator = ExecutionCoordinator(registry, {"apiTesting": ApiModule}, env)
        >>> summary, results = await coordinator.execute_all()
        >>> summary.failed_modules
        0
    """

    def __init__(
        self,
        registry: ModuleRegistry,
        factories: Mapping[str, TestModuleFactory],
        environment: EnvironmentConfig,
        *,
        module_timeout_seconds: float = DEFAULT_MODULE_TIMEOUT_SECONDS,
    ) -> None:
        self.registry = registry
        self.factories = dict(factories)
        self.environment = environment
        self.module_timeout_seconds = module_timeout_seconds
        self._log = logger.bind(component="execution_coordinator")

    async def execute_all(
        self,
        descriptors: list[ModuleDescriptor] | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> tuple[RunSummary, dict[str, ModuleResult]]:
        """Run every module and aggregate the results.

        Args:
            descriptors: Modules to run; defaults to every registered module.
            cancel_event: When set, modules not yet started are recorded
                as skipped (cancelled). Results already collected are kept.

        Returns:
            Run summary and module results keyed by category, in order.
        """
        if descriptors is None:
            descriptors = self.registry.list_modules()

        self._log.info("modules_started", count=len(descriptors))
        results: dict[str, ModuleResult] = {}

        for descriptor in descriptors:
            if cancel_event is not None and cancel_event.is_set():
                outcome: ModuleOutcome = Skipped(SkipReason.CANCELLED)
                self._log.info("module_skipped", module=descriptor.name, reason="cancelled")
            else:
                outcome = await self.run_module(descriptor)
            results[descriptor.category] = self.to_result(descriptor, outcome)

        summary = summarize(results.values())
        self._log.info(
            "modules_completed",
            passed=summary.passed_modules,
            failed=summary.failed_modules,
            skipped=summary.skipped_modules,
            total_duration_ms=summary.total_duration_ms,
        )
        return summary, results

    async def run_module(self, descriptor: ModuleDescriptor) -> ModuleOutcome:
        """Run one module and classify the outcome. Never raises for module faults."""
        log = self._log.bind(module=descriptor.name, category=descriptor.category)

        if not descriptor.enabled:
            log.info("module_skipped", reason="disabled")
            return Skipped(SkipReason.DISABLED)

        factory = self.factories.get(descriptor.category)
        if factory is None:
            log.warning("module_skipped", reason="implementation missing")
            return Skipped(SkipReason.IMPLEMENTATION_MISSING)

        log.info("module_started", timeout_seconds=self.module_timeout_seconds)
        start_time = time.monotonic()

        try:
            raw = await self._invoke(descriptor, factory)
            report = raw if isinstance(raw, ModuleReport) else ModuleReport.model_validate(raw)

        except ModuleExecutionError as e:
            duration_ms = _elapsed_ms(start_time)
            if e.reason == "timeout":
                log.error("module_timeout", duration_ms=duration_ms)
            else:
                log.error("module_error", error=e.user_message, error_type=type(e).__name__)
            return Errored(e, duration_ms)

        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            # The module cancelled its own work; the coordinator was not cancelled
            duration_ms = _elapsed_ms(start_time)
            log.error("module_cancelled", duration_ms=duration_ms)
            return Errored(
                ModuleExecutionError(descriptor.name, "cancelled", reason="cancelled"),
                duration_ms,
            )

        except PydanticValidationError as e:
            duration_ms = _elapsed_ms(start_time)
            log.error("module_invalid_report", error_count=e.error_count())
            return Errored(
                ModuleExecutionError(
                    descriptor.name,
                    "invalid report",
                    reason="invalid_report",
                    internal_details=str(e),
                ),
                duration_ms,
            )

        except Exception as e:
            duration_ms = _elapsed_ms(start_time)
            log.error("module_error", error=str(e), error_type=type(e).__name__)
            return Errored(
                ModuleExecutionError(descriptor.name, str(e) or type(e).__name__),
                duration_ms,
            )

        duration_ms = _elapsed_ms(start_time)
        log.info(
            "module_completed",
            passed=report.passed,
            total_tests=report.total_tests,
            duration_ms=duration_ms,
        )
        return Success(report, duration_ms)

    async def _invoke(self, descriptor: ModuleDescriptor, factory: TestModuleFactory) -> Any:
        instance = factory(self.environment)
        entry = getattr(instance, "run_all_tests", None) or getattr(instance, "run", None)
        if entry is None:
            raise ModuleExecutionError(
                descriptor.name,
                f"Module '{descriptor.name}' has no run_all_tests() entry point",
            )

        try:
            async with asyncio.timeout(self.module_timeout_seconds) as watchdog:
                if inspect.iscoroutinefunction(entry):
                    return await entry()
                # Blocking entry points run in a worker thread so the watchdog can fire
                result = await asyncio.to_thread(entry)
                if inspect.isawaitable(result):
                    result = await result
                return result
        except TimeoutError:
            if not watchdog.expired():
                raise
            raise ModuleExecutionError(descriptor.name, "timeout", reason="timeout") from None

    def to_result(self, descriptor: ModuleDescriptor, outcome: ModuleOutcome) -> ModuleResult:
        """Convert a typed outcome into the module's result record."""
        base: dict[str, Any] = {"module": descriptor.name, "category": descriptor.category}

        match outcome:
            case Success(report=report, duration_ms=duration_ms):
                return ModuleResult(
                    **base,
                    status=ModuleStatus.PASSED if report.passed else ModuleStatus.FAILED,
                    total_tests=report.total_tests,
                    passed_tests=report.passed_tests,
                    failed_tests=report.failed_tests,
                    duration_ms=duration_ms,
                    requirement_coverage=dict(report.requirement_coverage),
                    details=report.details,
                )
            case Skipped(reason=reason):
                return ModuleResult(**base, status=ModuleStatus.SKIPPED, reason=reason)
            case Errored(error=error, duration_ms=duration_ms):
                return ModuleResult(
                    **base,
                    status=ModuleStatus.ERROR,
                    duration_ms=duration_ms,
                    error=error.user_message,
                )


def overall_score(passed_tests: int, total_tests: int) -> int:
    """Test-weighted score, rounded down to a whole percent (0 when nothing ran)."""
    if total_tests <= 0:
        return 0
    return min(100, passed_tests * 100 // total_tests)


def summarize(results: Any) -> RunSummary:
    """Aggregate module results into a ``RunSummary``.

    Args:
        results: Iterable of ModuleResult.
    """
    results = list(results)
    total_tests = sum(r.total_tests for r in results)
    passed_tests = sum(r.passed_tests for r in results)

    return RunSummary(
        total_modules=len(results),
        passed_modules=sum(1 for r in results if r.status == ModuleStatus.PASSED),
        failed_modules=sum(1 for r in results if r.failed),
        skipped_modules=sum(1 for r in results if r.status == ModuleStatus.SKIPPED),
        total_tests=total_tests,
        passed_tests=passed_tests,
        failed_tests=sum(r.failed_tests for r in results),
        total_duration_ms=sum(r.duration_ms for r in results),
        overall_score_percent=overall_score(passed_tests, total_tests),
    )


def _elapsed_ms(start_time: float) -> int:
    return int((time.monotonic() - start_time) * 1000)
