"""Requirement coverage analysis and gap detection.

Covers the two folds over module results:

- ``analyze_coverage``: which modules contributed to each requirement
- ``detect_gaps``: which catalog requirements are uncovered or only failing

Gap detection scans the whole catalog, not just the requirements some
module touched, so requirements owned by disabled categories show up as
gaps instead of disappearing from the report.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from reqtrace_core.catalog import RequirementCatalog
from reqtrace_core.models import (
    CoverageEntry,
    Gap,
    GapKind,
    GapSeverity,
    ModuleResult,
    ModuleStatus,
    RequirementCoverage,
)
from reqtrace_core.registry import ModuleDescriptor

DEFAULT_COVERAGE_LEVEL = "partial"

FAILING_STATUSES = frozenset({ModuleStatus.FAILED, ModuleStatus.ERROR})


def analyze_coverage(
    descriptors: Iterable[ModuleDescriptor],
    results: Mapping[str, ModuleResult],
) -> RequirementCoverage:
    """Fold module results into per-requirement contribution lists.

    Skipped modules contribute nothing. Contributions are appended in
    descriptor order, which is execution order.

    Args:
        descriptors: Modules in registration order.
        results: Module results keyed by category.

    Returns:
        Requirement ID -> contributions. Requirements nobody covered are absent.
    """
    coverage: RequirementCoverage = {}
    for descriptor in descriptors:
        result = results.get(descriptor.category)
        if result is None or not result.executed:
            continue
        for req_id in descriptor.requirement_ids:
            coverage.setdefault(req_id, []).append(
                CoverageEntry(
                    module=descriptor.name,
                    status=result.status,
                    level=result.requirement_coverage.get(req_id, DEFAULT_COVERAGE_LEVEL),
                )
            )
    return coverage


def detect_gaps(catalog: RequirementCatalog, coverage: RequirementCoverage) -> list[Gap]:
    """Find uncovered and all-failing requirements across the full catalog.

    Uncovered requirements are listed first, then all-failing ones; each
    group keeps catalog order.

    Args:
        catalog: The full requirement catalog.
        coverage: Output of ``analyze_coverage``.

    Returns:
        Gaps for the current run.
    """
    uncovered: list[Gap] = []
    failing: list[Gap] = []

    for req_id, description in catalog.items():
        entries = coverage.get(req_id, [])
        if not entries:
            uncovered.append(
                Gap(
                    req_id=req_id,
                    description=description,
                    issue_kind=GapKind.NO_COVERAGE,
                    severity=GapSeverity.HIGH,
                )
            )
        elif all(e.status in FAILING_STATUSES for e in entries):
            failing.append(
                Gap(
                    req_id=req_id,
                    description=description,
                    issue_kind=GapKind.ALL_FAILING,
                    severity=GapSeverity.CRITICAL,
                )
            )

    return uncovered + failing
