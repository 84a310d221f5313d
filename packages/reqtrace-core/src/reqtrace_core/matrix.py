"""Traceability matrix builder.

Projects a run's coverage map onto the full catalog: one record per
requirement, in catalog order. The projection is pure, so building it
twice for the same run produces identical output.
"""

from __future__ import annotations

from reqtrace_core.catalog import RequirementCatalog
from reqtrace_core.models import (
    ModuleStatus,
    RequirementCoverage,
    TraceabilityMatrix,
    TraceabilityRecord,
    TraceabilityStatus,
)


def build_traceability_matrix(
    catalog: RequirementCatalog,
    coverage: RequirementCoverage,
) -> TraceabilityMatrix:
    """Build the traceability matrix for a run.

    Args:
        catalog: The full requirement catalog.
        coverage: The run's requirement coverage.

    Returns:
        TraceabilityMatrix with one record per catalog requirement.

    Example:
        >>> matrix = build_traceability_matrix(catalog, run.requirement_coverage)
        >>> print(f"Coverage: {matrix.coverage_percentage}%")
    """
    records: list[TraceabilityRecord] = []

    for req_id, description in catalog.items():
        entries = coverage.get(req_id, [])
        covered = bool(entries)
        passing = covered and any(e.status == ModuleStatus.PASSED for e in entries)

        if not covered:
            status = TraceabilityStatus.UNCOVERED
        elif passing:
            status = TraceabilityStatus.PASSING
        else:
            status = TraceabilityStatus.FAILING

        records.append(
            TraceabilityRecord(
                req_id=req_id,
                description=description,
                covered=covered,
                passing=passing,
                contributing_modules=[e.module for e in entries],
                status=status,
            )
        )

    covered_count = sum(1 for r in records if r.covered)
    return TraceabilityMatrix(
        total_requirements=len(records),
        covered_requirements=covered_count,
        coverage_percentage=coverage_percentage(covered_count, len(records)),
        records=records,
    )


def coverage_percentage(covered: int, total: int) -> int:
    """Whole-percent coverage, rounded half up (0 for an empty catalog)."""
    if total <= 0:
        return 0
    return (covered * 200 + total) // (total * 2)
