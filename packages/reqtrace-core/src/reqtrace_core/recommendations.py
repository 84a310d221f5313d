"""Rule-based recommendations.

Rules are evaluated independently, in the order they are declared here,
and every rule that matches contributes one recommendation. The output
keeps rule order; use ``sort_by_priority`` for most-urgent-first display.

Rules:
    1. Overall score below the success-rate threshold (high)
    2. At least one module failed or errored (high)
    3. Requirements with only failing coverage (critical)
    4. Total duration above the slow-suite threshold (medium)
"""

from __future__ import annotations

from reqtrace_core.models import Gap, GapKind, Priority, Recommendation, RunSummary

DEFAULT_SLOW_SUITE_THRESHOLD_MS = 300_000

_PRIORITY_RANK = {
    Priority.CRITICAL: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}


def generate_recommendations(
    summary: RunSummary,
    gaps: list[Gap],
    *,
    success_rate_threshold: float,
    slow_suite_threshold_ms: int = DEFAULT_SLOW_SUITE_THRESHOLD_MS,
) -> list[Recommendation]:
    """Apply every rule to a run summary and its gaps.

    Args:
        summary: Run summary.
        gaps: Gaps detected for the run.
        success_rate_threshold: Minimum acceptable overall score (percent).
        slow_suite_threshold_ms: Duration above which the suite counts as slow.

    Returns:
        Recommendations in rule order.
    """
    recommendations: list[Recommendation] = []

    if summary.overall_score_percent < success_rate_threshold:
        recommendations.append(
            Recommendation(
                priority=Priority.HIGH,
                category="Overall Quality",
                issue=(
                    f"Overall score {summary.overall_score_percent}% is below "
                    f"threshold {success_rate_threshold:g}%"
                ),
                action="Review and fix failing tests to improve overall quality",
            )
        )

    if summary.failed_modules > 0:
        recommendations.append(
            Recommendation(
                priority=Priority.HIGH,
                category="Module Failures",
                issue=f"{summary.failed_modules} module(s) failed",
                action="Investigate and fix failing test modules",
            )
        )

    failing = [g.req_id for g in gaps if g.issue_kind == GapKind.ALL_FAILING]
    if failing:
        recommendations.append(
            Recommendation(
                priority=Priority.CRITICAL,
                category="Requirement Coverage",
                issue=f"{len(failing)} requirement(s) have no passing tests",
                action="Implement or fix tests for critical requirements",
                affected_req_ids=failing,
            )
        )

    if summary.total_duration_ms > slow_suite_threshold_ms:
        recommendations.append(
            Recommendation(
                priority=Priority.MEDIUM,
                category="Performance",
                issue=(
                    f"Test suite took {summary.total_duration_ms / 1000:.2f}s "
                    f"(> {slow_suite_threshold_ms / 1000:g}s)"
                ),
                action="Optimize slow test modules or split the suite",
            )
        )

    return recommendations


def sort_by_priority(recommendations: list[Recommendation]) -> list[Recommendation]:
    """Most urgent first; ties keep rule order."""
    return sorted(recommendations, key=lambda r: _PRIORITY_RANK[r.priority])
