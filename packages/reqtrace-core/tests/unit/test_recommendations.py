"""Unit tests for rule-based recommendations.

Run with: pytest packages/reqtrace-core/tests/unit/test_recommendations.py -v
"""

from __future__ import annotations

from reqtrace_core.models import Gap, GapKind, GapSeverity, Priority, RunSummary
from reqtrace_core.recommendations import generate_recommendations, sort_by_priority


def _summary(**kwargs: int) -> RunSummary:
    defaults = {
        "total_modules": 2,
        "passed_modules": 2,
        "total_tests": 10,
        "passed_tests": 10,
        "total_duration_ms": 1000,
        "overall_score_percent": 100,
    }
    defaults.update(kwargs)
    return RunSummary(**defaults)


def _failing_gap(req_id: str) -> Gap:
    return Gap(
        req_id=req_id,
        description=f"req {req_id}",
        issue_kind=GapKind.ALL_FAILING,
        severity=GapSeverity.CRITICAL,
    )


def _uncovered_gap(req_id: str) -> Gap:
    return Gap(
        req_id=req_id,
        description=f"req {req_id}",
        issue_kind=GapKind.NO_COVERAGE,
        severity=GapSeverity.HIGH,
    )


class TestGenerateRecommendations:
    """Tests for generate_recommendations."""

    def test_healthy_run_has_none(self) -> None:
        """A clean, fast, fully passing run produces no recommendations."""
        assert generate_recommendations(_summary(), [], success_rate_threshold=95) == []

    def test_uncovered_gaps_alone_do_not_recommend(self) -> None:
        """Only all-failing gaps trigger the coverage rule."""
        recs = generate_recommendations(
            _summary(), [_uncovered_gap("1.1")], success_rate_threshold=95
        )
        assert recs == []

    def test_low_score(self) -> None:
        """Score below threshold triggers Overall Quality (high)."""
        recs = generate_recommendations(
            _summary(overall_score_percent=80, passed_tests=8, failed_tests=2),
            [],
            success_rate_threshold=95,
        )

        assert [(r.category, r.priority) for r in recs] == [("Overall Quality", Priority.HIGH)]
        assert recs[0].issue == "Overall score 80% is below threshold 95%"

    def test_score_equal_to_threshold_is_fine(self) -> None:
        """The threshold itself is acceptable."""
        recs = generate_recommendations(
            _summary(overall_score_percent=95), [], success_rate_threshold=95
        )
        assert recs == []

    def test_module_failures(self) -> None:
        """Failed modules trigger Module Failures (high)."""
        recs = generate_recommendations(
            _summary(passed_modules=1, failed_modules=1), [], success_rate_threshold=95
        )

        assert [r.category for r in recs] == ["Module Failures"]
        assert recs[0].issue == "1 module(s) failed"

    def test_failing_requirements_listed(self) -> None:
        """All-failing gaps trigger Requirement Coverage (critical) with affected IDs."""
        gaps = [_uncovered_gap("1.1"), _failing_gap("2.3"), _failing_gap("2.7")]

        recs = generate_recommendations(_summary(), gaps, success_rate_threshold=95)

        assert len(recs) == 1
        assert recs[0].priority == Priority.CRITICAL
        assert recs[0].category == "Requirement Coverage"
        assert recs[0].affected_req_ids == ["2.3", "2.7"]
        assert recs[0].issue == "2 requirement(s) have no passing tests"

    def test_slow_suite(self) -> None:
        """Runs longer than the threshold trigger Performance (medium)."""
        recs = generate_recommendations(
            _summary(total_duration_ms=300_001), [], success_rate_threshold=95
        )

        assert [(r.category, r.priority) for r in recs] == [("Performance", Priority.MEDIUM)]

    def test_slow_threshold_is_exclusive_and_configurable(self) -> None:
        """Exactly the threshold is not slow; the threshold can be lowered."""
        summary = _summary(total_duration_ms=300_000)
        assert generate_recommendations(summary, [], success_rate_threshold=95) == []

        recs = generate_recommendations(
            summary, [], success_rate_threshold=95, slow_suite_threshold_ms=1000
        )
        assert [r.category for r in recs] == ["Performance"]

    def test_rule_order_preserved(self) -> None:
        """Every matching rule contributes, in declaration order, not priority order."""
        summary = _summary(
            overall_score_percent=50,
            passed_modules=1,
            failed_modules=1,
            total_duration_ms=400_000,
        )

        recs = generate_recommendations(summary, [_failing_gap("B.1")], success_rate_threshold=95)

        assert [r.category for r in recs] == [
            "Overall Quality",
            "Module Failures",
            "Requirement Coverage",
            "Performance",
        ]

    def test_low_score_and_failing_gap(self) -> None:
        """Low score with one all-failing gap yields both entries in rule order."""
        recs = generate_recommendations(
            _summary(overall_score_percent=66), [_failing_gap("B.1")], success_rate_threshold=95
        )

        assert [r.category for r in recs] == ["Overall Quality", "Requirement Coverage"]


class TestSortByPriority:
    """Tests for sort_by_priority."""

    def test_most_urgent_first_stable(self) -> None:
        """Critical first; equal priorities keep rule order."""
        summary = _summary(
            overall_score_percent=50,
            passed_modules=1,
            failed_modules=1,
            total_duration_ms=400_000,
        )
        recs = generate_recommendations(summary, [_failing_gap("B.1")], success_rate_threshold=95)

        ordered = sort_by_priority(recs)

        assert [r.category for r in ordered] == [
            "Requirement Coverage",
            "Overall Quality",
            "Module Failures",
            "Performance",
        ]
        assert [r.category for r in recs][0] == "Overall Quality"
