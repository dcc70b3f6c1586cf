"""Unit tests for report aggregation helpers."""

from datetime import datetime, timezone

import pytest

from src.component_triage.classifier.models import IssueAnalysis, SeverityLevel
from src.component_triage.github.models import GitHubIssue
from src.component_triage.report.aggregator import (
    FALLBACK_SUMMARY,
    build_report,
    compute_stats,
    empty_report,
    pair_issues,
)


ANALYSIS_DATE = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _make_issue(number: int) -> GitHubIssue:
    return GitHubIssue.from_api({
        "id": 1000 + number,
        "number": number,
        "title": f"Issue {number}",
        "state": "open",
        "created_at": "2024-01-15T10:00:00Z",
        "updated_at": "2024-01-16T10:00:00Z",
        "html_url": f"https://github.com/shadcn-ui/ui/issues/{number}",
        "user": {"login": "dev1"},
    })


def _make_analysis(
    number: int,
    is_critical: bool = False,
    severity: SeverityLevel = SeverityLevel.LOW,
    confidence: float = 80.0,
) -> IssueAnalysis:
    return IssueAnalysis(
        issue_id=number,
        is_critical=is_critical,
        severity_level=severity,
        reasoning="r",
        affected_functionality=[],
        impact_description="i",
        confidence_score=confidence,
    )


class TestPairIssues:
    def test_pairs_by_position(self):
        issues = [_make_issue(1), _make_issue(2)]
        analyses = [_make_analysis(1), _make_analysis(2)]

        pairs = pair_issues(issues, analyses)

        assert [pair.github_issue.number for pair in pairs] == [1, 2]
        assert [pair.analysis.issue_id for pair in pairs] == [1, 2]

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            pair_issues([_make_issue(1)], [])


class TestBuildReport:
    def test_counts(self):
        pairs = pair_issues(
            [_make_issue(n) for n in range(1, 6)],
            [
                _make_analysis(1, severity=SeverityLevel.CRITICAL),
                _make_analysis(2, is_critical=True, severity=SeverityLevel.MEDIUM),
                _make_analysis(3, is_critical=True, severity=SeverityLevel.HIGH),
                _make_analysis(4, severity=SeverityLevel.HIGH),
                _make_analysis(5, severity=SeverityLevel.LOW),
            ],
        )

        report = build_report("button", pairs, FALLBACK_SUMMARY, ANALYSIS_DATE)

        assert report.total_issues == 5
        assert report.critical_issues == 3
        assert report.high_priority_issues == 1
        assert report.medium_low_issues == 1
        assert report.analysis_date == ANALYSIS_DATE
        assert [item.github_issue.number for item in report.issues] == [1, 2, 3, 4, 5]

    def test_empty_report(self):
        report = empty_report("button", ANALYSIS_DATE)

        assert report.total_issues == 0
        assert report.critical_issues == 0
        assert report.high_priority_issues == 0
        assert report.issues == ()
        assert report.summary.most_critical_issues == []
        assert report.summary.recommended_actions == [
            "No issues found for button component - it appears to be stable!"
        ]

    def test_fallback_summary(self):
        assert FALLBACK_SUMMARY.most_critical_issues == []
        assert FALLBACK_SUMMARY.common_problems == []
        assert FALLBACK_SUMMARY.recommended_actions == ["Manual review of issues recommended"]


class TestComputeStats:
    def test_percentages_and_average(self):
        pairs = pair_issues(
            [_make_issue(n) for n in range(1, 5)],
            [
                _make_analysis(1, is_critical=True, confidence=80),
                _make_analysis(2, severity=SeverityLevel.HIGH, confidence=60),
                _make_analysis(3, confidence=0),
                _make_analysis(4, confidence=100),
            ],
        )

        stats = compute_stats(build_report("button", pairs, FALLBACK_SUMMARY, ANALYSIS_DATE))

        assert stats.critical_percentage == 25.0
        assert stats.high_priority_percentage == 25.0
        assert stats.avg_confidence == 60.0

    def test_rounds_to_one_decimal(self):
        pairs = pair_issues(
            [_make_issue(n) for n in range(1, 4)],
            [_make_analysis(1, is_critical=True), _make_analysis(2), _make_analysis(3)],
        )

        stats = compute_stats(build_report("button", pairs, FALLBACK_SUMMARY, ANALYSIS_DATE))

        assert stats.critical_percentage == 33.3

    def test_empty_report_has_zero_stats(self):
        stats = compute_stats(empty_report("button", ANALYSIS_DATE))

        assert stats.critical_percentage == 0.0
        assert stats.high_priority_percentage == 0.0
        assert stats.avg_confidence == 0.0
