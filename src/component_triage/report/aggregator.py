"""Aggregation of classified issues into a report.

The critical and high priority predicates are asymmetric:
a blocking issue counts as critical whatever its severity level, and is
therefore excluded from the high priority count even at severity "high".
"""

from datetime import datetime
from typing import Sequence

from src.component_triage.classifier.models import (
    AnalyzedIssue,
    IssueAnalysis,
    ReportSummary,
    is_critical_item,
    is_high_priority_item,
)
from src.component_triage.github.models import GitHubIssue
from src.component_triage.report.models import AnalysisStats, ComponentAnalysisReport


FALLBACK_SUMMARY = ReportSummary(
    most_critical_issues=[],
    common_problems=[],
    recommended_actions=["Manual review of issues recommended"],
)


def pair_issues(
    issues: Sequence[GitHubIssue],
    analyses: Sequence[IssueAnalysis],
) -> list[AnalyzedIssue]:
    """Pair issues with their analyses by position.

    Raises:
        ValueError: If the sequences differ in length.
    """
    if len(issues) != len(analyses):
        raise ValueError(
            f"Cannot pair {len(issues)} issues with {len(analyses)} analyses"
        )
    return [
        AnalyzedIssue(github_issue=issue, analysis=analysis)
        for issue, analysis in zip(issues, analyses)
    ]


def build_report(
    component_name: str,
    analyzed_issues: Sequence[AnalyzedIssue],
    summary: ReportSummary,
    analysis_date: datetime,
) -> ComponentAnalysisReport:
    """Count the classified issues and assemble the report.

    Args:
        component_name: Name of the analyzed component.
        analyzed_issues: Issue/analysis pairs in fetch order.
        summary: Component-level rollup.
        analysis_date: Generation timestamp stored in the report.

    Returns:
        The immutable report.
    """
    return ComponentAnalysisReport(
        component_name=component_name,
        analysis_date=analysis_date,
        total_issues=len(analyzed_issues),
        critical_issues=sum(1 for item in analyzed_issues if is_critical_item(item.analysis)),
        high_priority_issues=sum(1 for item in analyzed_issues if is_high_priority_item(item.analysis)),
        issues=tuple(analyzed_issues),
        summary=summary,
    )


def empty_report(component_name: str, analysis_date: datetime) -> ComponentAnalysisReport:
    """Report for a component with no matching issues."""
    return ComponentAnalysisReport(
        component_name=component_name,
        analysis_date=analysis_date,
        total_issues=0,
        critical_issues=0,
        high_priority_issues=0,
        issues=(),
        summary=ReportSummary(
            most_critical_issues=[],
            common_problems=[],
            recommended_actions=[
                f"No issues found for {component_name} component - it appears to be stable!"
            ],
        ),
    )


def compute_stats(report: ComponentAnalysisReport) -> AnalysisStats:
    """Derive percentages and the average confidence from a report."""
    total = report.total_issues
    if total == 0:
        return AnalysisStats()

    avg_confidence = sum(item.analysis.confidence_score for item in report.issues) / total

    return AnalysisStats(
        critical_percentage=round(report.critical_issues / total * 100, 1),
        high_priority_percentage=round(report.high_priority_issues / total * 100, 1),
        avg_confidence=round(avg_confidence, 1),
    )
