"""Report formatting as Markdown, JSON and console text.

Every function here is a pure function of the report: the only timestamp
rendered is the report's stored ``analysis_date``.
"""

import json
from datetime import datetime
from typing import Callable, Sequence

from src.component_triage.classifier.models import (
    AnalyzedIssue,
    SeverityLevel,
    is_critical_item,
    is_high_priority_item,
)
from src.component_triage.report.models import ComponentAnalysisReport


CONFIDENCE_BUCKETS = (
    ("High (80-100%)", 80),
    ("Medium (60-79%)", 60),
    ("Low (40-59%)", 40),
    ("Very Low (0-39%)", 0),
)

REPORT_FOOTER = "*This report was generated automatically using GitHub API and LLM analysis.*"


def _format_score(score: float) -> str:
    return f"{score:g}"


def _format_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


def confidence_distribution(issues: Sequence[AnalyzedIssue]) -> dict[str, int]:
    """Count issues per confidence bucket, in bucket order."""
    distribution = {label: 0 for label, _ in CONFIDENCE_BUCKETS}
    for item in issues:
        score = item.analysis.confidence_score
        for label, lower_bound in CONFIDENCE_BUCKETS:
            if score >= lower_bound:
                distribution[label] += 1
                break
    return distribution


def format_issue_section(item: AnalyzedIssue, index: int, emoji: str, compact: bool = False) -> str:
    """Format one issue as a Markdown section.

    Args:
        item: The issue and its analysis.
        index: 1-based position within its severity section.
        emoji: Marker shown before the title.
        compact: Render only severity, confidence and reasoning.

    Returns:
        Markdown text ending with a horizontal rule.
    """
    issue = item.github_issue
    analysis = item.analysis
    severity = analysis.severity_level.value.upper()
    confidence = _format_score(analysis.confidence_score)

    lines = [f"### {emoji} {index}. [{issue.title}]({issue.html_url})", ""]

    if compact:
        lines += [
            f"**Severity:** {severity} | **Confidence:** {confidence}%",
            "",
            analysis.reasoning,
            "",
        ]
    else:
        lines += [
            f"**Issue #{issue.number}** | **Severity:** {severity} | **Confidence:** {confidence}%",
            "",
        ]

        if issue.labels:
            labels = ", ".join(f"`{name}`" for name in issue.label_names)
            lines += [f"**Labels:** {labels}", ""]

        lines += [
            f"**Why this is {analysis.severity_level.value} priority:**",
            analysis.reasoning,
            "",
        ]

        if analysis.affected_functionality:
            lines.append("**Affected Functionality:**")
            lines += [f"- {feature}" for feature in analysis.affected_functionality]
            lines.append("")

        lines += [
            f"**Impact:** {analysis.impact_description}",
            "",
            f"**Created:** {_format_date(issue.created_at)}",
            f"**Updated:** {_format_date(issue.updated_at)}",
            f"**Comments:** {issue.comments}",
            f"**State:** {issue.state.value}",
            "",
        ]

    lines += ["---", "", ""]
    return "\n".join(lines)


def _expanded_section(
    title: str,
    intro: str,
    items: Sequence[AnalyzedIssue],
    emoji: str,
) -> str:
    parts = [f"## {title}\n\n", f"{intro}\n\n"]
    parts += [format_issue_section(item, i, emoji) for i, item in enumerate(items, start=1)]
    return "".join(parts)


def _collapsed_section(
    title: str,
    label: str,
    items: Sequence[AnalyzedIssue],
    emoji: str,
) -> str:
    parts = [
        f"## {title}\n\n",
        "<details>\n",
        f"<summary>Click to expand {label} issues ({len(items)} issues)</summary>\n\n",
    ]
    parts += [
        format_issue_section(item, i, emoji, compact=True)
        for i, item in enumerate(items, start=1)
    ]
    parts.append("</details>\n\n")
    return "".join(parts)


def _bullet_block(heading: str, entries: Sequence[str]) -> str:
    if not entries:
        return ""
    return f"### {heading}\n" + "".join(f"- {entry}\n" for entry in entries) + "\n"


def _in_tier(item: AnalyzedIssue, level: SeverityLevel) -> bool:
    # blocking issues are listed under critical only
    return item.analysis.severity_level == level and not item.analysis.is_critical


def _select(
    issues: Sequence[AnalyzedIssue],
    predicate: Callable[[AnalyzedIssue], bool],
) -> list[AnalyzedIssue]:
    return [item for item in issues if predicate(item)]


def format_markdown_report(report: ComponentAnalysisReport) -> str:
    """Render the long-form Markdown report.

    Critical and high priority issues are shown expanded; medium and low
    priority issues are collapsed into ``<details>`` blocks. Sections
    without issues are omitted.

    Args:
        report: The report to render.

    Returns:
        The Markdown document.
    """
    issues = report.issues
    critical = _select(issues, lambda item: is_critical_item(item.analysis))
    high = _select(issues, lambda item: is_high_priority_item(item.analysis))
    medium = _select(issues, lambda item: _in_tier(item, SeverityLevel.MEDIUM))
    low = _select(issues, lambda item: _in_tier(item, SeverityLevel.LOW))

    parts = [
        f"# {report.component_name} Component Analysis Report\n\n",
        f"**Generated on:** {_format_date(report.analysis_date)}\n\n",
        "## 📊 Summary\n\n",
        f"- **Total Issues Analyzed:** {report.total_issues}\n",
        f"- **Critical Issues:** {report.critical_issues} 🔴\n",
        f"- **High Priority Issues:** {report.high_priority_issues} 🟠\n",
        f"- **Medium/Low Priority Issues:** {report.medium_low_issues} 🟡\n\n",
    ]

    if critical:
        parts.append(_expanded_section(
            "🚨 Critical Issues",
            "These issues prevent basic component usage or cause severe problems:",
            critical,
            "🔴",
        ))

    if high:
        parts.append(_expanded_section(
            "⚠️ High Priority Issues",
            "These issues significantly impact functionality but don't prevent basic usage:",
            high,
            "🟠",
        ))

    if medium:
        parts.append(_collapsed_section("📋 Medium Priority Issues", "medium priority", medium, "🟡"))

    if low:
        parts.append(_collapsed_section("📝 Low Priority Issues", "low priority", low, "🟢"))

    summary = report.summary
    parts.append("## 🔍 Analysis Summary\n\n")
    parts.append(_bullet_block("Most Critical Issues", summary.most_critical_issues))
    parts.append(_bullet_block("Common Problems Identified", summary.common_problems))
    parts.append(_bullet_block("Recommended Actions", summary.recommended_actions))

    parts.append("## 📈 Analysis Confidence\n\n")
    if issues:
        avg_confidence = sum(item.analysis.confidence_score for item in issues) / len(issues)
        parts.append(f"**Average Confidence Score:** {avg_confidence:.1f}%\n\n")
        parts.append("**Confidence Distribution:**\n")
        parts += [
            f"- {label}: {count} issues\n"
            for label, count in confidence_distribution(issues).items()
        ]
        parts.append("\n")
    else:
        parts.append("No issues were analyzed.\n\n")

    parts += [
        "---\n\n",
        f"{REPORT_FOOTER}\n",
        f"*Last updated: {report.analysis_date.isoformat()}*\n",
    ]

    return "".join(parts)


def format_json_report(report: ComponentAnalysisReport) -> str:
    """Serialize the complete report as indented JSON."""
    return json.dumps(report.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"


def format_console_summary(report: ComponentAnalysisReport) -> str:
    """Short multi-line summary for terminal output."""
    lines = [
        "",
        f"📊 Analysis Summary for {report.component_name}:",
        f"   Total Issues: {report.total_issues}",
        f"   🔴 Critical: {report.critical_issues}",
        f"   🟠 High Priority: {report.high_priority_issues}",
        f"   🟡 Medium/Low: {report.medium_low_issues}",
    ]

    if report.critical_issues > 0:
        lines += [
            "",
            f"⚠️  WARNING: {report.critical_issues} critical issues found that may "
            "prevent basic component usage!",
        ]

    return "\n".join(lines) + "\n"
