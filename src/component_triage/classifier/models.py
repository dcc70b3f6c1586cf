"""Severity classification models for component issues.

This module defines the data models for LLM-based severity classification:
the four ordered severity levels, the per-issue classification request, the
validated classification result, and the component-level summary returned
by the same backend.

IssueAnalysis is parsed in strict mode. A backend response that is missing
a field, carries an extra field, uses the wrong JSON type, names a severity
outside the enumeration or reports a confidence outside [0, 100] fails
validation instead of being coerced.
"""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from src.component_triage.github.models import GitHubIssue


class SeverityLevel(str, Enum):
    """Severity tiers for component issues, ordered from least to most severe.

    Attributes:
        LOW: Cosmetic issues, enhancements, very specific edge cases.
        MEDIUM: Edge cases, minor performance impact, simple workarounds.
        HIGH: Significant impact that does not prevent basic usage.
        CRITICAL: Prevents the component from rendering or functioning.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ClassificationRequest(BaseModel):
    """Issue fields submitted to the classification backend.

    Attributes:
        component_name: Component the issue is analyzed for.
        issue_title: The issue title.
        issue_body: The issue body, empty when the issue has none.
        issue_labels: Names of the labels attached to the issue.
        issue_url: Browser URL of the issue.
    """

    model_config = ConfigDict(frozen=True)

    component_name: str
    issue_title: str
    issue_body: str = ""
    issue_labels: list[str] = Field(default_factory=list)
    issue_url: str

    @property
    def issue_id(self) -> int:
        """Issue number taken from the last path segment of the URL, or 0."""
        last_segment = self.issue_url.rstrip("/").rsplit("/", 1)[-1]
        return int(last_segment) if last_segment.isdigit() else 0

    @classmethod
    def from_issue(cls, component_name: str, issue: GitHubIssue) -> "ClassificationRequest":
        """Build the request for one fetched issue.

        Args:
            component_name: Component the issue is analyzed for.
            issue: The fetched GitHub issue.

        Returns:
            ClassificationRequest: Request carrying the issue's fields.
        """
        return cls(
            component_name=component_name,
            issue_title=issue.title,
            issue_body=issue.body or "",
            issue_labels=issue.label_names,
            issue_url=issue.html_url,
        )


class IssueAnalysis(BaseModel):
    """Validated severity classification of a single issue.

    Attributes:
        issue_id: Issue number the analysis refers to.
        is_critical: True if the issue blocks basic component usage.
        severity_level: One of low, medium, high, critical.
        reasoning: Explanation of the assessment.
        affected_functionality: Features affected by the issue.
        impact_description: How the issue affects users.
        confidence_score: Confidence in the assessment, 0-100.
    """

    model_config = ConfigDict(strict=True, extra="forbid", frozen=True)

    issue_id: int
    is_critical: bool
    severity_level: SeverityLevel
    reasoning: str
    affected_functionality: list[str]
    impact_description: str
    confidence_score: Annotated[float, Field(ge=0, le=100)]

    # set only by fallback(); never parsed from a backend response
    _fallback: bool = PrivateAttr(default=False)

    @classmethod
    def fallback(cls, issue_id: int, reason: str) -> "IssueAnalysis":
        """Create the analysis substituted when classification fails.

        Args:
            issue_id: Issue number of the failed request.
            reason: Description of the failure, kept in the reasoning text.

        Returns:
            IssueAnalysis: Medium severity, non-blocking, zero confidence.
        """
        analysis = cls(
            issue_id=issue_id,
            is_critical=False,
            severity_level=SeverityLevel.MEDIUM,
            reasoning=f"Failed to analyze issue: {reason}. Manual review required.",
            affected_functionality=["unknown"],
            impact_description="Unable to determine impact due to analysis failure",
            confidence_score=0,
        )
        analysis._fallback = True
        return analysis

    @property
    def is_fallback(self) -> bool:
        """True if this analysis was substituted for a failed classification."""
        return self._fallback


def is_critical_item(analysis: IssueAnalysis) -> bool:
    """Blocking issues count as critical whatever their severity level."""
    return analysis.is_critical or analysis.severity_level == SeverityLevel.CRITICAL


def is_high_priority_item(analysis: IssueAnalysis) -> bool:
    """High severity issues that are not also flagged as blocking."""
    return analysis.severity_level == SeverityLevel.HIGH and not analysis.is_critical


class AnalyzedIssue(BaseModel):
    """A fetched issue paired with its analysis."""

    model_config = ConfigDict(frozen=True)

    github_issue: GitHubIssue
    analysis: IssueAnalysis


class ReportSummary(BaseModel):
    """Component-level rollup of the classified issues.

    Parsed strictly when it comes from the classification backend.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    most_critical_issues: list[str]
    common_problems: list[str]
    recommended_actions: list[str]
