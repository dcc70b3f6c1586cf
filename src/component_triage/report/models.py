"""Report models for a component analysis run.

A ComponentAnalysisReport is built once per run after every issue has been
classified and is immutable afterwards. The Markdown and JSON artifacts are
both derived from it without mutating it.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.component_triage.classifier.models import AnalyzedIssue, ReportSummary


class ComponentAnalysisReport(BaseModel):
    """Result of analyzing every fetched issue of one component.

    Attributes:
        component_name: Name of the analyzed component.
        analysis_date: When the report was generated.
        total_issues: Number of analyzed issues.
        critical_issues: Issues that are blocking or of critical severity.
        high_priority_issues: High severity issues that are not blocking.
        issues: Issue/analysis pairs in fetch order.
        summary: Component-level rollup.
    """

    model_config = ConfigDict(frozen=True)

    component_name: str
    analysis_date: datetime
    total_issues: int = Field(ge=0)
    critical_issues: int = Field(ge=0)
    high_priority_issues: int = Field(ge=0)
    issues: tuple[AnalyzedIssue, ...] = ()
    summary: ReportSummary

    @property
    def medium_low_issues(self) -> int:
        """Issues counted neither as critical nor as high priority."""
        return self.total_issues - self.critical_issues - self.high_priority_issues


class AnalysisStats(BaseModel):
    """Percentages and averages derived from a report, rounded to one decimal."""

    critical_percentage: float = 0.0
    high_priority_percentage: float = 0.0
    avg_confidence: float = 0.0
