"""Component analyzer driving one triage run.

Runs the linear flow of a triage run:
issue source → batch classifier → summary → report → writer.

Search failures abort the run. Classification and summary failures are
absorbed into fallback values so a usable report is always produced once
issues have been fetched.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import structlog

from src.component_triage.classifier.agent import IssueClassifier
from src.component_triage.classifier.batch import BatchClassifier
from src.component_triage.classifier.models import (
    AnalyzedIssue,
    ClassificationRequest,
    IssueAnalysis,
    ReportSummary,
    is_critical_item,
    is_high_priority_item,
)
from src.component_triage.config import TriageSettings
from src.component_triage.github.client import GitHubClient
from src.component_triage.github.models import GitHubIssue
from src.component_triage.github.source import IssueSource
from src.component_triage.report.aggregator import (
    FALLBACK_SUMMARY,
    build_report,
    empty_report,
    pair_issues,
)
from src.component_triage.report.models import ComponentAnalysisReport
from src.component_triage.report.writer import ReportWriter, SavedReport


logger = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ComponentAnalyzer:
    """Runs the issue triage flow for one component.

    Accepts all collaborators via constructor injection; use
    ``from_settings`` to wire them from configuration.

    Attributes:
        issue_source: Fetches the component's issues.
        classifier: Single-issue classifier, also used for the summary.
        batch_classifier: Drives the classifier over all fetched issues.
        report_writer: Persists the report artifacts.
        clock: Source of the report's generation timestamp.
    """

    def __init__(
        self,
        issue_source: IssueSource,
        classifier: IssueClassifier,
        batch_classifier: BatchClassifier,
        report_writer: ReportWriter,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.issue_source = issue_source
        self.classifier = classifier
        self.batch_classifier = batch_classifier
        self.report_writer = report_writer
        self.clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: TriageSettings,
        github_client: GitHubClient,
    ) -> "ComponentAnalyzer":
        """Wire all analyzer dependencies from settings.

        Args:
            settings: Validated triage settings.
            github_client: GitHub API client owned by the caller.

        Returns:
            Fully wired ComponentAnalyzer.
        """
        classifier = IssueClassifier(
            api_key=settings.openai_api_key,
            model_name=settings.openai_model,
            base_url=settings.openai_base_url,
        )

        return cls(
            issue_source=IssueSource(
                github_client=github_client,
                repository=settings.repository,
                rate_limit_warning_threshold=settings.rate_limit_warning_threshold,
            ),
            classifier=classifier,
            batch_classifier=BatchClassifier(
                classifier=classifier,
                batch_size=settings.batch_size,
                batch_delay_seconds=settings.batch_delay_seconds,
            ),
            report_writer=ReportWriter(settings.output_dir),
        )

    async def analyze_component(
        self,
        component: str,
        max_issues: int = 50,
        include_closed: bool = False,
        expanded_search: bool = False,
    ) -> ComponentAnalysisReport:
        """Analyze the issues of one component.

        Args:
            component: Name of the component.
            max_issues: Maximum number of issues to analyze.
            include_closed: Include closed issues.
            expanded_search: Use the extended search query set.

        Returns:
            The finished report; empty when no issues match.

        Raises:
            IssueSearchError: If the issues cannot be fetched.
        """
        logger.info("Analyzing component issues", component=component)

        await self.issue_source.check_rate_limit()

        logger.info("Searching for issues", component=component, max_issues=max_issues)
        issues = await self.issue_source.search(
            component,
            max_results=max_issues,
            include_closed=include_closed,
            expanded=expanded_search,
        )

        if not issues:
            logger.warning("No issues found for component", component=component)
            return empty_report(component, self.clock())

        logger.info("Found issues to analyze", count=len(issues))

        analyzed_issues = await self._classify_issues(component, issues)

        logger.info("Generating analysis summary")
        summary = await self._generate_summary(component, analyzed_issues)

        report = build_report(component, analyzed_issues, summary, self.clock())

        return report

    async def _classify_issues(
        self,
        component: str,
        issues: Sequence[GitHubIssue],
    ) -> List[AnalyzedIssue]:
        requests = [ClassificationRequest.from_issue(component, issue) for issue in issues]

        logger.info("Analyzing issues", count=len(requests))
        analyses: List[IssueAnalysis] = await self.batch_classifier.run_batch(requests)

        analyzed_issues = pair_issues(issues, analyses)
        critical_count = sum(1 for analysis in analyses if is_critical_item(analysis))
        high_count = sum(1 for analysis in analyses if is_high_priority_item(analysis))

        logger.info(
            "Analysis complete",
            critical=critical_count,
            high_priority=high_count,
            fallbacks=sum(1 for analysis in analyses if analysis.is_fallback),
        )
        if critical_count > 0:
            logger.warning(
                "Found critical issues that may prevent basic component usage",
                critical=critical_count,
            )

        return analyzed_issues

    async def _generate_summary(
        self,
        component: str,
        analyzed_issues: Sequence[AnalyzedIssue],
    ) -> ReportSummary:
        try:
            return await self.classifier.summarize(component, analyzed_issues)
        except Exception as e:
            logger.warning("Failed to generate summary", error=str(e), error_type=type(e).__name__)
            return FALLBACK_SUMMARY

    def save_report(
        self,
        report: ComponentAnalysisReport,
        output_file: Optional[Union[str, Path]] = None,
    ) -> SavedReport:
        """Persist the Markdown and JSON artifacts of a report.

        Raises:
            ReportWriteError: If either artifact cannot be written.
        """
        try:
            saved = self.report_writer.save(report, markdown_path=output_file)
        except Exception as e:
            logger.error("Failed to save report", error=str(e))
            raise

        logger.info(
            "Reports saved",
            markdown=str(saved.markdown_path),
            json=str(saved.json_path),
        )
        return saved
