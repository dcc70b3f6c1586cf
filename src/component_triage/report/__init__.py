"""Aggregation, rendering and persistence of component analysis reports."""

from src.component_triage.report.aggregator import (
    FALLBACK_SUMMARY,
    build_report,
    compute_stats,
    empty_report,
    pair_issues,
)
from src.component_triage.report.formatting import (
    format_console_summary,
    format_json_report,
    format_markdown_report,
)
from src.component_triage.report.models import AnalysisStats, ComponentAnalysisReport
from src.component_triage.report.writer import ReportWriter, SavedReport

__all__ = [
    "AnalysisStats",
    "build_report",
    "ComponentAnalysisReport",
    "compute_stats",
    "empty_report",
    "FALLBACK_SUMMARY",
    "format_console_summary",
    "format_json_report",
    "format_markdown_report",
    "pair_issues",
    "ReportWriter",
    "SavedReport",
]
