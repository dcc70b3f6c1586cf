"""Persistence of report artifacts.

Writes the Markdown report and the JSON export of one analysis run under
the configured output directory, creating directories as needed.
"""

import re
from pathlib import Path
from typing import NamedTuple, Optional, Union

import structlog

from src.component_triage.errors import ReportWriteError
from src.component_triage.report.formatting import format_json_report, format_markdown_report
from src.component_triage.report.models import ComponentAnalysisReport


logger = structlog.get_logger()


class SavedReport(NamedTuple):
    """Locations of the written artifacts."""

    markdown_path: Path
    json_path: Path


def safe_component_slug(component_name: str) -> str:
    """Reduce a component name to a single path segment.

    Path separators and other unsafe characters become ``-`` and outer
    dots and dashes are dropped, so the result stays inside the output
    directory.

    >>> safe_component_slug("../../etc/passwd")
    'etc-passwd'
    """
    slug = re.sub(r"[^A-Za-z0-9._-]+", "-", component_name).strip(".-")
    return slug or "component"


def report_filename(component_name: str, report: ComponentAnalysisReport, extension: str) -> str:
    """File name ``<component>-analysis-<YYYY-MM-DD>.<ext>`` for a report."""
    component_name = safe_component_slug(component_name)
    return f"{component_name}-analysis-{report.analysis_date.strftime('%Y-%m-%d')}.{extension}"


def write_text(path: Path, content: str) -> None:
    """Write a UTF-8 text file, creating its parent directory.

    Raises:
        ReportWriteError: If the directory or file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ReportWriteError(f"Failed to write report to {path}: {e}", cause=e)


class ReportWriter:
    """Writes the Markdown and JSON artifacts of a report.

    Attributes:
        output_dir: Directory the artifacts are written to by default.
    """

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def default_path(self, report: ComponentAnalysisReport, extension: str) -> Path:
        return self.output_dir / report_filename(report.component_name, report, extension)

    def save(
        self,
        report: ComponentAnalysisReport,
        markdown_path: Optional[Union[str, Path]] = None,
    ) -> SavedReport:
        """Write both artifacts of a report.

        Args:
            report: The report to persist.
            markdown_path: Destination of the Markdown report, overriding
                the default location. The JSON export always goes to the
                output directory.

        Returns:
            The paths that were written.

        Raises:
            ReportWriteError: If either file cannot be written.
        """
        md_path = Path(markdown_path) if markdown_path else self.default_path(report, "md")
        json_path = self.default_path(report, "json")

        write_text(md_path, format_markdown_report(report))
        logger.info("Report saved", format="markdown", path=str(md_path))

        write_text(json_path, format_json_report(report))
        logger.info("Report saved", format="json", path=str(json_path))

        return SavedReport(markdown_path=md_path, json_path=json_path)
