"""Unit tests for the command line entry point."""

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.component_triage import cli
from src.component_triage.classifier.models import AnalyzedIssue, IssueAnalysis, SeverityLevel
from src.component_triage.errors import IssueSearchError
from src.component_triage.github.models import GitHubIssue
from src.component_triage.report.aggregator import FALLBACK_SUMMARY, build_report, empty_report
from src.component_triage.report.writer import SavedReport


ANALYSIS_DATE = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)


def _make_critical_report():
    issue = GitHubIssue.from_api({
        "id": 1001,
        "number": 1,
        "title": "Button does not render",
        "state": "open",
        "created_at": "2024-01-15T10:00:00Z",
        "updated_at": "2024-01-16T10:00:00Z",
        "html_url": "https://github.com/shadcn-ui/ui/issues/1",
        "user": {"login": "dev1"},
    })
    analysis = IssueAnalysis(
        issue_id=1,
        is_critical=True,
        severity_level=SeverityLevel.CRITICAL,
        reasoning="Crashes",
        affected_functionality=["rendering"],
        impact_description="Unusable",
        confidence_score=90.0,
    )
    return build_report(
        "button",
        [AnalyzedIssue(github_issue=issue, analysis=analysis)],
        FALLBACK_SUMMARY,
        ANALYSIS_DATE,
    )


def _patch_analyzer(monkeypatch, report=None, error=None):
    analyzer = MagicMock()
    analyzer.analyze_component = AsyncMock(return_value=report, side_effect=error)
    analyzer.save_report = MagicMock(
        return_value=SavedReport(Path("reports/button.md"), Path("reports/button.json"))
    )
    monkeypatch.setattr(cli.ComponentAnalyzer, "from_settings", MagicMock(return_value=analyzer))
    return analyzer


class TestListComponents:
    def test_prints_components(self, capsys):
        assert cli.main(["list-components"]) == 0

        out = capsys.readouterr().out
        assert "button" in out
        assert "dropdown-menu" in out
        assert "Use: component-triage analyze <component-name>" in out

    def test_four_columns(self, capsys):
        cli.main(["list-components"])

        first_row = capsys.readouterr().out.splitlines()[1]
        assert first_row.split() == ["button", "input", "label", "textarea"]
        assert first_row.startswith("button".ljust(20) + "input")


class TestSetup:
    def test_prints_env_template(self, capsys):
        assert cli.main(["setup"]) == 0

        out = capsys.readouterr().out
        assert "OPENAI_API_KEY=your_openai_api_key_here" in out
        assert "GITHUB_TOKEN=" in out


class TestAnalyze:
    def test_missing_api_key_exits_1(self):
        assert cli.main(["analyze", "button"]) == 1

    def test_blank_component_exits_1(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        assert cli.main(["analyze", "   "]) == 1

    def test_rejects_non_positive_max_issues(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["analyze", "button", "--max-issues", "0"])

        assert exc_info.value.code == 2

    def test_successful_run(self, monkeypatch, capsys):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        analyzer = _patch_analyzer(monkeypatch, report=_make_critical_report())

        exit_code = cli.main([
            "analyze", "Button", "--max-issues", "10", "--include-closed", "--output", "out.md",
        ])

        assert exit_code == 0
        analyzer.analyze_component.assert_awaited_once_with(
            "button", max_issues=10, include_closed=True, expanded_search=False,
        )
        analyzer.save_report.assert_called_once()
        assert analyzer.save_report.call_args.args[1] == "out.md"

        out = capsys.readouterr().out
        assert "Critical Issues: 1/1 (100.0%)" in out
        assert "1 critical issues found!" in out

    def test_run_without_critical_issues(self, monkeypatch, capsys):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        _patch_analyzer(monkeypatch, report=empty_report("dialog", ANALYSIS_DATE))

        assert cli.main(["analyze", "dialog"]) == 0

        assert "No critical issues found for dialog component!" in capsys.readouterr().out

    def test_analysis_error_exits_1(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        analyzer = _patch_analyzer(monkeypatch, error=IssueSearchError("Failed to search GitHub issues"))

        assert cli.main(["analyze", "button"]) == 1
        analyzer.save_report.assert_not_called()


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "usage:" in capsys.readouterr().out
