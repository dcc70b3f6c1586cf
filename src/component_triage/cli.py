"""Command line entry point for component triage.

Commands:
- analyze <component>: fetch, classify and report on a component's issues
- list-components: print the known shadcn/ui component names
- setup: print the environment variables the tool reads

Exit code 1 on configuration errors and on any fatal analysis error.
"""

import argparse
import asyncio
import sys
from typing import Optional, Sequence

import structlog

from src.component_triage import __version__
from src.component_triage.analyzer import ComponentAnalyzer
from src.component_triage.config import TriageSettings, load_settings, redact_secret
from src.component_triage.errors import TriageError
from src.component_triage.github.client import GitHubClient
from src.component_triage.logging_config import configure_logging
from src.component_triage.report.aggregator import compute_stats
from src.component_triage.report.formatting import format_console_summary


logger = structlog.get_logger()


KNOWN_COMPONENTS = [
    "button", "input", "label", "textarea",
    "select", "dialog", "alert-dialog", "sheet",
    "popover", "tooltip", "dropdown-menu", "context-menu",
    "navigation-menu", "menubar", "table", "card",
    "avatar", "badge", "separator", "tabs",
    "accordion", "collapsible", "scroll-area", "slider",
    "switch", "checkbox", "radio-group", "form",
    "calendar", "date-picker", "command", "toast",
    "alert", "progress", "skeleton", "aspect-ratio",
    "resizable", "toggle", "toggle-group", "hover-card",
    "breadcrumb", "pagination", "carousel", "drawer",
    "sidebar", "sonner", "chart",
]

SETUP_TEMPLATE = """Create a .env file in your project root with:

# Required
OPENAI_API_KEY=your_openai_api_key_here

# Optional (for higher GitHub API rate limits)
GITHUB_TOKEN=your_github_personal_access_token

# Optional (defaults to gpt-4-turbo-preview)
OPENAI_MODEL=gpt-4-turbo-preview

# Optional (OpenAI-compatible endpoint)
# OPENAI_BASE_URL=http://localhost:8000/v1

# Optional (defaults to ./reports)
OUTPUT_DIR=./reports

GitHub token can be created at: https://github.com/settings/tokens
OpenAI API key can be found at: https://platform.openai.com/api-keys
"""


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="component-triage",
        description="Analyze shadcn/ui component issues and identify critical ones",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    analyze = subparsers.add_parser("analyze", help="Analyze issues for a specific component")
    analyze.add_argument("component", help='Name of the component to analyze (e.g. "button", "dialog")')
    analyze.add_argument("-m", "--max-issues", type=_positive_int, default=50,
                         help="Maximum number of issues to analyze (default: 50)")
    analyze.add_argument("-c", "--include-closed", action="store_true",
                         help="Include closed issues in analysis")
    analyze.add_argument("-e", "--expanded-search", action="store_true",
                         help="Run the extended set of search queries")
    analyze.add_argument("-o", "--output", help="Output file path for the Markdown report")
    analyze.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    analyze.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")

    subparsers.add_parser("list-components", help="List common shadcn/ui components")
    subparsers.add_parser("setup", help="Show the environment variables to configure")

    return parser


def log_configuration(settings: TriageSettings) -> None:
    """Log configuration values with secrets redacted."""
    logger.debug(
        "Triage configuration",
        openai_api_key=redact_secret(settings.openai_api_key),
        openai_model=settings.openai_model,
        openai_base_url=settings.openai_base_url,
        github_token=redact_secret(settings.github_token),
        github_base_url=settings.github_base_url,
        repository=settings.repository,
        batch_size=settings.batch_size,
        batch_delay_seconds=settings.batch_delay_seconds,
        output_dir=settings.output_dir,
    )
    if not settings.github_token:
        logger.warning("GITHUB_TOKEN not provided. API rate limits will be lower.")


async def run_analysis(args: argparse.Namespace, settings: TriageSettings) -> int:
    """Run the analyze command and return the process exit code."""
    component = args.component.strip().lower()

    async with GitHubClient(token=settings.github_token, base_url=settings.github_base_url) as github_client:
        analyzer = ComponentAnalyzer.from_settings(settings, github_client)

        logger.info("Starting analysis", component=component)
        report = await analyzer.analyze_component(
            component,
            max_issues=args.max_issues,
            include_closed=args.include_closed,
            expanded_search=args.expanded_search,
        )

    print(format_console_summary(report))
    saved = analyzer.save_report(report, args.output)

    stats = compute_stats(report)
    print("Final Statistics")
    print(f"  Markdown report: {saved.markdown_path}")
    print(f"  JSON report: {saved.json_path}")
    print(
        f"  Critical Issues: {report.critical_issues}/{report.total_issues} "
        f"({stats.critical_percentage}%)"
    )
    print(
        f"  High Priority Issues: {report.high_priority_issues}/{report.total_issues} "
        f"({stats.high_priority_percentage}%)"
    )
    print(f"  Average Confidence: {stats.avg_confidence}%")

    if report.critical_issues > 0:
        print(f"\n🚨 {report.critical_issues} critical issues found! Review the report for details.")
    else:
        print(f"\n✅ No critical issues found for {component} component!")

    return 0


def analyze_command(args: argparse.Namespace) -> int:
    configure_logging(verbose=args.verbose, json_logs=args.json_logs)

    if not args.component or not args.component.strip():
        logger.error("Component name is required")
        return 1

    try:
        settings = load_settings()
        log_configuration(settings)
        return asyncio.run(run_analysis(args, settings))
    except TriageError as e:
        logger.error("Analysis failed", error=e.message)
        return 1


def list_components_command() -> int:
    print("Common shadcn/ui Components")
    for start in range(0, len(KNOWN_COMPONENTS), 4):
        row = KNOWN_COMPONENTS[start:start + 4]
        print("".join(name.ljust(20) for name in row).rstrip())
    print()
    print("Use: component-triage analyze <component-name>")
    return 0


def setup_command() -> int:
    print("Environment Setup")
    print()
    print(SETUP_TEMPLATE)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "analyze":
        return analyze_command(args)
    if args.command == "list-components":
        return list_components_command()
    if args.command == "setup":
        return setup_command()

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
