"""Issue source for a named UI component.

Builds GitHub search queries scoped to the component library repository,
filters out pull requests and duplicates, and caps the result set.
"""

import re
from typing import List, Optional

import structlog
from pydantic import ValidationError

from src.component_triage.errors import IssueSearchError
from src.component_triage.github.client import GitHubAPIError, GitHubClient
from src.component_triage.github.models import GitHubIssue, RateLimit


logger = structlog.get_logger()


def to_kebab_case(value: str) -> str:
    """Convert a component name to kebab-case.

    >>> to_kebab_case("DropdownMenu")
    'dropdown-menu'
    """
    value = re.sub(r"([a-z])([A-Z])", r"\1-\2", value)
    value = re.sub(r"[\s_]+", "-", value)
    return value.lower()


def build_search_queries(
    repository: str,
    component_name: str,
    include_closed: bool = False,
    expanded: bool = False,
) -> List[str]:
    """Build the search queries used to find issues for a component.

    Args:
        repository: Repository scope in ``owner/name`` form.
        component_name: Name of the component.
        include_closed: Search closed issues as well as open ones.
        expanded: Add phrase, label and variant queries to the base query.

    Returns:
        Queries in the order they should be run.
    """
    base_query = f"repo:{repository} is:issue"
    if not include_closed:
        base_query += " state:open"

    if not expanded:
        return [f"{base_query} {component_name}"]

    kebab = to_kebab_case(component_name)
    queries = [
        f'{base_query} "{component_name}" in:title',
        f'{base_query} "{component_name}" in:body',
        f'{base_query} "{kebab}" in:title',
        f'{base_query} "{kebab}" in:body',
        f'{base_query} "{component_name} component"',
        f'{base_query} "{component_name}Component"',
        f'{base_query} "{component_name}" label:bug',
        f'{base_query} "{component_name}" "not working"',
        f'{base_query} "{component_name}" "broken"',
        f'{base_query} "{component_name}" "issue"',
        f'{base_query} "{component_name}" "slow"',
        f'{base_query} "{component_name}" "performance"',
        f'{base_query} "{component_name}" "accessibility"',
        f'{base_query} "{component_name}" "a11y"',
    ]

    # kebab-case matches the plain name for single-word components
    return list(dict.fromkeys(queries))


class IssueSource:
    """Fetches deduplicated issues for a component from one repository.

    Attributes:
        github_client: Client used for the search and rate limit endpoints.
        repository: Repository scope in ``owner/name`` form.
        rate_limit_warning_threshold: Remaining quota below which a warning is logged.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        repository: str,
        rate_limit_warning_threshold: int = 10,
    ):
        self.github_client = github_client
        self.repository = repository
        self.rate_limit_warning_threshold = rate_limit_warning_threshold

    async def check_rate_limit(self) -> Optional[RateLimit]:
        """Log the remaining search quota, warning when it runs low.

        Never raises; the quota is informational only.

        Returns:
            The quota, or None if it could not be read.
        """
        try:
            rate_limit = await self.github_client.get_rate_limit()
        except GitHubAPIError as e:
            logger.warning("Could not read GitHub rate limit", error=str(e))
            return None

        logger.debug(
            "GitHub API rate limit",
            remaining=rate_limit.remaining,
            limit=rate_limit.limit,
        )
        if rate_limit.remaining < self.rate_limit_warning_threshold:
            logger.warning(
                "GitHub API rate limit is low. Consider using a GitHub token.",
                remaining=rate_limit.remaining,
                limit=rate_limit.limit,
            )
        return rate_limit

    async def search(
        self,
        component_name: str,
        max_results: int = 50,
        include_closed: bool = False,
        expanded: bool = False,
    ) -> List[GitHubIssue]:
        """Search for issues related to a component.

        Pull requests are excluded and each issue number is returned once,
        in the order the search backend ranked it first.

        Args:
            component_name: Name of the component to search for.
            max_results: Maximum number of issues to return.
            include_closed: Include closed issues.
            expanded: Run the extended query set instead of a single query.

        Returns:
            At most ``max_results`` issues.

        Raises:
            IssueSearchError: If the search backend cannot be queried or
                returns malformed items.
        """
        queries = build_search_queries(
            self.repository,
            component_name,
            include_closed=include_closed,
            expanded=expanded,
        )

        issues: List[GitHubIssue] = []
        seen_numbers: set[int] = set()

        for query in queries:
            logger.info("Searching with query", query=query)

            try:
                items = await self.github_client.search_issues(
                    query,
                    per_page=min(max_results, 100),
                )
            except GitHubAPIError as e:
                raise IssueSearchError(f"Failed to search GitHub issues: {e.message}", cause=e)

            for item in items:
                if not isinstance(item, dict):
                    raise IssueSearchError(
                        f"Malformed issue in search results: expected an object, got {type(item).__name__}"
                    )
                if "pull_request" in item or item.get("number") in seen_numbers:
                    continue
                try:
                    issue = GitHubIssue.from_api(item)
                except (KeyError, TypeError, ValidationError) as e:
                    raise IssueSearchError(f"Malformed issue in search results: {e}", cause=e)
                seen_numbers.add(issue.number)
                issues.append(issue)

            if len(issues) >= max_results:
                break

        logger.debug(
            "Retrieved issues from GitHub",
            count=min(len(issues), max_results),
        )
        return issues[:max_results]
