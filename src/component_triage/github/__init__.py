"""GitHub issue search for a component library repository.

Provides an async GitHub API client with rate limiting and retry logic,
issue models, and the IssueSource that turns a component name into a
deduplicated, capped list of issues.
"""

from src.component_triage.github.client import (
    GitHubAPIError,
    GitHubClient,
    RateLimitError,
)
from src.component_triage.github.models import (
    GitHubIssue,
    GitHubLabel,
    GitHubUser,
    IssueState,
    RateLimit,
)
from src.component_triage.github.source import IssueSource, build_search_queries

__all__ = [
    "build_search_queries",
    "GitHubAPIError",
    "GitHubClient",
    "GitHubIssue",
    "GitHubLabel",
    "GitHubUser",
    "IssueSource",
    "IssueState",
    "RateLimit",
    "RateLimitError",
]
