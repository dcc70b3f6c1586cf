"""GitHub issue models for the issue search backend.

These models mirror the subset of the GitHub REST API issue payload the
triage pipeline consumes. Fetched issues are immutable once parsed.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class IssueState(str, Enum):
    """Open/closed state of a GitHub issue."""

    OPEN = "open"
    CLOSED = "closed"


class GitHubUser(BaseModel):
    """Author or assignee of an issue."""

    model_config = ConfigDict(frozen=True)

    login: str
    avatar_url: str = ""


class GitHubLabel(BaseModel):
    """Label attached to an issue."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    color: str = ""
    description: Optional[str] = None


class GitHubIssue(BaseModel):
    """A single issue returned by the GitHub search or issues API.

    Attributes:
        id: Global GitHub identifier of the issue.
        number: Issue number, unique within one fetch batch.
        title: Issue title.
        body: Issue description, None when the reporter left it empty.
        state: Open or closed.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
        html_url: Browser URL of the issue.
        user: The issue author.
        labels: Labels in the order GitHub returns them.
        assignees: Users assigned to the issue.
        comments: Number of comments on the issue.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    number: int
    title: str
    body: Optional[str] = None
    state: IssueState
    created_at: datetime
    updated_at: datetime
    html_url: str
    user: GitHubUser
    labels: list[GitHubLabel] = Field(default_factory=list)
    assignees: list[GitHubUser] = Field(default_factory=list)
    comments: int = 0

    @property
    def label_names(self) -> list[str]:
        """Names of the attached labels, in order."""
        return [label.name for label in self.labels]

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "GitHubIssue":
        """Create a GitHubIssue from a raw GitHub API item.

        Fields the pipeline does not use are dropped.

        Args:
            item: Issue object from the search or issues endpoint.

        Returns:
            GitHubIssue: Parsed issue.

        Raises:
            pydantic.ValidationError: If the item lacks required fields.
        """
        return cls(
            id=item["id"],
            number=item["number"],
            title=item["title"],
            body=item.get("body"),
            state=item["state"],
            created_at=item["created_at"],
            updated_at=item["updated_at"],
            html_url=item["html_url"],
            user={
                "login": item["user"]["login"],
                "avatar_url": item["user"].get("avatar_url", ""),
            },
            labels=[
                {
                    "id": label["id"],
                    "name": label["name"],
                    "color": label.get("color", ""),
                    "description": label.get("description"),
                }
                for label in item.get("labels", [])
            ],
            assignees=[
                {
                    "login": assignee["login"],
                    "avatar_url": assignee.get("avatar_url", ""),
                }
                for assignee in item.get("assignees") or []
            ],
            comments=item.get("comments", 0),
        )


class RateLimit(BaseModel):
    """Remaining request quota reported by ``GET /rate_limit``."""

    limit: int
    remaining: int
    reset: int
    used: Optional[int] = None
