"""GitHub API client for issue search.

This module provides an async wrapper around the GitHub REST API for:
- Searching issues with the full-text search endpoint
- Fetching a single issue's details
- Reading the remaining request quota

Includes rate limit detection and retry logic for transient failures.
Anonymous access is supported; a token only raises the request quota.
"""

import asyncio
import random
import time
from typing import Any, Dict, List, Optional

import httpx
import structlog
from pydantic import ValidationError

from src.component_triage.github.models import GitHubIssue, RateLimit


logger = structlog.get_logger()


class GitHubAPIError(Exception):
    """Raised when a GitHub API request fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code from the response.
        response_body: Response body from GitHub API.
        request_url: The URL that was requested.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url
        super().__init__(message)


class RateLimitError(GitHubAPIError):
    """Raised when GitHub API rate limit is exceeded.

    Attributes:
        reset_at: Unix timestamp when the rate limit resets.
        retry_after: Seconds to wait before retrying.
    """

    def __init__(
        self,
        message: str,
        reset_at: Optional[int] = None,
        retry_after: Optional[int] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.reset_at = reset_at
        self.retry_after = retry_after


class GitHubClient:
    """Async GitHub API client with rate limiting and retry logic.

    - Automatic retry with exponential backoff for transient failures
    - Rate limit detection from X-RateLimit-* headers
    - Support for both github.com and GitHub Enterprise Server

    Attributes:
        token: Optional GitHub API token. Requests are anonymous without it.
        base_url: Base URL for GitHub API (default: https://api.github.com).
        max_retries: Maximum number of retry attempts for transient failures.
        base_delay: Base delay in seconds for exponential backoff.
        max_delay: Maximum delay in seconds between retries.
        timeout: Request timeout in seconds.

    Example:
        >>> async with GitHubClient(token="ghp_xxx") as client:
        ...     items = await client.search_issues("repo:shadcn-ui/ui is:issue button")
    """

    # HTTP status codes that should trigger a retry
    RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = "https://api.github.com",
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the GitHub client.

        Args:
            token: GitHub API token for authentication, or None for anonymous access.
            base_url: Base URL for GitHub API.
            max_retries: Maximum number of retry attempts.
            base_delay: Base delay in seconds for exponential backoff.
            max_delay: Maximum delay in seconds between retries.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used to stub the API in tests.
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._default_headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _default_headers(self) -> Dict[str, str]:
        """Build default headers for GitHub API requests."""
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "component-triage/1.0",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _calculate_backoff(self, attempt: int) -> float:
        """Calculate backoff delay with full jitter.

        Args:
            attempt: The current retry attempt (0-indexed).

        Returns:
            Delay in seconds before the next retry.
        """
        exponential_delay = self.base_delay * (2 ** attempt)
        capped_delay = min(exponential_delay, self.max_delay)
        return random.uniform(0, capped_delay)

    def _parse_int_header(self, headers: httpx.Headers, name: str) -> Optional[int]:
        value = headers.get(name)
        if value is not None:
            try:
                return int(value)
            except ValueError:
                pass
        return None

    def _raise_rate_limit(self, response: httpx.Response) -> None:
        """Raise a RateLimitError describing when the quota resets.

        Args:
            response: The rate-limited response from GitHub.

        Raises:
            RateLimitError: Always.
        """
        reset_at = self._parse_int_header(response.headers, "x-ratelimit-reset")

        retry_after = None
        if reset_at is not None:
            retry_after = max(0, reset_at - int(time.time()))

        retry_after_header = self._parse_int_header(response.headers, "retry-after")
        if retry_after_header is not None:
            retry_after = retry_after_header

        logger.warning(
            "GitHub API rate limit exceeded",
            reset_at=reset_at,
            retry_after=retry_after,
            limit=self._parse_int_header(response.headers, "x-ratelimit-limit"),
        )

        raise RateLimitError(
            message="GitHub API rate limit exceeded",
            status_code=response.status_code,
            reset_at=reset_at,
            retry_after=retry_after,
            request_url=str(response.url),
        )

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Make an HTTP request with retry logic.

        Transient failures are retried with exponential backoff and jitter.
        Exhausted rate limits are raised immediately.

        Args:
            method: HTTP method.
            path: API path (e.g., /search/issues).
            params: Optional query string parameters.

        Returns:
            The HTTP response from GitHub.

        Raises:
            GitHubAPIError: If the request fails after all retries.
            RateLimitError: If rate limit is exceeded.
        """
        last_exception: Optional[Exception] = None

        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.request(method=method, url=path, params=params)

                if response.status_code == 403:
                    remaining = self._parse_int_header(response.headers, "x-ratelimit-remaining")
                    if remaining == 0:
                        self._raise_rate_limit(response)

                if response.status_code == 429:
                    self._raise_rate_limit(response)

                if response.status_code in self.RETRYABLE_STATUS_CODES and attempt < self.max_retries:
                    delay = self._calculate_backoff(attempt)
                    logger.warning(
                        "Retryable error from GitHub API",
                        status_code=response.status_code,
                        attempt=attempt + 1,
                        max_retries=self.max_retries,
                        delay=delay,
                        path=path,
                    )
                    await asyncio.sleep(delay)
                    continue

                if response.status_code >= 400:
                    error_body = response.text
                    logger.error(
                        "GitHub API error",
                        status_code=response.status_code,
                        path=path,
                        method=method,
                        response_body=error_body[:500],
                    )
                    raise GitHubAPIError(
                        message=f"GitHub API error: {response.status_code}",
                        status_code=response.status_code,
                        response_body=error_body,
                        request_url=str(response.url),
                    )

                return response

            except GitHubAPIError:
                raise
            except httpx.RequestError as e:
                # TimeoutException is a RequestError subclass
                last_exception = e
                if attempt < self.max_retries:
                    delay = self._calculate_backoff(attempt)
                    logger.warning(
                        "Request error, retrying",
                        error=str(e),
                        error_type=type(e).__name__,
                        attempt=attempt + 1,
                        max_retries=self.max_retries,
                        delay=delay,
                        path=path,
                    )
                    await asyncio.sleep(delay)
                    continue

        logger.error(
            "GitHub API request failed after all retries",
            path=path,
            method=method,
            max_retries=self.max_retries,
            last_error=str(last_exception),
        )
        raise GitHubAPIError(
            message=f"Request failed after {self.max_retries} retries: {last_exception}",
            request_url=f"{self.base_url}{path}",
        )

    def _json_object(self, response: httpx.Response) -> Dict[str, Any]:
        """Decode a response body that must be a JSON object.

        Raises:
            GitHubAPIError: If the body is not JSON or not an object, e.g. an
                HTML error page served by a proxy with status 200.
        """
        try:
            data = response.json()
        except ValueError as e:
            logger.error(
                "GitHub API returned a non-JSON body",
                status_code=response.status_code,
                url=str(response.url),
                response_body=response.text[:200],
            )
            raise GitHubAPIError(
                message=f"Invalid JSON in GitHub API response: {e}",
                status_code=response.status_code,
                response_body=response.text,
                request_url=str(response.url),
            )

        if not isinstance(data, dict):
            raise GitHubAPIError(
                message=f"Unexpected GitHub API response type: {type(data).__name__}",
                status_code=response.status_code,
                response_body=response.text,
                request_url=str(response.url),
            )
        return data

    async def search_issues(
        self,
        query: str,
        per_page: int = 100,
        sort: str = "updated",
        order: str = "desc",
    ) -> List[Dict[str, Any]]:
        """Run a search query against the issues and pull requests index.

        Args:
            query: GitHub search query string.
            per_page: Number of results to request (at most 100).
            sort: Sort field.
            order: Sort direction.

        Returns:
            Raw search result items, pull requests included.

        Raises:
            GitHubAPIError: If the request fails or the body is not a search result object.
        """
        logger.debug("Searching GitHub issues", query=query, per_page=per_page)

        response = await self._request(
            method="GET",
            path="/search/issues",
            params={
                "q": query,
                "sort": sort,
                "order": order,
                "per_page": min(per_page, 100),
            },
        )

        data = self._json_object(response)
        if data.get("incomplete_results"):
            logger.warning("GitHub search returned incomplete results", query=query)

        items = data.get("items") or []
        if not isinstance(items, list):
            raise GitHubAPIError(
                message=f"Unexpected search items type: {type(items).__name__}",
                status_code=response.status_code,
                request_url=str(response.url),
            )
        return items

    async def get_issue(self, owner: str, repo: str, issue_number: int) -> GitHubIssue:
        """Fetch the details of a single issue.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            issue_number: Issue number.

        Returns:
            The parsed issue.

        Raises:
            GitHubAPIError: If the request fails.
        """
        response = await self._request(
            method="GET",
            path=f"/repos/{owner}/{repo}/issues/{issue_number}",
        )
        return GitHubIssue.from_api(self._json_object(response))

    async def get_rate_limit(self) -> RateLimit:
        """Read the core request quota for the current credentials.

        Returns:
            The remaining quota.

        Raises:
            GitHubAPIError: If the request fails or the quota payload is malformed.
        """
        response = await self._request(method="GET", path="/rate_limit")
        rate = self._json_object(response).get("rate")
        if not isinstance(rate, dict):
            raise GitHubAPIError(
                message=f"Unexpected rate limit payload: {type(rate).__name__}",
                status_code=response.status_code,
                request_url=str(response.url),
            )

        try:
            return RateLimit.model_validate(rate)
        except ValidationError as e:
            raise GitHubAPIError(
                message=f"Invalid rate limit payload: {e.error_count()} errors",
                status_code=response.status_code,
                request_url=str(response.url),
            )
