"""GitHub GraphQL API client for timeline queries."""

import logging
from typing import Any, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from github_timeline.config import Config, get_config
from github_timeline.exceptions import (
    AuthenticationError,
    GitHubAPIError,
    GitHubGraphQLError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)
from github_timeline.utils.rate_limiter import RateLimiter, get_rate_limiter

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (httpx.TimeoutException, httpx.ConnectError, GitHubRateLimitError)


def _rate_limit_error(response: httpx.Response) -> Optional[GitHubRateLimitError]:
    """Build a rate limit error if the response is a (primary or secondary) rate limit."""
    if response.status_code not in (403, 429):
        return None

    remaining = response.headers.get("x-ratelimit-remaining")
    if response.status_code == 403 and remaining != "0" and "retry-after" not in response.headers:
        return None

    reset = response.headers.get("x-ratelimit-reset")
    return GitHubRateLimitError(
        f"GitHub rate limit hit (HTTP {response.status_code})",
        status_code=response.status_code,
        reset_time=float(reset) if reset else None,
    )


class GitHubGraphQLClient:
    """Async client for GitHub GraphQL API."""

    def __init__(
        self,
        config: Optional[Config] = None,
        rate_limiter: Optional[RateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or get_config()
        self.rate_limiter = rate_limiter or get_rate_limiter()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_headers(self) -> dict[str, str]:
        """Get headers for API requests."""
        if not self.config.github_token:
            raise AuthenticationError(
                "GitHub token is required for GraphQL API. "
                "Set GITHUB_TIMELINE_TOKEN or GITHUB_TOKEN environment variable."
            )

        return {
            "Authorization": f"Bearer {self.config.github_token}",
            "Content-Type": "application/json",
            "User-Agent": "github-timeline/0.1.0",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.github_graphql_url,
                headers=self._get_headers(),
                timeout=self.config.request_timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "GitHubGraphQLClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def execute(
        self,
        query: str,
        variables: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Execute a GraphQL query, retrying transient and rate limit failures.

        Args:
            query: GraphQL query string
            variables: Query variables

        Returns:
            Query result data

        Raises:
            GitHubGraphQLError: If the response carries GraphQL errors
            GitHubRateLimitError: If the rate limit persists across retries
            AuthenticationError: If no token is configured or it is rejected
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            stop=stop_after_attempt(self.config.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        ):
            with attempt:
                return await self._execute_once(query, variables)
        raise GitHubAPIError("GraphQL request retries exhausted")

    async def _execute_once(
        self,
        query: str,
        variables: Optional[dict[str, Any]],
    ) -> dict[str, Any]:
        # Acquire rate limit permission
        await self.rate_limiter.acquire_graphql()

        client = await self._get_client()
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        response = await client.post("", json=payload)

        # Update rate limit from response
        self.rate_limiter.update_graphql_from_headers(dict(response.headers))

        rate_limited = _rate_limit_error(response)
        if rate_limited is not None:
            logger.warning("%s; will retry with backoff", rate_limited)
            raise rate_limited

        if response.status_code == 401:
            raise AuthenticationError("GitHub rejected the token (HTTP 401)")

        if response.status_code == 404:
            raise GitHubNotFoundError(
                f"GraphQL endpoint not found: {self.config.github_graphql_url}"
            )

        if response.status_code != 200:
            raise GitHubAPIError(
                f"GraphQL request failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        result = response.json()

        # Check for GraphQL errors
        if result.get("errors"):
            error_messages = [e.get("message", "Unknown error") for e in result["errors"]]
            raise GitHubGraphQLError(
                f"GraphQL errors: {'; '.join(error_messages)}",
                errors=result["errors"],
            )

        return result.get("data") or {}
