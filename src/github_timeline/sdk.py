"""GitHub Timeline SDK - High-level API for normalized issue and pull request timelines."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from github_timeline.assembler import merge_models
from github_timeline.config import Config
from github_timeline.exceptions import AuthenticationError, GitHubTimelineError
from github_timeline.models.activity import ActivityModel, QueryProfile, SubjectKind
from github_timeline.services.graphql_client import GitHubGraphQLClient
from github_timeline.services.timeline_fetcher import TimelineFetcher, decode_response
from github_timeline.utils.rate_limiter import RateLimiter, get_rate_limiter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimelineTarget:
    """One issue or pull request to fetch."""

    owner: str
    repo: str
    number: int
    subject_kind: SubjectKind = SubjectKind.ISSUE
    profile: QueryProfile = QueryProfile.FULL

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"


class GitHubTimeline:
    """High-level SDK for fetching normalized GitHub timelines.

    Example usage:
        ```python
        from github_timeline import GitHubTimeline

        async with GitHubTimeline(token="ghp_xxx") as client:
            model = await client.get_pull_request_timeline("octo", "repo", 42)
            for event in model.events:
                print(event.timestamp, event.kind, event.actor)
        ```

    Args:
        token: GitHub personal access token (required by the GraphQL API)
        graphql_url: GitHub GraphQL API URL (default: https://api.github.com/graphql)
        max_concurrency: Default bound for parallel fetches in ``get_timelines``
        config: Full configuration; overrides the other arguments when given
    """

    def __init__(
        self,
        token: str | None = None,
        graphql_url: str = "https://api.github.com/graphql",
        max_concurrency: int = 4,
        config: Config | None = None,
    ):
        self._config = config or Config(
            github_token=token,
            github_graphql_url=graphql_url,
            max_concurrency=max_concurrency,
        )
        self._rate_limiter: RateLimiter | None = None
        self._graphql_client: GitHubGraphQLClient | None = None
        self._fetcher: TimelineFetcher | None = None
        self._initialized = False

    @property
    def is_authenticated(self) -> bool:
        """Check if a token is configured."""
        return self._config.is_authenticated

    async def __aenter__(self) -> "GitHubTimeline":
        """Async context manager entry."""
        await self._initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def _initialize(self) -> None:
        """Initialize clients."""
        if self._initialized:
            return

        self._rate_limiter = get_rate_limiter()
        if self._config.is_authenticated:
            self._graphql_client = GitHubGraphQLClient(
                config=self._config,
                rate_limiter=self._rate_limiter,
            )
            self._fetcher = TimelineFetcher(self._graphql_client, self._config)

        self._initialized = True
        logger.debug(
            "GitHubTimeline initialized (authenticated=%s)",
            self.is_authenticated,
        )

    async def close(self) -> None:
        """Close all HTTP connections."""
        if self._graphql_client:
            await self._graphql_client.close()
        self._initialized = False
        logger.debug("GitHubTimeline closed")

    def _ensure_fetcher(self) -> TimelineFetcher:
        """Ensure the client is initialized and able to query GraphQL."""
        if not self._initialized:
            raise GitHubTimelineError(
                "Client not initialized. Use 'async with GitHubTimeline(...) as client:'"
            )
        if self._fetcher is None:
            raise AuthenticationError(
                "Timelines require the GraphQL API. Provide a GitHub token."
            )
        return self._fetcher

    async def get_issue_timeline(
        self,
        owner: str,
        repo: str,
        number: int,
        profile: QueryProfile = QueryProfile.FULL,
    ) -> ActivityModel:
        """Get an issue's normalized timeline.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Issue number
            profile: FULL for the whole narrative, LINKAGE for closure and
                cross-link detection only (no timestamps)

        Returns:
            ActivityModel for the issue

        Raises:
            ResourceNotFoundError: If the issue doesn't exist
        """
        fetcher = self._ensure_fetcher()
        return await fetcher.fetch(owner, repo, number, SubjectKind.ISSUE, profile)

    async def get_pull_request_timeline(
        self,
        owner: str,
        repo: str,
        number: int,
    ) -> ActivityModel:
        """Get a pull request's normalized timeline.

        Raises:
            ResourceNotFoundError: If the pull request doesn't exist
        """
        fetcher = self._ensure_fetcher()
        return await fetcher.fetch(owner, repo, number, SubjectKind.PULL_REQUEST)

    async def get_timelines(
        self,
        targets: Sequence[TimelineTarget],
        max_concurrency: int | None = None,
    ) -> list[ActivityModel]:
        """Fetch several independent timelines in parallel.

        At most ``max_concurrency`` fetches are in flight at once. Results come
        back in the order of ``targets``. If any fetch fails, the remaining
        ones are cancelled and the error propagates.
        """
        fetcher = self._ensure_fetcher()
        limit = self._config.max_concurrency if max_concurrency is None else max_concurrency
        if limit < 1:
            raise ValueError("max_concurrency must be at least 1")
        semaphore = asyncio.Semaphore(limit)

        async def fetch_one(target: TimelineTarget) -> ActivityModel:
            async with semaphore:
                return await fetcher.fetch(
                    target.owner,
                    target.repo,
                    target.number,
                    target.subject_kind,
                    target.profile,
                )

        logger.info("Fetching %d timelines (max_concurrency=%d)", len(targets), limit)
        tasks = [asyncio.ensure_future(fetch_one(target)) for target in targets]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

    async def get_linked_timeline(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        pull_request_number: int,
    ) -> ActivityModel:
        """Fetch an issue and a related pull request and interleave their timelines."""
        issue, pull_request = await self.get_timelines(
            [
                TimelineTarget(owner, repo, issue_number, SubjectKind.ISSUE),
                TimelineTarget(owner, repo, pull_request_number, SubjectKind.PULL_REQUEST),
            ]
        )
        return merge_models(issue, pull_request)

    def decode_response(
        self,
        raw_response: Any,
        subject_kind: Optional[SubjectKind] = None,
        profile: QueryProfile = QueryProfile.FULL,
    ) -> ActivityModel:
        """Normalize an already-fetched response (no network access)."""
        return decode_response(raw_response, subject_kind, profile, self._config)
