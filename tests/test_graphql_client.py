"""Tests for the GraphQL client and timeline fetcher using a mock transport."""

import json

import httpx
import pytest

from github_timeline.config import Config
from github_timeline.exceptions import (
    AuthenticationError,
    GitHubAPIError,
    GitHubGraphQLError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    ResourceNotFoundError,
)
from github_timeline.models.activity import QueryProfile, SubjectKind
from github_timeline.models.events import EventKind
from github_timeline.queries import ISSUE_LINKAGE_QUERY, PULL_REQUEST_TIMELINE_QUERY
from github_timeline.services.graphql_client import GitHubGraphQLClient
from github_timeline.services.timeline_fetcher import TimelineFetcher, query_for
from github_timeline.utils.rate_limiter import RateLimiter

from conftest import event_node, response


def make_client(handler, token="test_token", max_retries=1):
    config = Config(github_token=token, max_retries=max_retries)
    return GitHubGraphQLClient(
        config=config,
        rate_limiter=RateLimiter(),
        transport=httpx.MockTransport(handler),
    )


class TestGitHubGraphQLClient:
    """Tests for GitHubGraphQLClient.execute."""

    @pytest.mark.asyncio
    async def test_returns_data_and_sends_variables(self):
        """Test a successful query."""
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"data": {"ok": True}},
                headers={"x-ratelimit-remaining": "4321"},
            )

        async with make_client(handler) as client:
            data = await client.execute("query { ok }", {"number": 1})
            assert client.rate_limiter.graphql.remaining == 4321

        assert data == {"ok": True}
        assert seen["auth"] == "Bearer test_token"
        assert seen["body"] == {"query": "query { ok }", "variables": {"number": 1}}

    @pytest.mark.asyncio
    async def test_graphql_errors_raise(self):
        """Test that GraphQL errors are surfaced."""

        def handler(request):
            return httpx.Response(200, json={"data": None, "errors": [{"message": "boom"}]})

        async with make_client(handler) as client:
            with pytest.raises(GitHubGraphQLError, match="boom") as exc_info:
                await client.execute("query { x }")
        assert exc_info.value.errors == [{"message": "boom"}]

    @pytest.mark.asyncio
    async def test_unauthorized(self):
        """Test that a rejected token raises AuthenticationError."""
        async with make_client(lambda request: httpx.Response(401, json={})) as client:
            with pytest.raises(AuthenticationError):
                await client.execute("query { x }")

    @pytest.mark.asyncio
    async def test_server_error(self):
        """Test that other HTTP errors raise GitHubAPIError."""
        async with make_client(lambda request: httpx.Response(502, text="bad gateway")) as client:
            with pytest.raises(GitHubAPIError) as exc_info:
                await client.execute("query { x }")
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_endpoint_not_found(self):
        """Test that a 404 from the endpoint raises GitHubNotFoundError."""
        async with make_client(lambda request: httpx.Response(404, text="nope")) as client:
            with pytest.raises(GitHubNotFoundError, match="endpoint not found"):
                await client.execute("query { x }")

    @pytest.mark.asyncio
    async def test_rate_limit_error(self):
        """Test that a primary rate limit response raises GitHubRateLimitError."""

        def handler(request):
            return httpx.Response(
                403,
                json={"message": "API rate limit exceeded"},
                headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": "1700000000"},
            )

        async with make_client(handler) as client:
            with pytest.raises(GitHubRateLimitError) as exc_info:
                await client.execute("query { x }")
        assert exc_info.value.reset_time == 1700000000.0

    @pytest.mark.asyncio
    async def test_forbidden_without_rate_limit(self):
        """Test that a plain 403 is not treated as a rate limit."""

        def handler(request):
            return httpx.Response(403, json={}, headers={"x-ratelimit-remaining": "100"})

        async with make_client(handler) as client:
            with pytest.raises(GitHubAPIError) as exc_info:
                await client.execute("query { x }")
        assert not isinstance(exc_info.value, GitHubRateLimitError)

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self, monkeypatch):
        """Test that connection errors are retried."""
        monkeypatch.setattr("asyncio.sleep", _no_sleep)
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                raise httpx.ConnectError("down", request=request)
            return httpx.Response(200, json={"data": {"ok": 1}})

        async with make_client(handler, max_retries=3) as client:
            assert await client.execute("query { ok }") == {"ok": 1}
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_requires_token(self):
        """Test that a client without a token refuses to send."""
        async with make_client(lambda request: httpx.Response(200), token=None) as client:
            with pytest.raises(AuthenticationError):
                await client.execute("query { x }")


async def _no_sleep(seconds):
    return None


class TestQueryFor:
    """Tests for query document selection."""

    def test_issue_profiles(self):
        """Test the issue query documents."""
        assert query_for(SubjectKind.ISSUE, QueryProfile.LINKAGE) == ISSUE_LINKAGE_QUERY
        assert "createdAt" not in ISSUE_LINKAGE_QUERY
        assert "... on ConnectedEvent" in ISSUE_LINKAGE_QUERY

    def test_pull_request(self):
        """Test the pull request query document."""
        assert query_for(SubjectKind.PULL_REQUEST, QueryProfile.FULL) == PULL_REQUEST_TIMELINE_QUERY

    def test_pull_request_linkage_unsupported(self):
        """Test that the linkage profile is issue-only."""
        with pytest.raises(ValueError):
            query_for(SubjectKind.PULL_REQUEST, QueryProfile.LINKAGE)


class TestTimelineFetcher:
    """Tests for TimelineFetcher."""

    @pytest.mark.asyncio
    async def test_fetch_pull_request(self):
        """Test fetching and normalizing a pull request timeline."""
        nodes = [
            event_node("MergedEvent", "2024-01-03T00:00:00Z", mergeRefName="main"),
            event_node("ReadyForReviewEvent", "2024-01-01T00:00:00Z"),
        ]

        def handler(request):
            body = json.loads(request.content)
            assert body["variables"] == {"owner": "octo", "repo": "repo", "number": 5}
            return httpx.Response(200, json=response(nodes, kind="pull_request"))

        async with make_client(handler) as client:
            model = await TimelineFetcher(client).fetch("octo", "repo", 5, SubjectKind.PULL_REQUEST)

        assert model.subject_kind is SubjectKind.PULL_REQUEST
        assert [e.kind for e in model.events] == [EventKind.READY_FOR_REVIEW, EventKind.MERGED]

    @pytest.mark.asyncio
    async def test_null_subject_is_not_found(self):
        """Test that a null issue raises ResourceNotFoundError."""

        def handler(request):
            return httpx.Response(200, json={"data": {"repository": {"issue": None}}})

        async with make_client(handler) as client:
            with pytest.raises(ResourceNotFoundError, match="issue not found: octo/repo#404"):
                await TimelineFetcher(client).fetch("octo", "repo", 404, SubjectKind.ISSUE)

    @pytest.mark.asyncio
    async def test_not_found_error_type(self):
        """Test that NOT_FOUND GraphQL errors map to ResourceNotFoundError."""

        def handler(request):
            return httpx.Response(
                200,
                json={
                    "data": {"repository": None},
                    "errors": [{"type": "NOT_FOUND", "message": "Could not resolve"}],
                },
            )

        async with make_client(handler) as client:
            with pytest.raises(ResourceNotFoundError) as exc_info:
                await TimelineFetcher(client).fetch("octo", "gone", 1, SubjectKind.PULL_REQUEST)
        assert exc_info.value.repo == "gone"
        assert exc_info.value.subject_kind == "pull_request"
