"""Exceptions for the GitHub Timeline SDK.

Exception Hierarchy:
    GitHubTimelineError (base)
    ├── GitHubAPIError (HTTP API errors with status codes)
    │   ├── GitHubRateLimitError (403/429 rate limit from API response)
    │   └── GitHubNotFoundError (404 not found)
    ├── GitHubGraphQLError (GraphQL API errors)
    ├── RateLimitExceededError (local rate limit tracking, before making request)
    ├── AuthenticationError (token invalid or required)
    ├── ResourceNotFoundError (repository, issue or pull request is null)
    ├── MalformedResponseError (response is not a container of timeline edges)
    └── DecodeError (one timeline node is malformed)

    TruncationWarning (UserWarning, informational)

Usage:
    - DecodeError never escapes the event decoder: the offending node is
      downgraded to an Unknown event and the message is kept as a diagnostic.
    - MalformedResponseError is the only decode failure that aborts a page.
"""

from typing import Any

__all__ = [
    "GitHubTimelineError",
    "GitHubAPIError",
    "GitHubRateLimitError",
    "GitHubNotFoundError",
    "GitHubGraphQLError",
    "RateLimitExceededError",
    "AuthenticationError",
    "ResourceNotFoundError",
    "MalformedResponseError",
    "DecodeError",
    "TruncationWarning",
]


class GitHubTimelineError(Exception):
    """Base exception for all GitHub Timeline errors."""

    pass


class GitHubAPIError(GitHubTimelineError):
    """Base exception for GitHub API errors (HTTP responses with error status codes)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: dict | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class GitHubRateLimitError(GitHubAPIError):
    """Raised when GitHub API returns a rate limit error (HTTP 403 or 429).

    This is raised after receiving a rate limit response from the GitHub API.
    For preemptive rate limiting (before making requests), see RateLimitExceededError.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = 403,
        response_body: dict | None = None,
        reset_time: float | None = None,
    ):
        super().__init__(message, status_code=status_code, response_body=response_body)
        self.reset_time = reset_time


class GitHubNotFoundError(GitHubAPIError):
    """Raised when a GitHub endpoint is not found (HTTP 404)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = 404,
        response_body: dict | None = None,
    ):
        super().__init__(message, status_code=status_code, response_body=response_body)


class GitHubGraphQLError(GitHubTimelineError):
    """Exception for GraphQL API errors."""

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class RateLimitExceededError(GitHubTimelineError):
    """Raised by local rate limiter when limits are exhausted.

    This is a preemptive exception raised before making a request when the
    local rate limit tracker indicates no remaining points.
    """

    pass


class AuthenticationError(GitHubTimelineError):
    """Raised when authentication fails or token is missing."""

    pass


class ResourceNotFoundError(GitHubTimelineError):
    """Raised when the requested issue or pull request does not exist."""

    def __init__(self, owner: str, repo: str, number: int, subject_kind: str):
        super().__init__(f"{subject_kind} not found: {owner}/{repo}#{number}")
        self.owner = owner
        self.repo = repo
        self.number = number
        self.subject_kind = subject_kind


class MalformedResponseError(GitHubTimelineError):
    """Raised when a response is not a well-formed container of timeline edges."""

    def __init__(self, message: str, raw: Any = None):
        super().__init__(message)
        self.raw = raw


class DecodeError(GitHubTimelineError):
    """Raised when a single timeline node (or one of its sub-shapes) is malformed.

    Carries the offending raw node so the caller can keep it for diagnostics.
    """

    def __init__(self, message: str, node: Any = None):
        super().__init__(message)
        self.node = node


class TruncationWarning(UserWarning):
    """A bounded collection came back exactly at its cap; more items may exist."""

    pass
