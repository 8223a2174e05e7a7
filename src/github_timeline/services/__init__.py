"""Services for fetching GitHub timelines."""

from github_timeline.services.graphql_client import GitHubGraphQLClient
from github_timeline.services.timeline_fetcher import TimelineFetcher, decode_response

__all__ = [
    "GitHubGraphQLClient",
    "TimelineFetcher",
    "decode_response",
]
