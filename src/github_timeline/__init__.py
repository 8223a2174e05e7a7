"""GitHub Timeline - Normalize GitHub issue and pull request timelines.

This SDK turns the heterogeneous ``timelineItems`` of GitHub's GraphQL API into
one uniform, ordered activity model:
- Typed events for every known timeline item, with an Unknown fallback
- Stable timestamp ordering that keeps undated items in place
- Truncation and decode diagnostics for capped, cursor-less queries
- Offline decoding of saved responses

Example usage:
    ```python
    from github_timeline import GitHubTimeline

    async with GitHubTimeline(token="ghp_xxx") as client:
        model = await client.get_issue_timeline("octo", "repo", 12)
        print(model.count_by_kind(), model.truncated)
    ```
"""

from importlib.metadata import PackageNotFoundError, version

from github_timeline.assembler import assemble, merge_models, order_events
from github_timeline.config import Config
from github_timeline.decoders import decode_event, extract_page
from github_timeline.exceptions import (
    AuthenticationError,
    DecodeError,
    GitHubAPIError,
    GitHubGraphQLError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubTimelineError,
    MalformedResponseError,
    RateLimitExceededError,
    ResourceNotFoundError,
    TruncationWarning,
)
from github_timeline.models import (
    ActivityModel,
    ActorKind,
    ActorRef,
    CloserState,
    EventKind,
    QueryProfile,
    ResourceKind,
    ResourceRef,
    SubjectKind,
    TimelineEvent,
)
from github_timeline.sdk import GitHubTimeline, TimelineTarget
from github_timeline.services import decode_response

try:
    __version__ = version("github-timeline")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"

__all__ = [
    # Main SDK class
    "GitHubTimeline",
    "TimelineTarget",
    # Configuration
    "Config",
    # Offline pipeline
    "decode_response",
    "decode_event",
    "extract_page",
    "assemble",
    "order_events",
    "merge_models",
    # Exceptions
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
    # Models
    "ActivityModel",
    "TimelineEvent",
    "EventKind",
    "SubjectKind",
    "QueryProfile",
    "CloserState",
    "ActorKind",
    "ActorRef",
    "ResourceKind",
    "ResourceRef",
]
