"""Data models for GitHub Timeline."""

from github_timeline.models.activity import (
    ActivityModel,
    DecodeDiagnostic,
    IssueClosedReason,
    QueryProfile,
    SubjectKind,
    SubjectSummary,
)
from github_timeline.models.events import (
    CloserState,
    Commit,
    EventKind,
    LockReason,
    ReviewComment,
    ReviewState,
    TimelineEvent,
)
from github_timeline.models.refs import (
    ActorKind,
    ActorRef,
    CommitRef,
    GitActor,
    LabelRef,
    ResourceKind,
    ResourceRef,
)

__all__ = [
    "ActivityModel",
    "DecodeDiagnostic",
    "IssueClosedReason",
    "QueryProfile",
    "SubjectKind",
    "SubjectSummary",
    "CloserState",
    "Commit",
    "EventKind",
    "LockReason",
    "ReviewComment",
    "ReviewState",
    "TimelineEvent",
    "ActorKind",
    "ActorRef",
    "CommitRef",
    "GitActor",
    "LabelRef",
    "ResourceKind",
    "ResourceRef",
]
