"""Normalized timeline event models.

Every raw timeline node becomes one ``TimelineEvent``: a common envelope
(id, timestamp, actor) around exactly one payload variant. Payloads form a
closed union discriminated on ``kind``; anything the decoder does not
recognize lands in ``UnknownPayload`` with its raw form preserved.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from github_timeline.models.refs import (
    ActorRef,
    CommitRef,
    GitActor,
    LabelRef,
    ResourceKind,
    ResourceRef,
)


class EventKind(str, Enum):
    """Closed set of normalized event kinds."""

    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"
    LABELED = "labeled"
    UNLABELED = "unlabeled"
    CLOSED = "closed"
    REOPENED = "reopened"
    CONNECTED = "connected"
    CROSS_REFERENCED = "cross_referenced"
    REFERENCED = "referenced"
    COMMENTED = "commented"
    REVIEW = "review"
    REVIEW_THREAD = "review_thread"
    COMMIT = "commit"
    MERGED = "merged"
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    PINNED = "pinned"
    UNPINNED = "unpinned"
    MILESTONED = "milestoned"
    DEMILESTONED = "demilestoned"
    MARKED_DUPLICATE = "marked_duplicate"
    UNMARKED_DUPLICATE = "unmarked_duplicate"
    RENAMED_TITLE = "renamed_title"
    CONVERTED_TO_DISCUSSION = "converted_to_discussion"
    FORCE_PUSHED = "force_pushed"
    HEAD_DELETED = "head_deleted"
    REVIEW_REQUESTED = "review_requested"
    REVIEW_REQUEST_REMOVED = "review_request_removed"
    CONVERTED_TO_DRAFT = "converted_to_draft"
    READY_FOR_REVIEW = "ready_for_review"
    SUBSCRIBED = "subscribed"
    MENTIONED = "mentioned"
    UNKNOWN = "unknown"


class ReviewState(str, Enum):
    """State of a pull request review or review comment."""

    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"
    DISMISSED = "DISMISSED"
    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    OTHER = "OTHER"


class LockReason(str, Enum):
    """Why a conversation was locked."""

    OFF_TOPIC = "OFF_TOPIC"
    RESOLVED = "RESOLVED"
    SPAM = "SPAM"
    TOO_HEATED = "TOO_HEATED"
    OTHER = "OTHER"


class CloserState(str, Enum):
    """What closed a subject, as far as the ClosedEvent says."""

    NONE = "none"  # closed by hand, no linked pull request or commit
    PULL_REQUEST = "pull_request"
    COMMIT = "commit"
    PROJECT = "project"
    UNKNOWN = "unknown"  # a closer was present but of a shape we do not decode


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True)


class AssignedPayload(_Payload):
    kind: Literal[EventKind.ASSIGNED] = EventKind.ASSIGNED
    assignee: ActorRef | None = None


class UnassignedPayload(_Payload):
    kind: Literal[EventKind.UNASSIGNED] = EventKind.UNASSIGNED
    assignee: ActorRef | None = None


class LabeledPayload(_Payload):
    kind: Literal[EventKind.LABELED] = EventKind.LABELED
    label: LabelRef


class UnlabeledPayload(_Payload):
    kind: Literal[EventKind.UNLABELED] = EventKind.UNLABELED
    label: LabelRef


class ClosedPayload(_Payload):
    kind: Literal[EventKind.CLOSED] = EventKind.CLOSED
    closer: ResourceRef | None = None
    state_reason: str | None = None

    @property
    def closer_state(self) -> CloserState:
        """Distinguishes "no closer" from "closer of a shape we do not know"."""
        if self.closer is None:
            return CloserState.NONE
        return {
            ResourceKind.PULL_REQUEST: CloserState.PULL_REQUEST,
            ResourceKind.COMMIT: CloserState.COMMIT,
            ResourceKind.PROJECT: CloserState.PROJECT,
        }.get(self.closer.kind, CloserState.UNKNOWN)


class ReopenedPayload(_Payload):
    kind: Literal[EventKind.REOPENED] = EventKind.REOPENED
    state_reason: str | None = None


class ConnectedPayload(_Payload):
    kind: Literal[EventKind.CONNECTED] = EventKind.CONNECTED
    source: ResourceRef | None = None
    subject: ResourceRef | None = None
    is_cross_repository: bool | None = None


class CrossReferencedPayload(_Payload):
    kind: Literal[EventKind.CROSS_REFERENCED] = EventKind.CROSS_REFERENCED
    source: ResourceRef | None = None
    is_cross_repository: bool | None = None
    will_close_target: bool | None = None
    referenced_at: datetime | None = None


class ReferencedPayload(_Payload):
    kind: Literal[EventKind.REFERENCED] = EventKind.REFERENCED
    commit: CommitRef | None = None
    commit_repository: ResourceRef | None = None
    is_cross_repository: bool | None = None
    is_direct_reference: bool | None = None


class CommentedPayload(_Payload):
    kind: Literal[EventKind.COMMENTED] = EventKind.COMMENTED
    body: str | None = None
    url: str | None = None
    author_association: str | None = None


class ReviewComment(BaseModel):
    """One comment inside a review or review thread."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    author: ActorRef | None = None
    body: str | None = None
    diff_hunk: str | None = None
    path: str | None = None
    outdated: bool = False
    state: ReviewState | None = None
    timestamp: datetime | None = None


class ReviewPayload(_Payload):
    kind: Literal[EventKind.REVIEW] = EventKind.REVIEW
    state: ReviewState
    raw_state: str | None = None
    body: str | None = None
    comments: tuple[ReviewComment, ...] = ()
    comments_truncated: bool = False
    comment_count: int | None = None  # totalCount when selected


class ReviewThreadPayload(_Payload):
    kind: Literal[EventKind.REVIEW_THREAD] = EventKind.REVIEW_THREAD
    path: str | None = None
    is_resolved: bool | None = None
    is_outdated: bool | None = None
    resolved_by: ActorRef | None = None
    comments: tuple[ReviewComment, ...] = ()
    comments_truncated: bool = False
    comment_count: int | None = None


class Commit(BaseModel):
    """A commit pushed to a pull request."""

    model_config = ConfigDict(frozen=True)

    abbreviated_oid: str
    oid: str | None = None
    message_headline: str | None = None
    committed_date: datetime | None = None
    author: GitActor | None = None
    committer: GitActor | None = None
    authored_by_committer: bool | None = None
    url: str | None = None


class CommitPayload(_Payload):
    kind: Literal[EventKind.COMMIT] = EventKind.COMMIT
    commit: Commit


class MergedPayload(_Payload):
    kind: Literal[EventKind.MERGED] = EventKind.MERGED
    merge_ref_name: str | None = None
    commit: CommitRef | None = None


class LockedPayload(_Payload):
    kind: Literal[EventKind.LOCKED] = EventKind.LOCKED
    lock_reason: LockReason | None = None
    raw_lock_reason: str | None = None


class UnlockedPayload(_Payload):
    kind: Literal[EventKind.UNLOCKED] = EventKind.UNLOCKED


class PinnedPayload(_Payload):
    kind: Literal[EventKind.PINNED] = EventKind.PINNED


class UnpinnedPayload(_Payload):
    kind: Literal[EventKind.UNPINNED] = EventKind.UNPINNED


class MilestonedPayload(_Payload):
    kind: Literal[EventKind.MILESTONED] = EventKind.MILESTONED
    milestone_title: str | None = None


class DemilestonedPayload(_Payload):
    kind: Literal[EventKind.DEMILESTONED] = EventKind.DEMILESTONED
    milestone_title: str | None = None


class MarkedDuplicatePayload(_Payload):
    kind: Literal[EventKind.MARKED_DUPLICATE] = EventKind.MARKED_DUPLICATE
    canonical: ResourceRef | None = None
    duplicate: ResourceRef | None = None
    is_cross_repository: bool | None = None


class UnmarkedDuplicatePayload(_Payload):
    kind: Literal[EventKind.UNMARKED_DUPLICATE] = EventKind.UNMARKED_DUPLICATE
    canonical: ResourceRef | None = None
    duplicate: ResourceRef | None = None
    is_cross_repository: bool | None = None


class RenamedTitlePayload(_Payload):
    kind: Literal[EventKind.RENAMED_TITLE] = EventKind.RENAMED_TITLE
    previous_title: str | None = None
    current_title: str | None = None


class ConvertedToDiscussionPayload(_Payload):
    kind: Literal[EventKind.CONVERTED_TO_DISCUSSION] = EventKind.CONVERTED_TO_DISCUSSION
    discussion: ResourceRef | None = None


class ForcePushedPayload(_Payload):
    kind: Literal[EventKind.FORCE_PUSHED] = EventKind.FORCE_PUSHED
    before_commit: CommitRef | None = None
    after_commit: CommitRef | None = None
    ref_name: str | None = None


class HeadDeletedPayload(_Payload):
    kind: Literal[EventKind.HEAD_DELETED] = EventKind.HEAD_DELETED
    head_ref_name: str | None = None


class ReviewRequestedPayload(_Payload):
    kind: Literal[EventKind.REVIEW_REQUESTED] = EventKind.REVIEW_REQUESTED
    requested_reviewer: ActorRef | None = None


class ReviewRequestRemovedPayload(_Payload):
    kind: Literal[EventKind.REVIEW_REQUEST_REMOVED] = EventKind.REVIEW_REQUEST_REMOVED
    requested_reviewer: ActorRef | None = None


class ConvertedToDraftPayload(_Payload):
    kind: Literal[EventKind.CONVERTED_TO_DRAFT] = EventKind.CONVERTED_TO_DRAFT


class ReadyForReviewPayload(_Payload):
    kind: Literal[EventKind.READY_FOR_REVIEW] = EventKind.READY_FOR_REVIEW


class SubscribedPayload(_Payload):
    kind: Literal[EventKind.SUBSCRIBED] = EventKind.SUBSCRIBED


class MentionedPayload(_Payload):
    kind: Literal[EventKind.MENTIONED] = EventKind.MENTIONED


class UnknownPayload(_Payload):
    """Forward-compatibility arm: the node verbatim, plus why it landed here."""

    kind: Literal[EventKind.UNKNOWN] = EventKind.UNKNOWN
    raw_type: str | None = None
    raw_payload: Any = None
    error: str | None = None  # set when a known type failed to decode


EventPayload = Annotated[
    Union[
        AssignedPayload,
        UnassignedPayload,
        LabeledPayload,
        UnlabeledPayload,
        ClosedPayload,
        ReopenedPayload,
        ConnectedPayload,
        CrossReferencedPayload,
        ReferencedPayload,
        CommentedPayload,
        ReviewPayload,
        ReviewThreadPayload,
        CommitPayload,
        MergedPayload,
        LockedPayload,
        UnlockedPayload,
        PinnedPayload,
        UnpinnedPayload,
        MilestonedPayload,
        DemilestonedPayload,
        MarkedDuplicatePayload,
        UnmarkedDuplicatePayload,
        RenamedTitlePayload,
        ConvertedToDiscussionPayload,
        ForcePushedPayload,
        HeadDeletedPayload,
        ReviewRequestedPayload,
        ReviewRequestRemovedPayload,
        ConvertedToDraftPayload,
        ReadyForReviewPayload,
        SubscribedPayload,
        MentionedPayload,
        UnknownPayload,
    ],
    Field(discriminator="kind"),
]


class TimelineEvent(BaseModel):
    """One normalized timeline item.

    ``id`` and ``timestamp`` are genuinely optional: the linkage query
    profile selects neither, and some system events carry no actor.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    timestamp: datetime | None = None
    actor: ActorRef | None = None
    payload: EventPayload

    @computed_field  # type: ignore[prop-decorator]
    @property
    def kind(self) -> EventKind:
        return self.payload.kind

    @property
    def is_unknown(self) -> bool:
        return self.payload.kind is EventKind.UNKNOWN

    @property
    def is_dated(self) -> bool:
        return self.timestamp is not None
