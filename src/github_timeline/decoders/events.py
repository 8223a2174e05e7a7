"""Event decoder: one raw timeline node in, exactly one TimelineEvent out."""

import logging
from typing import Any, Callable, Optional

from pydantic import ValidationError

from github_timeline.decoders.refs import (
    decode_actor,
    decode_commit_ref,
    decode_git_actor,
    decode_label,
    decode_resource,
    optional_object,
    optional_string,
    typename,
)
from github_timeline.exceptions import DecodeError
from github_timeline.models.events import (
    AssignedPayload,
    ClosedPayload,
    Commit,
    CommentedPayload,
    CommitPayload,
    ConnectedPayload,
    ConvertedToDiscussionPayload,
    ConvertedToDraftPayload,
    CrossReferencedPayload,
    DemilestonedPayload,
    ForcePushedPayload,
    HeadDeletedPayload,
    LabeledPayload,
    LockedPayload,
    LockReason,
    MarkedDuplicatePayload,
    MentionedPayload,
    MergedPayload,
    MilestonedPayload,
    PinnedPayload,
    ReadyForReviewPayload,
    ReferencedPayload,
    RenamedTitlePayload,
    ReopenedPayload,
    ReviewComment,
    ReviewPayload,
    ReviewRequestedPayload,
    ReviewRequestRemovedPayload,
    ReviewState,
    ReviewThreadPayload,
    SubscribedPayload,
    TimelineEvent,
    UnassignedPayload,
    UnknownPayload,
    UnlabeledPayload,
    UnlockedPayload,
    UnmarkedDuplicatePayload,
    UnpinnedPayload,
)
from github_timeline.models.refs import ActorRef
from github_timeline.queries import COMMENTS_PAGE_SIZE
from github_timeline.utils.pagination import connection_items, is_truncated, report_truncation
from github_timeline.utils.time import parse_datetime

logger = logging.getLogger(__name__)

Node = dict[str, Any]


def _timestamp(node: Node, field: str = "createdAt"):
    try:
        return parse_datetime(node.get(field), strict=True)
    except ValueError as e:
        raise DecodeError(f"{field}: {e}", node) from e


def _review_state(raw: Optional[str]) -> Optional[ReviewState]:
    if raw is None:
        return None
    try:
        return ReviewState(raw)
    except ValueError:
        return ReviewState.OTHER


def _lock_reason(raw: Optional[str]) -> Optional[LockReason]:
    if raw is None:
        return None
    try:
        return LockReason(raw)
    except ValueError:
        return LockReason.OTHER


def _review_comment(node: Node) -> ReviewComment:
    if not isinstance(node, dict):
        raise DecodeError("review comment is not an object", node)
    return ReviewComment(
        id=node.get("id"),
        author=decode_actor(node.get("author"), "comment.author"),
        body=node.get("body"),
        diff_hunk=node.get("diffHunk"),
        path=node.get("path"),
        outdated=bool(node.get("outdated")),
        state=_review_state(node.get("state")),
        timestamp=_timestamp(node),
    )


def _comments(node: Node, cap: int) -> tuple[tuple[ReviewComment, ...], bool, Optional[int]]:
    """Decode a nested ``comments(first: N)`` connection.

    Returns:
        (comments, truncated, totalCount or None)
    """
    connection = optional_object(node.get("comments"), "comments")
    items = connection_items(connection)
    total_count = connection.get("totalCount")
    if total_count is not None and (not isinstance(total_count, int) or isinstance(total_count, bool)):
        raise DecodeError("comments.totalCount is not an integer", connection)
    comments = tuple(_review_comment(item) for item in items if item is not None)
    return comments, is_truncated(len(items), cap, total_count), total_count


# Payload builders, one per known __typename. Each receives the raw node and
# the nested comments cap.
PayloadBuilder = Callable[[Node, int], Any]


def _assigned(node: Node, cap: int) -> AssignedPayload:
    return AssignedPayload(assignee=decode_actor(node.get("assignee"), "assignee"))


def _unassigned(node: Node, cap: int) -> UnassignedPayload:
    return UnassignedPayload(assignee=decode_actor(node.get("assignee"), "assignee"))


def _labeled(node: Node, cap: int) -> LabeledPayload:
    return LabeledPayload(label=decode_label(node.get("label")))


def _unlabeled(node: Node, cap: int) -> UnlabeledPayload:
    return UnlabeledPayload(label=decode_label(node.get("label")))


def _closed(node: Node, cap: int) -> ClosedPayload:
    return ClosedPayload(
        closer=decode_resource(node.get("closer"), "closer"),
        state_reason=node.get("stateReason"),
    )


def _reopened(node: Node, cap: int) -> ReopenedPayload:
    return ReopenedPayload(state_reason=node.get("stateReason"))


def _connected(node: Node, cap: int) -> ConnectedPayload:
    return ConnectedPayload(
        source=decode_resource(node.get("source"), "source"),
        subject=decode_resource(node.get("subject"), "subject"),
        is_cross_repository=node.get("isCrossRepository"),
    )


def _cross_referenced(node: Node, cap: int) -> CrossReferencedPayload:
    return CrossReferencedPayload(
        source=decode_resource(node.get("source"), "source"),
        is_cross_repository=node.get("isCrossRepository"),
        will_close_target=node.get("willCloseTarget"),
        referenced_at=_timestamp(node, "referencedAt"),
    )


def _referenced(node: Node, cap: int) -> ReferencedPayload:
    return ReferencedPayload(
        commit=decode_commit_ref(node.get("commit")),
        commit_repository=decode_resource(node.get("commitRepository"), "commitRepository"),
        is_cross_repository=node.get("isCrossRepository"),
        is_direct_reference=node.get("isDirectReference"),
    )


def _commented(node: Node, cap: int) -> CommentedPayload:
    return CommentedPayload(
        body=node.get("body"),
        url=node.get("url"),
        author_association=node.get("authorAssociation"),
    )


def _review(node: Node, cap: int) -> ReviewPayload:
    raw_state = node.get("state")
    state = _review_state(raw_state)
    if state is None:
        raise DecodeError("review has no state", node)
    comments, truncated, total_count = _comments(node, cap)
    return ReviewPayload(
        state=state,
        raw_state=raw_state,
        body=node.get("body"),
        comments=comments,
        comments_truncated=truncated,
        comment_count=total_count,
    )


def _review_thread(node: Node, cap: int) -> ReviewThreadPayload:
    comments, truncated, total_count = _comments(node, cap)
    return ReviewThreadPayload(
        path=node.get("path"),
        is_resolved=node.get("isResolved"),
        is_outdated=node.get("isOutdated"),
        resolved_by=decode_actor(node.get("resolvedBy"), "resolvedBy"),
        comments=comments,
        comments_truncated=truncated,
        comment_count=total_count,
    )


def _commit(node: Node, cap: int) -> CommitPayload:
    raw = node.get("commit")
    if not isinstance(raw, dict):
        raise DecodeError("PullRequestCommit has no commit", node)
    oid = optional_string(raw.get("oid"), "commit.oid")
    abbreviated = optional_string(raw.get("abbreviatedOid"), "commit.abbreviatedOid") or (
        oid[:7] if oid else None
    )
    if not abbreviated:
        raise DecodeError("commit has no oid", node)
    return CommitPayload(
        commit=Commit(
            abbreviated_oid=abbreviated,
            oid=oid,
            message_headline=raw.get("messageHeadline"),
            committed_date=_timestamp(raw, "committedDate"),
            author=decode_git_actor(raw.get("author"), "commit.author"),
            committer=decode_git_actor(raw.get("committer"), "commit.committer"),
            authored_by_committer=raw.get("authoredByCommitter"),
            url=raw.get("url"),
        )
    )


def _merged(node: Node, cap: int) -> MergedPayload:
    return MergedPayload(
        merge_ref_name=node.get("mergeRefName"),
        commit=decode_commit_ref(node.get("commit")),
    )


def _locked(node: Node, cap: int) -> LockedPayload:
    raw = node.get("lockReason")
    return LockedPayload(lock_reason=_lock_reason(raw), raw_lock_reason=raw)


def _milestoned(node: Node, cap: int) -> MilestonedPayload:
    return MilestonedPayload(milestone_title=node.get("milestoneTitle"))


def _demilestoned(node: Node, cap: int) -> DemilestonedPayload:
    return DemilestonedPayload(milestone_title=node.get("milestoneTitle"))


def _marked_duplicate(node: Node, cap: int) -> MarkedDuplicatePayload:
    return MarkedDuplicatePayload(
        canonical=decode_resource(node.get("canonical"), "canonical"),
        duplicate=decode_resource(node.get("duplicate"), "duplicate"),
        is_cross_repository=node.get("isCrossRepository"),
    )


def _unmarked_duplicate(node: Node, cap: int) -> UnmarkedDuplicatePayload:
    return UnmarkedDuplicatePayload(
        canonical=decode_resource(node.get("canonical"), "canonical"),
        duplicate=decode_resource(node.get("duplicate"), "duplicate"),
        is_cross_repository=node.get("isCrossRepository"),
    )


def _renamed_title(node: Node, cap: int) -> RenamedTitlePayload:
    return RenamedTitlePayload(
        previous_title=node.get("previousTitle"),
        current_title=node.get("currentTitle"),
    )


def _converted_to_discussion(node: Node, cap: int) -> ConvertedToDiscussionPayload:
    return ConvertedToDiscussionPayload(
        discussion=decode_resource(node.get("discussion"), "discussion"),
    )


def _force_pushed(node: Node, cap: int) -> ForcePushedPayload:
    return ForcePushedPayload(
        before_commit=decode_commit_ref(node.get("beforeCommit"), "beforeCommit"),
        after_commit=decode_commit_ref(node.get("afterCommit"), "afterCommit"),
        ref_name=optional_object(node.get("ref"), "ref").get("name"),
    )


def _head_deleted(node: Node, cap: int) -> HeadDeletedPayload:
    return HeadDeletedPayload(head_ref_name=node.get("headRefName"))


def _review_requested(node: Node, cap: int) -> ReviewRequestedPayload:
    return ReviewRequestedPayload(
        requested_reviewer=decode_actor(node.get("requestedReviewer"), "requestedReviewer"),
    )


def _review_request_removed(node: Node, cap: int) -> ReviewRequestRemovedPayload:
    return ReviewRequestRemovedPayload(
        requested_reviewer=decode_actor(node.get("requestedReviewer"), "requestedReviewer"),
    )


def _empty(payload_cls: type) -> PayloadBuilder:
    return lambda node, cap: payload_cls()


PAYLOAD_BUILDERS: dict[str, PayloadBuilder] = {
    "AssignedEvent": _assigned,
    "UnassignedEvent": _unassigned,
    "LabeledEvent": _labeled,
    "UnlabeledEvent": _unlabeled,
    "ClosedEvent": _closed,
    "ReopenedEvent": _reopened,
    "ConnectedEvent": _connected,
    "CrossReferencedEvent": _cross_referenced,
    "ReferencedEvent": _referenced,
    "IssueComment": _commented,
    "PullRequestReview": _review,
    "PullRequestReviewThread": _review_thread,
    "PullRequestCommit": _commit,
    "MergedEvent": _merged,
    "LockedEvent": _locked,
    "UnlockedEvent": _empty(UnlockedPayload),
    "PinnedEvent": _empty(PinnedPayload),
    "UnpinnedEvent": _empty(UnpinnedPayload),
    "MilestonedEvent": _milestoned,
    "DemilestonedEvent": _demilestoned,
    "MarkedAsDuplicateEvent": _marked_duplicate,
    "UnmarkedAsDuplicateEvent": _unmarked_duplicate,
    "RenamedTitleEvent": _renamed_title,
    "ConvertedToDiscussionEvent": _converted_to_discussion,
    "HeadRefForcePushedEvent": _force_pushed,
    "HeadRefDeletedEvent": _head_deleted,
    "ReviewRequestedEvent": _review_requested,
    "ReviewRequestRemovedEvent": _review_request_removed,
    "ConvertToDraftEvent": _empty(ConvertedToDraftPayload),
    "ReadyForReviewEvent": _empty(ReadyForReviewPayload),
    "SubscribedEvent": _empty(SubscribedPayload),
    "MentionedEvent": _empty(MentionedPayload),
}

KNOWN_TYPENAMES = frozenset(PAYLOAD_BUILDERS)

# Types whose acting user is selected as ``author`` instead of ``actor``
_AUTHORED_TYPES = {"IssueComment", "PullRequestReview"}


def _envelope_actor(raw_type: str, node: Node, payload: Any) -> Optional[ActorRef]:
    if raw_type in _AUTHORED_TYPES:
        return decode_actor(node.get("author"), "author")
    if isinstance(payload, CommitPayload):
        commit = payload.commit
        for git_actor in (commit.author, commit.committer):
            if git_actor is not None and git_actor.user is not None:
                return git_actor.user
        return None
    if isinstance(payload, ReviewThreadPayload):
        return payload.comments[0].author if payload.comments else None
    return decode_actor(node.get("actor"), "actor")


def _envelope_timestamp(node: Node, payload: Any):
    if isinstance(payload, CommitPayload):
        return payload.commit.committed_date
    return _timestamp(node)


def _decode_known(
    raw_type: str, node: Node, comments_page_size: int, warn_on_truncation: bool
) -> TimelineEvent:
    payload = PAYLOAD_BUILDERS[raw_type](node, comments_page_size)
    event = TimelineEvent(
        id=node.get("id"),
        timestamp=_envelope_timestamp(node, payload),
        actor=_envelope_actor(raw_type, node, payload),
        payload=payload,
    )
    if getattr(payload, "comments_truncated", False):
        report_truncation(
            f"{raw_type} {event.id} comments",
            len(payload.comments),
            comments_page_size,
            emit_warning=warn_on_truncation,
        )
    return event


def unknown_event(raw: Any, raw_type: Optional[str] = None, error: Optional[str] = None) -> TimelineEvent:
    """Wrap a node we could not (or would not) decode, keeping it verbatim."""
    raw_id = raw.get("id") if isinstance(raw, dict) else None
    return TimelineEvent(
        id=raw_id if isinstance(raw_id, str) else None,
        payload=UnknownPayload(raw_type=raw_type, raw_payload=raw, error=error),
    )


def decode_event(
    node: Any,
    comments_page_size: int = COMMENTS_PAGE_SIZE,
    warn_on_truncation: bool = False,
) -> TimelineEvent:
    """Decode one raw timeline node.

    Never raises for node-level problems: unrecognized ``__typename`` values
    and malformed nodes both come back as ``UNKNOWN`` events, the latter with
    ``payload.error`` describing what was wrong.

    Args:
        node: Raw ``timelineItems.edges[].node`` object
        comments_page_size: The ``first:`` argument of nested comment connections
        warn_on_truncation: Also issue a ``TruncationWarning`` when a nested
            comment connection looks truncated (it is always logged)

    Returns:
        The normalized event
    """
    raw_type = node.get("__typename") if isinstance(node, dict) else None
    if not isinstance(raw_type, str):
        raw_type = None

    try:
        raw_type = typename(node, "timeline node")
        if raw_type not in PAYLOAD_BUILDERS:
            logger.debug("Unknown timeline item type %s", raw_type)
            return unknown_event(node, raw_type)
        return _decode_known(raw_type, node, comments_page_size, warn_on_truncation)
    except (DecodeError, ValidationError) as e:
        if isinstance(e, ValidationError):
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            message = f"{e.title}.{location}: {first['msg']}"
        else:
            message = str(e)
        logger.warning("Could not decode %s node: %s", raw_type or "untyped", message)
        return unknown_event(node, raw_type, error=message)
