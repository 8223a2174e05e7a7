"""Page extractor: walks the timeline edges of one GraphQL response."""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from github_timeline.decoders.events import decode_event
from github_timeline.exceptions import MalformedResponseError
from github_timeline.models.activity import DecodeDiagnostic, SubjectKind, SubjectSummary
from github_timeline.models.events import TimelineEvent, UnknownPayload
from github_timeline.queries import COMMENTS_PAGE_SIZE, TIMELINE_PAGE_SIZE
from github_timeline.utils.pagination import is_truncated, report_truncation

logger = logging.getLogger(__name__)

_SUBJECT_FIELDS = {
    "issue": SubjectKind.ISSUE,
    "pullRequest": SubjectKind.PULL_REQUEST,
}


@dataclass(frozen=True)
class ExtractedPage:
    """Events of one response page, in edge order, plus page-level facts."""

    subject_kind: SubjectKind
    events: list[TimelineEvent]
    truncated: bool
    edge_count: int
    subject: Optional[SubjectSummary] = None
    diagnostics: list[DecodeDiagnostic] = field(default_factory=list)


def _locate_subject(
    raw: Any, subject_kind: Optional[SubjectKind]
) -> tuple[SubjectKind, dict[str, Any]]:
    """Find the issue or pull request object that owns ``timelineItems``."""
    if not isinstance(raw, dict):
        raise MalformedResponseError("Response is not an object", raw)

    if "data" in raw:
        if raw["data"] is None:
            raise MalformedResponseError("Response has no data", raw)
        raw = raw["data"]
        if not isinstance(raw, dict):
            raise MalformedResponseError("Response data is not an object", raw)

    if "timelineItems" in raw:
        if subject_kind is None:
            raise MalformedResponseError("Subject kind is required for a bare subject object", raw)
        return subject_kind, raw

    container = raw.get("repository", raw)
    if not isinstance(container, dict):
        raise MalformedResponseError("Response has no repository object", raw)

    for key, kind in _SUBJECT_FIELDS.items():
        if key in container and (subject_kind is None or subject_kind is kind):
            subject = container[key]
            if not isinstance(subject, dict):
                raise MalformedResponseError(f"Response {key} is not an object", raw)
            return kind, subject

    raise MalformedResponseError("Response has no issue or pullRequest", raw)


def _edges(subject: dict[str, Any]) -> tuple[list[Any], Optional[int]]:
    """Return raw nodes of ``timelineItems`` (edge wrappers removed) and totalCount."""
    timeline = subject.get("timelineItems")
    if not isinstance(timeline, dict):
        raise MalformedResponseError("timelineItems is missing or not an object", subject)

    if isinstance(timeline.get("edges"), list):
        nodes = [edge.get("node") if isinstance(edge, dict) else None for edge in timeline["edges"]]
    elif isinstance(timeline.get("nodes"), list):
        nodes = list(timeline["nodes"])
    else:
        raise MalformedResponseError("timelineItems has no edge list", subject)

    total_count = timeline.get("totalCount")
    if total_count is not None and (not isinstance(total_count, int) or isinstance(total_count, bool)):
        raise MalformedResponseError("timelineItems totalCount is not an integer", subject)

    return nodes, total_count


def _subject_summary(subject: dict[str, Any]) -> SubjectSummary:
    return SubjectSummary(
        number=subject.get("number"),
        title=subject.get("title"),
        body=subject.get("body"),
        state=subject.get("state"),
        state_reason=subject.get("stateReason"),
        closed=subject.get("closed"),
        url=subject.get("url"),
    )


def extract_page(
    raw_response: Any,
    subject_kind: Optional[SubjectKind] = None,
    page_size: int = TIMELINE_PAGE_SIZE,
    comments_page_size: int = COMMENTS_PAGE_SIZE,
    warn_on_truncation: bool = False,
) -> ExtractedPage:
    """Decode every node of one response page.

    Args:
        raw_response: Full GraphQL response (``{"data": ...}``), its ``data``
            object, or a bare subject object holding ``timelineItems``
        subject_kind: Expected subject; inferred from the response when omitted
        page_size: The ``first:`` argument of ``timelineItems``
        comments_page_size: The ``first:`` argument of nested comment connections
        warn_on_truncation: Issue ``TruncationWarning`` for truncated connections
            in addition to logging them

    Returns:
        ExtractedPage with events in edge order

    Raises:
        MalformedResponseError: If the response is not a container of edges
    """
    kind, subject = _locate_subject(raw_response, subject_kind)
    nodes, total_count = _edges(subject)

    events: list[TimelineEvent] = []
    diagnostics: list[DecodeDiagnostic] = []

    for index, node in enumerate(nodes):
        if node is None:
            diagnostics.append(DecodeDiagnostic(index=index, message="edge has no node"))
            continue

        event = decode_event(
            node,
            comments_page_size=comments_page_size,
            warn_on_truncation=warn_on_truncation,
        )
        payload = event.payload
        if isinstance(payload, UnknownPayload) and payload.error:
            diagnostics.append(
                DecodeDiagnostic(index=index, raw_type=payload.raw_type, message=payload.error)
            )
        events.append(event)

    truncated = is_truncated(len(nodes), page_size, total_count)
    if truncated:
        report_truncation(
            f"{kind.value} timelineItems", len(nodes), page_size, emit_warning=warn_on_truncation
        )

    logger.debug(
        "Extracted %d events from %d edges (truncated=%s)", len(events), len(nodes), truncated
    )

    return ExtractedPage(
        subject_kind=kind,
        events=events,
        truncated=truncated,
        edge_count=len(nodes),
        subject=_subject_summary(subject),
        diagnostics=diagnostics,
    )
