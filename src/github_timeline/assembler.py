"""Timeline assembler: ordering, merging and diagnostics.

Events are ordered by timestamp, but undated events (the linkage profile,
review threads, anything decoded as Unknown) are incomparable with dated ones.
They stay attached directly after the last dated event that preceded them in
edge order; undated events before the first dated one stay at the front.
"""

import heapq
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from github_timeline.decoders.page import ExtractedPage
from github_timeline.models.activity import (
    ActivityModel,
    DecodeDiagnostic,
    QueryProfile,
    SubjectKind,
    SubjectSummary,
)
from github_timeline.models.events import TimelineEvent, UnknownPayload

logger = logging.getLogger(__name__)

# A dated event followed by the undated events anchored to it
_Group = tuple[TimelineEvent, list[TimelineEvent]]


def _sort_key(event: TimelineEvent) -> Optional[datetime]:
    """Timestamp used for ordering, or None for undated/unknown events."""
    if event.timestamp is None or isinstance(event.payload, UnknownPayload):
        return None
    if event.timestamp.tzinfo is None:
        # GitHub always sends UTC; naive values come from hand-built events
        return event.timestamp.replace(tzinfo=timezone.utc)
    return event.timestamp


def _anchor(events: Iterable[TimelineEvent]) -> tuple[list[TimelineEvent], list[_Group]]:
    leading: list[TimelineEvent] = []
    groups: list[_Group] = []
    for event in events:
        if _sort_key(event) is None:
            (groups[-1][1] if groups else leading).append(event)
        else:
            groups.append((event, []))
    return leading, groups


def _flatten(leading: list[TimelineEvent], groups: Iterable[_Group]) -> list[TimelineEvent]:
    ordered = list(leading)
    for dated, trailing in groups:
        ordered.append(dated)
        ordered.extend(trailing)
    return ordered


def order_events(events: Sequence[TimelineEvent]) -> list[TimelineEvent]:
    """Stable timestamp ordering that never moves an undated event past a dated neighbor."""
    leading, groups = _anchor(events)
    groups.sort(key=lambda group: _sort_key(group[0]))
    return _flatten(leading, groups)


def assemble(
    subject_kind: SubjectKind,
    events: Sequence[TimelineEvent],
    truncated: bool,
    profile: QueryProfile = QueryProfile.FULL,
    subject: Optional[SubjectSummary] = None,
    diagnostics: Sequence[DecodeDiagnostic] = (),
) -> ActivityModel:
    """Build the immutable activity model for one subject.

    Args:
        subject_kind: Issue or pull request
        events: Decoded events in edge order
        truncated: Whether the page hit its cap
        profile: Query profile that produced the events
        subject: Top-level subject fields, when decoded
        diagnostics: Per-node decode diagnostics

    Returns:
        ActivityModel with ordered events and counts
    """
    ordered = order_events(events)
    unknown = sum(1 for event in ordered if event.is_unknown)
    if unknown:
        logger.info("%d timeline item(s) decoded as unknown", unknown)

    return ActivityModel(
        subject_kind=subject_kind,
        events=tuple(ordered),
        truncated=truncated,
        unknown_variant_count=unknown,
        decode_error_count=len(diagnostics),
        profile=profile,
        subject=subject,
        diagnostics=tuple(diagnostics),
    )


def assemble_page(page: ExtractedPage, profile: QueryProfile = QueryProfile.FULL) -> ActivityModel:
    """Assemble the output of ``extract_page``."""
    return assemble(
        page.subject_kind,
        page.events,
        page.truncated,
        profile=profile,
        subject=page.subject,
        diagnostics=page.diagnostics,
    )


def merge_models(first: ActivityModel, second: ActivityModel) -> ActivityModel:
    """Interleave two already-assembled timelines, e.g. an issue and the PR closing it.

    Dated events are merged on timestamp, ``first`` winning ties. Undated and
    unknown events from either side stay directly after their last dated
    predecessor from that same side. The result takes its subject from
    ``first``.
    """
    first_leading, first_groups = _anchor(order_events(first.events))
    second_leading, second_groups = _anchor(order_events(second.events))

    merged_groups = heapq.merge(
        first_groups, second_groups, key=lambda group: _sort_key(group[0])
    )
    events = _flatten(first_leading + second_leading, merged_groups)

    profile = (
        QueryProfile.FULL
        if first.profile is QueryProfile.FULL and second.profile is QueryProfile.FULL
        else QueryProfile.LINKAGE
    )

    return ActivityModel(
        subject_kind=first.subject_kind,
        events=tuple(events),
        truncated=first.truncated or second.truncated,
        unknown_variant_count=first.unknown_variant_count + second.unknown_variant_count,
        decode_error_count=first.decode_error_count + second.decode_error_count,
        profile=profile,
        subject=first.subject,
        diagnostics=first.diagnostics + second.diagnostics,
    )
