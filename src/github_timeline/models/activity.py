"""Activity model: the assembled, immutable view of one subject's timeline."""

from collections import Counter
from enum import Enum

from pydantic import BaseModel, ConfigDict

from github_timeline.models.events import (
    ClosedPayload,
    CrossReferencedPayload,
    EventKind,
    TimelineEvent,
)
from github_timeline.models.refs import ResourceRef


class SubjectKind(str, Enum):
    """What the timeline belongs to."""

    ISSUE = "issue"
    PULL_REQUEST = "pull_request"


class QueryProfile(str, Enum):
    """Which query document produced a response."""

    LINKAGE = "linkage"  # minimal issue query, no createdAt/id
    FULL = "full"


class IssueClosedReason(str, Enum):
    """Reason an issue was closed."""

    COMPLETED = "COMPLETED"
    NOT_PLANNED = "NOT_PLANNED"
    DUPLICATE = "DUPLICATE"
    REOPENED = "REOPENED"
    UNKNOWN = "UNKNOWN"


class SubjectSummary(BaseModel):
    """Top-level fields of the issue or pull request the timeline belongs to."""

    model_config = ConfigDict(frozen=True)

    number: int | None = None
    title: str | None = None
    body: str | None = None
    state: str | None = None  # OPEN, CLOSED, MERGED
    state_reason: str | None = None
    closed: bool | None = None
    url: str | None = None

    @property
    def is_closed(self) -> bool:
        if self.closed is not None:
            return self.closed
        return (self.state or "").upper() in {"CLOSED", "MERGED"}

    @property
    def closed_reason(self) -> IssueClosedReason | None:
        """Why the subject was closed, or None while it is open.

        A closed subject without a state reason counts as not planned.
        """
        if not self.is_closed:
            return None
        if not self.state_reason:
            return IssueClosedReason.NOT_PLANNED
        try:
            return IssueClosedReason(self.state_reason.upper())
        except ValueError:
            return IssueClosedReason.UNKNOWN


class DecodeDiagnostic(BaseModel):
    """Why a node was skipped or downgraded to an Unknown event."""

    model_config = ConfigDict(frozen=True)

    index: int  # edge position in the response page
    raw_type: str | None = None
    message: str


class ActivityModel(BaseModel):
    """Uniform, ordered activity for one issue or pull request.

    Built once per API response and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    subject_kind: SubjectKind
    events: tuple[TimelineEvent, ...] = ()
    truncated: bool = False
    unknown_variant_count: int = 0
    decode_error_count: int = 0
    profile: QueryProfile = QueryProfile.FULL
    subject: SubjectSummary | None = None
    diagnostics: tuple[DecodeDiagnostic, ...] = ()

    def count_by_kind(self) -> dict[EventKind, int]:
        """Count events per kind, in first-appearance order."""
        return dict(Counter(event.kind for event in self.events))

    def participants(self) -> list[str]:
        """Distinct actor logins in first-appearance order."""
        seen: dict[str, None] = {}
        for event in self.events:
            if event.actor and event.actor.login:
                seen.setdefault(event.actor.login, None)
        return list(seen)

    def events_of(self, *kinds: EventKind) -> list[TimelineEvent]:
        """Events whose kind is one of ``kinds``, in timeline order."""
        wanted = set(kinds)
        return [event for event in self.events if event.kind in wanted]

    def closing_references(self) -> list[ResourceRef]:
        """Resources that closed the subject or were marked as closing it."""
        refs: list[ResourceRef] = []
        for event in self.events:
            payload = event.payload
            if isinstance(payload, ClosedPayload) and payload.closer is not None:
                refs.append(payload.closer)
            elif (
                isinstance(payload, CrossReferencedPayload)
                and payload.will_close_target
                and payload.source is not None
            ):
                refs.append(payload.source)
        return refs
