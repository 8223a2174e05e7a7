"""Tests for data models."""

from datetime import datetime, timezone

import pytest

from github_timeline.models.activity import (
    ActivityModel,
    IssueClosedReason,
    SubjectKind,
    SubjectSummary,
)
from github_timeline.models.events import (
    ClosedPayload,
    CommentedPayload,
    CrossReferencedPayload,
    EventKind,
    LabeledPayload,
    TimelineEvent,
    UnknownPayload,
)
from github_timeline.models.refs import (
    ActorKind,
    ActorRef,
    LabelRef,
    ResourceKind,
    ResourceRef,
)


def actor(login):
    return ActorRef(kind=ActorKind.USER, login=login)


def pr_ref(number):
    return ResourceRef(kind=ResourceKind.PULL_REQUEST, owner="o", repo="r", number=number)


class TestRefs:
    """Tests for reference value types."""

    def test_actor_without_login(self):
        """Test display of an actor whose login is unknown."""
        assert str(ActorRef(kind=ActorKind.UNKNOWN)) == "<Unknown>"

    def test_resource_commit_with_repository(self):
        """Test display of a commit in a known repository."""
        ref = ResourceRef(kind=ResourceKind.COMMIT, owner="o", repo="r", oid="abc1234")
        assert str(ref) == "o/r@abc1234"

    def test_refs_are_hashable(self):
        """Test that frozen refs can be used in sets."""
        assert len({actor("a"), actor("a"), actor("b")}) == 2


class TestTimelineEvent:
    """Tests for the event envelope."""

    def test_kind_follows_payload(self):
        """Test that kind is derived from the payload."""
        event = TimelineEvent(payload=LabeledPayload(label=LabelRef(name="bug")))
        assert event.kind is EventKind.LABELED
        assert not event.is_unknown

    def test_dump_includes_kind(self):
        """Test that the serialized form carries the kind."""
        event = TimelineEvent(
            id="E1",
            timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
            payload=CommentedPayload(body="hi"),
        )
        data = event.model_dump(mode="json")
        assert data["kind"] == "commented"
        assert data["payload"]["kind"] == "commented"
        assert data["payload"]["body"] == "hi"

    def test_payload_validated_by_discriminator(self):
        """Test that a payload dict is resolved through its kind."""
        event = TimelineEvent.model_validate(
            {"payload": {"kind": EventKind.UNKNOWN, "raw_type": "X", "raw_payload": {"a": 1}}}
        )
        assert isinstance(event.payload, UnknownPayload)
        assert event.payload.raw_payload == {"a": 1}


class TestSubjectSummary:
    """Tests for SubjectSummary closure reasons."""

    def test_open(self):
        """Test that an open subject has no closed reason."""
        summary = SubjectSummary(state="OPEN", closed=False)
        assert summary.is_closed is False
        assert summary.closed_reason is None

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("COMPLETED", IssueClosedReason.COMPLETED),
            ("NOT_PLANNED", IssueClosedReason.NOT_PLANNED),
            ("DUPLICATE", IssueClosedReason.DUPLICATE),
            ("completed", IssueClosedReason.COMPLETED),
            ("SOMETHING_NEW", IssueClosedReason.UNKNOWN),
            (None, IssueClosedReason.NOT_PLANNED),
        ],
    )
    def test_closed_reason(self, raw, expected):
        """Test state reason mapping for closed subjects."""
        summary = SubjectSummary(closed=True, state_reason=raw)
        assert summary.closed_reason is expected

    def test_state_fallback(self):
        """Test that state is used when closed was not selected."""
        assert SubjectSummary(state="MERGED").is_closed is True
        assert SubjectSummary(state="OPEN").is_closed is False


class TestActivityModelHelpers:
    """Tests for ActivityModel query helpers."""

    @pytest.fixture
    def model(self):
        return ActivityModel(
            subject_kind=SubjectKind.ISSUE,
            events=(
                TimelineEvent(actor=actor("alice"), payload=CommentedPayload(body="a")),
                TimelineEvent(
                    actor=actor("bob"),
                    payload=CrossReferencedPayload(source=pr_ref(5), will_close_target=True),
                ),
                TimelineEvent(
                    actor=actor("carol"),
                    payload=CrossReferencedPayload(source=pr_ref(6), will_close_target=False),
                ),
                TimelineEvent(actor=actor("alice"), payload=CommentedPayload(body="b")),
                TimelineEvent(actor=actor("bob"), payload=ClosedPayload(closer=pr_ref(5))),
                TimelineEvent(payload=UnknownPayload(raw_type="X")),
            ),
        )

    def test_count_by_kind(self, model):
        """Test per-kind counts."""
        assert model.count_by_kind() == {
            EventKind.COMMENTED: 2,
            EventKind.CROSS_REFERENCED: 2,
            EventKind.CLOSED: 1,
            EventKind.UNKNOWN: 1,
        }

    def test_participants(self, model):
        """Test distinct actors in first-appearance order."""
        assert model.participants() == ["alice", "bob", "carol"]

    def test_events_of(self, model):
        """Test filtering by kind."""
        assert [e.payload.body for e in model.events_of(EventKind.COMMENTED)] == ["a", "b"]
        assert len(model.events_of(EventKind.CLOSED, EventKind.UNKNOWN)) == 2

    def test_closing_references(self, model):
        """Test closers and will-close cross references."""
        assert [ref.number for ref in model.closing_references()] == [5, 5]
