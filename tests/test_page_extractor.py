"""Tests for response page extraction and the offline decode pipeline."""

import warnings

import pytest

from github_timeline.config import Config
from github_timeline.decoders.page import extract_page
from github_timeline.exceptions import MalformedResponseError, TruncationWarning
from github_timeline.models.activity import QueryProfile, SubjectKind
from github_timeline.models.events import EventKind
from github_timeline.services.timeline_fetcher import decode_response

from conftest import event_node, response


def labeled(i):
    return event_node(
        "LabeledEvent",
        f"2024-01-01T00:{i // 60:02d}:{i % 60:02d}Z",
        node_id=f"LE_{i}",
        label={"name": f"l{i}"},
    )


class TestSubjectLocation:
    """Tests for finding the subject inside a response."""

    def test_full_envelope(self):
        """Test a full {"data": ...} response."""
        page = extract_page(response([labeled(1)]))
        assert page.subject_kind is SubjectKind.ISSUE
        assert len(page.events) == 1

    def test_data_object(self):
        """Test the unwrapped data object."""
        raw = response([labeled(1)], kind="pull_request")["data"]
        page = extract_page(raw)
        assert page.subject_kind is SubjectKind.PULL_REQUEST

    def test_bare_subject_needs_kind(self):
        """Test that a bare subject object needs an explicit kind."""
        subject = response([labeled(1)])["data"]["repository"]["issue"]
        with pytest.raises(MalformedResponseError, match="Subject kind is required"):
            extract_page(subject)
        assert extract_page(subject, SubjectKind.ISSUE).subject_kind is SubjectKind.ISSUE

    def test_subject_summary(self):
        """Test that top-level subject fields are kept."""
        page = extract_page(response([], number=42, title="Crash", closed=True, stateReason="COMPLETED"))
        assert page.subject.number == 42
        assert page.subject.title == "Crash"
        assert page.subject.is_closed is True


class TestMalformedResponses:
    """Top-level shape errors abort the page."""

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            [],
            {"data": None},
            {"data": {"repository": {"issue": None}}},
            {"data": {"repository": {}}},
            {"data": {"repository": {"issue": {"number": 1}}}},
            {"data": {"repository": {"issue": {"timelineItems": {"totalCount": 3}}}}},
            {"data": {"repository": {"issue": {"timelineItems": []}}}},
            {"data": {"repository": {"issue": {"timelineItems": {"edges": [], "totalCount": "3"}}}}},
        ],
    )
    def test_malformed(self, raw):
        """Test that non-container responses raise MalformedResponseError."""
        with pytest.raises(MalformedResponseError):
            extract_page(raw)

    def test_nodes_selection_is_accepted(self):
        """Test that a ``nodes`` selection works like ``edges``."""
        raw = {"data": {"repository": {"issue": {"timelineItems": {"nodes": [labeled(1)]}}}}}
        assert len(extract_page(raw).events) == 1


class TestTruncation:
    """Tests for the cursor-less truncation heuristic."""

    def test_below_cap_not_truncated(self):
        """Test that 99 edges are complete."""
        page = extract_page(response([labeled(i) for i in range(99)]))
        assert page.truncated is False
        assert page.edge_count == 99

    def test_at_cap_truncated(self):
        """Test that exactly 100 edges may be truncated."""
        page = extract_page(response([labeled(i) for i in range(100)]))
        assert page.truncated is True

    def test_total_count_above_returned(self):
        """Test that totalCount above the edge count flags truncation."""
        page = extract_page(response([labeled(1)], total_count=5))
        assert page.truncated is True

    def test_custom_page_size(self):
        """Test that the cap follows the query's first: argument."""
        page = extract_page(response([labeled(1), labeled(2)]), page_size=2)
        assert page.truncated is True

    def test_truncation_warning_is_opt_in(self):
        """Test that a capped page only warns when asked to."""
        raw = response([labeled(1), labeled(2)])
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert extract_page(raw, page_size=2).truncated is True

        with pytest.warns(TruncationWarning, match="issue timelineItems"):
            extract_page(raw, page_size=2, warn_on_truncation=True)


class TestEdgeHandling:
    """Tests for per-edge problems."""

    def test_null_node_is_skipped_with_diagnostic(self):
        """Test that a null edge node is skipped but recorded."""
        raw = response([labeled(1), None, labeled(2)])
        page = extract_page(raw)
        assert [e.id for e in page.events] == ["LE_1", "LE_2"]
        assert page.edge_count == 3
        assert len(page.diagnostics) == 1
        assert page.diagnostics[0].index == 1
        assert page.diagnostics[0].message == "edge has no node"

    def test_malformed_node_keeps_position(self):
        """Test that a malformed node becomes Unknown in place."""
        bad = event_node("LabeledEvent", label=None)
        page = extract_page(response([labeled(1), bad, labeled(2)]))
        assert [e.kind for e in page.events] == [
            EventKind.LABELED,
            EventKind.UNKNOWN,
            EventKind.LABELED,
        ]
        assert page.diagnostics[0].index == 1
        assert page.diagnostics[0].raw_type == "LabeledEvent"

    def test_unknown_type_has_no_diagnostic(self):
        """Test that an unrecognized type is not a decode error."""
        page = extract_page(response([{"__typename": "BrandNewEvent"}]))
        assert page.events[0].is_unknown
        assert page.diagnostics == []


class TestDecodeResponse:
    """Tests for the pure decode pipeline."""

    def test_counts_and_ordering(self):
        """Test that decode_response assembles an ordered model."""
        raw = response(
            [
                labeled(5),
                labeled(1),
                {"__typename": "BrandNewEvent"},
                event_node("LabeledEvent", label=None),
            ]
        )
        model = decode_response(raw)
        assert model.subject_kind is SubjectKind.ISSUE
        assert model.unknown_variant_count == 2
        assert model.decode_error_count == 1
        assert model.events[0].id == "LE_1"
        assert model.truncated is False

    def test_linkage_profile(self):
        """Test decoding a linkage response without ids or timestamps."""
        raw = {
            "data": {
                "repository": {
                    "issue": {
                        "number": 3,
                        "closed": True,
                        "stateReason": "COMPLETED",
                        "timelineItems": {
                            "edges": [
                                {
                                    "node": {
                                        "__typename": "CrossReferencedEvent",
                                        "willCloseTarget": True,
                                        "source": {
                                            "__typename": "PullRequest",
                                            "number": 8,
                                            "repository": {"name": "r", "owner": {"login": "o"}},
                                        },
                                    }
                                },
                                {
                                    "node": {
                                        "__typename": "ClosedEvent",
                                        "actor": {"__typename": "User", "login": "m"},
                                        "closer": {
                                            "__typename": "PullRequest",
                                            "number": 8,
                                            "repository": {"name": "r", "owner": {"login": "o"}},
                                        },
                                    }
                                },
                            ]
                        },
                    }
                }
            }
        }
        model = decode_response(raw, profile=QueryProfile.LINKAGE)
        assert model.profile is QueryProfile.LINKAGE
        assert [e.kind for e in model.events] == [EventKind.CROSS_REFERENCED, EventKind.CLOSED]
        assert all(e.timestamp is None for e in model.events)
        assert [str(ref) for ref in model.closing_references()] == ["o/r#8", "o/r#8"]

    def test_linkage_connected_event(self):
        """Test that a linkage ConnectedEvent selecting only __typename decodes."""
        model = decode_response(response([{"__typename": "ConnectedEvent"}]), profile=QueryProfile.LINKAGE)
        assert [e.kind for e in model.events] == [EventKind.CONNECTED]
        assert model.events[0].payload.source is None
        assert model.decode_error_count == 0

    def test_config_enables_truncation_warning(self):
        """Test that Config.warn_on_truncation reaches the page extractor."""
        config = Config(github_token=None, page_size=1, warn_on_truncation=True)
        with pytest.warns(TruncationWarning):
            model = decode_response(response([labeled(1)]), config=config)
        assert model.truncated is True
