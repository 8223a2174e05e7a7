"""Tests for console and JSON output."""

import json

from github_timeline.models.events import (
    ClosedPayload,
    LabeledPayload,
    ReviewPayload,
    ReviewState,
    TimelineEvent,
    UnknownPayload,
)
from github_timeline.models.refs import LabelRef, ResourceKind, ResourceRef
from github_timeline.output.console import Console, describe_event
from github_timeline.output.json_writer import build_report, write_json_report
from github_timeline.services.timeline_fetcher import decode_response

from conftest import event_node, response


class TestDescribeEvent:
    """Tests for one-line event descriptions."""

    def test_label(self):
        """Test a label description."""
        event = TimelineEvent(payload=LabeledPayload(label=LabelRef(name="bug")))
        assert describe_event(event) == "bug"

    def test_closed_without_closer(self):
        """Test a closed event without a closer."""
        assert describe_event(TimelineEvent(payload=ClosedPayload())) == "no closer"

    def test_closed_by_pull_request(self):
        """Test a closed event with a pull request closer."""
        closer = ResourceRef(kind=ResourceKind.PULL_REQUEST, owner="o", repo="r", number=4)
        assert describe_event(TimelineEvent(payload=ClosedPayload(closer=closer))) == "by o/r#4"

    def test_review_truncated(self):
        """Test that truncated review comments are marked."""
        payload = ReviewPayload(state=ReviewState.APPROVED, comments_truncated=True)
        assert describe_event(TimelineEvent(payload=payload)) == "APPROVED (0+ comments)"

    def test_unknown_with_error(self):
        """Test an Unknown event that failed to decode."""
        payload = UnknownPayload(raw_type="LabeledEvent", error="label has no name")
        assert describe_event(TimelineEvent(payload=payload)) == "LabeledEvent: label has no name"


class TestJsonReport:
    """Tests for the JSON report."""

    def test_build_report(self):
        """Test report contents."""
        raw = response(
            [event_node("LabeledEvent", label={"name": "bug"}), {"__typename": "NewEvent"}],
            number=7,
        )
        report = build_report(decode_response(raw), owner="octo", repo="repo")

        assert report["repository"] == "octo/repo"
        assert report["subject_kind"] == "issue"
        assert report["subject"]["number"] == 7
        assert report["unknown_variant_count"] == 1
        assert report["summary"]["by_kind"] == {"labeled": 1, "unknown": 1}
        assert report["summary"]["participants"] == ["octocat"]
        assert report["events"][0]["kind"] == "labeled"
        assert report["events"][0]["payload"]["label"]["name"] == "bug"

    def test_write_json_report(self, tmp_path):
        """Test writing a report to an explicit path."""
        raw = response([event_node("PinnedEvent")])
        report = build_report(decode_response(raw))
        path = write_json_report(report, tmp_path / "nested" / "out.json")

        assert path.exists()
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["summary"]["events_count"] == 1
        assert data["repository"] is None


class TestConsole:
    """Tests for the rich console wrapper."""

    def test_quiet_suppresses_output(self, capsys):
        """Test that quiet mode prints nothing but errors."""
        model = decode_response(response([event_node("PinnedEvent")]))
        console = Console(quiet=True)
        console.print_header("Issue", model.subject)
        console.print_events(model)
        console.print_summary(model)
        console.print_error("bad")
        out = capsys.readouterr().out
        assert "Timeline" not in out
        assert "bad" in out

    def test_summary_warns_on_truncation(self, capsys):
        """Test that a truncated model prints a warning."""
        nodes = [event_node("PinnedEvent", f"2024-01-01T00:{i // 60:02d}:{i % 60:02d}Z") for i in range(100)]
        model = decode_response(response(nodes))
        Console().print_summary(model)
        assert "100 item cap" in capsys.readouterr().out
