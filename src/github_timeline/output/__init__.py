"""Output formatting for timeline reports."""

from github_timeline.output.console import Console
from github_timeline.output.json_writer import build_report, write_json_report

__all__ = ["Console", "build_report", "write_json_report"]
