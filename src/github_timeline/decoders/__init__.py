"""Decoders turning raw timeline responses into normalized events."""

from github_timeline.decoders.events import KNOWN_TYPENAMES, decode_event
from github_timeline.decoders.page import ExtractedPage, extract_page
from github_timeline.decoders.refs import (
    decode_actor,
    decode_commit_ref,
    decode_git_actor,
    decode_label,
    decode_resource,
)

__all__ = [
    "KNOWN_TYPENAMES",
    "decode_event",
    "ExtractedPage",
    "extract_page",
    "decode_actor",
    "decode_commit_ref",
    "decode_git_actor",
    "decode_label",
    "decode_resource",
]
