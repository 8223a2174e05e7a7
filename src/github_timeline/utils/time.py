"""Timestamp parsing for GitHub's ISO 8601 DateTime scalar."""

from datetime import datetime


def parse_datetime(value: str | None, strict: bool = False) -> datetime | None:
    """Parse ISO datetime string.

    Absent values always give None. Unparseable values give None unless
    ``strict`` is set, in which case the ValueError propagates.
    """
    if not value:
        return None
    try:
        # Handle ISO format with or without Z suffix
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    except (ValueError, TypeError, AttributeError):
        if strict:
            raise ValueError(f"Invalid DateTime value: {value!r}") from None
        return None
