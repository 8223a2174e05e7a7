"""Utility modules for GitHub Timeline."""

from github_timeline.utils.pagination import connection_items, is_truncated, report_truncation
from github_timeline.utils.rate_limiter import RateLimiter, get_rate_limiter, reset_rate_limiter
from github_timeline.utils.time import parse_datetime

__all__ = [
    "RateLimiter",
    "get_rate_limiter",
    "reset_rate_limiter",
    "connection_items",
    "is_truncated",
    "report_truncation",
    "parse_datetime",
]
