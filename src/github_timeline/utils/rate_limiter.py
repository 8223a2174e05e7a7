"""Rate limiter for GitHub GraphQL API requests."""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from rich.console import Console

from github_timeline.exceptions import RateLimitExceededError

console = Console(stderr=True)

# Warn when fewer points than this remain
LOW_REMAINING_THRESHOLD = 100


def format_time_remaining(seconds: float) -> str:
    """Format seconds into a human-friendly string."""
    if seconds <= 0:
        return "now"

    seconds = int(seconds)

    if seconds < 60:
        return f"{seconds} second{'s' if seconds != 1 else ''}"
    elif seconds < 3600:
        minutes = seconds // 60
        secs = seconds % 60
        if secs > 0:
            return f"{minutes} min {secs} sec"
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    else:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        if minutes > 0:
            return f"{hours} hr {minutes} min"
        return f"{hours} hour{'s' if hours != 1 else ''}"


def format_reset_time(reset_timestamp: float) -> str:
    """Format reset timestamp to a human-readable local time."""
    reset_dt = datetime.fromtimestamp(reset_timestamp)
    return reset_dt.strftime("%H:%M:%S")


@dataclass
class RateLimitState:
    """Track rate limit state for an API."""

    limit: int
    remaining: int
    reset_time: float  # Unix timestamp

    @property
    def is_exhausted(self) -> bool:
        """Check if rate limit is exhausted."""
        return self.remaining <= 0

    @property
    def seconds_until_reset(self) -> float:
        """Get seconds until rate limit resets."""
        return max(0, self.reset_time - time.time())

    def update_from_headers(self, headers: dict) -> None:
        """Update state from GitHub API response headers."""
        if "x-ratelimit-limit" in headers:
            self.limit = int(headers["x-ratelimit-limit"])
        if "x-ratelimit-remaining" in headers:
            self.remaining = int(headers["x-ratelimit-remaining"])
        if "x-ratelimit-reset" in headers:
            self.reset_time = float(headers["x-ratelimit-reset"])


@dataclass
class RateLimiter:
    """Rate limiter for the GraphQL API (5000 points/hour)."""

    graphql: RateLimitState = field(
        default_factory=lambda: RateLimitState(
            limit=5000, remaining=5000, reset_time=time.time() + 3600
        )
    )

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def acquire_graphql(self, cost: int = 1) -> None:
        """Acquire permission for a GraphQL API request."""
        async with self._lock:
            state = self.graphql
            if state.remaining < cost:
                wait_time = state.seconds_until_reset
                if wait_time > 0:
                    human_time = format_time_remaining(wait_time)
                    reset_at = format_reset_time(state.reset_time)
                    console.print("\n[red]Rate limit exceeded[/red] for GraphQL API.")
                    console.print(f"[yellow]  Resets in: {human_time} (at {reset_at})[/yellow]\n")
                    raise RateLimitExceededError(
                        f"Rate limit exceeded. Resets in {human_time} (at {reset_at})"
                    )

            state.remaining -= cost

    def update_graphql_from_headers(self, headers: dict) -> None:
        """Update GraphQL rate limit state from response headers."""
        self.graphql.update_from_headers(headers)

    def get_status(self) -> dict:
        """Get current rate limit status."""
        return {
            "graphql": {
                "remaining": self.graphql.remaining,
                "limit": self.graphql.limit,
                "reset_in": self.graphql.seconds_until_reset,
            },
        }


# Global rate limiter instance
_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the global rate limiter instance."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter


def reset_rate_limiter() -> None:
    """Reset the global rate limiter (useful for testing)."""
    global _rate_limiter
    _rate_limiter = None


def check_and_report_rate_limit(rate_info: dict) -> bool:
    """Check a GraphQL ``rateLimit`` result and report status to user.

    Args:
        rate_info: ``{"limit", "remaining", "resetAt"}`` from the rateLimit query,
            with ``resetAt`` already converted to a Unix timestamp under ``reset``

    Returns:
        True if OK to proceed, False if rate limit exhausted
    """
    remaining = rate_info["remaining"]
    limit = rate_info["limit"]
    reset_time = rate_info["reset"]

    if remaining == 0:
        human_time = format_time_remaining(reset_time - time.time())
        reset_at = format_reset_time(reset_time)

        console.print(f"\n[red]Rate limit exhausted[/red] (0/{limit} points remaining)")
        console.print(f"[yellow]  Resets in: {human_time} (at {reset_at})[/yellow]")
        console.print()
        return False

    if remaining < LOW_REMAINING_THRESHOLD:
        console.print(
            f"[yellow]Warning: Only {remaining}/{limit} GraphQL points remaining[/yellow]"
        )

    return True
