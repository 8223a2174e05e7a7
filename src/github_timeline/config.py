"""Configuration management for GitHub Timeline."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass
class Config:
    """Application configuration."""

    github_token: str | None
    github_graphql_url: str = "https://api.github.com/graphql"

    # Wire caps of the fixed query documents
    page_size: int = 100  # timelineItems(first: 100)
    comments_page_size: int = 100  # comments(first: 100) on reviews and threads

    # Fetching
    max_concurrency: int = 4
    max_retries: int = 3
    request_timeout: float = 30.0

    # Issue TruncationWarning (not just a log line) for capped connections
    warn_on_truncation: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        # override=False ensures environment variables take precedence over .env
        load_dotenv(override=False)

        # Support both GITHUB_TIMELINE_TOKEN (preferred) and GITHUB_TOKEN (fallback)
        token = os.getenv("GITHUB_TIMELINE_TOKEN") or os.getenv("GITHUB_TOKEN")

        return cls(
            github_token=token,
            github_graphql_url=os.getenv(
                "GITHUB_GRAPHQL_URL", "https://api.github.com/graphql"
            ),
            max_concurrency=int(os.getenv("GITHUB_TIMELINE_MAX_CONCURRENCY", "4")),
            warn_on_truncation=os.getenv("GITHUB_TIMELINE_WARN_ON_TRUNCATION", "").lower()
            in ("1", "true", "yes"),
        )

    @property
    def is_authenticated(self) -> bool:
        """Check if a GitHub token is configured."""
        return bool(self.github_token)


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def set_config(config: Config | None) -> None:
    """Set the global configuration instance (useful for testing)."""
    global _config
    _config = config
