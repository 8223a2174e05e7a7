"""Small value types shared by many timeline events."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class ActorKind(str, Enum):
    """Concrete shapes of GitHub's Actor-like unions."""

    USER = "User"
    ORGANIZATION = "Organization"
    MANNEQUIN = "Mannequin"
    BOT = "Bot"
    TEAM = "Team"
    UNKNOWN = "Unknown"


class ResourceKind(str, Enum):
    """Concrete shapes of reference-like unions (source, closer, canonical, ...)."""

    ISSUE = "Issue"
    PULL_REQUEST = "PullRequest"
    DISCUSSION = "Discussion"
    COMMIT = "Commit"
    REPOSITORY = "Repository"
    PROJECT = "ProjectV2"
    UNKNOWN = "Unknown"


class ActorRef(BaseModel):
    """Someone (or something) that acted on, or was targeted by, an event."""

    model_config = ConfigDict(frozen=True)

    kind: ActorKind
    login: str | None = None

    def __str__(self) -> str:
        return self.login or f"<{self.kind.value}>"


class ResourceRef(BaseModel):
    """Weak reference to another issue, pull request, discussion, commit or repository.

    Only carries the identifiers the API inlined; the referenced resource is
    never hydrated, so title and number may be stale.
    """

    model_config = ConfigDict(frozen=True)

    kind: ResourceKind
    owner: str | None = None
    repo: str | None = None
    number: int | None = None
    oid: str | None = None
    title: str | None = None
    url: str | None = None
    raw_type: str | None = None  # set when kind is UNKNOWN

    @property
    def full_name(self) -> str | None:
        """``owner/repo`` when both are known."""
        if self.owner and self.repo:
            return f"{self.owner}/{self.repo}"
        return None

    def __str__(self) -> str:
        prefix = self.full_name or ""
        if self.number is not None:
            return f"{prefix}#{self.number}"
        if self.oid:
            return f"{prefix}@{self.oid}" if prefix else self.oid
        return prefix or f"<{self.raw_type or self.kind.value}>"


class LabelRef(BaseModel):
    """Label attached to or removed from a subject."""

    model_config = ConfigDict(frozen=True)

    name: str
    color: str | None = None


class CommitRef(BaseModel):
    """Commit mentioned by an event (force-push, merge, reference)."""

    model_config = ConfigDict(frozen=True)

    abbreviated_oid: str
    oid: str | None = None
    message_headline: str | None = None
    url: str | None = None


class GitActor(BaseModel):
    """Git-level author or committer, optionally linked to a platform account."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    email: str | None = None
    date: datetime | None = None
    user: ActorRef | None = None

    @property
    def display_name(self) -> str | None:
        """Platform login when linked, git name otherwise."""
        if self.user and self.user.login:
            return self.user.login
        return self.name
