"""Decoders for the polymorphic sub-shapes shared across timeline events.

Each decoder takes one raw JSON object tagged by ``__typename`` and returns a
typed value, ``None`` for a documented absence, or raises ``DecodeError`` for
input that is malformed. Unrecognized discriminators never raise: they map to
the ``UNKNOWN`` arm of the corresponding kind enum.
"""

from typing import Any, Optional

from github_timeline.exceptions import DecodeError
from github_timeline.models.refs import (
    ActorKind,
    ActorRef,
    CommitRef,
    GitActor,
    LabelRef,
    ResourceKind,
    ResourceRef,
)
from github_timeline.utils.time import parse_datetime

_ACTOR_KINDS = {kind.value: kind for kind in ActorKind if kind is not ActorKind.UNKNOWN}
_RESOURCE_KINDS = {kind.value: kind for kind in ResourceKind if kind is not ResourceKind.UNKNOWN}


def _require_object(node: Any, what: str) -> dict[str, Any]:
    if not isinstance(node, dict):
        raise DecodeError(f"{what} is not an object", node)
    return node


def optional_object(node: Any, what: str) -> dict[str, Any]:
    """Return ``node`` as an object, treating null as an empty one.

    Raises:
        DecodeError: If the node is present but not an object
    """
    if node is None:
        return {}
    return _require_object(node, what)


def optional_string(value: Any, what: str) -> Optional[str]:
    """Return ``value`` if it is a string or null.

    Raises:
        DecodeError: For any other JSON type
    """
    if value is None or isinstance(value, str):
        return value
    raise DecodeError(f"{what} is not a string", value)


def typename(node: Any, what: str = "node") -> str:
    """Return the ``__typename`` discriminator of ``node``.

    Raises:
        DecodeError: If the node is not an object or has no discriminator
    """
    value = _require_object(node, what).get("__typename")
    if not isinstance(value, str) or not value:
        raise DecodeError(f"{what} has no __typename", node)
    return value


def decode_actor(
    node: Optional[dict[str, Any]],
    what: str = "actor",
    default_kind: Optional[ActorKind] = None,
) -> Optional[ActorRef]:
    """Decode an Actor-like union (actor, author, assignee, requestedReviewer).

    Args:
        node: Raw actor object, or None when the field is absent
        what: Field name, used in error messages
        default_kind: Kind to assume when the field's schema type is concrete
            (e.g. ``GitActor.user`` is always a ``User``) and no discriminator
            was selected

    Returns:
        ActorRef, or None when the field is null
    """
    if node is None:
        return None

    node = _require_object(node, what)
    if node.get("__typename") is None and default_kind is not None:
        kind = default_kind
    else:
        raw_type = typename(node, what)
        kind = _ACTOR_KINDS.get(raw_type, ActorKind.UNKNOWN)

    if kind is ActorKind.UNKNOWN:
        return ActorRef(kind=kind, login=node.get("login") or node.get("name"))

    if kind is ActorKind.TEAM:
        login = node.get("combinedSlug") or node.get("slug") or node.get("name")
    else:
        login = node.get("login")

    if not login:
        raise DecodeError(f"{what} of type {kind.value} has no login", node)
    return ActorRef(kind=kind, login=login)


def _repository_coords(node: dict[str, Any], what: str) -> tuple[Optional[str], Optional[str]]:
    repository = optional_object(node.get("repository"), f"{what}.repository")
    owner = optional_object(repository.get("owner"), f"{what}.repository.owner").get("login")
    return owner, repository.get("name")


def decode_resource(node: Optional[dict[str, Any]], what: str = "source") -> Optional[ResourceRef]:
    """Decode a reference-like union (source, closer, canonical, discussion, ...).

    Returns None when the field is null or every selected field came back
    null, which is how GitHub reports e.g. an issue closed without a linked
    pull request or commit. That holds even when a discriminator was sent
    along with the nulls. A present node of an unrecognized type yields a
    ``ResourceRef`` of kind ``UNKNOWN`` instead.
    """
    if node is None:
        return None

    node = _require_object(node, what)
    selected = [value for key, value in node.items() if key != "__typename"]
    if all(value is None for value in selected) and (selected or node.get("__typename") is None):
        return None

    raw_type = typename(node, what)
    kind = _RESOURCE_KINDS.get(raw_type, ResourceKind.UNKNOWN)

    if kind in (ResourceKind.ISSUE, ResourceKind.PULL_REQUEST, ResourceKind.DISCUSSION):
        owner, repo = _repository_coords(node, what)
        return ResourceRef(
            kind=kind,
            owner=owner,
            repo=repo,
            number=node.get("number"),
            title=node.get("title"),
            url=node.get("url"),
        )

    if kind is ResourceKind.COMMIT:
        abbreviated = optional_string(node.get("abbreviatedOid"), f"{what}.abbreviatedOid")
        oid = abbreviated or optional_string(node.get("oid"), f"{what}.oid")
        if not oid:
            raise DecodeError(f"{what} commit has no oid", node)
        owner, repo = _repository_coords(node, what)
        return ResourceRef(kind=kind, owner=owner, repo=repo, oid=oid, url=node.get("url"))

    if kind is ResourceKind.REPOSITORY:
        owner = optional_object(node.get("owner"), f"{what}.owner").get("login")
        return ResourceRef(kind=kind, owner=owner, repo=node.get("name"), url=node.get("url"))

    if kind is ResourceKind.PROJECT:
        return ResourceRef(
            kind=kind,
            number=node.get("number"),
            title=node.get("title"),
            url=node.get("url"),
        )

    return ResourceRef(kind=ResourceKind.UNKNOWN, raw_type=raw_type, url=node.get("url"))


def decode_label(node: Optional[dict[str, Any]]) -> LabelRef:
    """Decode a label; labeled/unlabeled events always carry one."""
    node = _require_object(node, "label")
    name = node.get("name")
    if not name:
        raise DecodeError("label has no name", node)
    return LabelRef(name=name, color=node.get("color"))


def decode_commit_ref(node: Optional[dict[str, Any]], what: str = "commit") -> Optional[CommitRef]:
    """Decode a commit mention; None when the commit is gone or was not selected."""
    if node is None:
        return None

    node = _require_object(node, what)
    oid = optional_string(node.get("oid"), f"{what}.oid")
    abbreviated = optional_string(node.get("abbreviatedOid"), f"{what}.abbreviatedOid") or (
        oid[:7] if oid else None
    )
    if not abbreviated:
        raise DecodeError(f"{what} has no oid", node)
    return CommitRef(
        abbreviated_oid=abbreviated,
        oid=oid,
        message_headline=node.get("messageHeadline"),
        url=node.get("url"),
    )


def decode_git_actor(node: Optional[dict[str, Any]], what: str = "author") -> Optional[GitActor]:
    """Decode a git author/committer whose ``user`` link is independently optional."""
    if node is None:
        return None

    node = _require_object(node, what)
    try:
        date = parse_datetime(node.get("date"), strict=True)
    except ValueError as e:
        raise DecodeError(f"{what}.date: {e}", node) from e

    return GitActor(
        name=node.get("name"),
        email=node.get("email"),
        date=date,
        user=decode_actor(node.get("user"), f"{what}.user", default_kind=ActorKind.USER),
    )
