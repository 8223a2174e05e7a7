"""Pytest configuration and fixtures."""

import pytest

from github_timeline.config import Config, set_config
from github_timeline.utils.rate_limiter import reset_rate_limiter


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset global state before each test."""
    reset_rate_limiter()
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def test_config():
    """Create a test configuration."""
    config = Config(
        github_token="test_token",
        github_graphql_url="https://api.github.com/graphql",
        max_retries=1,
    )
    set_config(config)
    return config


def user(login="octocat"):
    return {"__typename": "User", "login": login}


def issue_ref(number=7, owner="octo", repo="repo", typename="Issue"):
    return {
        "__typename": typename,
        "number": number,
        "title": f"Ref {number}",
        "url": f"https://github.com/{owner}/{repo}/issues/{number}",
        "repository": {"name": repo, "owner": {"login": owner}},
    }


def event_node(typename, created_at="2024-01-01T00:00:00Z", actor="octocat", node_id=None, **fields):
    """Build a raw timeline node of the given ``__typename``."""
    node = {"__typename": typename, "id": node_id or f"{typename}_{created_at}"}
    if created_at is not None:
        node["createdAt"] = created_at
    if actor is not None:
        node["actor"] = user(actor)
    node.update(fields)
    return node


def response(nodes, kind="issue", total_count=None, **subject_fields):
    """Wrap raw nodes into a full GraphQL response envelope."""
    timeline = {"edges": [{"node": node} for node in nodes]}
    if total_count is not None:
        timeline["totalCount"] = total_count
    subject = {"number": 1, "title": "Subject", "state": "OPEN", **subject_fields}
    subject["timelineItems"] = timeline
    field = "issue" if kind == "issue" else "pullRequest"
    return {"data": {"repository": {field: subject}}}
