"""Timeline fetcher service: query, extract, assemble."""

import logging
from typing import Any, Optional

from github_timeline.assembler import assemble_page
from github_timeline.config import Config, get_config
from github_timeline.decoders.page import extract_page
from github_timeline.exceptions import GitHubGraphQLError, ResourceNotFoundError
from github_timeline.models.activity import ActivityModel, QueryProfile, SubjectKind
from github_timeline.queries import (
    ISSUE_LINKAGE_QUERY,
    ISSUE_TIMELINE_QUERY,
    PULL_REQUEST_TIMELINE_QUERY,
)
from github_timeline.services.graphql_client import GitHubGraphQLClient

logger = logging.getLogger(__name__)

_QUERIES = {
    (SubjectKind.ISSUE, QueryProfile.FULL): ISSUE_TIMELINE_QUERY,
    (SubjectKind.ISSUE, QueryProfile.LINKAGE): ISSUE_LINKAGE_QUERY,
    (SubjectKind.PULL_REQUEST, QueryProfile.FULL): PULL_REQUEST_TIMELINE_QUERY,
}

_SUBJECT_FIELDS = {
    SubjectKind.ISSUE: "issue",
    SubjectKind.PULL_REQUEST: "pullRequest",
}


def query_for(subject_kind: SubjectKind, profile: QueryProfile) -> str:
    """Pick the query document for a subject and profile.

    Raises:
        ValueError: For the linkage profile on pull requests, which has no document
    """
    try:
        return _QUERIES[(subject_kind, profile)]
    except KeyError:
        raise ValueError(
            f"No {profile.value} query for {subject_kind.value} timelines"
        ) from None


def decode_response(
    raw_response: Any,
    subject_kind: Optional[SubjectKind] = None,
    profile: QueryProfile = QueryProfile.FULL,
    config: Optional[Config] = None,
) -> ActivityModel:
    """Turn one already-fetched timeline response into an ActivityModel.

    Pure and synchronous; no network access.
    """
    config = config or get_config()
    page = extract_page(
        raw_response,
        subject_kind=subject_kind,
        page_size=config.page_size,
        comments_page_size=config.comments_page_size,
        warn_on_truncation=config.warn_on_truncation,
    )
    return assemble_page(page, profile=profile)


def _is_not_found(error: GitHubGraphQLError) -> bool:
    return bool(error.errors) and all(e.get("type") == "NOT_FOUND" for e in error.errors)


class TimelineFetcher:
    """Fetches one subject's timeline and normalizes it."""

    def __init__(self, graphql_client: GitHubGraphQLClient, config: Optional[Config] = None):
        self.graphql_client = graphql_client
        self.config = config or graphql_client.config

    async def fetch_raw(
        self,
        owner: str,
        repo: str,
        number: int,
        subject_kind: SubjectKind,
        profile: QueryProfile = QueryProfile.FULL,
    ) -> dict[str, Any]:
        """Fetch the raw ``data`` object for a subject's timeline.

        Raises:
            ResourceNotFoundError: If the repository or subject does not exist
        """
        query = query_for(subject_kind, profile)
        variables = {"owner": owner, "repo": repo, "number": number}

        try:
            data = await self.graphql_client.execute(query, variables)
        except GitHubGraphQLError as e:
            if _is_not_found(e):
                raise ResourceNotFoundError(owner, repo, number, subject_kind.value) from e
            raise

        repository = data.get("repository")
        if not repository or not repository.get(_SUBJECT_FIELDS[subject_kind]):
            raise ResourceNotFoundError(owner, repo, number, subject_kind.value)

        return data

    async def fetch(
        self,
        owner: str,
        repo: str,
        number: int,
        subject_kind: SubjectKind,
        profile: QueryProfile = QueryProfile.FULL,
    ) -> ActivityModel:
        """Fetch and normalize a subject's timeline.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Issue or pull request number
            subject_kind: Issue or pull request
            profile: Full timeline or minimal linkage query

        Returns:
            ActivityModel built fresh from this one response
        """
        logger.info(
            "Fetching %s timeline for %s/%s#%d (%s)",
            subject_kind.value,
            owner,
            repo,
            number,
            profile.value,
        )
        data = await self.fetch_raw(owner, repo, number, subject_kind, profile)
        model = decode_response(data, subject_kind=subject_kind, profile=profile, config=self.config)
        logger.info(
            "Decoded %d events for %s/%s#%d (truncated=%s, unknown=%d)",
            len(model.events),
            owner,
            repo,
            number,
            model.truncated,
            model.unknown_variant_count,
        )
        return model
