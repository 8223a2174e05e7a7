"""GraphQL query documents for issue and pull request timelines.

These documents are a fixed wire contract. None of them selects ``pageInfo``:
every timeline is capped at ``TIMELINE_PAGE_SIZE`` top-level items and every
nested comment collection at ``COMMENTS_PAGE_SIZE`` entries.
"""

TIMELINE_PAGE_SIZE = 100
COMMENTS_PAGE_SIZE = 100

_ACTOR_FRAGMENT = """
fragment ActorFields on Actor {
  __typename
  login
}
"""

_SOURCE_FRAGMENT = """
fragment ReferencedSubjectFields on ReferencedSubject {
  __typename
  ... on Issue {
    number
    title
    url
    repository { name owner { login } }
  }
  ... on PullRequest {
    number
    title
    url
    repository { name owner { login } }
  }
}
"""

_REVIEW_COMMENT_FRAGMENT = """
fragment ReviewCommentFields on PullRequestReviewComment {
  id
  createdAt
  author { ...ActorFields }
  body
  diffHunk
  path
  outdated
  state
}
"""

# Minimal issue query used when only closure and cross-link detection matter.
ISSUE_LINKAGE_QUERY = (
    """
query IssueLinkage($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    issue(number: $number) {
      number
      closed
      state
      stateReason
      title
      body
      timelineItems(first: 100) {
        edges {
          node {
            __typename
            ... on ClosedEvent {
              actor { ...ActorFields }
              closer {
                __typename
                ... on PullRequest { number title url repository { name owner { login } } }
                ... on Commit { abbreviatedOid oid url repository { name owner { login } } }
              }
            }
            ... on ConnectedEvent {
              __typename
            }
            ... on CrossReferencedEvent {
              source { ...ReferencedSubjectFields }
            }
            ... on IssueComment {
              author { ...ActorFields }
              body
            }
            ... on LabeledEvent {
              actor { ...ActorFields }
              label { name }
            }
          }
        }
      }
    }
  }
}
"""
    + _ACTOR_FRAGMENT
    + _SOURCE_FRAGMENT
)

_COMMON_EVENT_SELECTIONS = """
            ... on AssignedEvent {
              id createdAt
              actor { ...ActorFields }
              assignee { __typename ... on Actor { login } }
            }
            ... on UnassignedEvent {
              id createdAt
              actor { ...ActorFields }
              assignee { __typename ... on Actor { login } }
            }
            ... on LabeledEvent {
              id createdAt
              actor { ...ActorFields }
              label { name color }
            }
            ... on UnlabeledEvent {
              id createdAt
              actor { ...ActorFields }
              label { name color }
            }
            ... on ClosedEvent {
              id createdAt stateReason
              actor { ...ActorFields }
              closer {
                __typename
                ... on PullRequest { number title url repository { name owner { login } } }
                ... on Commit { abbreviatedOid oid url repository { name owner { login } } }
              }
            }
            ... on ReopenedEvent {
              id createdAt stateReason
              actor { ...ActorFields }
            }
            ... on ConnectedEvent {
              id createdAt isCrossRepository
              actor { ...ActorFields }
              source { ...ReferencedSubjectFields }
              subject { ...ReferencedSubjectFields }
            }
            ... on CrossReferencedEvent {
              id createdAt referencedAt isCrossRepository willCloseTarget
              actor { ...ActorFields }
              source { ...ReferencedSubjectFields }
            }
            ... on ReferencedEvent {
              id createdAt isCrossRepository isDirectReference
              actor { ...ActorFields }
              commit { abbreviatedOid oid messageHeadline url }
              commitRepository { __typename name owner { login } }
            }
            ... on IssueComment {
              id createdAt body url authorAssociation
              author { ...ActorFields }
            }
            ... on LockedEvent {
              id createdAt lockReason
              actor { ...ActorFields }
            }
            ... on UnlockedEvent { id createdAt actor { ...ActorFields } }
            ... on PinnedEvent { id createdAt actor { ...ActorFields } }
            ... on UnpinnedEvent { id createdAt actor { ...ActorFields } }
            ... on MilestonedEvent { id createdAt milestoneTitle actor { ...ActorFields } }
            ... on DemilestonedEvent { id createdAt milestoneTitle actor { ...ActorFields } }
            ... on MarkedAsDuplicateEvent {
              id createdAt isCrossRepository
              actor { ...ActorFields }
              canonical { ...ReferencedSubjectFields }
              duplicate { ...ReferencedSubjectFields }
            }
            ... on UnmarkedAsDuplicateEvent {
              id createdAt isCrossRepository
              actor { ...ActorFields }
              canonical { ...ReferencedSubjectFields }
              duplicate { ...ReferencedSubjectFields }
            }
            ... on RenamedTitleEvent {
              id createdAt previousTitle currentTitle
              actor { ...ActorFields }
            }
            ... on ConvertedToDiscussionEvent {
              id createdAt
              actor { ...ActorFields }
              discussion { __typename number title url repository { name owner { login } } }
            }
            ... on SubscribedEvent { id createdAt actor { ...ActorFields } }
            ... on MentionedEvent { id createdAt actor { ...ActorFields } }
"""

_PULL_REQUEST_EVENT_SELECTIONS = """
            ... on PullRequestCommit {
              id
              commit {
                abbreviatedOid oid messageHeadline committedDate url authoredByCommitter
                author { name email date user { __typename login } }
                committer { name email date user { __typename login } }
              }
            }
            ... on PullRequestReview {
              id createdAt state body
              author { ...ActorFields }
              comments(first: 100) {
                totalCount
                edges { node { ...ReviewCommentFields } }
              }
            }
            ... on PullRequestReviewThread {
              id path isResolved isOutdated
              resolvedBy { ...ActorFields }
              comments(first: 100) {
                totalCount
                edges { node { ...ReviewCommentFields } }
              }
            }
            ... on MergedEvent {
              id createdAt mergeRefName
              actor { ...ActorFields }
              commit { abbreviatedOid oid messageHeadline url }
            }
            ... on HeadRefForcePushedEvent {
              id createdAt
              actor { ...ActorFields }
              ref { name }
              beforeCommit { abbreviatedOid oid url }
              afterCommit { abbreviatedOid oid url }
            }
            ... on HeadRefDeletedEvent {
              id createdAt headRefName
              actor { ...ActorFields }
            }
            ... on ReviewRequestedEvent {
              id createdAt
              actor { ...ActorFields }
              requestedReviewer {
                __typename
                ... on Actor { login }
                ... on Team { name slug combinedSlug }
              }
            }
            ... on ReviewRequestRemovedEvent {
              id createdAt
              actor { ...ActorFields }
              requestedReviewer {
                __typename
                ... on Actor { login }
                ... on Team { name slug combinedSlug }
              }
            }
            ... on ConvertToDraftEvent { id createdAt actor { ...ActorFields } }
            ... on ReadyForReviewEvent { id createdAt actor { ...ActorFields } }
"""

PULL_REQUEST_TIMELINE_QUERY = (
    """
query PullRequestTimeline($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      number
      closed
      state
      title
      body
      url
      timelineItems(first: 100) {
        edges {
          node {
            __typename
"""
    + _COMMON_EVENT_SELECTIONS
    + _PULL_REQUEST_EVENT_SELECTIONS
    + """
          }
        }
      }
    }
  }
}
"""
    + _ACTOR_FRAGMENT
    + _SOURCE_FRAGMENT
    + _REVIEW_COMMENT_FRAGMENT
)

ISSUE_TIMELINE_QUERY = (
    """
query IssueTimeline($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    issue(number: $number) {
      number
      closed
      state
      stateReason
      title
      body
      url
      timelineItems(first: 100) {
        edges {
          node {
            __typename
"""
    + _COMMON_EVENT_SELECTIONS
    + """
          }
        }
      }
    }
  }
}
"""
    + _ACTOR_FRAGMENT
    + _SOURCE_FRAGMENT
)

RATE_LIMIT_QUERY = """
query RateLimit {
  rateLimit {
    limit
    remaining
    resetAt
  }
}
"""
