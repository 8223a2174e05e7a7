"""Truncation heuristics for the cursor-less GraphQL connections.

None of the timeline query documents request ``pageInfo``, so a connection
that comes back holding exactly ``first: N`` items is the only signal that
more items may exist upstream.
"""

import logging
import warnings
from typing import Any, Optional

from github_timeline.exceptions import DecodeError, TruncationWarning

logger = logging.getLogger(__name__)


def connection_items(connection: Optional[dict[str, Any]]) -> list[Any]:
    """Return the raw items of a GraphQL connection.

    Accepts both ``edges { node }`` and ``nodes`` selections. A missing or
    null connection gives an empty list; edge wrappers are unwrapped and null
    entries are kept so callers can count them.

    Raises:
        DecodeError: If the connection or its item list has the wrong JSON type
    """
    if connection is None:
        return []
    if not isinstance(connection, dict):
        raise DecodeError("connection is not an object", connection)

    edges = connection.get("edges")
    if edges is not None:
        if not isinstance(edges, list):
            raise DecodeError("connection edges is not a list", connection)
        return [edge.get("node") if isinstance(edge, dict) else None for edge in edges]

    nodes = connection.get("nodes")
    if nodes is None:
        return []
    if not isinstance(nodes, list):
        raise DecodeError("connection nodes is not a list", connection)
    return list(nodes)


def is_truncated(count: int, cap: int, total_count: Optional[int] = None) -> bool:
    """Decide whether a bounded connection may be missing items.

    Args:
        count: Number of items actually returned
        cap: The ``first:`` argument the query used
        total_count: ``totalCount`` when the query selected it

    Returns:
        True when the connection hit its cap or reports more items than returned
    """
    if total_count is not None and total_count > count:
        return True
    return count >= cap


def report_truncation(what: str, count: int, cap: int, emit_warning: bool = False) -> None:
    """Log (and optionally warn) that a connection hit its cap."""
    message = f"{what} returned {count} items (cap {cap}); more may exist upstream"
    logger.warning(message)
    if emit_warning:
        warnings.warn(message, TruncationWarning, stacklevel=3)
