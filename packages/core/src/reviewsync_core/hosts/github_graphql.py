"""Review-thread resolution state from GitHub's GraphQL API.

Only the GraphQL ``reviewThreads`` connection knows whether a thread is
resolved or outdated. Its comment node ids match the REST ``node_id``, which
is the suffix of our ``host-gh-`` ids, so the two sources are correlated by
that id after the fact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from reviewsync_core.models import ReviewComment

logger = logging.getLogger(__name__)

_ID_PREFIX = "host-gh-"

REVIEW_THREADS_QUERY = """
query($owner: String!, $name: String!, $number: Int!, $after: String) {
  repository(owner: $owner, name: $name) {
    pullRequest(number: $number) {
      reviewThreads(first: 100, after: $after) {
        pageInfo { hasNextPage endCursor }
        nodes {
          id
          isResolved
          isOutdated
          comments(first: 50) { nodes { id } }
        }
      }
    }
  }
}
"""


@dataclass(frozen=True)
class ThreadState:
    is_resolved: bool
    is_outdated: bool
    thread_id: str | None = None


def _review_threads(response: dict) -> dict | None:
    data = response.get("data") or {}
    pull = (data.get("repository") or {}).get("pullRequest") or {}
    return pull.get("reviewThreads")


def fetch_thread_states(requester, owner: str, repo: str, pr_number: int) -> dict[str, ThreadState]:
    """Map every review comment node id on a PR to its thread state.

    Pages are requested strictly one after another, following ``endCursor``
    until ``hasNextPage`` is false.
    """
    states: dict[str, ThreadState] = {}
    after: str | None = None
    pages = 0

    while True:
        variables = {"owner": owner, "name": repo, "number": pr_number, "after": after}
        _, response = requester.graphql_query(REVIEW_THREADS_QUERY, variables)
        threads = _review_threads(response or {})
        if not threads or threads.get("nodes") is None:
            break
        pages += 1

        for thread in threads["nodes"]:
            if not thread:
                continue
            state = ThreadState(
                is_resolved=bool(thread.get("isResolved")),
                is_outdated=bool(thread.get("isOutdated")),
                thread_id=thread.get("id"),
            )
            for comment in (thread.get("comments") or {}).get("nodes") or []:
                if comment and comment.get("id"):
                    states[comment["id"]] = state

        page_info = threads.get("pageInfo") or {}
        after = page_info.get("endCursor") if page_info.get("hasNextPage") else None
        if not after:
            break

    logger.debug("Fetched thread state for %d comment(s) over %d page(s)", len(states), pages)
    return states


def _node_id(comment_id: str) -> str | None:
    if comment_id.startswith(_ID_PREFIX):
        return comment_id[len(_ID_PREFIX) :]
    return None


def apply_thread_states(comments: list[ReviewComment], states: dict[str, ThreadState]) -> list[ReviewComment]:
    """Overlay thread state onto GitHub comments without mutating the input.

    Comments that are not ``host-gh-`` ids, or have no entry in ``states``,
    are passed through as the same objects.
    """
    result = []
    for c in comments:
        node_id = _node_id(c.id)
        state = states.get(node_id) if node_id else None
        if state is None:
            result.append(c)
            continue
        changes = {"host_resolved": state.is_resolved, "host_outdated": state.is_outdated}
        if state.thread_id is not None:
            changes["host_thread_id"] = state.thread_id
        result.append(replace(c, **changes))
    return result
