"""GitHub pull request review comments (REST) -> ReviewComment.

The REST endpoint cannot say whether a thread is resolved, so comments come
out with ``host_resolved=False`` until github_graphql.apply_thread_states
overlays the review-thread state.
"""

from __future__ import annotations

import logging
from typing import Any

from github import Auth, Github

from reviewsync_core.hosts.base import Extracted, HostMapping, comment_body, map_comments, positive_int
from reviewsync_core.models import ReviewComment
from reviewsync_core.utils.diff import normalize_path

logger = logging.getLogger(__name__)

TAG = "gh"
PER_PAGE = 100


def get_client(token: str) -> Github:
    return Github(auth=Auth.Token(token))


def _extract(item: dict[str, Any]) -> Extracted | None:
    path = item.get("path")
    if not isinstance(path, str) or not path:
        return None

    rest_id = item.get("id")
    node_id = item.get("node_id") or (str(rest_id) if rest_id is not None else None)
    if node_id is None:
        return None

    line = positive_int(item.get("line")) or positive_int(item.get("original_line")) or 1
    # A line comment whose diff position is gone no longer maps onto the
    # current diff. File-level comments have no position to lose.
    outdated = item.get("subject_type") != "file" and item.get("position") is None
    in_reply_to = item.get("in_reply_to_id")

    return Extracted(
        native_id=str(node_id),
        reply_key=str(rest_id) if rest_id is not None else None,
        file=normalize_path(path),
        line=line,
        side="LEFT" if item.get("side") == "LEFT" else "RIGHT",
        body=comment_body(item.get("body")),
        outdated=outdated,
        resolved=False,
        parent_native_id=str(in_reply_to) if in_reply_to is not None else None,
        host_comment_id=rest_id,
        author=(item.get("user") or {}).get("login"),
    )


GITHUB = HostMapping(tag=TAG, extract=_extract)


def map_github_comments(items: list[dict[str, Any]]) -> list[ReviewComment]:
    return map_comments(items, GITHUB)


def fetch_github_comments(requester, owner: str, repo: str, pr_number: int) -> list[dict[str, Any]]:
    """Fetch raw review comments for a PR, one page at a time.

    ``requester`` is a PyGithub Requester (``Github.requester``); failures
    surface as GithubException.
    """
    url = f"/repos/{owner}/{repo}/pulls/{pr_number}/comments"
    items: list[dict[str, Any]] = []
    page = 1
    while True:
        _, data = requester.requestJsonAndCheck("GET", url, parameters={"per_page": PER_PAGE, "page": page})
        if not data:
            break
        items.extend(data)
        if len(data) < PER_PAGE:
            break
        page += 1
    logger.debug("Fetched %d review comment(s) for %s/%s#%d", len(items), owner, repo, pr_number)
    return items
