"""Bitbucket Cloud pull request comments -> ReviewComment.

Bitbucket exposes no thread resolution state, so ``host_resolved`` is always
False; a deleted comment is reported as outdated.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from reviewsync_core.hosts.base import Extracted, HostMapping, comment_body, get_json, map_comments, positive_int
from reviewsync_core.models import ReviewComment
from reviewsync_core.utils.diff import normalize_path

logger = logging.getLogger(__name__)

TAG = "bb"
API_URL = "https://api.bitbucket.org/2.0"
PAGE_LEN = 100


def _extract(item: dict[str, Any]) -> Extracted | None:
    anchor = item.get("anchor") or item.get("inline") or {}
    path = anchor.get("path")
    if not path or item.get("id") is None:
        return None

    line = positive_int(anchor.get("line")) or positive_int(anchor.get("to")) or positive_int(anchor.get("from")) or 1
    parent = (item.get("parent") or {}).get("id")
    user = item.get("user") or {}

    return Extracted(
        native_id=str(item["id"]),
        file=normalize_path(path),
        line=line,
        side="LEFT" if anchor.get("line_type") == "removed" else "RIGHT",
        body=comment_body((item.get("content") or {}).get("raw")),
        outdated=item.get("deleted") is True,
        resolved=False,
        parent_native_id=str(parent) if parent else None,
        host_comment_id=item["id"],
        author=user.get("display_name") or user.get("username") or user.get("nickname"),
    )


BITBUCKET = HostMapping(tag=TAG, extract=_extract)


def map_bitbucket_comments(items: list[dict[str, Any]]) -> list[ReviewComment]:
    return map_comments(items, BITBUCKET)


class BitbucketClient:
    """Read client for pull request comments.

    With a username the token is sent as an app password (basic auth),
    otherwise as a bearer access token.
    """

    def __init__(self, token: str, username: str | None = None, session: requests.Session | None = None):
        self._session = session or requests.Session()
        if username:
            self._session.auth = (username, token)
        else:
            self._session.headers.update({"Authorization": f"Bearer {token}"})

    def fetch_comments(self, workspace: str, repo: str, pr_id: int) -> list[dict[str, Any]]:
        url: str | None = f"{API_URL}/repositories/{workspace}/{repo}/pullrequests/{pr_id}/comments"
        params: dict | None = {"pagelen": PAGE_LEN}
        comments: list[dict[str, Any]] = []
        while url:
            data = get_json(self._session, url, params=params)
            comments.extend(data.get("values") or [])
            # The "next" link already carries the query string.
            url = data.get("next")
            params = None
        logger.debug("Fetched %d comment(s) for %s/%s#%d", len(comments), workspace, repo, pr_id)
        return comments
