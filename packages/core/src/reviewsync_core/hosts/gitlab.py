"""GitLab merge request discussions -> ReviewComment."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from reviewsync_core.hosts.base import Extracted, HostMapping, comment_body, get_json, map_comments, positive_int
from reviewsync_core.models import ReviewComment
from reviewsync_core.utils.diff import normalize_path

logger = logging.getLogger(__name__)

TAG = "gl"
PER_PAGE = 100
DEFAULT_BASE_URL = "https://gitlab.com"


def _extract(entry: tuple[dict[str, Any], dict[str, Any], Any]) -> Extracted | None:
    note, discussion, root_id = entry
    position = note.get("position")
    if not position or note.get("id") is None:
        return None

    path = position.get("new_path") or position.get("old_path")
    if not path:
        return None

    new_line = positive_int(position.get("new_line"))
    old_line = positive_int(position.get("old_line"))
    if new_line is not None:
        side, line = "RIGHT", new_line
    else:
        side, line = "LEFT", old_line or 1

    note_id = note["id"]
    parent = str(root_id) if root_id is not None and root_id != note_id else None

    return Extracted(
        native_id=str(note_id),
        file=normalize_path(path),
        line=line,
        side=side,
        body=comment_body(note.get("body")),
        # A position always refers to the current diff version here.
        outdated=False,
        resolved=discussion.get("resolved") is True,
        parent_native_id=parent,
        host_comment_id=note_id,
        host_thread_id=discussion.get("id"),
        author=(note.get("author") or {}).get("username"),
    )


GITLAB = HostMapping(tag=TAG, extract=_extract)


def map_gitlab_discussions(discussions: list[dict[str, Any]]) -> list[ReviewComment]:
    """Flatten discussions into comments; later notes reply to the first one."""
    entries = []
    for discussion in discussions:
        notes = discussion.get("notes") or []
        root_id = notes[0].get("id") if notes else None
        for note in notes:
            entries.append((note, discussion, root_id))
    return map_comments(entries, GITLAB)


class GitLabClient:
    """Minimal read client for merge request discussions."""

    def __init__(self, token: str, base_url: str = DEFAULT_BASE_URL, session: requests.Session | None = None):
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update({"PRIVATE-TOKEN": token})

    def fetch_discussions(self, project: str, mr_iid: int) -> list[dict[str, Any]]:
        url = f"{self._base_url}/api/v4/projects/{quote(project, safe='')}/merge_requests/{mr_iid}/discussions"
        discussions: list[dict[str, Any]] = []
        page = 1
        while True:
            data = get_json(self._session, url, params={"per_page": PER_PAGE, "page": page})
            if not isinstance(data, list) or not data:
                break
            discussions.extend(data)
            if len(data) < PER_PAGE:
                break
            page += 1
        logger.debug("Fetched %d discussion(s) for %s!%d", len(discussions), project, mr_iid)
        return discussions
