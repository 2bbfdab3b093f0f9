"""Shared mapping of native host comments onto ReviewComment.

Each host answers the same three questions (which side, outdated, resolved)
from a different wire shape. A HostMapping bundles a host's tag with its
per-item extraction rule; map_comments runs the common two-pass algorithm:

  1. extract every item and remember which native ids exist in the batch
  2. link replies to their parent only when the parent is in the batch;
     otherwise the reply is flattened to a root comment
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable

import requests

from reviewsync_core.models import ReviewComment

logger = logging.getLogger(__name__)

NO_CONTENT = "(No content)"

# Newlines and tabs stay so markdown bodies survive.
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


class HostAPIError(RuntimeError):
    """A code-host API call returned a non-success response."""

    def __init__(self, status: int, url: str, message: str = ""):
        self.status = status
        self.url = url
        super().__init__(f"{status} from {url}" + (f": {message}" if message else ""))


@dataclass
class Extracted:
    """One native comment reduced to host-independent fields.

    ``native_id`` becomes the canonical id; ``parent_native_id`` is the
    reply key of the comment it replies to, if any.
    """

    native_id: str
    file: str
    line: int
    side: str
    body: str
    outdated: bool = False
    resolved: bool = False
    parent_native_id: str | None = None
    host_comment_id: int | str | None = None
    host_thread_id: str | None = None
    author: str | None = None
    # Key that replies use to point at this comment, when it differs from
    # native_id (GitHub replies reference the REST id, not the node id).
    reply_key: str | None = None


@dataclass(frozen=True)
class HostMapping:
    tag: str
    extract: Callable[[Any], Extracted | None]


def get_json(session: requests.Session, url: str, params: dict | None = None, timeout: float = 30) -> Any:
    """GET a JSON document, raising HostAPIError for non-2xx responses."""
    response = session.get(url, params=params, timeout=timeout)
    if not response.ok:
        raise HostAPIError(response.status_code, url, response.text[:200])
    return response.json()


def host_comment_id(tag: str, native_id: Any) -> str:
    return f"host-{tag}-{native_id}"


def comment_body(raw: Any) -> str:
    if not isinstance(raw, str):
        return NO_CONTENT
    return _CONTROL_CHARS_RE.sub("", raw).strip() or NO_CONTENT


def positive_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return None
    return value


def map_comments(items: Iterable[Any], mapping: HostMapping) -> list[ReviewComment]:
    extracted: list[Extracted] = []
    seen: set[str] = set()
    for item in items:
        e = mapping.extract(item)
        if e is None:
            logger.debug("Dropping %s comment without a usable file path", mapping.tag)
            continue
        if e.native_id in seen:
            logger.debug("Dropping repeated %s comment %s", mapping.tag, e.native_id)
            continue
        seen.add(e.native_id)
        extracted.append(e)

    # Pass 1: reply key -> canonical id for everything in the batch.
    known = {(e.reply_key or e.native_id): host_comment_id(mapping.tag, e.native_id) for e in extracted}

    # Pass 2: build comments, linking replies whose parent is present.
    comments = []
    for e in extracted:
        own_id = host_comment_id(mapping.tag, e.native_id)
        parent_id = None
        if e.parent_native_id is not None:
            parent_id = known.get(e.parent_native_id)
            if parent_id is None:
                logger.debug("Parent %s not in batch; treating %s as a root", e.parent_native_id, e.native_id)
            elif parent_id == own_id:
                parent_id = None
        comments.append(
            ReviewComment(
                id=own_id,
                file=e.file,
                line=e.line,
                side=e.side,
                severity="medium",
                issue=e.body,
                status="pending",
                source="host",
                host_resolved=e.resolved,
                host_outdated=e.outdated,
                host_comment_id=e.host_comment_id,
                host_thread_id=e.host_thread_id,
                parent_id=parent_id,
                author=e.author,
            )
        )
    return comments
