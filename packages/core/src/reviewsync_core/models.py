"""Canonical review data model shared by the annotator, parser and host mappers.

Every comment, whether proposed by the model or fetched from a code host,
ends up as a ReviewComment. A (file, line, side) coordinate means the same
thing wherever it flows: LEFT is the old-file line, RIGHT the new-file line.
"""

from __future__ import annotations

from dataclasses import dataclass, field

SEVERITIES = ("critical", "high", "medium", "low")
SIDES = ("LEFT", "RIGHT")
STATUSES = ("pending", "approved", "rejected")  # transitions are enforced by the store
SOURCES = ("ai", "host")


@dataclass(frozen=True)
class AnnotatedDiff:
    original: str
    annotated: str
    file_count: int
    hunk_count: int


@dataclass
class ReviewComment:
    """A single addressable review comment.

    ``status`` is the local reviewer decision and is independent of any host
    state. ``host_resolved``/``host_outdated`` are only meaningful for
    comments fetched from a host (``source == "host"``).
    """

    id: str
    file: str
    line: int
    side: str
    severity: str
    issue: str
    status: str = "pending"
    source: str = "ai"
    suggestion: str | None = None
    code_snippet: str | None = None
    end_line: int | None = None
    host_resolved: bool | None = None
    host_outdated: bool | None = None
    host_comment_id: int | str | None = None
    host_thread_id: str | None = None
    parent_id: str | None = None
    edited_text: str | None = None
    author: str | None = None


@dataclass
class ParsedReview:
    """Result of turning raw model output into validated comments."""

    summary: str
    comments: list[ReviewComment] = field(default_factory=list)


def display_text(comment: ReviewComment) -> str:
    return comment.edited_text or comment.issue
