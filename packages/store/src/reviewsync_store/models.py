"""Review session data models.

Decoupled from reviewsync_core so the store layer can be used independently
and reviewsync_core has no knowledge of persistence concerns.
"""

from __future__ import annotations

from dataclasses import dataclass, field

STATUSES = ("pending", "approved", "rejected")


@dataclass
class CommentRecord:
    """A single review comment and the reviewer's local decision on it."""

    id: str
    file: str
    line: int
    side: str
    severity: str
    issue: str
    status: str = "pending"
    source: str = "ai"
    suggestion: str | None = None
    parent_id: str | None = None
    edited_text: str | None = None


@dataclass
class ReviewRecord:
    """A completed review run persisted to the store.

    Created by the CLI layer after run_review() returns a ReviewResult.
    """

    repo: str
    pr_number: int
    host: str  # "github" | "gitlab" | "bitbucket" | "local"
    reviewer_model: str
    reviewed_at: str  # ISO-8601 UTC timestamp
    summary: str
    comments: list[CommentRecord] = field(default_factory=list)


def change_status(current: str, status: str) -> None:
    """Raise ValueError for an unknown status or an approved<->rejected jump."""
    if status not in STATUSES:
        raise ValueError(f"Unknown status {status!r}. Choose one of: {', '.join(STATUSES)}.")
    if status != current and "pending" not in (current, status):
        raise ValueError(f"Cannot move a comment from {current!r} to {status!r}; reset it to 'pending' first.")
