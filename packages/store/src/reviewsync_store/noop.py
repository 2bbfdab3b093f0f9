"""No-op store: the default when no store is configured.

Using a NoOpStore rather than None lets the CLI always call store.save()
without conditional checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reviewsync_store.base import BaseStore

if TYPE_CHECKING:
    from reviewsync_store.models import ReviewRecord


class NoOpStore(BaseStore):
    """Silently discards all records: zero configuration required."""

    def save(self, record: ReviewRecord) -> None:
        pass  # intentional no-op

    def list_reviews(self, repo: str, pr_number: int | None = None) -> list[ReviewRecord]:
        return []

    def update_comment(self, repo, pr_number, comment_id, status=None, edited_text=None) -> bool:
        return False

    def reset(self, repo: str, pr_number: int) -> int:
        return 0
