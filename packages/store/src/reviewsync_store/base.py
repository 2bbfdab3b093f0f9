"""Abstract store interface.

The CLI depends on BaseStore, not on a concrete backend, so backends are
swappable without touching CLI code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reviewsync_store.models import ReviewRecord


class BaseStore(ABC):
    """Pluggable persistence for review runs and reviewer decisions."""

    @abstractmethod
    def save(self, record: ReviewRecord) -> None:
        """Persist a completed review record."""

    @abstractmethod
    def list_reviews(self, repo: str, pr_number: int | None = None) -> list[ReviewRecord]:
        """Return reviews for a repo, optionally filtered by PR number.

        Returns an empty list if no reviews exist: never raises.
        """

    @abstractmethod
    def update_comment(
        self,
        repo: str,
        pr_number: int,
        comment_id: str,
        status: str | None = None,
        edited_text: str | None = None,
    ) -> bool:
        """Change a stored comment's status and/or edited text.

        Returns False when no stored review holds ``comment_id``. Raises
        ValueError for a status change the reviewer is not allowed to make.
        """

    @abstractmethod
    def reset(self, repo: str, pr_number: int) -> int:
        """Delete every stored review of a PR and return how many went."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Default is a no-op so callers can always call close() safely.
        """
