"""Drop model findings that repeat a comment already on the PR."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from reviewsync_core.models import ReviewComment

logger = logging.getLogger(__name__)

# Diff context drift moves a re-reported issue by a line or so.
LINE_TOLERANCE = 1


def is_duplicate(comment: ReviewComment, existing_lines: Iterable[int]) -> bool:
    return any(abs(comment.line - line) <= LINE_TOLERANCE for line in existing_lines)


def dedupe(incoming: list[ReviewComment], existing: Iterable[ReviewComment]) -> list[ReviewComment]:
    """Return the incoming comments that do not collide with an existing one.

    A collision is the same file and a line within LINE_TOLERANCE, whatever
    the source or side of either comment. Order is preserved.
    """
    lines_by_file: dict[str, list[int]] = defaultdict(list)
    for c in existing:
        lines_by_file[c.file].append(c.line)

    kept = []
    for comment in incoming:
        if is_duplicate(comment, lines_by_file.get(comment.file, ())):
            logger.debug("Dropping duplicate comment %s at %s:%d", comment.id, comment.file, comment.line)
            continue
        kept.append(comment)
    return kept
