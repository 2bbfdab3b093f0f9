"""SQLiteStore: local file-based store for review runs and decisions.

Schema:
  reviews: one row per review run; comments are kept as a JSON column so
             read paths never need a JOIN.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import asdict

from reviewsync_store.base import BaseStore
from reviewsync_store.models import CommentRecord, ReviewRecord, change_status

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS reviews (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    repo            TEXT NOT NULL,
    pr_number       INTEGER NOT NULL,
    host            TEXT,
    reviewer_model  TEXT,
    reviewed_at     TEXT,
    summary         TEXT,
    comments_json   TEXT DEFAULT '[]'
);
CREATE INDEX IF NOT EXISTS idx_reviews_repo ON reviews (repo);
CREATE INDEX IF NOT EXISTS idx_reviews_pr   ON reviews (repo, pr_number);
"""


class SQLiteStore(BaseStore):
    """Stores review runs in a local SQLite database file.

    The database file path defaults to `.reviewsync.db` in the current working
    directory. Configure via .reviewsync.yml: `store_path: /path/to/reviewsync.db`.
    """

    def __init__(self, db_path: str = ".reviewsync.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def save(self, record: ReviewRecord) -> None:
        self._conn.execute(
            """
            INSERT INTO reviews
              (repo, pr_number, host, reviewer_model, reviewed_at, summary, comments_json)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.repo,
                record.pr_number,
                record.host,
                record.reviewer_model,
                record.reviewed_at,
                record.summary,
                json.dumps([asdict(c) for c in record.comments]),
            ),
        )
        self._conn.commit()

    def list_reviews(self, repo: str, pr_number: int | None = None) -> list[ReviewRecord]:
        return [self._row_to_record(r) for r in self._rows(repo, pr_number)]

    def update_comment(
        self,
        repo: str,
        pr_number: int,
        comment_id: str,
        status: str | None = None,
        edited_text: str | None = None,
    ) -> bool:
        # Newest run first: a comment id belongs to exactly one run.
        for row in reversed(self._rows(repo, pr_number)):
            comments = json.loads(row["comments_json"] or "[]")
            for c in comments:
                if c.get("id") != comment_id:
                    continue
                if status is not None:
                    change_status(c.get("status", "pending"), status)
                    c["status"] = status
                if edited_text is not None:
                    c["edited_text"] = edited_text or None
                self._conn.execute(
                    "UPDATE reviews SET comments_json=? WHERE id=?",
                    (json.dumps(comments), row["id"]),
                )
                self._conn.commit()
                return True
        logger.debug("Comment %s not found in %s#%d", comment_id, repo, pr_number)
        return False

    def reset(self, repo: str, pr_number: int) -> int:
        cursor = self._conn.execute("DELETE FROM reviews WHERE repo=? AND pr_number=?", (repo, pr_number))
        self._conn.commit()
        return cursor.rowcount

    def close(self) -> None:
        self._conn.close()

    def _rows(self, repo: str, pr_number: int | None) -> list[sqlite3.Row]:
        if pr_number is not None:
            return self._conn.execute(
                "SELECT * FROM reviews WHERE repo=? AND pr_number=? ORDER BY reviewed_at, id",
                (repo, pr_number),
            ).fetchall()
        return self._conn.execute(
            "SELECT * FROM reviews WHERE repo=? ORDER BY reviewed_at, id",
            (repo,),
        ).fetchall()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> ReviewRecord:
        comments = [
            CommentRecord(
                id=c.get("id", ""),
                file=c.get("file", ""),
                line=c.get("line", 1),
                side=c.get("side", "RIGHT"),
                severity=c.get("severity", "medium"),
                issue=c.get("issue", ""),
                status=c.get("status", "pending"),
                source=c.get("source", "ai"),
                suggestion=c.get("suggestion"),
                parent_id=c.get("parent_id"),
                edited_text=c.get("edited_text"),
            )
            for c in json.loads(row["comments_json"] or "[]")
        ]
        return ReviewRecord(
            repo=row["repo"],
            pr_number=row["pr_number"],
            host=row["host"] or "",
            reviewer_model=row["reviewer_model"] or "",
            reviewed_at=row["reviewed_at"] or "",
            summary=row["summary"] or "",
            comments=comments,
        )
