"""Core review orchestration.

One review run: annotate the diff, ask the model, recover its findings, and
drop the ones that repeat a comment already on the pull request. Host
comments are fetched fresh on every pass; nothing is cached between runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from reviewsync_core.annotator import annotate
from reviewsync_core.dedupe import dedupe
from reviewsync_core.hosts.bitbucket import BitbucketClient, map_bitbucket_comments
from reviewsync_core.hosts.github import fetch_github_comments, get_client, map_github_comments
from reviewsync_core.hosts.github_graphql import apply_thread_states, fetch_thread_states
from reviewsync_core.hosts.gitlab import GitLabClient, map_gitlab_discussions
from reviewsync_core.log import ReviewLog
from reviewsync_core.models import AnnotatedDiff, ReviewComment
from reviewsync_core.providers.base import build_prompt
from reviewsync_core.response import parse_review_response
from reviewsync_core.utils.diff import truncate_diff
from reviewsync_core.utils.url import PullRequestRef

logger = logging.getLogger(__name__)


@dataclass
class ReviewResult:
    """Everything one run produced; the caller owns persistence and display."""

    summary: str
    comments: list[ReviewComment]
    annotated: AnnotatedDiff
    dropped_duplicates: int = 0
    log: ReviewLog = field(default_factory=ReviewLog)
    reviewed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


def get_reviewer(config: dict):
    model = config["model"]
    if model == "anthropic":
        from reviewsync_core.providers.anthropic import AnthropicReviewer

        return AnthropicReviewer(api_key=config["anthropic_api_key"])
    if model == "openai":
        from reviewsync_core.providers.openai import OpenAIReviewer

        return OpenAIReviewer(api_key=config["openai_api_key"])
    raise ValueError(f"Unknown model provider: {model!r}. Choose 'anthropic' or 'openai'.")


def run_review(
    diff: str,
    reviewer,
    existing: list[ReviewComment] | tuple = (),
    max_diff_chars: int | None = None,
    log: ReviewLog | None = None,
) -> ReviewResult:
    """Review a unified diff and return the novel comments.

    ``reviewer`` is anything with ``complete(prompt) -> str``. Raises
    ValueError for an empty diff and UnparseableOutputError when the model
    answer cannot be recovered; provider errors propagate unchanged.
    """
    if not diff or not diff.strip():
        raise ValueError("Nothing to review: the diff is empty.")

    log = log if log is not None else ReviewLog()
    if max_diff_chars and len(diff) > max_diff_chars:
        log.warning(f"Diff truncated from {len(diff)} to {max_diff_chars} characters", logger)
        diff = truncate_diff(diff, max_diff_chars)

    annotated = annotate(diff)
    log.info(f"Annotated {annotated.file_count} file(s), {annotated.hunk_count} hunk(s)", logger)

    raw = reviewer.complete(build_prompt(annotated))
    parsed = parse_review_response(raw, log=log)

    novel = dedupe(parsed.comments, existing)
    dropped = len(parsed.comments) - len(novel)
    if dropped:
        log.info(f"Dropped {dropped} finding(s) already raised or approved", logger)

    return ReviewResult(
        summary=parsed.summary,
        comments=novel,
        annotated=annotated,
        dropped_duplicates=dropped,
        log=log,
    )


def fetch_host_comments(target: PullRequestRef, config: dict) -> list[ReviewComment]:
    """Fetch and normalise the existing inline comments on a pull request.

    For GitHub the REST comments are overlaid with GraphQL thread state.
    Raises ValueError when the host's token is not configured.
    """
    if target.host == "github":
        token = config.get("github_token")
        if not token:
            raise ValueError("GITHUB_TOKEN is not set.")
        requester = get_client(token).requester
        comments = map_github_comments(fetch_github_comments(requester, target.owner, target.repo, target.number))
        states = fetch_thread_states(requester, target.owner, target.repo, target.number)
        return apply_thread_states(comments, states)

    if target.host == "gitlab":
        token = config.get("gitlab_token")
        if not token:
            raise ValueError("GITLAB_TOKEN is not set.")
        client = GitLabClient(token, base_url=target.base_url or config.get("gitlab_url") or "https://gitlab.com")
        return map_gitlab_discussions(client.fetch_discussions(target.slug, target.number))

    if target.host == "bitbucket":
        token = config.get("bitbucket_token")
        if not token:
            raise ValueError("BITBUCKET_TOKEN is not set.")
        client = BitbucketClient(token, username=config.get("bitbucket_username"))
        return map_bitbucket_comments(client.fetch_comments(target.owner, target.repo, target.number))

    raise ValueError(f"Unsupported host: {target.host!r}")


def visible_host_comments(comments: list[ReviewComment]) -> list[ReviewComment]:
    """Drop resolved or outdated host comments, keeping AI comments."""
    return [c for c in comments if not (c.source == "host" and (c.host_resolved or c.host_outdated))]
