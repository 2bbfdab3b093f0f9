"""Pull/merge request URL parsing for the three supported hosts."""

from __future__ import annotations

import re
from dataclasses import dataclass

# Owner and repo segments end up in API paths, so anything outside this set
# is rejected rather than escaped.
_SEGMENT = r"[A-Za-z0-9_.-]+"

_GITHUB_RE = re.compile(rf"^https?://(?:www\.)?github\.com/({_SEGMENT})/({_SEGMENT})/pull/(\d+)(?:[/?#].*)?$")
_GITLAB_RE = re.compile(
    rf"^https?://(gitlab\.[A-Za-z0-9.-]+)/({_SEGMENT}(?:/{_SEGMENT})+)/-/merge_requests/(\d+)(?:[/?#].*)?$"
)
_BITBUCKET_RE = re.compile(
    rf"^https?://(?:www\.)?bitbucket\.org/({_SEGMENT})/({_SEGMENT})/pull-requests/(\d+)(?:[/?#].*)?$"
)


@dataclass(frozen=True)
class PullRequestRef:
    host: str  # "github" | "gitlab" | "bitbucket"
    owner: str
    repo: str
    number: int
    base_url: str | None = None

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_pr_url(url: str) -> PullRequestRef | None:
    """Parse a GitHub PR, GitLab MR or Bitbucket PR URL.

    GitLab groups may nest, so the owner is the top-level group and the repo
    is the remaining path (``group/sub/repo`` -> ``group``, ``sub/repo``).
    Returns None for anything unrecognised.
    """
    url = url.strip()

    match = _GITHUB_RE.match(url)
    if match:
        return PullRequestRef("github", match.group(1), match.group(2), int(match.group(3)))

    match = _GITLAB_RE.match(url)
    if match:
        owner, _, repo = match.group(2).partition("/")
        return PullRequestRef("gitlab", owner, repo, int(match.group(3)), base_url=f"https://{match.group(1)}")

    match = _BITBUCKET_RE.match(url)
    if match:
        return PullRequestRef("bitbucket", match.group(1), match.group(2), int(match.group(3)))

    return None
