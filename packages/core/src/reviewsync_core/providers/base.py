"""Base reviewer: the model completion boundary.

The core treats a model vendor as a single capability, ``complete(prompt)``,
returning raw text. Parsing that text is the response module's job, and
retrying a failed call is the caller's; a failing ``_call_api`` propagates.

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from reviewsync_core.models import AnnotatedDiff

logger = logging.getLogger(__name__)

_MAX_TOKENS = 8192

SYSTEM_PROMPT = """You are an expert code reviewer. Review the provided code diff and identify issues.

Focus on bugs, security vulnerabilities, performance problems, missing error
handling and type safety issues.

Every line of the diff is annotated with its absolute line number:
  [OLD:n|DEL]     a deleted line, n is the old-file line number
  [NEW:n|ADD]     an added line, n is the new-file line number
  [OLD:n|NEW:m]   an unchanged context line

Copy line numbers from these annotations; never compute them from hunk headers.
Use side "RIGHT" with the NEW number for added or context lines and side "LEFT"
with the OLD number for deleted lines.

Output ONLY valid JSON in this exact format:
{
  "summary": "One or two sentence overview",
  "findings": [
    {
      "file": "path/to/file.py",
      "line": 42,
      "side": "RIGHT",
      "severity": "critical|high|medium|low",
      "issue": "Description of the issue",
      "suggestion": "How to fix it",
      "codeSnippet": "optional corrected code"
    }
  ]
}

If no issues are found, return: {"summary": "No issues found.", "findings": []}
Do not include any text outside the JSON."""


def build_prompt(annotated: AnnotatedDiff) -> str:
    return (
        f"Review this change ({annotated.file_count} file(s), {annotated.hunk_count} hunk(s)).\n\n"
        f"## Annotated diff\n\n```diff\n{annotated.annotated}\n```"
    )


class BaseReviewer(ABC):
    MODEL: str = ""
    MAX_TOKENS: int = _MAX_TOKENS

    def complete(self, prompt: str) -> str:
        """Send one prompt with the review system prompt and return the raw text."""
        logger.debug("%s: sending %d prompt chars to %s", self.__class__.__name__, len(prompt), self.MODEL)
        return self._call_api(SYSTEM_PROMPT, prompt) or ""

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response."""
