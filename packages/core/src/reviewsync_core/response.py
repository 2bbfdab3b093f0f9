"""Recovery parser for model review output.

Models are asked for a JSON object ``{"summary": ..., "findings": [...]}`` but
routinely wrap it in prose or markdown fences, leave trailing commas, or drift
into JS-style object literals. The parser runs an ordered pipeline of parse
attempts and only gives up (``UnparseableOutputError``) when none of them can
locate a usable JSON object.

Two outcomes must never be confused by callers:
  - the model found nothing -> a valid ParsedReview with no comments
  - the model output was unusable -> UnparseableOutputError

Individual findings that fail validation are skipped and recorded in the
run's ReviewLog; they never fail the batch.
"""

from __future__ import annotations

import itertools
import json
import logging
import math
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Union

from reviewsync_core.log import ReviewLog
from reviewsync_core.models import ParsedReview, ReviewComment
from reviewsync_core.utils.diff import normalize_path

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "Code review completed."
NO_ISSUES_SUMMARY = "No issues found in the reviewed changes."
MAX_SUMMARY_CHARS = 256

UNKNOWN_FILE = "unknown"
MISSING_ISSUE = "(no description)"

SEVERITY_ALIASES = {
    "critical": "critical",
    "crit": "critical",
    "high": "high",
    "hi": "high",
    "medium": "medium",
    "med": "medium",
    "moderate": "medium",
    "low": "low",
    "lo": "low",
    "minor": "low",
}

SIDE_ALIASES = {
    "left": "LEFT",
    "l": "LEFT",
    "right": "RIGHT",
    "r": "RIGHT",
}

_NO_ISSUE_PHRASES = ("no issues", "no findings", "looks good", "no problems")

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_OUTER_FENCE_OPEN_RE = re.compile(r"^```(?:json)?[^\n]*\n", re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([\]}])")
_BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)\s*:")
_SINGLE_QUOTED_KEY_RE = re.compile(r"([{,]\s*)'((?:[^'\\]|\\.)*)'\s*:")
_SINGLE_QUOTED_VALUE_RE = re.compile(r"(:\s*)'((?:[^'\\]|\\.)*)'")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"\s+")


class UnparseableOutputError(ValueError):
    """Raised when no usable JSON object can be recovered from model output."""


@dataclass(frozen=True)
class NoJsonObject:
    reason: str


@dataclass(frozen=True)
class JsonDecodeFailed:
    error: str


ParseFailure = Union[NoJsonObject, JsonDecodeFailed]


# --------------------------------------------------------------------------- #
# Text recovery helpers                                                         #
# --------------------------------------------------------------------------- #


def _unwrap_fence(text: str) -> str:
    """Return the contents of the fenced block if the text has one.

    When the whole answer is a single fenced block, only the outer fence is
    removed so that fences inside string values (code suggestions) survive.
    """
    stripped = text.strip()
    opening = _OUTER_FENCE_OPEN_RE.match(stripped)
    if opening and stripped.endswith("```") and len(stripped) > opening.end():
        inner = stripped[opening.end() :]
        return inner[: inner.rfind("```")]
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1)
    return text


def _json_span(text: str) -> str | NoJsonObject:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1:
        return NoJsonObject("no braces in output")
    if end < start:
        return NoJsonObject("braces out of order")
    return text[start : end + 1]


def _light_cleanup(span: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", span.lstrip("\ufeff"))


def _says_no_issues(raw_text: str) -> bool:
    lowered = raw_text.lower()
    return any(phrase in lowered for phrase in _NO_ISSUE_PHRASES)


def _requote_single(match: re.Match) -> str:
    value = match.group(2).replace("\\'", "'")
    return match.group(1) + json.dumps(value)


def _aggressive_repair(text: str) -> str | NoJsonObject:
    span = _json_span(text)
    if isinstance(span, NoJsonObject):
        return span
    repaired = _TRAILING_COMMA_RE.sub(r"\1", span)
    repaired = _SINGLE_QUOTED_KEY_RE.sub(lambda m: m.group(1) + json.dumps(m.group(2)) + ":", repaired)
    repaired = _BARE_KEY_RE.sub(r'\1"\2":', repaired)
    repaired = _SINGLE_QUOTED_VALUE_RE.sub(_requote_single, repaired)
    return repaired.replace("\r", "").replace("\t", "")


def _decode(text: str, strict: bool = True) -> dict | JsonDecodeFailed:
    try:
        data = json.loads(text, strict=strict)
    except json.JSONDecodeError as e:
        return JsonDecodeFailed(str(e))
    if not isinstance(data, dict):
        return JsonDecodeFailed(f"top-level JSON value is {type(data).__name__}, not an object")
    return data


def _strict_attempt(cleaned: str) -> dict | ParseFailure:
    return _decode(cleaned)


def _aggressive_attempt(cleaned: str) -> dict | ParseFailure:
    repaired = _aggressive_repair(cleaned)
    if isinstance(repaired, NoJsonObject):
        return repaired
    # Literal newlines inside strings are tolerated on this pass only.
    return _decode(repaired, strict=False)


# Ordered: each attempt runs only when the previous one failed. The boolean
# selects lenient finding normalisation for results of that attempt.
_ATTEMPTS: tuple[tuple[str, Callable[[str], Any], bool], ...] = (
    ("strict", _strict_attempt, False),
    ("aggressive", _aggressive_attempt, True),
)


# --------------------------------------------------------------------------- #
# Finding normalisation                                                         #
# --------------------------------------------------------------------------- #


def sanitize_text(value: str) -> str:
    """Drop ASCII control characters and collapse whitespace runs."""
    return _WHITESPACE_RE.sub(" ", _CONTROL_CHARS_RE.sub(" ", value)).strip()


def coerce_line(value: Any) -> int | None:
    """Return ``value`` as a positive integer line number, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        try:
            value = int(value)
        except ValueError:
            try:
                value = float(value)
            except ValueError:
                return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        value = math.floor(value)
    if not isinstance(value, int) or value < 1:
        return None
    return value


def resolve_severity(value: Any) -> str:
    if isinstance(value, str):
        return SEVERITY_ALIASES.get(value.strip().lower(), "medium")
    return "medium"


def resolve_side(value: Any) -> str:
    if isinstance(value, str):
        return SIDE_ALIASES.get(value.strip().lower(), "RIGHT")
    return "RIGHT"


def _optional_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return sanitize_text(value) or None


class _IdFactory:
    """Synthetic ids for one parse call: ``ai-<epoch-ms>-<n>``."""

    def __init__(self):
        self._stamp = int(time.time() * 1000)
        self._counter = itertools.count()

    def __call__(self) -> str:
        return f"ai-{self._stamp}-{next(self._counter)}"


def normalize_finding(
    raw: Any,
    lenient: bool = False,
    new_id: Callable[[], str] | None = None,
) -> ReviewComment | None:
    """Validate one raw finding and coerce it into a ReviewComment.

    Returns None when the finding must be skipped. In lenient mode a missing
    file, issue or line is replaced with a placeholder instead.
    """
    if not isinstance(raw, dict):
        return None

    file = raw.get("file")
    file = normalize_path(file.strip()) if isinstance(file, str) else ""
    if not file:
        if not lenient:
            return None
        file = UNKNOWN_FILE

    issue = raw.get("issue")
    if not isinstance(issue, str):
        if not lenient:
            return None
        issue = MISSING_ISSUE

    line = coerce_line(raw.get("line"))
    if line is None:
        if not lenient:
            return None
        line = 1

    end_line = coerce_line(raw.get("endLine"))
    if end_line is not None and end_line < line:
        end_line = None

    return ReviewComment(
        id=(new_id or _IdFactory())(),
        file=file,
        line=line,
        end_line=end_line,
        side=resolve_side(raw.get("side")),
        severity=resolve_severity(raw.get("severity")),
        issue=sanitize_text(issue),
        suggestion=_optional_text(raw.get("suggestion")),
        code_snippet=_optional_text(raw.get("codeSnippet")),
        status="pending",
        source="ai",
    )


def _extract(data: dict, lenient: bool, log: ReviewLog, new_id: Callable[[], str]) -> ParsedReview:
    summary = data.get("summary")
    if isinstance(summary, str) and summary.strip():
        summary = summary.strip()[:MAX_SUMMARY_CHARS]
    else:
        summary = DEFAULT_SUMMARY

    findings = data.get("findings")
    if not isinstance(findings, list):
        if findings is not None:
            log.warning(f"'findings' is {type(findings).__name__}, not a list; treating as empty", logger)
        return ParsedReview(summary=summary)

    comments: list[ReviewComment] = []
    for index, raw in enumerate(findings):
        comment = normalize_finding(raw, lenient=lenient, new_id=new_id)
        if comment is None:
            log.warning(f"Skipping invalid finding #{index}: {str(raw)[:120]}", logger)
            continue
        comments.append(comment)

    log.info(f"Parsed {len(comments)} of {len(findings)} finding(s)", logger)
    return ParsedReview(summary=summary, comments=comments)


# --------------------------------------------------------------------------- #
# Public entry point                                                            #
# --------------------------------------------------------------------------- #


def parse_review_response(raw_text: str, log: ReviewLog | None = None) -> ParsedReview:
    """Turn raw model output into a summary and validated review comments.

    Raises UnparseableOutputError only when no attempt recovers a JSON object
    and the text does not read as an explicit "no issues" answer.
    """
    log = log if log is not None else ReviewLog()

    if not raw_text or not raw_text.strip():
        log.info("Empty model response; nothing to review", logger)
        return ParsedReview(summary=DEFAULT_SUMMARY)

    span = _json_span(_unwrap_fence(raw_text))
    if isinstance(span, NoJsonObject):
        if _says_no_issues(raw_text):
            log.info("Model response has no JSON but reports no issues", logger)
            return ParsedReview(summary=NO_ISSUES_SUMMARY)
        raise UnparseableOutputError(f"Model output contains no JSON object ({span.reason}): {raw_text[:200]!r}")

    cleaned = _light_cleanup(span)
    new_id = _IdFactory()
    failure: ParseFailure | None = None

    for name, attempt, lenient in _ATTEMPTS:
        outcome = attempt(cleaned)
        if isinstance(outcome, dict):
            if lenient:
                log.warning(f"Recovered model output with the {name} repair pass", logger)
            return _extract(outcome, lenient, log, new_id)
        failure = outcome
        log.warning(f"{name} parse failed: {outcome}", logger)

    raise UnparseableOutputError(f"Could not parse model output as JSON ({failure}): {raw_text[:200]!r}")
