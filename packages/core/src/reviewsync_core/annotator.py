"""Absolute line-number annotation for unified diffs.

The model is far better at echoing a number it can see than at recomputing
offsets from hunk headers, so every in-hunk line is prefixed with the line
number(s) it occupies:

    @@ -10,5 +12,7 @@
    [OLD:10|NEW:12]  context line
    [OLD:11|DEL] -deleted line
    [NEW:13|ADD] +added line

Annotation is purely additive: stripping the bracket prefix and the single
space after it gives back the original line.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from reviewsync_core.models import AnnotatedDiff

logger = logging.getLogger(__name__)

_HUNK_RE = re.compile(r"^@@ -(\d+)(?:,\d+)? \+(\d+)(?:,\d+)? @@")

_FILE_METADATA_PREFIXES = (
    "index ",
    "--- ",
    "+++ ",
    "new file",
    "deleted file",
    "similarity index",
    "rename from",
    "rename to",
    "Binary files",
)

_DEL_RE = re.compile(r"^\[OLD:(\d+)\|DEL\]")
_ADD_RE = re.compile(r"^\[NEW:(\d+)\|ADD\]")
_CONTEXT_RE = re.compile(r"^\[OLD:(\d+)\|NEW:(\d+)\]")
_PREFIX_RE = re.compile(r"^\[(?:OLD:\d+\|DEL|NEW:\d+\|ADD|OLD:\d+\|NEW:\d+)\] ?")


@dataclass(frozen=True)
class LineAnnotation:
    type: str  # "add" | "del" | "context"
    old_line: int | None = None
    new_line: int | None = None


def annotate(diff: str) -> AnnotatedDiff:
    """Annotate a unified diff with absolute old/new line numbers."""
    out: list[str] = []
    old_line = 0
    new_line = 0
    in_hunk = False
    file_count = 0
    hunk_count = 0

    for line in diff.split("\n"):
        if line.startswith("diff --git"):
            file_count += 1
            in_hunk = False
            out.append(line)
            continue

        if line.startswith(_FILE_METADATA_PREFIXES):
            out.append(line)
            continue

        match = _HUNK_RE.match(line)
        if match:
            hunk_count += 1
            old_line = int(match.group(1))
            new_line = int(match.group(2))
            in_hunk = True
            out.append(line)
            continue

        if not in_hunk:
            out.append(line)
        elif line.startswith("-"):
            out.append(f"[OLD:{old_line}|DEL] {line}")
            old_line += 1
        elif line.startswith("+"):
            out.append(f"[NEW:{new_line}|ADD] {line}")
            new_line += 1
        elif line == "" or line.startswith(" "):
            out.append(f"[OLD:{old_line}|NEW:{new_line}] {line}")
            old_line += 1
            new_line += 1
        else:
            # "\ No newline at end of file" and any unrecognised dialect.
            out.append(line)

    logger.debug("Diff annotated: %d file(s), %d hunk(s)", file_count, hunk_count)

    return AnnotatedDiff(
        original=diff,
        annotated="\n".join(out),
        file_count=file_count,
        hunk_count=hunk_count,
    )


def parse_annotation(line: str) -> LineAnnotation | None:
    """Return the line numbers carried by an annotated line, or None."""
    match = _DEL_RE.match(line)
    if match:
        return LineAnnotation(type="del", old_line=int(match.group(1)))

    match = _ADD_RE.match(line)
    if match:
        return LineAnnotation(type="add", new_line=int(match.group(1)))

    match = _CONTEXT_RE.match(line)
    if match:
        return LineAnnotation(type="context", old_line=int(match.group(1)), new_line=int(match.group(2)))

    return None


def strip_annotation(line: str) -> str:
    """Remove a recognised annotation prefix and its separating space."""
    return _PREFIX_RE.sub("", line, count=1)
