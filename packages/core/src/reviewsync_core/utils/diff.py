from __future__ import annotations

import re
from dataclasses import dataclass

_GIT_HEADER_RE = re.compile(r"^diff --git a/(.+?) b/(.+?)$")


@dataclass
class ChangedFile:
    path: str
    status: str = "modified"  # "added" | "modified" | "deleted" | "renamed"
    additions: int = 0
    deletions: int = 0


def normalize_path(path: str) -> str:
    """Strip the ``a/`` or ``b/`` prefix git puts in front of diff paths."""
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


def parse_changed_files(diff: str) -> list[ChangedFile]:
    """List the files touched by a unified diff with their add/remove counts."""
    files: list[ChangedFile] = []
    current: ChangedFile | None = None
    in_hunk = False

    for line in diff.split("\n"):
        match = _GIT_HEADER_RE.match(line)
        if match:
            current = ChangedFile(path=match.group(2))
            files.append(current)
            in_hunk = False
            continue
        if current is None:
            continue

        if not in_hunk:
            if line.startswith("new file mode"):
                current.status = "added"
            elif line.startswith("deleted file mode"):
                current.status = "deleted"
            elif line.startswith("rename to "):
                current.status = "renamed"
                current.path = line[len("rename to ") :]
            elif line.startswith("@@"):
                in_hunk = True
            continue

        if line.startswith("+") and not line.startswith("+++"):
            current.additions += 1
        elif line.startswith("-") and not line.startswith("---"):
            current.deletions += 1

    return files


def truncate_diff(diff: str, max_chars: int) -> str:
    """Cut an oversized diff at a line boundary so the prompt stays bounded."""
    if len(diff) <= max_chars:
        return diff
    truncated = diff[:max_chars]
    cut = truncated.rfind("\n")
    if cut > 0:
        truncated = truncated[:cut]
    return truncated + "\n\n... (diff truncated)"
