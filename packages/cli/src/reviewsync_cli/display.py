"""Terminal rendering of review comments."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from reviewsync_core.models import ReviewComment, display_text

console = Console()

_SEVERITY_COLOR = {"critical": "red", "high": "yellow", "medium": "blue", "low": "dim"}
_STATUS_MARK = {"pending": "•", "approved": "[green]✔[/green]", "rejected": "[red]✘[/red]"}


def _host_flags(c: ReviewComment) -> str:
    flags = []
    if c.host_resolved:
        flags.append("resolved")
    if c.host_outdated:
        flags.append("outdated")
    return f"  [dim]({', '.join(flags)})[/dim]" if flags else ""


def print_comments(comments: list[ReviewComment]) -> None:
    """Print comments grouped by file, replies indented under their root."""
    if not comments:
        console.print("[yellow]No comments.[/yellow]")
        return

    ids = {c.id for c in comments}
    replies: dict[str, list[ReviewComment]] = {}
    roots = []
    for c in comments:
        if c.parent_id and c.parent_id in ids:
            replies.setdefault(c.parent_id, []).append(c)
        else:
            roots.append(c)

    current_file = None
    for root in sorted(roots, key=lambda c: (c.file, c.line)):
        if root.file != current_file:
            current_file = root.file
            console.print(f"\n[bold cyan]{escape(root.file)}[/bold cyan]")
        color = _SEVERITY_COLOR.get(root.severity, "white")
        author = f" @{escape(root.author)}" if root.author else ""
        console.print(
            f"  {_STATUS_MARK.get(root.status, '•')} line [bold]{root.line}[/bold] {root.side}  "
            f"[{color}]{root.severity.upper()}[/{color}]{author}{_host_flags(root)}  [dim]{root.id}[/dim]"
        )
        console.print(f"    {escape(display_text(root))}")
        if root.suggestion:
            console.print(f"    [dim]Suggestion:[/dim] {escape(root.suggestion)}")
        for reply in replies.get(root.id, []):
            who = f"@{escape(reply.author)}" if reply.author else "reply"
            console.print(f"      ↳ {who}: {escape(display_text(reply))}")
