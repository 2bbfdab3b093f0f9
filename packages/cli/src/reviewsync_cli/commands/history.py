"""history command: display stored review runs."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


def require_store(ctx):
    from reviewsync_store.noop import NoOpStore

    store = ctx.obj.get("store") if ctx.obj else None
    if store is None or isinstance(store, NoOpStore):
        raise click.UsageError("No store configured. Add 'store: sqlite' to .reviewsync.yml.")
    return store


@click.command("history")
@click.option("--repo", required=True, help="Repository (owner/name), or 'local' for diffs without a PR.")
@click.option("--pr", "pr_number", type=int, default=None, help="Filter by PR number.")
@click.option("--limit", default=20, show_default=True, help="Maximum number of records to show.")
@click.pass_context
def history_cmd(ctx, repo: str, pr_number: int | None, limit: int):
    """Show past AI review runs for a repository."""
    store = require_store(ctx)

    records = store.list_reviews(repo, pr_number=pr_number)
    if not records:
        console.print("[yellow]No review records found.[/yellow]")
        return

    # Show most recent first, capped at --limit.
    records = list(reversed(records))[:limit]

    table = Table(title=f"Review History — {repo}", show_header=True, header_style="bold cyan")
    table.add_column("PR", style="bold", width=6)
    table.add_column("Host", width=10)
    table.add_column("Summary", max_width=40)
    table.add_column("Comments", justify="right", width=10)
    table.add_column("Approved", justify="right", width=9)
    table.add_column("Rejected", justify="right", width=9)
    table.add_column("Reviewed At", width=20)

    for r in records:
        approved = sum(1 for c in r.comments if c.status == "approved")
        rejected = sum(1 for c in r.comments if c.status == "rejected")
        table.add_row(
            f"#{r.pr_number}",
            r.host,
            r.summary[:40],
            str(len(r.comments)),
            f"[green]{approved}[/green]" if approved else "—",
            f"[red]{rejected}[/red]" if rejected else "—",
            r.reviewed_at[:19].replace("T", " "),
        )

    console.print(table)
