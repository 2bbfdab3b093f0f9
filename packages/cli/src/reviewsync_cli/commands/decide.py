"""decide command: record the reviewer's decision on a stored comment."""

from __future__ import annotations

import click
from rich.console import Console

from reviewsync_cli.commands.history import require_store

console = Console()

_DECISIONS = {"approve": "approved", "reject": "rejected", "pending": "pending"}


@click.command("decide")
@click.argument("comment_id", required=False)
@click.argument("decision", type=click.Choice(sorted(_DECISIONS)), required=False)
@click.option("--repo", required=True, help="Repository (owner/name), or 'local'.")
@click.option("--pr", "pr_number", type=int, default=0, show_default=True, help="PR number (0 for local diffs).")
@click.option("--edit", "edited_text", default=None, help="Replace the comment text shown and posted.")
@click.option("--reset", is_flag=True, help="Forget every stored review of this PR instead.")
@click.pass_context
def decide_cmd(ctx, comment_id: str | None, decision: str | None, repo: str, pr_number: int, edited_text, reset: bool):
    """Approve, reject or edit a stored AI comment.

    Decisions toggle through pending: an approved comment must be set back to
    pending before it can be rejected, and vice versa.
    """
    store = require_store(ctx)

    if reset:
        removed = store.reset(repo, pr_number)
        console.print(f"Removed {removed} stored review(s) of {repo}#{pr_number}.")
        return

    if comment_id is None:
        raise click.UsageError("Missing COMMENT_ID.")
    if decision is None and edited_text is None:
        raise click.UsageError("Give a decision (approve, reject, pending) and/or --edit TEXT.")

    status = _DECISIONS[decision] if decision else None
    try:
        found = store.update_comment(repo, pr_number, comment_id, status=status, edited_text=edited_text)
    except ValueError as e:
        raise click.ClickException(str(e))
    if not found:
        raise click.ClickException(f"No stored comment {comment_id!r} for {repo}#{pr_number}.")

    console.print(f"[green]Updated {comment_id}[/green]" + (f": {status}" if status else ""))
