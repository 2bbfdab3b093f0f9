"""comments command: show the existing inline comments on a pull request."""

from __future__ import annotations

import click
from github import GithubException
from rich.console import Console

from reviewsync_cli.display import print_comments
from reviewsync_core.hosts.base import HostAPIError
from reviewsync_core.reviewer import fetch_host_comments, visible_host_comments
from reviewsync_core.utils.url import parse_pr_url

console = Console()


@click.command("comments")
@click.option("--pr", "pr_url", required=True, help="Pull/merge request URL.")
@click.option(
    "--all",
    "show_all",
    is_flag=True,
    help="Include resolved and outdated threads.",
)
@click.pass_context
def comments_cmd(ctx, pr_url: str, show_all: bool):
    """Fetch and normalise inline comments from GitHub, GitLab or Bitbucket."""
    config = ctx.obj["config"]
    target = parse_pr_url(pr_url)
    if target is None:
        raise click.UsageError(f"Not a GitHub, GitLab or Bitbucket pull request URL: {pr_url}")

    try:
        comments = fetch_host_comments(target, config)
    except ValueError as e:
        raise click.UsageError(str(e))
    except (HostAPIError, GithubException) as e:
        raise click.ClickException(f"Could not fetch comments: {e}")

    shown = comments if show_all else visible_host_comments(comments)
    hidden = len(comments) - len(shown)

    console.print(f"[bold]{target.slug}#{target.number}[/bold] ({target.host}): {len(comments)} comment(s)")
    print_comments(shown)
    if hidden:
        console.print(f"\n[dim]{hidden} resolved/outdated comment(s) hidden. Use --all to show them.[/dim]")
