"""review command: run the AI review over a diff."""

from __future__ import annotations

import click
from github import GithubException
from rich.console import Console
from rich.markup import escape

from reviewsync_cli.display import print_comments
from reviewsync_core.hosts.base import HostAPIError
from reviewsync_core.models import ReviewComment
from reviewsync_core.response import UnparseableOutputError
from reviewsync_core.reviewer import ReviewResult, fetch_host_comments, get_reviewer, run_review
from reviewsync_core.utils.diff import parse_changed_files
from reviewsync_core.utils.url import PullRequestRef, parse_pr_url
from reviewsync_store.models import CommentRecord, ReviewRecord

console = Console()


def _result_to_record(result: ReviewResult, target: PullRequestRef | None, model: str) -> ReviewRecord:
    """Map a ReviewResult returned by run_review() to a ReviewRecord for the store.

    The CLI owns this mapping: reviewsync_core has no store knowledge and
    reviewsync_store has no core knowledge.
    """
    return ReviewRecord(
        repo=target.slug if target else "local",
        pr_number=target.number if target else 0,
        host=target.host if target else "local",
        reviewer_model=model,
        reviewed_at=result.reviewed_at,
        summary=result.summary,
        comments=[
            CommentRecord(
                id=c.id,
                file=c.file,
                line=c.line,
                side=c.side,
                severity=c.severity,
                issue=c.issue,
                status=c.status,
                source=c.source,
                suggestion=c.suggestion,
                parent_id=c.parent_id,
                edited_text=c.edited_text,
            )
            for c in result.comments
        ],
    )


def _approved_findings(store, repo: str, pr_number: int) -> list[ReviewComment]:
    """Findings the reviewer approved in earlier runs of the same PR."""
    if store is None:
        return []
    return [
        ReviewComment(
            id=c.id,
            file=c.file,
            line=c.line,
            side=c.side,
            severity=c.severity,
            issue=c.issue,
            status=c.status,
            source=c.source,
            suggestion=c.suggestion,
            edited_text=c.edited_text,
        )
        for record in store.list_reviews(repo, pr_number=pr_number)
        for c in record.comments
        if c.status == "approved"
    ]


@click.command("review")
@click.argument("diff_file", type=click.File("r"), default="-")
@click.option(
    "--pr",
    "pr_url",
    default=None,
    help="Pull/merge request URL. Existing inline comments there are not repeated.",
)
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print review comments without saving them to the store.",
)
@click.pass_context
def review_cmd(ctx, diff_file, pr_url: str | None, model: str | None, shadow: bool):
    """Review a unified diff (file or stdin) with an AI model.

    \b
    Example:
      git diff main... | reviewsync review --pr https://github.com/o/r/pull/7

    \b
    Required environment variables:
      ANTHROPIC_API_KEY    Required when using --model anthropic
      OPENAI_API_KEY       Required when using --model openai
      GITHUB_TOKEN / GITLAB_TOKEN / BITBUCKET_TOKEN   with --pr
    """
    config = dict(ctx.obj["config"])
    if model:
        config["model"] = model

    if config["model"] == "anthropic" and not config.get("anthropic_api_key"):
        raise click.UsageError("ANTHROPIC_API_KEY environment variable is not set.")
    if config["model"] == "openai" and not config.get("openai_api_key"):
        raise click.UsageError("OPENAI_API_KEY environment variable is not set.")

    target = None
    if pr_url:
        target = parse_pr_url(pr_url)
        if target is None:
            raise click.UsageError(f"Not a GitHub, GitLab or Bitbucket pull request URL: {pr_url}")

    diff = diff_file.read()
    if not diff.strip():
        raise click.UsageError("The diff is empty. Pipe `git diff` output or pass a diff file.")

    for f in parse_changed_files(diff):
        console.print(f"[dim]{f.status:>8}  {escape(f.path)}  +{f.additions} -{f.deletions}[/dim]")

    existing = []
    if target is not None:
        try:
            existing = fetch_host_comments(target, config)
        except ValueError as e:
            raise click.UsageError(str(e))
        except (HostAPIError, GithubException) as e:
            raise click.ClickException(f"Could not fetch existing comments: {e}")
        console.print(f"[dim]{len(existing)} existing comment(s) on {target.slug}#{target.number}[/dim]")

    store = ctx.obj.get("store")
    approved = _approved_findings(store, target.slug if target else "local", target.number if target else 0)
    if approved:
        console.print(f"[dim]{len(approved)} approved finding(s) from earlier runs[/dim]")

    try:
        with console.status("Reviewing diff..."):
            result = run_review(
                diff,
                get_reviewer(config),
                existing=existing + approved,
                max_diff_chars=config.get("max_diff_chars"),
            )
    except UnparseableOutputError as e:
        raise click.ClickException(f"The model's answer could not be used: {e}")

    for message in result.log.warnings:
        console.print(f"[yellow]{escape(message)}[/yellow]")

    console.print(f"\n[bold]{escape(result.summary)}[/bold]")
    print_comments(result.comments)
    if result.dropped_duplicates:
        console.print(
            f"\n[dim]{result.dropped_duplicates} finding(s) already raised on the PR or approved earlier were skipped.[/dim]"
        )

    if shadow:
        console.print(f"[bold]Shadow review complete. {len(result.comments)} comment(s) not saved.[/bold]")
        return

    if store is not None:
        store.save(_result_to_record(result, target, config["model"]))
