"""CLI entry point for reviewsync.

Commands:
  annotate: print a diff with absolute line numbers
  review: run the AI review over a diff
  comments: show existing inline comments on a GitHub/GitLab/Bitbucket PR
  history: display stored review runs
  decide: approve, reject or edit a stored comment
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from reviewsync_cli.commands.annotate import annotate_cmd
from reviewsync_cli.commands.comments import comments_cmd
from reviewsync_cli.commands.decide import decide_cmd
from reviewsync_cli.commands.history import history_cmd
from reviewsync_cli.commands.review import review_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured store from .reviewsync.yml settings.

      store: sqlite → SQLiteStore (store_path, default .reviewsync.db)
      (default)     → NoOpStore   (no persistence)
    """
    from reviewsync_store.noop import NoOpStore

    store_type = config.get("store", "noop")

    if store_type == "sqlite":
        from reviewsync_store.sqlite import SQLiteStore

        return SQLiteStore(db_path=config.get("store_path", ".reviewsync.db"))

    if store_type != "noop":
        console.print(f"[yellow]Unknown store {store_type!r}. Falling back to no store.[/yellow]")
    return NoOpStore()


@click.group()
@click.version_option(
    version=importlib.metadata.version("reviewsync"),
    prog_name="reviewsync",
)
@click.option(
    "--config",
    "config_path",
    default=".reviewsync.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REVIEWSYNC_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log parser and host API details.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI code review across GitHub, GitLab and Bitbucket."""
    from reviewsync_cli.auth import resolve_github_token
    from reviewsync_core.config import load_config

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )

    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e))

    # Resolve token early so all subcommands share the same resolution.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(annotate_cmd)
main.add_command(review_cmd)
main.add_command(comments_cmd)
main.add_command(history_cmd)
main.add_command(decide_cmd)
