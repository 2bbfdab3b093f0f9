"""annotate command: print a diff with absolute line numbers."""

from __future__ import annotations

import click
from rich.console import Console

from reviewsync_core.annotator import annotate, strip_annotation

console = Console(stderr=True)


@click.command("annotate")
@click.argument("diff_file", type=click.File("r"), default="-")
@click.option("--strip", is_flag=True, help="Remove annotations from an annotated diff instead.")
def annotate_cmd(diff_file, strip: bool):
    """Annotate a unified diff (file or stdin) with [OLD:n|NEW:m] line numbers."""
    text = diff_file.read()
    if strip:
        click.echo("\n".join(strip_annotation(line) for line in text.split("\n")), nl=False)
        return

    result = annotate(text)
    click.echo(result.annotated, nl=not result.annotated.endswith("\n"))
    console.print(f"[dim]{result.file_count} file(s), {result.hunk_count} hunk(s)[/dim]")
