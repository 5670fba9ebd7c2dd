"""Extract nitpicks from a saved review body."""

from __future__ import annotations

import json

import click

from prtriage_core.models import Review
from prtriage_core.nitpicks import extract_nitpick_comments


@click.command("nitpicks")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--author", default="coderabbitai", show_default=True, help="Author recorded on each nitpick.")
def nitpicks_cmd(source, author: str):
    """Print the nitpicks embedded in a review body as JSON.

    SOURCE is a file holding the raw review body, or - for stdin. Useful for
    checking how a review will be parsed without querying GitHub.
    """
    review = Review(author=author, body=source.read(), created_at="")
    comments = extract_nitpick_comments(review)
    output = {
        "nitpickComments": [c.to_dict() for c in comments],
        "totalNitpicks": len(comments),
    }
    click.echo(json.dumps(output, indent=2, ensure_ascii=False))
