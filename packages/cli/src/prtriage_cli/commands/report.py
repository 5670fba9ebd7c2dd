"""Report command: unresolved comments and nitpicks for one pull request."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.table import Table

from prtriage_cli.git import current_branch, detect_repo_from_git
from prtriage_core.errors import PRTriageError
from prtriage_core.gh.client import GitHubClient
from prtriage_core.models import Report
from prtriage_core.report import build_pr_report
from prtriage_core.security import DEFAULT_SECURITY_AUTHOR

console = Console()


def _first_line(text: str, width: int = 80) -> str:
    line = text.strip().splitlines()[0] if text.strip() else ""
    return line if len(line) <= width else line[: width - 1] + "…"


def print_report_tables(report: Report) -> None:
    """Render a Report as rich tables for reading in a terminal."""
    console.print(f"\n[bold]#{report.pr_number}[/bold] {report.title}")
    console.print(f"[dim]{report.url}[/dim]\n")

    if report.unresolved_comments:
        table = Table(
            title=f"Unresolved comments ({report.total_unresolved})",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("File")
        table.add_column("Line", justify="right", width=6)
        table.add_column("Author", width=24)
        table.add_column("Comment", max_width=60)
        for c in report.unresolved_comments:
            table.add_row(c.file, str(c.line) if c.line is not None else "—", c.author, _first_line(c.body))
        console.print(table)
    else:
        console.print("[green]No unresolved comments.[/green]")

    if report.nitpick_comments:
        table = Table(
            title=f"Nitpicks ({report.total_nitpicks})",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("File")
        table.add_column("Lines", justify="right", width=9)
        table.add_column("Author", width=24)
        table.add_column("Nitpick", max_width=60)
        for n in report.nitpick_comments:
            table.add_row(n.file, n.line, n.author, _first_line(n.body))
        console.print(table)
    else:
        console.print("[green]No nitpicks.[/green]")


@click.command("report")
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Auto-detected from git remote.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Defaults to the open PR for the current branch.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "table"]),
    default=None,
    help="Output format. Overrides config file.",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Concurrent code-scanning alert lookups. Overrides config file.",
)
@click.pass_context
def report_cmd(ctx, repo: str | None, pr_number: int | None, output_format: str | None, workers: int | None):
    """Report unresolved review comments and AI nitpicks on a pull request.

    Comments left by the code-scanning bot are hidden when their alert is
    already fixed. Nitpicks are recovered from the AI reviewer's review bodies.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub personal access token (or use gh CLI)
    """
    config = dict(ctx.obj.get("config") or {}) if ctx.obj else {}
    if output_format is not None:
        config["output"] = output_format
    if workers is not None:
        config["alert_lookup_workers"] = workers

    token = config.get("github_token")
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN (or GH_TOKEN) or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )

    if repo is None:
        repo = detect_repo_from_git()
        if repo is None:
            raise click.UsageError("Could not determine repository. Pass --repo owner/name.")
    if repo.count("/") != 1 or not all(repo.split("/")):
        raise click.UsageError(f"Invalid repository {repo!r}. Expected owner/name.")
    owner, name = repo.split("/")

    client = GitHubClient(token, timeout=config.get("request_timeout", 30))

    if pr_number is None:
        branch = current_branch()
        pr_number = client.find_pull_number(owner, name, branch) if branch else None
        if pr_number is None:
            raise click.UsageError("No PR found for current branch. Provide the PR number with --pr.")

    try:
        report = build_pr_report(
            client,
            owner,
            name,
            pr_number,
            security_author=config.get("security_author", DEFAULT_SECURITY_AUTHOR),
            max_workers=config.get("alert_lookup_workers", 1),
        )
    except PRTriageError as e:
        click.echo(json.dumps({"error": str(e)}))
        ctx.exit(1)

    if config.get("output") == "table":
        print_report_tables(report)
    else:
        click.echo(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
