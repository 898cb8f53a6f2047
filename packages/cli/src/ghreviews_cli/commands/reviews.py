"""reviews command: list the reviews a user received."""

from __future__ import annotations

import json

import click
from github import GithubException
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ghreviews_core.errors import ReviewsError, sanitize_error_message
from ghreviews_core.models import ReviewQuery, ReviewsResponse
from ghreviews_core.report import render_error_report, render_markdown, state_emoji
from ghreviews_cli.runner import fetch_reviews, require_token
from ghreviews_cli.validation import markdown_output_path, validate_username

console = Console()

_STATE_STYLE = {
    "APPROVED": "green",
    "CHANGES_REQUESTED": "red",
    "COMMENTED": "yellow",
    "DISMISSED": "dim",
}


def print_reviews(result: ReviewsResponse, username: str) -> None:
    console.print(f"\n[bold]Reviews received by [cyan]{escape(username)}[/cyan][/bold]")
    console.print(f"  Total: {result.total_count} review(s)\n")
    if not result.reviews:
        console.print("[yellow]No reviews found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", width=4)
    table.add_column("State", width=22)
    table.add_column("PR", max_width=40)
    table.add_column("Reviewer")
    table.add_column("Date", width=10)
    table.add_column("Comment", max_width=60)

    for index, review in enumerate(result.reviews, 1):
        style = _STATE_STYLE.get(review.state.value, "white")
        body = review.body.strip()
        table.add_row(
            str(index),
            f"{state_emoji(review.state)} [{style}]{review.state.value}[/{style}]",
            escape(f"#{review.pr_number} {review.pr_title}"),
            escape(review.reviewer),
            review.submitted_at.strftime("%Y-%m-%d"),
            escape(body[:100] + ("..." if len(body) > 100 else "")),
        )
    console.print(table)


@click.command("reviews")
@click.option("--username", "-u", required=True, callback=validate_username, help="GitHub username.")
@click.option("--token", "-t", default=None, help="GitHub personal access token (or set GITHUB_TOKEN).")
@click.option("--org", "-o", default=None, help="Only report when the repository belongs to this organization.")
@click.option(
    "--state",
    "-s",
    type=click.Choice(["open", "closed", "all"]),
    default=None,
    help="Pull request state filter. Overrides config file (default: all).",
)
@click.option("--page", "-p", type=click.IntRange(min=1), default=None, help="Page number (echoed in JSON output).")
@click.option("--limit", "-l", type=click.IntRange(min=1), default=None, help="Results per page (echoed in JSON output).")
@click.option("--days", "-d", type=click.IntRange(min=1), default=None, help="Only reviews from the last N days.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--markdown", "markdown_name", default=None, help="Write a Markdown report to this file (cwd only).")
@click.pass_context
def reviews_cmd(
    ctx,
    username: str,
    token: str | None,
    org: str | None,
    state: str | None,
    page: int | None,
    limit: int | None,
    days: int | None,
    as_json: bool,
    markdown_name: str | None,
):
    """Show reviews you received on your pull requests in this repository.

    Run inside a clone whose `origin` remote points at GitHub.
    """
    config = ctx.obj["config"]

    output_path = None
    if markdown_name is not None:
        output_path = markdown_output_path(markdown_name)
        if output_path is None:
            raise click.BadParameter(
                "use letters, digits, '.', '-' and '_' only; README.md and config files are refused.",
                param_hint="--markdown",
            )

    token = require_token(token or config.get("github_token"))
    query = ReviewQuery(
        username=username,
        state=state or config["state"],
        per_page=limit or config["per_page"],
        page=page or config["page"],
        org=org or config.get("default_org"),
        timeframe_days=days,
    )

    try:
        result = fetch_reviews(config, query, token)
    except (ReviewsError, GithubException, OSError) as e:
        message = sanitize_error_message(e)
        if output_path is not None:
            output_path.write_text(
                render_error_report(username, e, title=config.get("title")),
                encoding="utf-8",
            )
            console.print(f"[yellow]Wrote error report to {output_path}[/yellow]", highlight=False)
        raise click.ClickException(message) from e

    if output_path is not None:
        markdown = render_markdown(
            result.reviews,
            username,
            title=config.get("title"),
            include_stats=config.get("include_stats", True),
        )
        output_path.write_text(markdown, encoding="utf-8")
        console.print(f"[green]Markdown report written to {output_path}[/green]", highlight=False)
        console.print(f"Total reviews: {result.total_count}")
    elif as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_reviews(result, username)
