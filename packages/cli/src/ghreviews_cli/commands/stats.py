"""stats command: aggregate counts over the reviews a user received."""

from __future__ import annotations

import json

import click
from github import GithubException
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ghreviews_core.errors import ReviewsError, sanitize_error_message
from ghreviews_core.models import ReviewQuery, ReviewState, ReviewStats
from ghreviews_core.report import state_display
from ghreviews_core.stats import compute_stats
from ghreviews_cli.runner import fetch_reviews, require_token
from ghreviews_cli.validation import validate_username

console = Console()


def print_stats(stats: ReviewStats, username: str, top: int) -> None:
    console.print(f"\n[bold]Review stats for [cyan]{escape(username)}[/cyan][/bold]")
    console.print(f"  Total reviews: {stats.total_reviews}")

    state_table = Table(title="By Review State", show_header=True)
    state_table.add_column("State", style="bold")
    state_table.add_column("Count", justify="right")
    state_table.add_column("% of total", justify="right")
    _state_style = {"approved": "green", "changes_requested": "red", "commented": "yellow"}
    for state, key in (
        (ReviewState.APPROVED, "approved"),
        (ReviewState.CHANGES_REQUESTED, "changes_requested"),
        (ReviewState.COMMENTED, "commented"),
    ):
        emoji, label = state_display(state)
        count = stats.by_state[key]
        pct = f"{count / stats.total_reviews * 100:.1f}%" if stats.total_reviews else "0%"
        style = _state_style[key]
        state_table.add_row(f"{emoji} [{style}]{label}[/{style}]", str(count), pct)
    console.print(state_table)

    if stats.by_reviewer:
        reviewer_table = Table(title=f"Top {top} Reviewers", show_header=True)
        reviewer_table.add_column("Reviewer")
        reviewer_table.add_column("Reviews", justify="right")
        for reviewer, count in stats.top_reviewers(top):
            reviewer_table.add_row(escape(reviewer), str(count))
        console.print(reviewer_table)

    if stats.by_repository:
        repo_table = Table(title=f"Top {top} Repositories", show_header=True)
        repo_table.add_column("Repository")
        repo_table.add_column("Reviews", justify="right")
        for repo, count in stats.top_repositories(top):
            repo_table.add_row(escape(repo), str(count))
        console.print(repo_table)


@click.command("stats")
@click.option("--username", "-u", required=True, callback=validate_username, help="GitHub username.")
@click.option("--token", "-t", default=None, help="GitHub personal access token (or set GITHUB_TOKEN).")
@click.option("--org", "-o", default=None, help="Only report when the repository belongs to this organization.")
@click.option("--days", "-d", type=click.IntRange(min=1), default=None, help="Only reviews from the last N days.")
@click.option("--top", type=click.IntRange(min=1), default=None, help="Entries shown per category. Overrides config.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def stats_cmd(ctx, username: str, token: str | None, org: str | None, days: int | None, top: int | None, as_json: bool):
    """Show review statistics: counts by state, reviewer and repository."""
    config = ctx.obj["config"]
    token = require_token(token or config.get("github_token"))
    query = ReviewQuery(
        username=username,
        state=config["state"],
        per_page=config["per_page"],
        page=config["page"],
        org=org or config.get("default_org"),
        timeframe_days=days,
    )

    try:
        result = fetch_reviews(config, query, token)
    except (ReviewsError, GithubException, OSError) as e:
        raise click.ClickException(sanitize_error_message(e)) from e

    stats = compute_stats(result.reviews)
    if as_json:
        click.echo(json.dumps(stats.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_stats(stats, username, top or config["top"])
