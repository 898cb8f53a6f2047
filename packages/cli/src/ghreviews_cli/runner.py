"""Glue between click commands and the core aggregation."""

from __future__ import annotations

import click
from rich.console import Console

from ghreviews_core.aggregator import get_received_reviews
from ghreviews_core.config import min_interval_seconds
from ghreviews_core.models import ReviewQuery, ReviewsResponse
from ghreviews_cli.auth import resolve_github_token

# Progress goes to stderr; stdout carries --json output.
console = Console(stderr=True)


def require_token(explicit: str | None) -> str:
    token = resolve_github_token(explicit)
    if not token:
        raise click.UsageError(
            "No GitHub token found. Pass --token, set GITHUB_TOKEN, or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens (scope: repo or public_repo)."
        )
    return token


def fetch_reviews(config: dict, query: ReviewQuery, token: str) -> ReviewsResponse:
    """Run the aggregation behind a spinner. Fatal errors propagate."""
    with console.status("Fetching GitHub reviews..."):
        result = get_received_reviews(
            query,
            token,
            max_pulls=config["max_pulls"],
            min_interval=min_interval_seconds(config),
        )
    console.print(f"[green]Complete! Found {result.total_count} review(s).[/green]", highlight=False)
    return result
