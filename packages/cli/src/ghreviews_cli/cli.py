"""CLI entry point for ghreviews.

Commands:
  reviews  list the reviews you received (console, --json or --markdown)
  stats    counts by state, reviewer and repository
"""

from __future__ import annotations

import importlib.metadata
import logging

import click

from ghreviews_cli.commands.reviews import reviews_cmd
from ghreviews_cli.commands.stats import stats_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("ghreviews"),
    prog_name="ghreviews",
)
@click.option(
    "--config",
    "config_path",
    default=".ghreviews.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="GHREVIEWS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Track the GitHub reviews you received on your pull requests."""
    from ghreviews_core.config import load_config

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e)) from e


main.add_command(reviews_cmd)
main.add_command(stats_cmd)
