"""GitHub token lookup for the ghreviews commands.

Sources, first non-empty wins:
  1. --token on the command line
  2. GITHUB_TOKEN environment variable
  3. `gh auth token` (GitHub CLI session, works after `gh auth login`)
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

GH_CLI_TIMEOUT_SECONDS = 5


def _token_from_gh_cli() -> str | None:
    try:
        completed = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=GH_CLI_TIMEOUT_SECONDS,
        )
    except FileNotFoundError:
        logger.debug("gh CLI not installed; no session token available.")
        return None
    except subprocess.TimeoutExpired:
        logger.debug("gh auth token timed out after %ss.", GH_CLI_TIMEOUT_SECONDS)
        return None

    if completed.returncode != 0:
        logger.debug("gh auth token exited with status %s.", completed.returncode)
        return None
    return completed.stdout.strip() or None


def resolve_github_token(explicit: str | None = None) -> str | None:
    """Return a GitHub token, or None when no source has one.

    Never raises; the command layer turns None into a UsageError.
    """
    if explicit:
        return explicit

    env_token = os.environ.get("GITHUB_TOKEN")
    if env_token:
        return env_token

    token = _token_from_gh_cli()
    if token:
        logger.debug("Using GitHub token from the gh CLI session.")
    return token
