"""Input checks for user-supplied usernames and output file names."""

from __future__ import annotations

import re
from pathlib import Path

import click

# 1-39 chars, alphanumerics and hyphens, no leading/trailing hyphen.
_USERNAME_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,37}[A-Za-z0-9])?$")
_MARKDOWN_NAME_RE = re.compile(r"^[A-Za-z0-9._-]+\.md$")
_PROTECTED_FILES = {"README.md", ".env", "pyproject.toml", "setup.cfg"}


def is_valid_username(username: str | None) -> bool:
    if not username or not _USERNAME_RE.match(username):
        return False
    return "--" not in username


def validate_username(ctx, param, value):
    """click callback for --username."""
    if not is_valid_username(value):
        raise click.BadParameter(
            "must be 1-39 characters of letters, digits and single hyphens, "
            "and may not start or end with a hyphen."
        )
    return value


def markdown_output_path(name: str | None, directory: str | Path | None = None) -> Path | None:
    """Return a safe report path in ``directory`` (default: cwd), or None.

    Path separators and ``..`` are flattened to ``_`` so the report always
    lands in the target directory; ``.md`` is appended when missing.
    """
    if not name:
        return None
    flattened = re.sub(r"[/\\]", "_", name).replace("..", "_")
    filename = flattened if flattened.endswith(".md") else f"{flattened}.md"
    if not _MARKDOWN_NAME_RE.match(filename) or filename in _PROTECTED_FILES:
        return None
    return Path(directory if directory is not None else Path.cwd()) / filename
