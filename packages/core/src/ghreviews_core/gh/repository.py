"""Detect the GitHub repository the tool is running inside.

A best-effort read of ``.git/config``, not a git client. Anything
unexpected (no .git, no origin, an unrecognised URL shape) yields None.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

GIT_CONFIG_PATH = Path(".git") / "config"

# The first `url = ...` line inside the origin stanza; [^\[] keeps the match
# from running into the next section.
_ORIGIN_URL_RE = re.compile(r'\[remote "origin"\][^\[]*?^\s*url\s*=\s*(.+)$', re.MULTILINE)
_SSH_URL_RE = re.compile(r"^git@[^:/\s]+:(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$")
_HTTPS_URL_RE = re.compile(r"^https://[^/\s]+/(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$")


@dataclass(frozen=True)
class RepositoryRef:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


def parse_remote_url(url: str) -> RepositoryRef | None:
    """Parse an SSH (git@host:owner/repo.git) or HTTPS remote URL."""
    url = url.strip()
    for pattern in (_SSH_URL_RE, _HTTPS_URL_RE):
        match = pattern.match(url)
        if match:
            return RepositoryRef(owner=match.group("owner"), name=match.group("repo"))
    return None


def resolve_repository(root: str | Path | None = None) -> RepositoryRef | None:
    """Return the origin repository of the git checkout at ``root`` (default: cwd)."""
    config_path = Path(root) / GIT_CONFIG_PATH if root is not None else GIT_CONFIG_PATH
    try:
        text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        logger.debug("No readable git config at %s", config_path)
        return None

    match = _ORIGIN_URL_RE.search(text)
    if not match:
        logger.debug("No origin remote in %s", config_path)
        return None

    ref = parse_remote_url(match.group(1))
    if ref is None:
        logger.debug("Unrecognised origin URL: %s", match.group(1).strip())
    return ref
