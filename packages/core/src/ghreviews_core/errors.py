"""Error taxonomy for review aggregation.

Fatal errors derive from ReviewsError and abort the whole aggregation.
Sub-fetch failures never reach this module. They are caught as
GithubException where they happen and the affected unit degrades.
"""

from __future__ import annotations

import re


class ReviewsError(Exception):
    """Base class for fatal aggregation errors. Messages are user-facing."""


class RepositoryResolutionError(ReviewsError):
    def __init__(self):
        super().__init__(
            "The current directory is not a recognized GitHub repository. "
            "Run ghreviews inside a clone whose 'origin' remote points at GitHub."
        )


class GitHubAuthError(ReviewsError):
    def __init__(self, status: int | None = None):
        self.status = status
        super().__init__("Authentication failed: check that your GitHub token is valid and has repo access.")


class RepositoryNotFoundError(ReviewsError):
    def __init__(self, owner: str, repo: str):
        self.owner = owner
        self.repo = repo
        super().__init__(f"Repository not found or not accessible with this token: {owner}/{repo}")


class FetchError(ReviewsError):
    def __init__(self, detail: str, status: int | None = None):
        self.status = status
        super().__init__(f"Failed to fetch pull requests: {detail}")


_SCRUB_PATTERNS = [
    (re.compile(r"[A-Z]:\\[\w\\.-]+"), "[PATH]"),
    (re.compile(r"file:///\S+"), "[FILE_URL]"),
    (re.compile(r"https?://\S+"), "[URL]"),
    (re.compile(r"/[\w/-]+/"), "[PATH]/"),
    (re.compile(r"\b[A-Za-z0-9+/]{40,}={0,2}"), "[TOKEN]"),
    (re.compile(r"password[=:]\s*\S+", re.IGNORECASE), "password=[HIDDEN]"),
    (re.compile(r"token[=:]\s*\S+", re.IGNORECASE), "token=[HIDDEN]"),
    (re.compile(r"key[=:]\s*\S+", re.IGNORECASE), "key=[HIDDEN]"),
]

_MAX_MESSAGE_CHARS = 100


def sanitize_error_message(error: BaseException | str | None) -> str:
    """Return a message safe to print or write into a report.

    ReviewsError messages are authored here and pass through unchanged.
    Anything else is scrubbed of paths, URLs and token-like strings and
    truncated.
    """
    if not error:
        return "An unknown error occurred."
    if isinstance(error, ReviewsError):
        return str(error)

    message = str(error)
    for pattern, replacement in _SCRUB_PATTERNS:
        message = pattern.sub(replacement, message)

    if "401" in message:
        return "The GitHub token is invalid or expired."
    if "403" in message:
        return "The GitHub token lacks permission or the rate limit was reached."
    if "404" in message:
        return "The requested resource was not found."
    if "Network Error" in message or "ENOTFOUND" in message or "Name or service not known" in message:
        return "Network error: check your internet connection."

    if len(message) > _MAX_MESSAGE_CHARS:
        message = message[:_MAX_MESSAGE_CHARS] + "..."
    return f"Unexpected error: {message}"
