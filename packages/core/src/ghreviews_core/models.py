"""Review data models.

Everything downstream of the aggregator sees only these types; raw PyGithub
objects are coerced at the aggregation boundary. Records are frozen: stats
and report rendering build their own groupings instead of mutating them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ReviewState(str, Enum):
    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"
    DISMISSED = "DISMISSED"
    # Any state GitHub reports outside the four above (e.g. PENDING).
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: str | None) -> ReviewState:
        try:
            return cls((raw or "").upper())
        except ValueError:
            return cls.UNKNOWN


def as_utc(value: datetime | None) -> datetime | None:
    """Return value as an aware UTC datetime. Naive values are assumed UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class InlineComment:
    """A review comment anchored to a file and (usually) a line of the diff."""

    id: int | None
    body: str
    url: str
    created_at: datetime
    path: str | None = None
    line: int | None = None  # None when GitHub supplied neither line nor original_line
    diff_hunk: str | None = None
    author: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "body": self.body,
            "path": self.path,
            "line": self.line,
            "diff_hunk": self.diff_hunk,
            "url": self.url,
            "created_at": _iso(self.created_at),
            "author": self.author,
        }


@dataclass(frozen=True)
class ReplyComment:
    """A conversation comment on the pull request, not tied to a diff line."""

    id: int | None
    author: str
    body: str
    created_at: datetime
    url: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "author": self.author,
            "body": self.body,
            "created_at": _iso(self.created_at),
            "url": self.url,
        }


@dataclass(frozen=True)
class ReviewRecord:
    """One review left by someone else on one of the subject's pull requests."""

    pr_title: str
    pr_number: int
    pr_url: str
    repository: str  # owner/name
    reviewer: str
    reviewer_avatar: str
    state: ReviewState
    submitted_at: datetime
    body: str
    review_url: str
    comments: tuple[InlineComment, ...] = ()
    reply_comments: tuple[ReplyComment, ...] = ()

    @property
    def group_key(self) -> str:
        return f"{self.repository}#{self.pr_number}"

    def to_dict(self) -> dict:
        return {
            "pr_title": self.pr_title,
            "pr_number": self.pr_number,
            "pr_url": self.pr_url,
            "repository": self.repository,
            "reviewer": self.reviewer,
            "reviewer_avatar": self.reviewer_avatar,
            "state": self.state.value,
            "submitted_at": _iso(self.submitted_at),
            "body": self.body,
            "review_url": self.review_url,
            "comments": [c.to_dict() for c in self.comments],
            "reply_comments": [r.to_dict() for r in self.reply_comments],
        }


@dataclass
class PullRequestGroup:
    """All reviews of one pull request, keyed by ``repository#pr_number``."""

    pr_title: str
    pr_url: str
    repository: str
    pr_number: int
    reviews: list[ReviewRecord] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.repository}#{self.pr_number}"


@dataclass(frozen=True)
class TimelineEntry:
    """One row of a pull request's merged timeline.

    ``kind`` selects which payload is set: "review" → review,
    "comment" → comment (with the review it belongs to), "reply" → reply.
    """

    kind: str
    created_at: datetime
    author: str
    review: ReviewRecord | None = None
    comment: InlineComment | None = None
    reply: ReplyComment | None = None


@dataclass(frozen=True)
class ReviewQuery:
    """Request descriptor for one aggregation run."""

    username: str
    state: str = "all"  # "open" | "closed" | "all"
    per_page: int = 30
    page: int = 1
    org: str | None = None
    timeframe_days: int | None = None


@dataclass
class ReviewsResponse:
    reviews: list[ReviewRecord]
    total_count: int
    page: int
    per_page: int

    def to_dict(self) -> dict:
        return {
            "reviews": [r.to_dict() for r in self.reviews],
            "total_count": self.total_count,
            "page": self.page,
            "per_page": self.per_page,
        }


@dataclass
class ReviewStats:
    total_reviews: int = 0
    approved: int = 0
    changes_requested: int = 0
    commented: int = 0
    by_reviewer: dict[str, int] = field(default_factory=dict)
    by_repository: dict[str, int] = field(default_factory=dict)

    @property
    def by_state(self) -> dict[str, int]:
        return {
            "approved": self.approved,
            "changes_requested": self.changes_requested,
            "commented": self.commented,
        }

    def top_reviewers(self, n: int = 5) -> list[tuple[str, int]]:
        return _most_common(self.by_reviewer, n)

    def top_repositories(self, n: int = 5) -> list[tuple[str, int]]:
        return _most_common(self.by_repository, n)

    def to_dict(self) -> dict:
        return {
            "total_reviews": self.total_reviews,
            "by_state": self.by_state,
            "by_reviewer": dict(self.by_reviewer),
            "by_repository": dict(self.by_repository),
        }


def _most_common(counts: dict[str, int], n: int) -> list[tuple[str, int]]:
    # Ties keep first-seen order (sorted is stable).
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)[:n]
