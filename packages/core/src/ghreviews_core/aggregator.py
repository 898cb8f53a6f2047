"""Collect the reviews a user received on their pull requests."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from ghreviews_core.errors import RepositoryResolutionError
from ghreviews_core.gh.client import DEFAULT_MAX_PULLS, DEFAULT_MIN_INTERVAL, FETCH_ERRORS, ReviewFetcher
from ghreviews_core.gh.repository import RepositoryRef, resolve_repository
from ghreviews_core.models import (
    InlineComment,
    ReplyComment,
    ReviewQuery,
    ReviewRecord,
    ReviewsResponse,
    ReviewState,
    as_utc,
)

logger = logging.getLogger(__name__)

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def _login(user) -> str:
    return (getattr(user, "login", None) or "") if user is not None else ""


def to_inline_comment(raw) -> InlineComment:
    """Coerce a PyGithub PullRequestComment into an InlineComment."""
    return InlineComment(
        id=raw.id,
        body=raw.body or "",
        url=raw.html_url or "",
        created_at=as_utc(raw.created_at) or _EPOCH,
        path=raw.path or None,
        # line is None once the commented line left the diff; original_line survives.
        line=raw.line or getattr(raw, "original_line", None) or None,
        diff_hunk=raw.diff_hunk or None,
        author=_login(raw.user) or None,
    )


def to_reply_comment(raw) -> ReplyComment:
    """Coerce a PyGithub IssueComment into a ReplyComment."""
    return ReplyComment(
        id=raw.id,
        author=_login(raw.user),
        body=raw.body or "",
        created_at=as_utc(raw.created_at) or _EPOCH,
        url=raw.html_url or "",
    )


class _PullRequestComments:
    """Per-pull-request memo of sub-fetch results.

    Only successes are cached; a failed fetch is retried for the next review
    of the same pull request, so each review degrades on its own.
    """

    def __init__(self, fetcher: ReviewFetcher, pr):
        self._fetcher = fetcher
        self._pr = pr
        self._inline: list[tuple[int, InlineComment]] | None = None
        self._replies: tuple[ReplyComment, ...] | None = None

    def inline_for(self, review_id: int) -> tuple[InlineComment, ...]:
        if self._inline is None:
            try:
                raw = self._fetcher.list_review_comments(self._pr)
            except FETCH_ERRORS as e:
                logger.debug("Could not fetch review comments for PR #%s: %s", self._pr.number, e)
                return ()
            self._inline = [(c.pull_request_review_id, to_inline_comment(c)) for c in raw]
        return tuple(comment for owner_id, comment in self._inline if owner_id == review_id)

    def replies(self) -> tuple[ReplyComment, ...]:
        if self._replies is None:
            try:
                raw = self._fetcher.list_issue_comments(self._pr)
            except FETCH_ERRORS as e:
                logger.debug("Could not fetch reply comments for PR #%s: %s", self._pr.number, e)
                return ()
            self._replies = tuple(to_reply_comment(c) for c in raw)
        return self._replies


def _within_timeframe(submitted_at: datetime, timeframe_days: int | None, now: datetime) -> bool:
    if not timeframe_days:
        return True
    return submitted_at >= now - timedelta(days=timeframe_days)


def aggregate_reviews(
    fetcher: ReviewFetcher,
    query: ReviewQuery,
    repository: RepositoryRef | None,
    max_pulls: int = DEFAULT_MAX_PULLS,
    now: datetime | None = None,
) -> ReviewsResponse:
    """Walk the subject's pull requests and return the reviews others left.

    Fatal: unresolved repository and a failed pull request listing.
    Everything below the listing degrades: a pull request whose reviews
    cannot be read is skipped, and a review whose comments or replies cannot
    be read is kept with empty comments/replies.
    """
    if repository is None:
        raise RepositoryResolutionError()

    now = as_utc(now) or datetime.now(timezone.utc)
    reviews: list[ReviewRecord] = []

    if query.org and query.org.lower() != repository.owner.lower():
        logger.warning(
            "Organization %s does not own %s; no reviews will be listed.", query.org, repository.full_name
        )
        return ReviewsResponse(reviews=[], total_count=0, page=query.page, per_page=query.per_page)

    username = query.username.lower()
    pulls = [
        pr
        for pr in fetcher.list_pull_requests(state=query.state, limit=max_pulls)
        if _login(pr.user).lower() == username
    ]
    logger.debug("%d pull request(s) by %s in %s", len(pulls), query.username, repository.full_name)

    for pr in pulls:
        try:
            pr_reviews = fetcher.list_reviews(pr)
        except FETCH_ERRORS as e:
            logger.debug("Skipping PR #%s, reviews unavailable: %s", pr.number, e)
            continue

        comments = _PullRequestComments(fetcher, pr)
        for review in pr_reviews:
            reviewer = _login(review.user)
            if not reviewer or reviewer.lower() == username:
                continue
            submitted_at = as_utc(review.submitted_at)
            if submitted_at is None:
                # Pending reviews have no submission time yet.
                continue
            if not _within_timeframe(submitted_at, query.timeframe_days, now):
                continue

            reviews.append(
                ReviewRecord(
                    pr_title=pr.title or "",
                    pr_number=pr.number,
                    pr_url=pr.html_url or "",
                    repository=repository.full_name,
                    reviewer=reviewer,
                    reviewer_avatar=getattr(review.user, "avatar_url", None) or "",
                    state=ReviewState.parse(review.state),
                    submitted_at=submitted_at,
                    body=review.body or "",
                    review_url=review.html_url or "",
                    comments=comments.inline_for(review.id),
                    reply_comments=comments.replies(),
                )
            )

    reviews.sort(key=lambda r: r.submitted_at, reverse=True)
    return ReviewsResponse(
        reviews=reviews,
        total_count=len(reviews),
        page=query.page,
        per_page=query.per_page,
    )


def get_received_reviews(
    query: ReviewQuery,
    token: str,
    root=None,
    max_pulls: int = DEFAULT_MAX_PULLS,
    min_interval: float = DEFAULT_MIN_INTERVAL,
    now: datetime | None = None,
) -> ReviewsResponse:
    """Resolve the current repository, connect, and aggregate."""
    repository = resolve_repository(root)
    if repository is None:
        raise RepositoryResolutionError()
    fetcher = ReviewFetcher.connect(repository, token, min_interval=min_interval)
    return aggregate_reviews(fetcher, query, repository, max_pulls=max_pulls, now=now)
