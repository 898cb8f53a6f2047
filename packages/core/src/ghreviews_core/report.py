"""Markdown report: table of contents plus one merged timeline per pull request.

Rendering is a pure function of the review list and ``now`` (used only for
the "Generated" stamp). Anchors are derived from repository, pull request
number, login and a timestamp or comment id, so table-of-contents links
resolve to the same subsection on every run.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Iterable

from ghreviews_core.errors import sanitize_error_message
from ghreviews_core.models import (
    InlineComment,
    PullRequestGroup,
    ReplyComment,
    ReviewRecord,
    ReviewState,
    TimelineEntry,
    as_utc,
)
from ghreviews_core.stats import compute_stats
from ghreviews_core.utils.diff import extract_context

TOC_TITLE_CHARS = 30
PROFILE_URL = "https://github.com/{login}"

_STATE_DISPLAY: dict[ReviewState, tuple[str, str]] = {
    ReviewState.APPROVED: ("✅", "Approved"),
    ReviewState.CHANGES_REQUESTED: ("🔄", "Changes requested"),
    ReviewState.COMMENTED: ("💬", "Commented"),
    ReviewState.DISMISSED: ("❌", "Dismissed"),
}
_UNKNOWN_DISPLAY = ("❓", "Unknown")

_ANCHOR_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def state_display(state: ReviewState) -> tuple[str, str]:
    """Return (emoji, label) for a review state."""
    if state in _STATE_DISPLAY:
        return _STATE_DISPLAY[state]
    return _UNKNOWN_DISPLAY


def state_emoji(state: ReviewState) -> str:
    return state_display(state)[0]


# --- anchors ---------------------------------------------------------------


def _repo_slug(repository: str) -> str:
    return repository.replace("/", "-")


def _login_slug(login: str | None) -> str:
    return _ANCHOR_UNSAFE_RE.sub("-", login or "unknown")


def _epoch_ms(value: datetime) -> int:
    return (as_utc(value) - _EPOCH) // timedelta(milliseconds=1)


def _item_key(item_id: int | None, created_at: datetime) -> str:
    # Comments without an id fall back to their creation time.
    return str(item_id) if item_id is not None else f"t{_epoch_ms(created_at)}"


def pr_anchor(repository: str, pr_number: int) -> str:
    return f"pr-{_repo_slug(repository)}-{pr_number}"


def review_anchor(review: ReviewRecord) -> str:
    return (
        f"review-{_repo_slug(review.repository)}-{review.pr_number}-"
        f"{_login_slug(review.reviewer)}-{_epoch_ms(review.submitted_at)}"
    )


def comment_anchor(review: ReviewRecord, comment: InlineComment) -> str:
    author = comment.author or review.reviewer
    return (
        f"comment-{_repo_slug(review.repository)}-{review.pr_number}-{_login_slug(author)}-"
        f"{_item_key(comment.id, comment.created_at)}"
    )


def reply_anchor(group: PullRequestGroup, reply: ReplyComment) -> str:
    return (
        f"reply-{_repo_slug(group.repository)}-{group.pr_number}-{_login_slug(reply.author)}-"
        f"{_item_key(reply.id, reply.created_at)}"
    )


# --- grouping and timeline ------------------------------------------------


def group_reviews(reviews: Iterable[ReviewRecord]) -> list[PullRequestGroup]:
    """Group by ``repository#pr_number``, most recently reviewed group first."""
    groups: dict[str, PullRequestGroup] = {}
    for review in reviews:
        group = groups.get(review.group_key)
        if group is None:
            group = PullRequestGroup(
                pr_title=review.pr_title,
                pr_url=review.pr_url,
                repository=review.repository,
                pr_number=review.pr_number,
            )
            groups[review.group_key] = group
        group.reviews.append(review)

    for group in groups.values():
        group.reviews.sort(key=lambda r: r.submitted_at, reverse=True)
    return sorted(groups.values(), key=lambda g: g.reviews[0].submitted_at, reverse=True)


def unique_reviews(reviews: Iterable[ReviewRecord]) -> list[ReviewRecord]:
    """Drop repeated (reviewer, submitted_at) pairs; return oldest first."""
    seen: dict[tuple[str, datetime], ReviewRecord] = {}
    for review in reviews:
        seen.setdefault((review.reviewer, review.submitted_at), review)
    return sorted(seen.values(), key=lambda r: r.submitted_at)


def _dedupe_key(item: InlineComment | ReplyComment):
    # Items without an id are compared by value.
    return item.id if item.id is not None else item


def build_timeline(group: PullRequestGroup, username: str) -> list[TimelineEntry]:
    """Interleave a pull request's reviews, inline comments and replies by time.

    Replies are attached to every review of the pull request, so they (and
    inline comments) are deduplicated by id, or by value when the id is
    missing. The subject's own replies are left out.
    """
    entries: list[TimelineEntry] = []
    seen_comments: set = set()
    seen_replies: set = set()
    subject = username.lower()

    reviews = unique_reviews(group.reviews)
    for review in reviews:
        entries.append(
            TimelineEntry(kind="review", created_at=review.submitted_at, author=review.reviewer, review=review)
        )
        for comment in review.comments:
            if _dedupe_key(comment) in seen_comments:
                continue
            seen_comments.add(_dedupe_key(comment))
            entries.append(
                TimelineEntry(
                    kind="comment",
                    created_at=comment.created_at,
                    author=comment.author or review.reviewer,
                    review=review,
                    comment=comment,
                )
            )

    for review in reviews:
        for reply in review.reply_comments:
            if reply.author.lower() == subject or _dedupe_key(reply) in seen_replies:
                continue
            seen_replies.add(_dedupe_key(reply))
            entries.append(TimelineEntry(kind="reply", created_at=reply.created_at, author=reply.author, reply=reply))

    # sorted() is stable: a review stays ahead of comments sharing its timestamp.
    return sorted(entries, key=lambda e: e.created_at)


# --- text helpers ------------------------------------------------------------


def _truncate(text: str, limit: int = TOC_TITLE_CHARS) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def _first_line(text: str) -> str:
    stripped = text.strip()
    return stripped.splitlines()[0] if stripped else ""


def _link_text(text: str) -> str:
    return text.replace("[", "\\[").replace("]", "\\]")


def _quote(text: str, prefix: str = "") -> str:
    return "> " + prefix + text.replace("\n", "\n> ")


def _date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


def _timestamp(value: datetime) -> str:
    return as_utc(value).strftime("%Y-%m-%d %H:%M:%S UTC")


def _user_link(login: str) -> str:
    return f"[@{login}]({PROFILE_URL.format(login=login)})"


def review_title(review: ReviewRecord) -> str:
    """Short label for the table of contents.

    Body first line, else the first inline comment, else "<STATE> review".
    """
    if review.body.strip():
        return _truncate(_first_line(review.body))
    if review.comments and review.comments[0].body.strip():
        return _truncate(_first_line(review.comments[0].body))
    return f"{review.state.value} review"


# --- sections ----------------------------------------------------------------


def _header(title: str, username: str, now: datetime) -> list[str]:
    return [
        f"# {title}",
        "",
        f"**Generated:** {_date(now)}",
        f"**User:** {username}",
    ]


def _stats_section(reviews: list[ReviewRecord]) -> list[str]:
    stats = compute_stats(reviews)
    lines = [
        "## 📊 Statistics",
        "",
        f"- {state_emoji(ReviewState.APPROVED)} Approved: {stats.approved}",
        f"- {state_emoji(ReviewState.CHANGES_REQUESTED)} Changes requested: {stats.changes_requested}",
        f"- {state_emoji(ReviewState.COMMENTED)} Commented: {stats.commented}",
        "",
        "**Reviewers:**",
        "",
    ]
    lines.extend(f"- {reviewer}: {count}" for reviewer, count in stats.top_reviewers(len(stats.by_reviewer)))
    lines.append("")
    return lines


def _toc_section(groups: list[PullRequestGroup]) -> list[str]:
    lines = ["## 📋 Table of Contents", "", "### Pull requests", ""]
    for group in groups:
        lines.append(
            f"- [{_link_text(group.pr_title)}](#{pr_anchor(group.repository, group.pr_number)})"
            f" - **{len(group.reviews)} review(s)** ({group.key})"
        )
    lines.extend(["", "### Reviews by pull request", ""])
    for group in groups:
        lines.extend([f"#### {group.pr_title}", ""])
        for review in unique_reviews(group.reviews):
            lines.append(
                f"- {state_emoji(review.state)} "
                f"[{_link_text(review.reviewer)}: {_link_text(review_title(review))}](#{review_anchor(review)})"
                f" _({_date(review.submitted_at)})_"
            )
        lines.append("")
    return lines


def _render_review(review: ReviewRecord) -> list[str]:
    emoji, _ = state_display(review.state)
    lines = [
        f'#### <a id="{review_anchor(review)}"></a>{emoji} {review.state.value} by {_user_link(review.reviewer)}',
        "",
        f"**Date:** {_timestamp(review.submitted_at)}",
        "",
    ]
    if review.body.strip():
        lines.extend([_quote(review.body), ""])
    if not review.comments:
        lines.extend(["_(no code comments)_", ""])
    if review.review_url:
        lines.extend([f"**[📖 View full review]({review.review_url})**", ""])
    return lines


def _render_comment(review: ReviewRecord, comment: InlineComment) -> list[str]:
    author = comment.author or review.reviewer
    lines = [
        f'#### <a id="{comment_anchor(review, comment)}"></a>💬 Code comment by {_user_link(author)}',
        "",
        f"**Date:** {_timestamp(comment.created_at)}",
        "",
    ]
    if comment.path:
        location = f"{comment.path}:{comment.line}" if comment.line else comment.path
        lines.extend([f"**📁 {location}**", ""])
    if comment.diff_hunk:
        excerpt = extract_context(comment.diff_hunk, comment.line, comment.path)
        lines.extend([excerpt.to_markdown(), ""])
    lines.extend([_quote(comment.body, prefix="💬 "), ""])
    if comment.url:
        lines.extend([f"[🔗 View comment]({comment.url})", ""])
    return lines


def _render_reply(group: PullRequestGroup, reply: ReplyComment) -> list[str]:
    lines = [
        f'#### <a id="{reply_anchor(group, reply)}"></a>↩️ Reply by {_user_link(reply.author)}',
        "",
        f"**Date:** {_timestamp(reply.created_at)}",
        "",
        _quote(reply.body),
        "",
    ]
    if reply.url:
        lines.extend([f"[🔗 View reply]({reply.url})", ""])
    return lines


def _details_section(groups: list[PullRequestGroup], username: str) -> list[str]:
    lines = ["## 📝 Review Details", ""]
    for group in groups:
        anchor = pr_anchor(group.repository, group.pr_number)
        lines.extend(
            [
                f'### <a id="{anchor}"></a>[{_link_text(group.pr_title)}]({group.pr_url}) (#{group.pr_number})',
                "",
                f"**Repository:** {group.repository}",
                "",
            ]
        )
        for entry in build_timeline(group, username):
            if entry.kind == "review":
                lines.extend(_render_review(entry.review))
            elif entry.kind == "comment":
                lines.extend(_render_comment(entry.review, entry.comment))
            else:
                lines.extend(_render_reply(group, entry.reply))
            lines.extend(["---", ""])
    return lines


def _finish(lines: list[str]) -> str:
    return "\n".join(lines).rstrip("\n") + "\n"


def render_markdown(
    reviews: list[ReviewRecord],
    username: str,
    title: str | None = None,
    include_stats: bool = True,
    now: datetime | None = None,
) -> str:
    """Render the review report for ``username``."""
    now = now or datetime.now(timezone.utc)
    title = title or f"Code reviews received by {username}"

    lines = _header(title, username, now)
    lines.extend([f"**Total reviews:** {len(reviews)}", ""])

    if include_stats and reviews:
        lines.extend(_stats_section(reviews))

    if not reviews:
        lines.extend(["## 📝 Reviews", "", "No reviews found."])
        return _finish(lines)

    groups = group_reviews(reviews)
    lines.extend(_toc_section(groups))
    lines.extend(_details_section(groups, username))
    return _finish(lines)


def render_error_report(
    username: str,
    error: BaseException | str,
    title: str | None = None,
    now: datetime | None = None,
) -> str:
    """Best-effort report written in place of the real one when fetching failed."""
    now = now or datetime.now(timezone.utc)
    title = title or f"Code reviews received by {username}"
    lines = _header(title, username, now)
    lines.extend(
        [
            "",
            "## ❌ Error",
            "",
            "An error occurred while fetching review data:",
            sanitize_error_message(error),
            "",
            "## 💡 How to fix",
            "",
            "1. Check that the GitHub username is correct",
            "2. Check that your GitHub token is valid and has repo access",
            "3. Run the command inside a clone of the repository you want to report on",
        ]
    )
    return _finish(lines)
