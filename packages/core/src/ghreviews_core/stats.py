"""Reduce a review collection to counts."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from ghreviews_core.models import ReviewRecord, ReviewState, ReviewStats


def compute_stats(reviews: Iterable[ReviewRecord]) -> ReviewStats:
    """Count reviews by state, reviewer and repository.

    DISMISSED (and UNKNOWN) reviews count toward total_reviews only; there is
    no bucket for them in by_state.
    """
    total = 0
    state_counter: Counter[ReviewState] = Counter()
    reviewer_counter: Counter[str] = Counter()
    repository_counter: Counter[str] = Counter()

    for review in reviews:
        total += 1
        state_counter[review.state] += 1
        reviewer_counter[review.reviewer] += 1
        repository_counter[review.repository] += 1

    return ReviewStats(
        total_reviews=total,
        approved=state_counter[ReviewState.APPROVED],
        changes_requested=state_counter[ReviewState.CHANGES_REQUESTED],
        commented=state_counter[ReviewState.COMMENTED],
        by_reviewer=dict(reviewer_counter),
        by_repository=dict(repository_counter),
    )
