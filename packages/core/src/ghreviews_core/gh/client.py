"""Throttled access to the GitHub pull request APIs.

Every outbound call goes through one Throttle, which keeps at least
``min_interval`` seconds between the start of successive calls. There is
no backoff beyond that fixed gap.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

import requests
from github import Auth, Github, GithubException

from ghreviews_core.errors import FetchError, GitHubAuthError, RepositoryNotFoundError, ReviewsError
from ghreviews_core.gh.repository import RepositoryRef

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL = 0.1
DEFAULT_MAX_PULLS = 100
_API_PAGE_SIZE = 100

# PyGithub raises GithubException for HTTP errors; transport failures surface
# as requests exceptions.
FETCH_ERRORS = (GithubException, requests.RequestException)


class Throttle:
    """Minimum-interval gate shared by all call sites of one fetcher.

    ``clock`` and ``sleep`` are injectable so tests can drive time by hand.
    """

    def __init__(
        self,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_call: float | None = None

    def wait(self) -> None:
        if self._last_call is not None:
            elapsed = self._clock() - self._last_call
            remaining = self.min_interval - elapsed
            if remaining > 0:
                logger.debug("Throttling GitHub call for %.3fs", remaining)
                self._sleep(remaining)
        self._last_call = self._clock()


def classify_error(exc: Exception, repository: RepositoryRef) -> ReviewsError:
    """Map a failed primary listing onto the fatal error taxonomy."""
    if isinstance(exc, requests.RequestException):
        return FetchError(type(exc).__name__)
    status = getattr(exc, "status", None)
    if status == 404:
        return RepositoryNotFoundError(repository.owner, repository.name)
    if status in (401, 403):
        return GitHubAuthError(status)
    detail = f"HTTP {status}" if status else type(exc).__name__
    return FetchError(detail, status=status)


class ReviewFetcher:
    """Sequential, throttled reads of one repository's pull request data.

    ``list_pull_requests`` is the primary listing and raises classified
    ReviewsError on failure. The per-pull-request reads let FETCH_ERRORS
    propagate; the aggregator decides how to degrade.
    """

    def __init__(self, repo, repository: RepositoryRef, throttle: Throttle | None = None):
        self._repo = repo
        self.repository = repository
        self.throttle = throttle if throttle is not None else Throttle()

    @classmethod
    def connect(
        cls,
        repository: RepositoryRef,
        token: str,
        min_interval: float = DEFAULT_MIN_INTERVAL,
    ) -> ReviewFetcher:
        throttle = Throttle(min_interval)
        gh = Github(auth=Auth.Token(token), per_page=_API_PAGE_SIZE)
        throttle.wait()
        try:
            repo = gh.get_repo(repository.full_name)
        except FETCH_ERRORS as e:
            raise classify_error(e, repository) from e
        return cls(repo, repository, throttle)

    def list_pull_requests(self, state: str = "all", limit: int = DEFAULT_MAX_PULLS) -> list:
        self.throttle.wait()
        pulls = []
        try:
            # Lazy iteration + break so PyGithub does not page past the cap.
            for i, pr in enumerate(self._repo.get_pulls(state=state)):
                if i >= limit:
                    break
                pulls.append(pr)
        except FETCH_ERRORS as e:
            raise classify_error(e, self.repository) from e
        return pulls

    def list_reviews(self, pr) -> list:
        self.throttle.wait()
        return list(pr.get_reviews())

    def list_review_comments(self, pr) -> list:
        self.throttle.wait()
        return list(pr.get_review_comments())

    def list_issue_comments(self, pr) -> list:
        self.throttle.wait()
        return list(pr.get_issue_comments())
