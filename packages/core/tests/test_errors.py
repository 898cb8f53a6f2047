"""Tests for error messages shown to users."""

from ghreviews_core.errors import (
    GitHubAuthError,
    RepositoryNotFoundError,
    RepositoryResolutionError,
    ReviewsError,
    sanitize_error_message,
)


def test_known_errors_pass_through():
    err = RepositoryNotFoundError("octo", "widgets")
    assert sanitize_error_message(err) == str(err)
    assert "octo/widgets" in sanitize_error_message(err)


def test_error_classes_share_a_base():
    for err in (RepositoryResolutionError(), GitHubAuthError(401), RepositoryNotFoundError("a", "b")):
        assert isinstance(err, ReviewsError)


def test_auth_and_not_found_messages_differ():
    assert str(GitHubAuthError(403)) != str(RepositoryNotFoundError("octo", "widgets"))


def test_empty_error():
    assert sanitize_error_message(None) == "An unknown error occurred."


def test_urls_and_tokens_scrubbed():
    message = sanitize_error_message(RuntimeError("failed calling https://api.github.com/x with " + "a1" * 20))
    assert "api.github.com" not in message
    assert "a1" * 20 not in message


def test_unix_paths_scrubbed():
    message = sanitize_error_message(OSError("cannot open /home/alice/secret/file.md"))
    assert "/home/alice" not in message


def test_status_codes_get_friendly_messages():
    assert "invalid or expired" in sanitize_error_message(RuntimeError("HTTP 401 Unauthorized"))
    assert "permission" in sanitize_error_message(RuntimeError("HTTP 403"))
    assert "not found" in sanitize_error_message(RuntimeError("404 Not Found"))


def test_long_messages_truncated():
    message = sanitize_error_message(RuntimeError("x " * 200))
    assert message.endswith("...")
    assert len(message) < 150
