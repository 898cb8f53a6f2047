"""Tests for origin-remote detection from .git/config."""

import pytest

from ghreviews_core.gh.repository import RepositoryRef, parse_remote_url, resolve_repository

_CONFIG_TEMPLATE = """\
[core]
\trepositoryformatversion = 0
\tbare = false
[remote "origin"]
\turl = {url}
\tfetch = +refs/heads/*:refs/remotes/origin/*
[branch "main"]
\tremote = origin
\tmerge = refs/heads/main
"""


def _write_git_config(root, text):
    git_dir = root / ".git"
    git_dir.mkdir()
    (git_dir / "config").write_text(text)


class TestParseRemoteUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "git@github.com:octo/widgets.git",
            "git@github.com:octo/widgets",
            "https://github.com/octo/widgets.git",
            "https://github.com/octo/widgets",
            "https://ghe.example.com/octo/widgets.git",
        ],
    )
    def test_recognised_shapes(self, url):
        assert parse_remote_url(url) == RepositoryRef(owner="octo", name="widgets")

    def test_repo_name_with_dots_keeps_them(self):
        assert parse_remote_url("git@github.com:octo/widgets.js.git") == RepositoryRef("octo", "widgets.js")

    @pytest.mark.parametrize(
        "url",
        [
            "ssh://git@github.com/octo/widgets.git",
            "http://github.com/octo/widgets",
            "/srv/git/widgets.git",
            "https://github.com/octo",
            "",
        ],
    )
    def test_unrecognised_shapes(self, url):
        assert parse_remote_url(url) is None


class TestResolveRepository:
    def test_reads_origin_url(self, tmp_path):
        _write_git_config(tmp_path, _CONFIG_TEMPLATE.format(url="git@github.com:octo/widgets.git"))
        ref = resolve_repository(tmp_path)
        assert ref == RepositoryRef("octo", "widgets")
        assert ref.full_name == "octo/widgets"

    def test_uses_cwd_by_default(self, tmp_path, monkeypatch):
        _write_git_config(tmp_path, _CONFIG_TEMPLATE.format(url="https://github.com/octo/widgets.git"))
        monkeypatch.chdir(tmp_path)
        assert resolve_repository() == RepositoryRef("octo", "widgets")

    def test_returns_none_without_git_dir(self, tmp_path):
        assert resolve_repository(tmp_path) is None

    def test_returns_none_without_origin(self, tmp_path):
        _write_git_config(tmp_path, '[remote "upstream"]\n\turl = git@github.com:octo/widgets.git\n')
        assert resolve_repository(tmp_path) is None

    def test_ignores_other_remote_after_urlless_origin(self, tmp_path):
        text = '[remote "origin"]\n\tfetch = x\n[remote "fork"]\n\turl = git@github.com:me/widgets.git\n'
        _write_git_config(tmp_path, text)
        assert resolve_repository(tmp_path) is None

    def test_origin_after_other_remote(self, tmp_path):
        text = (
            '[remote "fork"]\n\turl = git@github.com:me/widgets.git\n'
            '[remote "origin"]\n\turl = git@github.com:octo/widgets.git\n'
        )
        _write_git_config(tmp_path, text)
        assert resolve_repository(tmp_path) == RepositoryRef("octo", "widgets")

    def test_returns_none_for_unrecognised_url(self, tmp_path):
        _write_git_config(tmp_path, _CONFIG_TEMPLATE.format(url="/srv/git/widgets.git"))
        assert resolve_repository(tmp_path) is None

    def test_returns_none_when_config_is_a_directory(self, tmp_path):
        (tmp_path / ".git" / "config").mkdir(parents=True)
        assert resolve_repository(tmp_path) is None
