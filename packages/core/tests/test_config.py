"""Tests for configuration loading."""

import pytest

from ghreviews_core.config import load_config, min_interval_seconds


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["state"] == "all"
    assert config["per_page"] == 30
    assert config["page"] == 1
    assert config["max_pulls"] == 100
    assert config["api_delay_ms"] == 100
    assert config["title"] is None
    assert config["include_stats"] is True


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".ghreviews.yml"
    cfg.write_text("state: closed\nmax_pulls: 250\n")
    config = load_config(config_path=str(cfg))
    assert config["state"] == "closed"
    assert config["max_pulls"] == 250


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".ghreviews.yml"
    cfg.write_text("")
    assert load_config(config_path=str(cfg))["state"] == "all"


def test_config_path_that_is_a_directory_is_ignored(tmp_path):
    assert load_config(config_path=str(tmp_path))["state"] == "all"


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".ghreviews.yml"
    cfg.write_text("state: closed\n")
    config = load_config(config_path=str(cfg), cli_overrides={"state": "open"})
    assert config["state"] == "open"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".ghreviews.yml"
    cfg.write_text("state: closed\n")
    config = load_config(config_path=str(cfg), cli_overrides={"state": None})
    assert config["state"] == "closed"


def test_invalid_state_rejected(tmp_path):
    cfg = tmp_path / ".ghreviews.yml"
    cfg.write_text("state: merged\n")
    with pytest.raises(ValueError, match="merged"):
        load_config(config_path=str(cfg))


def test_env_vars_loaded(monkeypatch, tmp_path):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    monkeypatch.setenv("GITHUB_DEFAULT_ORG", "octo")
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["github_token"] == "gh-token"
    assert config["default_org"] == "octo"


def test_defaults_are_not_shared_between_loads(tmp_path):
    config_a = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_b = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_a["state"] = "open"
    assert config_b["state"] == "all"


@pytest.mark.parametrize("delay_ms,expected", [(100, 0.1), (0, 0.0), (-5, 0.0), (250, 0.25)])
def test_min_interval_seconds(delay_ms, expected):
    assert min_interval_seconds({"api_delay_ms": delay_ms}) == pytest.approx(expected)
