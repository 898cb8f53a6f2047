import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "state": "all",  # open | closed | all
    "per_page": 30,
    "page": 1,
    "max_pulls": 100,  # pull requests listed per run; GitHub returns newest first
    "api_delay_ms": 100,  # minimum gap between the start of two GitHub calls
    "title": None,  # None = "Code reviews received by <username>"
    "include_stats": True,
    "top": 5,
}

VALID_STATES = ("open", "closed", "all")


def load_config(config_path: str = ".ghreviews.yml", cli_overrides: Optional[dict] = None) -> dict:
    """Return the effective settings for one run.

    Later sources win: built-in defaults, then ``config_path`` (YAML), then
    any non-None ``cli_overrides``. ``state`` is validated after merging.
    Credentials are never read from the file, only from the environment.
    """
    path = Path(config_path)
    file_config = (yaml.safe_load(path.read_text()) or {}) if path.is_file() else {}
    overrides = {key: value for key, value in (cli_overrides or {}).items() if value is not None}
    config = {**DEFAULT_CONFIG, **file_config, **overrides}

    if config["state"] not in VALID_STATES:
        raise ValueError(f"Invalid state {config['state']!r} in config. Choose one of: {', '.join(VALID_STATES)}.")

    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["default_org"] = os.environ.get("GITHUB_DEFAULT_ORG")

    return config


def min_interval_seconds(config: dict) -> float:
    return max(0, config.get("api_delay_ms", DEFAULT_CONFIG["api_delay_ms"])) / 1000
