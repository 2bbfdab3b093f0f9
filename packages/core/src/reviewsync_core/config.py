import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "model": "anthropic",
    "max_diff_chars": 100000,
    "store": "noop",  # "noop" | "sqlite"
    "store_path": ".reviewsync.db",
    "gitlab_url": "https://gitlab.com",
}


def load_config(config_path: str = ".reviewsync.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .reviewsync.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"{config_path} must contain a YAML mapping, got {type(file_config).__name__}.")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    if os.environ.get("GITLAB_URL"):
        config["gitlab_url"] = os.environ["GITLAB_URL"]

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["gitlab_token"] = os.environ.get("GITLAB_TOKEN")
    config["bitbucket_token"] = os.environ.get("BITBUCKET_TOKEN")
    config["bitbucket_username"] = os.environ.get("BITBUCKET_USERNAME")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

    return config
