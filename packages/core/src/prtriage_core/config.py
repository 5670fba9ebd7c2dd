import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "security_author": "github-advanced-security",
    "alert_lookup_workers": 1,  # 1 = sequential lookups in comment order
    "request_timeout": 30,  # seconds, handed to PyGithub
    "output": "json",  # "json" or "table"
}


def load_config(config_path: str = ".prtriage.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prtriage.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"{config_path} must contain a mapping, got {type(file_config).__name__}.")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    _validate(config, config_path)

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config


def _validate(config: dict, config_path: str) -> None:
    workers = config.get("alert_lookup_workers")
    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        raise ValueError(f"{config_path}: alert_lookup_workers must be an integer of at least 1, got {workers!r}.")

    timeout = config.get("request_timeout")
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError(f"{config_path}: request_timeout must be a positive number of seconds, got {timeout!r}.")

    if config.get("output") not in ("json", "table"):
        raise ValueError(f"{config_path}: output must be 'json' or 'table', got {config.get('output')!r}.")
