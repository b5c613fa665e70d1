import logging
import os
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict = {
    "threshold": 80.0,
    "report_path": "coverage/diff-cover.json",
    "codeowners_path": ".github/CODEOWNERS",
    "override_label": "coverage-override",
    "enable_collapse": True,
    "telemetry_url": "https://api.axiom.co/v1/datasets/ci-metrics/ingest",
}

_DEFAULT_CURL_RETRY_MAX = 3
_DEFAULT_CURL_RETRY_BASE_DELAY = 1


def load_config(config_path: str = ".ciguard.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .ciguard.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Credentials and retry tuning come from the workflow environment
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["axiom_token"] = os.environ.get("AXIOM_TOKEN")
    config["curl_retry_max"] = _env_int("CURL_RETRY_MAX", _DEFAULT_CURL_RETRY_MAX)
    config["curl_retry_base_delay"] = _env_int("CURL_RETRY_BASE_DELAY", _DEFAULT_CURL_RETRY_BASE_DELAY)

    return config


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default
