"""Configuration loading with layered overrides."""

from pathlib import Path
from typing import Any

import yaml


SYSTEM_CONFIG = Path("/etc/secposture/config.yaml")

DEFAULTS: dict[str, Any] = {
    "cache_file": "/tmp/secposture.cache",
    "cache_max_age": 86400,
    "command_timeout": 10,
    "warn_days": 180,
    "critical_days": 365,
    "log_dir": None,
}


def user_config_path() -> Path:
    """Per-user config file location."""
    return Path.home() / ".config" / "secposture" / "config.yaml"


def load_config_file(path: Path) -> dict[str, Any]:
    """Load a YAML config file if it exists."""
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def load_config(explicit: Path | None = None) -> dict[str, Any]:
    """
    Build the effective configuration.

    Precedence, highest first: explicit file, system file, user file,
    built-in defaults. Unknown keys are dropped.

    Args:
        explicit: Config file given on the command line

    Returns:
        Mapping with every key from DEFAULTS
    """
    config = dict(DEFAULTS)
    layers = [user_config_path(), SYSTEM_CONFIG]
    if explicit is not None:
        layers.append(explicit)

    for path in layers:
        data = load_config_file(path)
        for key, value in data.items():
            if key in DEFAULTS:
                config[key] = value

    return config
