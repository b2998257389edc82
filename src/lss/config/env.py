"""Environment variable mapping for lss configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

# Environment variable names
ENV_CONFIG_PATH = "LSS_CONFIG_PATH"
ENV_ENTROPY_THRESHOLD = "LSS_ENTROPY_THRESHOLD"
ENV_IGNORE = "LSS_IGNORE"
ENV_WORKERS = "LSS_WORKERS"
ENV_LOG_LEVEL = "LSS_LOG_LEVEL"


def _parse_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def _parse_float(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


def _parse_list(value: str) -> list[str]:
    """Parse a comma-separated list, dropping blank items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables.

    Unparsable numeric values are ignored rather than raising.

    Returns:
        Dictionary of configuration values to merge over the config file.
    """
    overrides: dict[str, Any] = {}

    if ENV_ENTROPY_THRESHOLD in os.environ:
        threshold = _parse_float(os.environ[ENV_ENTROPY_THRESHOLD])
        if threshold is not None:
            overrides["entropy_threshold"] = threshold

    if ENV_IGNORE in os.environ:
        overrides["ignore"] = _parse_list(os.environ[ENV_IGNORE])

    if ENV_WORKERS in os.environ:
        workers = _parse_int(os.environ[ENV_WORKERS])
        if workers is not None:
            overrides["scan"] = {"workers": workers}

    if ENV_LOG_LEVEL in os.environ:
        overrides["log_level"] = os.environ[ENV_LOG_LEVEL].lower()

    return overrides


def get_config_path_from_env() -> Path | None:
    """Get the config file path from ``LSS_CONFIG_PATH``, if set."""
    value = os.environ.get(ENV_CONFIG_PATH)
    return Path(value) if value else None
