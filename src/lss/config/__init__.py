"""Configuration management for lss.

Configuration is merged with the following priority:

1. CLI arguments (highest priority)
2. Environment variables
3. The per-user configuration file
4. Default values (lowest priority)

A missing config file is normal. An unreadable or invalid one is logged
and skipped so that a broken config never prevents a scan.

Example usage::

    from lss.config import load_config

    config = load_config(cli_args={"entropy_threshold": 4.2})
    print(config.entropy_threshold, config.ignore)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from lss.config.env import (
    ENV_CONFIG_PATH,
    ENV_ENTROPY_THRESHOLD,
    ENV_IGNORE,
    ENV_LOG_LEVEL,
    ENV_WORKERS,
    get_config_path_from_env,
    get_env_overrides,
)
from lss.config.loader import ConfigLoader, user_config_dir
from lss.config.schema import LogLevel, LssConfig, ScanSettings
from lss.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

__all__ = [
    "LogLevel",
    "LssConfig",
    "ScanSettings",
    "ConfigLoader",
    "user_config_dir",
    "ENV_CONFIG_PATH",
    "ENV_ENTROPY_THRESHOLD",
    "ENV_IGNORE",
    "ENV_LOG_LEVEL",
    "ENV_WORKERS",
    "get_env_overrides",
    "load_config",
]


# CLI argument name -> (section or None, key)
_CLI_MAPPINGS: dict[str, tuple[str | None, str]] = {
    "entropy_threshold": (None, "entropy_threshold"),
    "ignore": (None, "ignore"),
    "log_level": (None, "log_level"),
    "workers": ("scan", "workers"),
}


def _merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``, skipping None values."""
    result = base.copy()
    for key, value in override.items():
        if value is None:
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def _normalize_cli_args(cli_args: dict[str, Any]) -> dict[str, Any]:
    """Convert flat CLI argument names into the nested config structure."""
    result: dict[str, Any] = {}
    for arg_name, value in cli_args.items():
        if value is None or arg_name not in _CLI_MAPPINGS:
            continue
        section, key = _CLI_MAPPINGS[arg_name]
        if section is None:
            result[key] = value
        else:
            result.setdefault(section, {})[key] = value
    return result


def _load_file_layer(loader: ConfigLoader, config_path: Path | str | None) -> dict[str, Any]:
    path = Path(config_path) if config_path else get_config_path_from_env() or loader.find_config_file()
    if path is None or not path.exists():
        return {}
    try:
        data = loader.load(path)
        # Validate the file on its own so a bad file is dropped as a whole
        LssConfig.model_validate(data)
    except ConfigError as e:
        logger.warning(f"Ignoring config file: {e}")
        return {}
    except ValidationError as e:
        logger.warning(f"Ignoring invalid config file {path}: {e}")
        return {}
    logger.debug(f"Loaded config file {path}")
    return data


def load_config(
    config_path: Path | str | None = None,
    cli_args: dict[str, Any] | None = None,
    use_env: bool = True,
    use_file: bool = True,
    loader: ConfigLoader | None = None,
) -> LssConfig:
    """Load configuration with proper priority handling.

    Args:
        config_path: Explicit config file (defaults to ``$LSS_CONFIG_PATH``
                     or the first file found in ``~/.config/lss``).
        cli_args: Flat CLI overrides (``entropy_threshold``, ``workers``, ...).
        use_env: Whether to apply environment variable overrides.
        use_file: Whether to load a config file.
        loader: Loader to use for discovery; mainly for tests.

    Returns:
        The merged LssConfig.

    Raises:
        ConfigError: If the environment or CLI values are invalid.
    """
    config_dict = LssConfig.model_validate({}).model_dump()

    if use_file:
        config_dict = _merge_configs(config_dict, _load_file_layer(loader or ConfigLoader(), config_path))

    if use_env:
        config_dict = _merge_configs(config_dict, get_env_overrides())

    if cli_args:
        config_dict = _merge_configs(config_dict, _normalize_cli_args(cli_args))

    try:
        return LssConfig.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
