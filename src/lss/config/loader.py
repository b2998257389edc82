"""Configuration file loading and discovery.

This module finds the per-user configuration file and parses it as TOML,
YAML or JSON depending on its suffix.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any

import yaml

from lss.core.exceptions import ConfigError

# Config file names to search for (in order of preference)
CONFIG_FILE_NAMES = [
    "config.toml",
    "config.yaml",
    "config.yml",
    "config.json",
]


def user_config_dir() -> Path:
    """Return the per-user lss config directory (``~/.config/lss``)."""
    return Path.home() / ".config" / "lss"


class ConfigLoader:
    """Loads and parses configuration files.

    Example:
        >>> loader = ConfigLoader()
        >>> path = loader.find_config_file()
        >>> data = loader.load(path) if path else {}
    """

    def __init__(self, search_paths: list[Path] | None = None) -> None:
        """Initialize the config loader.

        Args:
            search_paths: Directories to search instead of the user config
                          directory.
        """
        self.search_paths = search_paths if search_paths is not None else [user_config_dir()]

    def find_config_file(self) -> Path | None:
        """Return the first existing config file in the search paths, if any."""
        for search_dir in self.search_paths:
            if not search_dir.is_dir():
                continue
            for config_name in CONFIG_FILE_NAMES:
                config_path = search_dir / config_name
                if config_path.is_file():
                    return config_path
        return None

    def load(self, path: Path | str) -> dict[str, Any]:
        """Load and parse a configuration file.

        Args:
            path: Path to the configuration file.

        Returns:
            The parsed configuration mapping.

        Raises:
            ConfigError: If the file cannot be read or parsed.
        """
        path = Path(path)

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Could not read config file {path}: {e}") from e

        suffix = path.suffix.lower()
        if suffix in (".yml", ".yaml"):
            return self._load_yaml(content, path)
        elif suffix == ".json":
            return self._load_json(content, path)
        else:
            return self._load_toml(content, path)

    def _load_yaml(self, content: str, path: Path) -> dict[str, Any]:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping, got: {type(data).__name__}")
        return data

    def _load_toml(self, content: str, path: Path) -> dict[str, Any]:
        try:
            return tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    def _load_json(self, content: str, path: Path) -> dict[str, Any]:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain an object, got: {type(data).__name__}")
        return data
