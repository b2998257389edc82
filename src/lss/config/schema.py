"""Configuration schema definitions using Pydantic Settings.

The persisted user config is small: an ignore list and an entropy
threshold, plus a few scan and logging knobs. Example ``config.toml``::

    entropy_threshold = 4.0
    ignore = ["node_modules", "fixtures/"]

    [scan]
    workers = 8
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lss.core.models import DEFAULT_ENTROPY_THRESHOLD


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_logging_level(self) -> int:
        return getattr(logging, self.value.upper())


class ScanSettings(BaseModel):
    """Settings for scan operations."""

    workers: int | None = Field(
        default=None,
        ge=1,
        le=1024,
        description="Parallel file-scan workers (unset for the thread pool default)",
    )


class LssConfig(BaseSettings):
    """Main configuration for lss.

    Can be loaded from the user config file, environment variables
    (``LSS_`` prefix, ``__`` for nested keys) or constructed directly.
    """

    model_config = SettingsConfigDict(
        env_prefix="LSS_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    entropy_threshold: float = Field(
        default=DEFAULT_ENTROPY_THRESHOLD,
        ge=0.0,
        description="Minimum Shannon entropy (bits) for reported findings",
    )
    ignore: list[str] = Field(
        default_factory=list,
        description="Path substrings to skip during scanning",
    )
    scan: ScanSettings = Field(
        default_factory=ScanSettings,
        description="Scan operation settings",
    )
    log_level: LogLevel = Field(
        default=LogLevel.WARNING,
        description="Logging level",
    )

    @field_validator("ignore", mode="before")
    @classmethod
    def parse_ignore(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> LogLevel:
        """Validate and normalize log level."""
        if v is None:
            return LogLevel.WARNING
        if isinstance(v, LogLevel):
            return v
        v = str(v).lower()
        try:
            return LogLevel(v)
        except ValueError:
            valid = ", ".join(level.value for level in LogLevel)
            raise ValueError(f"log_level must be one of: {valid}")
