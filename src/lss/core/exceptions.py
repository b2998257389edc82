"""Custom exception hierarchy for lss.

This module defines the exception classes used throughout lss for error
handling and reporting. All exceptions inherit from the base LssError
class, allowing callers to catch all lss errors with a single except
clause.

Scanning itself is best effort: these exceptions are raised at unit
boundaries (one repository, one commit, one config file) and are caught
and logged there, so a single failing unit never aborts a whole scan.
"""

from __future__ import annotations


class LssError(Exception):
    """Base exception for all lss errors.

    Attributes:
        message: Human-readable error message.
        context: Optional dictionary of additional context about the error.
    """

    def __init__(self, message: str, context: dict | None = None):
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            context: Optional dictionary of additional context about the error.
        """
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including context if present."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ScanError(LssError):
    """Exception raised when a scan operation fails.

    Raised for the scan target not existing, and internally by the git
    history scanner when a git command fails.

    Example:
        >>> raise ScanError("Target path does not exist", path="/nonexistent")
    """

    def __init__(self, message: str, path: str | None = None, context: dict | None = None):
        """Initialize the scan error.

        Args:
            message: Human-readable error message.
            path: The path that caused the error, if applicable.
            context: Optional dictionary of additional context.
        """
        ctx = context or {}
        if path:
            ctx["path"] = path
        super().__init__(message, ctx)
        self.path = path


class ConfigError(LssError):
    """Exception raised for configuration errors.

    Example:
        >>> raise ConfigError("Invalid output format", config_key="format")
    """

    def __init__(self, message: str, config_key: str | None = None, context: dict | None = None):
        """Initialize the config error.

        Args:
            message: Human-readable error message.
            config_key: The configuration key that caused the error.
            context: Optional dictionary of additional context.
        """
        ctx = context or {}
        if config_key:
            ctx["config_key"] = config_key
        super().__init__(message, ctx)
        self.config_key = config_key


class RuleError(LssError):
    """Exception raised when a rule file cannot be used.

    Rule loading is lenient (bad lines are dropped), so this is only raised
    by the CLI when ``--rules-file`` names a file that does not exist.
    """

    def __init__(self, message: str, rule_file: str | None = None, context: dict | None = None):
        ctx = context or {}
        if rule_file:
            ctx["rule_file"] = rule_file
        super().__init__(message, ctx)
        self.rule_file = rule_file


class OutputError(LssError):
    """Exception raised when output generation fails."""

    def __init__(self, message: str, output_path: str | None = None, context: dict | None = None):
        ctx = context or {}
        if output_path:
            ctx["output_path"] = output_path
        super().__init__(message, ctx)
        self.output_path = output_path
