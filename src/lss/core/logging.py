"""Logging configuration for lss.

This module provides logging setup using the Rich library for console
output with timestamps and source context.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"
DATE_FORMAT = "[%X]"


def setup_logging(verbose: bool = False, level: Optional[int] = None) -> logging.Logger:
    """Configure Python logging with a Rich handler.

    Log records go to stderr so they never interleave with findings
    printed on stdout.

    Args:
        verbose: If True, set log level to DEBUG for detailed output.
                 If False, set log level to WARNING to show only
                 warnings and errors.
        level: Explicit level overriding ``verbose`` (e.g. from config).

    Returns:
        A configured logger instance for use throughout the application.

    Example:
        >>> logger = setup_logging(verbose=True)
        >>> logger.debug("Skipping binary file")
    """
    if level is None:
        level = logging.DEBUG if verbose else logging.WARNING

    rich_handler = RichHandler(
        level=level,
        console=Console(stderr=True),
        show_time=True,
        show_level=True,
        show_path=True,
        rich_tracebacks=True,
        markup=False,
    )
    rich_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger = logging.getLogger("lss")
    logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    logger.handlers.clear()
    logger.addHandler(rich_handler)
    logger.propagate = False

    return logger
