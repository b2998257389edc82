"""Command-line interface for lss."""

from lss.cli.main import app

__all__ = ["app"]
