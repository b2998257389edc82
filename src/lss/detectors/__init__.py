"""Detector classes for lss.

This module provides the base detector interface. A detector turns a
block of text into findings; scanners decide where the text comes from
(a file on disk, a blob in git history) and stamp the location.
"""

from abc import ABC, abstractmethod

from lss.core.models import Finding


class BaseDetector(ABC):
    """Abstract base class for all detectors.

    Subclasses must implement the `name` property and `detect` method.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this detector (e.g. 'regex')."""
        pass

    @abstractmethod
    def detect(self, content: str, file_path: str = "") -> list[Finding]:
        """Detect potential secrets in the given content.

        Args:
            content: The text to analyze.
            file_path: Location stamped on every produced Finding.

        Returns:
            A list of Finding objects, at most one per (line, snippet).
        """
        pass
