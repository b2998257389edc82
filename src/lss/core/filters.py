"""Post-scan filtering of file findings.

Findings produced by the file scanner pass through four checks, in this
order: minimum confidence, excluded tags, included tags, and entropy of the
aggregated snippet. The entropy check runs on the trimmed snippet after all
matching rules have been merged.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from lss.core.models import DEFAULT_ENTROPY_THRESHOLD, Finding, ScanConfig
from lss.detectors.entropy_detector import meets_threshold


def parse_tag_list(value: str | None) -> set[str] | None:
    """Parse a comma-separated tag list.

    Returns:
        The set of stripped, non-empty tags, or None when no list was given.
    """
    if value is None:
        return None
    return {tag.strip() for tag in value.split(",") if tag.strip()}


@dataclass(frozen=True)
class FindingFilter:
    """Decides which findings are reported.

    Attributes:
        entropy_threshold: Minimum snippet entropy in bits.
        min_confidence: Minimum combined confidence.
        include_tags: If set, a finding needs at least one of these tags.
        exclude_tags: A finding with any of these tags is dropped.
    """

    entropy_threshold: float = DEFAULT_ENTROPY_THRESHOLD
    min_confidence: float = 0.0
    include_tags: frozenset[str] | None = None
    exclude_tags: frozenset[str] | None = None

    @classmethod
    def from_config(cls, config: ScanConfig) -> "FindingFilter":
        return cls(
            entropy_threshold=config.entropy_threshold,
            min_confidence=config.min_confidence,
            include_tags=frozenset(config.include_tags) if config.include_tags is not None else None,
            exclude_tags=frozenset(config.exclude_tags) if config.exclude_tags is not None else None,
        )

    def accepts(self, finding: Finding) -> bool:
        """Return True if ``finding`` survives every check."""
        if finding.confidence < self.min_confidence:
            return False
        if self.exclude_tags and any(tag in self.exclude_tags for tag in finding.tags):
            return False
        if self.include_tags is not None and not any(tag in self.include_tags for tag in finding.tags):
            return False
        return meets_threshold(finding.snippet, self.entropy_threshold)

    def apply(self, findings: Iterable[Finding]) -> list[Finding]:
        """Return the findings that pass, preserving order."""
        return [finding for finding in findings if self.accepts(finding)]
