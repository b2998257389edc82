"""Core data models for lss.

This module defines the models used throughout lss for representing
detection rules, scan configuration, findings, and results. Findings and
results are Pydantic models so they serialize directly to JSON; rules hold
a compiled regular expression and are plain frozen dataclasses.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

DEFAULT_ENTROPY_THRESHOLD = 3.5
DEFAULT_RULE_CONFIDENCE = 0.5


class OutputFormat(str, Enum):
    """Supported output formats."""

    HUMAN = "human"
    JSON = "json"
    TABLE = "table"


@dataclass(frozen=True)
class Rule:
    """A named pattern matcher with tags and a confidence weight.

    Attributes:
        name: Identifier shown in findings. Not required to be unique.
        pattern: Compiled regular expression tested against a single line.
        raw_pattern: The uncompiled pattern source, kept for listings.
        tags: Free-form category labels.
        confidence: The rule author's estimate of the true-positive rate.
    """

    name: str
    pattern: re.Pattern[str]
    raw_pattern: str
    tags: tuple[str, ...] = field(default_factory=tuple)
    confidence: float = DEFAULT_RULE_CONFIDENCE

    def matches(self, line: str) -> bool:
        """Return True if the pattern occurs anywhere in ``line``."""
        return self.pattern.search(line) is not None


class Finding(BaseModel):
    """One reported potential secret at a specific location.

    A Finding may be supported by several rules that matched the same
    line; their names are listed in match order and their confidences are
    combined into a single probability.
    """

    path: str = Field(..., description="File path, or git:<commit>:<entry> for history findings")
    line: int = Field(..., ge=1, description="1-based line number within the scanned content")
    snippet: str = Field(..., description="Trimmed text of the matching line")
    matched_rules: list[str] = Field(default_factory=list, description="Names of the rules that matched")
    tags: list[str] = Field(default_factory=list, description="Union of the tags of every matching rule")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0, description="Combined confidence")


class ScanConfig(BaseModel):
    """Effective parameters for one scan invocation."""

    target_path: Path = Field(..., description="Path to scan (file or directory)")
    entropy_threshold: float = Field(
        default=DEFAULT_ENTROPY_THRESHOLD,
        ge=0.0,
        description="Minimum Shannon entropy (bits) for a finding to be reported",
    )
    ignores: set[str] = Field(
        default_factory=set,
        description="Path substrings that suppress scanning (config file + ignore file)",
    )
    include_tags: Optional[set[str]] = Field(
        default=None,
        description="If set, only report findings carrying at least one of these tags",
    )
    exclude_tags: Optional[set[str]] = Field(
        default=None,
        description="Drop findings carrying any of these tags",
    )
    min_confidence: float = Field(default=0.0, description="Minimum combined confidence")
    workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Number of parallel file-scan workers (None for the executor default)",
    )


class ScanResult(BaseModel):
    """The complete result of a scan operation.

    Findings from the filesystem come first, followed by findings from git
    history.
    """

    target_path: str = Field(..., description="The path that was scanned")
    findings: list[Finding] = Field(default_factory=list, description="All reported findings")
    scan_duration: float = Field(default=0.0, description="Duration of the scan in seconds")
    stats: dict[str, Any] = Field(default_factory=dict, description="Statistics about the scan")


class RuleView(BaseModel):
    """Display form of a Rule, used by the rule listing."""

    name: str
    pattern: str
    tags: list[str] = Field(default_factory=list)
    confidence: float

    @classmethod
    def from_rule(cls, rule: Rule) -> "RuleView":
        return cls(
            name=rule.name,
            pattern=rule.raw_pattern,
            tags=list(rule.tags),
            confidence=rule.confidence,
        )


class RulePage(BaseModel):
    """One page of the rule listing."""

    total: int
    page: int
    per_page: int
    rules: list[RuleView] = Field(default_factory=list)
