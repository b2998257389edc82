"""Rule matching and per-line match aggregation.

Every rule is tested against every line of the content. All rules that
match the same line are merged into a single Finding keyed by
``(line number, trimmed line)``: their names are kept in match order,
their tags are unioned and their confidences are combined as independent
probabilities::

    confidence = 1 - (1 - c1) * (1 - c2) * ... * (1 - cn)
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field

from lss.core.models import Finding, Rule
from lss.detectors import BaseDetector

# Optional per-line gate applied to a matching line before it is recorded
LineFilter = Callable[[str], bool]


def combined_confidence(confidences: Iterable[float]) -> float:
    """Probability that at least one of several independent matches is real.

    Args:
        confidences: Individual rule confidences.

    Returns:
        ``1 - prod(1 - c)``; 0.0 when there are no confidences.
    """
    return 1.0 - math.prod(1.0 - c for c in confidences)


def iter_lines(content: str) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, raw_line)`` pairs, numbered from 1.

    Lines are split on ``\\n`` only, with one trailing ``\\r`` removed, and
    a final newline does not produce an extra empty line. Unlike
    ``str.splitlines`` this never splits on form feeds or other Unicode
    line boundaries, so line numbers agree with ``grep -n``.
    """
    if not content:
        return
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    for number, line in enumerate(lines, start=1):
        if line.endswith("\r"):
            line = line[:-1]
        yield number, line


@dataclass
class _Accumulator:
    rule_names: list[str] = field(default_factory=list)
    tags: set[str] = field(default_factory=set)
    confidences: list[float] = field(default_factory=list)

    def add(self, rule: Rule) -> None:
        self.rule_names.append(rule.name)
        self.tags.update(rule.tags)
        self.confidences.append(rule.confidence)


def aggregate_matches(
    content: str,
    rules: Sequence[Rule],
    path: str = "",
    line_filter: LineFilter | None = None,
) -> list[Finding]:
    """Match every rule against every line and merge matches per line.

    Args:
        content: Text to scan.
        rules: Active rule set, in load order.
        path: Location stamped on each Finding.
        line_filter: Optional predicate on the raw (untrimmed) line. A
            matching line that the predicate rejects contributes nothing.
            It is evaluated at most once per line.

    Returns:
        One Finding per distinct ``(line, trimmed text)`` key, in line order.
    """
    groups: dict[tuple[int, str], _Accumulator] = {}

    for number, line in iter_lines(content):
        accepted: bool | None = None
        for rule in rules:
            if not rule.matches(line):
                continue
            if line_filter is not None:
                if accepted is None:
                    accepted = line_filter(line)
                if not accepted:
                    break
            key = (number, line.strip())
            groups.setdefault(key, _Accumulator()).add(rule)

    return [
        Finding(
            path=path,
            line=number,
            snippet=snippet,
            matched_rules=acc.rule_names,
            tags=sorted(acc.tags),
            confidence=combined_confidence(acc.confidences),
        )
        for (number, snippet), acc in groups.items()
    ]


class RegexDetector(BaseDetector):
    """Detector that applies a rule set and aggregates matches per line.

    Example:
        detector = RegexDetector(load_default_rules())
        findings = detector.detect(text, "config.py")
    """

    def __init__(self, rules: Sequence[Rule], line_filter: LineFilter | None = None):
        """Initialize the detector.

        Args:
            rules: The rules to apply. Held by reference, never modified.
            line_filter: Optional gate on matching lines, see
                :func:`aggregate_matches`.
        """
        self.rules = rules
        self.line_filter = line_filter

    @property
    def name(self) -> str:
        """Return the detector name."""
        return "regex"

    def detect(self, content: str, file_path: str = "") -> list[Finding]:
        """Run all rules over ``content``. See :func:`aggregate_matches`."""
        return aggregate_matches(content, self.rules, file_path, self.line_filter)
