"""lss rule loading.

Rules are described one per line::

    Name::Pattern[::tag1,tag2,...[::confidence]]

Blank lines and lines starting with ``#`` are ignored. Name and pattern are
required; tags default to none and confidence to 0.5. A line whose pattern
does not compile is dropped on its own, the rest of the file still loads.

The built-in corpus lives next to this module in ``default_rules.txt`` and
is loaded the same way as user-supplied rule files.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence
from pathlib import Path

from lss.core.models import DEFAULT_RULE_CONFIDENCE, Rule, RulePage, RuleView

logger = logging.getLogger(__name__)

# Path to the rules directory
RULES_DIR = Path(__file__).parent
DEFAULT_RULES_FILE = RULES_DIR / "default_rules.txt"

FIELD_DELIMITER = "::"


def _parse_confidence(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        return DEFAULT_RULE_CONFIDENCE
    if not math.isfinite(value):
        return DEFAULT_RULE_CONFIDENCE
    return min(max(value, 0.0), 1.0)


def parse_rule_line(line: str) -> Rule | None:
    """Parse one line of the rule format.

    Args:
        line: A single line of a rule file.

    Returns:
        The Rule, or None for blank lines, comments, lines with fewer than
        two fields and lines whose pattern fails to compile.
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    parts = line.split(FIELD_DELIMITER)
    if len(parts) < 2:
        return None

    name = parts[0].strip()
    raw_pattern = parts[1].strip()
    tags: tuple[str, ...] = ()
    confidence = DEFAULT_RULE_CONFIDENCE
    if len(parts) >= 3:
        tags = tuple(t.strip() for t in parts[2].split(",") if t.strip())
    if len(parts) >= 4:
        confidence = _parse_confidence(parts[3].strip())

    try:
        pattern = re.compile(raw_pattern)
    except re.error as e:
        logger.debug(f"Dropping rule {name!r}: invalid pattern {raw_pattern!r}: {e}")
        return None

    return Rule(name=name, pattern=pattern, raw_pattern=raw_pattern, tags=tags, confidence=confidence)


def parse_rules(text: str) -> list[Rule]:
    """Parse a rule description into a list of rules, skipping bad lines."""
    rules = []
    for line in text.splitlines():
        rule = parse_rule_line(line)
        if rule is not None:
            rules.append(rule)
    return rules


def load_default_rules() -> list[Rule]:
    """Load the built-in rule corpus."""
    return parse_rules(DEFAULT_RULES_FILE.read_text(encoding="utf-8"))


def load_rules_from_file(path: Path | str) -> list[Rule]:
    """Load rules from a user-supplied file.

    Args:
        path: Path to a file in the rule format.

    Returns:
        The parsed rules, or an empty list if the file cannot be read.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read rules file {path}: {e}")
        return []
    return parse_rules(text)


def load_rules(rules_file: Path | str | None = None) -> tuple[Rule, ...]:
    """Build the effective rule set for a run.

    The default corpus comes first, followed by any rules from
    ``rules_file``. Duplicates are kept: a rule present in both sources
    matches twice and both matches count towards the combined confidence.
    """
    rules = load_default_rules()
    if rules_file is not None:
        extra = load_rules_from_file(rules_file)
        logger.debug(f"Loaded {len(extra)} extra rule(s) from {rules_file}")
        rules.extend(extra)
    return tuple(rules)


def filter_rules(rules: Sequence[Rule], query: str | None) -> list[Rule]:
    """Return the rules whose name contains ``query`` (all rules if None)."""
    if not query:
        return list(rules)
    return [rule for rule in rules if query in rule.name]


def paginate_rules(rules: Sequence[Rule], page: int = 1, per_page: int = 20) -> RulePage:
    """Slice ``rules`` into a 1-based page.

    A page past the end is returned empty rather than raising.
    """
    total = len(rules)
    start = max(page - 1, 0) * per_page
    end = min(start + per_page, total)
    selected = rules[start:end] if start < total else []
    return RulePage(
        total=total,
        page=page,
        per_page=per_page,
        rules=[RuleView.from_rule(rule) for rule in selected],
    )
