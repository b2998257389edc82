"""Shannon entropy used to corroborate pattern matches.

Entropy is not a detector on its own in lss: a line has to match a rule
first, and entropy then decides whether the match looks random enough to
be a real secret rather than, say, ``api_key = "changeme"``.
"""

from __future__ import annotations

import math
from collections import Counter


def calculate_shannon_entropy(data: str | bytes) -> float:
    """Calculate the Shannon entropy of a string, in bits per byte.

    The histogram is built over the UTF-8 encoded bytes, not over Unicode
    code points, so multi-byte characters contribute one symbol per byte.

    Args:
        data: The text (or raw bytes) to measure.

    Returns:
        ``-sum(p * log2(p))`` over the observed byte values; ``0.0`` for
        empty input.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not data:
        return 0.0

    length = len(data)
    entropy = 0.0
    for count in Counter(data).values():
        probability = count / length
        entropy -= probability * math.log2(probability)

    return entropy


def meets_threshold(data: str | bytes, threshold: float) -> bool:
    """Return True if ``data`` has at least ``threshold`` bits of entropy."""
    return calculate_shannon_entropy(data) >= threshold
