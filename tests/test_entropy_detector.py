"""Tests for Shannon entropy calculation."""

from __future__ import annotations

import math

import pytest

from lss.detectors.entropy_detector import calculate_shannon_entropy, meets_threshold


class TestCalculateShannonEntropy:
    """Test the byte-level entropy measure."""

    def test_empty_string_is_zero(self) -> None:
        """Test that empty input has zero entropy."""
        assert calculate_shannon_entropy("") == 0.0
        assert calculate_shannon_entropy(b"") == 0.0

    def test_single_repeated_byte_is_zero(self) -> None:
        """Test that a run of one byte value carries no information."""
        assert calculate_shannon_entropy("aaaaaaaa") == 0.0

    def test_equiprobable_bytes(self) -> None:
        """Test that k equally frequent distinct bytes give log2(k) bits."""
        assert calculate_shannon_entropy("ab") == pytest.approx(1.0)
        assert calculate_shannon_entropy("abcd") == pytest.approx(2.0)
        assert calculate_shannon_entropy("abcdefgh" * 3) == pytest.approx(3.0)

    def test_mixed_frequencies(self) -> None:
        """Test a hand-computed skewed distribution."""
        # t, o, k, _ once each and 'a' four times over 8 bytes
        assert calculate_shannon_entropy("tok_aaaa") == pytest.approx(2.0)

    def test_random_looking_string_scores_higher(self) -> None:
        """Test that a key-like string beats a placeholder."""
        assert calculate_shannon_entropy("wJalrXUtnFEMI/K7MDENG") > calculate_shannon_entropy("changeme")

    def test_bytes_and_str_agree(self) -> None:
        """Test that str input is measured over its UTF-8 bytes."""
        assert calculate_shannon_entropy("secret") == calculate_shannon_entropy(b"secret")

    def test_multibyte_characters_count_per_byte(self) -> None:
        """Test that a two-byte character contributes two symbols."""
        # "é" encodes to 0xC3 0xA9
        assert calculate_shannon_entropy("é") == pytest.approx(1.0)

    def test_never_exceeds_log2_of_length(self) -> None:
        """Test the upper bound for a string of distinct bytes."""
        text = "tok_A1b2C3d4E5f6G7h8"
        assert calculate_shannon_entropy(text) == pytest.approx(math.log2(len(text)))


class TestMeetsThreshold:
    """Test the threshold comparison."""

    def test_threshold_is_inclusive(self) -> None:
        """Test that entropy equal to the threshold passes."""
        assert meets_threshold("abcd", 2.0)

    def test_below_threshold(self) -> None:
        """Test that low entropy fails."""
        assert not meets_threshold("tok_aaaa", 3.5)

    def test_zero_threshold_accepts_everything(self) -> None:
        """Test that a threshold of zero accepts even empty input."""
        assert meets_threshold("", 0.0)
