"""
Tests for summary length planning.

Tests cover:
- Tier clamping at and around each boundary
- min_length = floor(0.4 * max_length) for computed specs
- Monotonic growth of max_length with input size
- Fixed chunk/intermediate specs
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from synopsis.summarization.length_planner import (
    CHUNK_SUMMARY_SPEC,
    INTERMEDIATE_SUMMARY_SPEC,
    LengthSpec,
    calculate_summary_length,
)


class TestCalculateSummaryLength:
    """Test tiered summary lengths."""

    @pytest.mark.parametrize("tokens, expected_max", [
        (0, 40),        # below the first tier floor
        (100, 40),
        (499, 89),      # 18% inside the first tier
        (500, 120),     # second tier floor
        (1000, 180),
        (1999, 250),    # second tier floor wins over 359
        (2000, 360),
        (4998, 400),    # third tier ceiling
        (5000, 600),    # fourth tier ceiling (900 clamped)
        (50000, 600),
    ])
    def test_max_length_by_tier(self, tokens, expected_max):
        assert calculate_summary_length(tokens).max_length == expected_max

    def test_min_length_is_forty_percent_of_max(self):
        for tokens in (0, 499, 500, 1000, 2000, 4998, 5000, 12345):
            spec = calculate_summary_length(tokens)
            assert spec.min_length == int(spec.max_length * 0.4)

    def test_direct_article_spec(self):
        """A 500-token article gets a 48-120 token summary."""
        assert calculate_summary_length(500) == LengthSpec(max_length=120, min_length=48)

    def test_max_length_never_decreases(self):
        previous = 0
        for tokens in range(0, 20000, 7):
            current = calculate_summary_length(tokens).max_length
            assert current >= previous, f"max_length dropped at {tokens} tokens"
            previous = current


class TestLengthSpec:
    """Test LengthSpec validation and fixed specs."""

    def test_from_max_length_derives_min(self):
        assert LengthSpec.from_max_length(150) == LengthSpec(150, 60)

    def test_min_above_max_rejected(self):
        with pytest.raises(ValueError):
            LengthSpec(max_length=10, min_length=20)

    def test_fixed_specs(self):
        assert (CHUNK_SUMMARY_SPEC.max_length, CHUNK_SUMMARY_SPEC.min_length) == (150, 60)
        assert (INTERMEDIATE_SUMMARY_SPEC.max_length, INTERMEDIATE_SUMMARY_SPEC.min_length) == (180, 70)

    def test_spec_is_immutable(self):
        spec = LengthSpec(100, 40)
        with pytest.raises(AttributeError):
            spec.max_length = 200
