"""
Summary length planning.

Target lengths scale with the input (18% of its tokens) and are clamped to a
tier chosen by input size, so short articles get short summaries and very long
documents top out at 600 tokens:

    input tokens    max_length clamp
    < 500           40 - 120
    500 - 1999      120 - 250
    2000 - 4999     250 - 400
    >= 5000         400 - 600

The final summary of a run always uses the estimate of the ORIGINAL input,
never of the combined intermediate summaries, so output length tracks the
source length however many reduction rounds ran.
"""

import math
from dataclasses import dataclass

from synopsis.config import (
    CHUNK_SUMMARY_MAX_LENGTH,
    CHUNK_SUMMARY_MIN_LENGTH,
    INTERMEDIATE_SUMMARY_MAX_LENGTH,
    INTERMEDIATE_SUMMARY_MIN_LENGTH,
    MIN_LENGTH_RATIO,
    SUMMARY_LENGTH_RATIO,
)

# (upper bound exclusive, floor, ceiling); the last tier has no upper bound
LENGTH_TIERS = (
    (500, 40, 120),
    (2000, 120, 250),
    (5000, 250, 400),
    (None, 400, 600),
)


@dataclass(frozen=True)
class LengthSpec:
    """
    Target min/max length (in tokens) for one generated summary.

    Computed specs come from LengthSpec.from_max_length(), which derives
    min_length = floor(0.4 * max_length).
    """
    max_length: int
    min_length: int

    def __post_init__(self):
        if not 0 <= self.min_length <= self.max_length:
            raise ValueError(f"Invalid length spec: min={self.min_length}, max={self.max_length}")

    @classmethod
    def from_max_length(cls, max_length: int) -> "LengthSpec":
        return cls(max_length=max_length, min_length=math.floor(max_length * MIN_LENGTH_RATIO))


# Fixed moderate specs for intermediate passes
CHUNK_SUMMARY_SPEC = LengthSpec(CHUNK_SUMMARY_MAX_LENGTH, CHUNK_SUMMARY_MIN_LENGTH)
INTERMEDIATE_SUMMARY_SPEC = LengthSpec(INTERMEDIATE_SUMMARY_MAX_LENGTH, INTERMEDIATE_SUMMARY_MIN_LENGTH)


def calculate_summary_length(input_tokens: int) -> LengthSpec:
    """
    Calculate the summary length for an input of the given token estimate.

    Args:
        input_tokens: Token estimate of the original input.

    Returns:
        LengthSpec with the tier-clamped max_length and its derived min_length.
    """
    target = math.floor(input_tokens * SUMMARY_LENGTH_RATIO)

    for upper, floor_, ceiling in LENGTH_TIERS:
        if upper is None or input_tokens < upper:
            return LengthSpec.from_max_length(max(floor_, min(target, ceiling)))

    raise AssertionError("unreachable: last tier is unbounded")
