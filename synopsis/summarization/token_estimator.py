"""
Token estimation for budget decisions.

Backends limit input by tokens, but tokenizers differ per provider, so the
engine works with a character-based approximation: ceil(chars / divisor).
The divisor is CHARS_PER_TOKEN from config (default 4).
"""

import math

from synopsis.config import CHARS_PER_TOKEN


class TokenEstimator:
    """
    Approximates token counts from character length.

    Deterministic and monotonic: a longer string never estimates lower.

    Attributes:
        chars_per_token: Characters assumed per token.
    """

    def __init__(self, chars_per_token: int = CHARS_PER_TOKEN):
        if chars_per_token < 1:
            raise ValueError(f"chars_per_token must be >= 1, got {chars_per_token}")
        self.chars_per_token = chars_per_token

    def estimate(self, text: str) -> int:
        """Return ceil(len(text) / chars_per_token)."""
        return math.ceil(len(text) / self.chars_per_token)

    def max_chars(self, max_tokens: int) -> int:
        """Character budget equivalent to a token budget."""
        return max_tokens * self.chars_per_token


_default_estimator = TokenEstimator()


def estimate_tokens(text: str) -> int:
    """Estimate tokens with the configured default divisor."""
    return _default_estimator.estimate(text)
