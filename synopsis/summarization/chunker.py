"""
Boundary-Respecting Text Chunker

Splits text that exceeds a backend's input budget into ordered chunks:
1. Paragraph-aware splitting (blank-line boundaries)
2. Sentence-level splitting for paragraphs that alone exceed the budget
3. Greedy accumulation of paragraphs/sentences while the chunk fits

Chunks are exact spans of the original text. The whitespace between two
chunks is kept on the earlier chunk as `separator`, and whitespace before the
first chunk as its `leading`, so rejoin() reproduces the input character for
character. Neither counts toward a chunk's size.
"""

import re
import time
from dataclasses import dataclass

from synopsis.logging_config import debug_log, debug_timing
from synopsis.summarization.token_estimator import TokenEstimator

PARAGRAPH_BREAK = re.compile(r'\n\s*\n')
# Whitespace after a terminator, optionally behind a closing quote or bracket
SENTENCE_BREAK = re.compile(r'(?<=[.!?])\s+|(?<=[.!?]["\'\)\]])\s+')


@dataclass
class Chunk:
    """
    Represents a single text chunk with its position in the original text.

    Attributes:
        chunk_num: 1-based position in the chunk sequence.
        text: original[start:end].
        start: Offset of the first character in the original text.
        end: Offset one past the last character.
        separator: Whitespace that followed this chunk in the original.
        leading: Whitespace before the first chunk (empty on later chunks).
    """
    chunk_num: int
    text: str
    start: int
    end: int
    separator: str = ""
    leading: str = ""

    @property
    def char_count(self) -> int:
        return len(self.text)


class TextChunker:
    """
    Splits text into chunks bounded by a character budget.

    The budget is max_tokens_per_chunk * chars_per_token, using the same
    divisor as the token estimator. A single sentence longer than the budget
    is emitted whole rather than cut mid-sentence.
    """

    def __init__(self, estimator: TokenEstimator = None):
        self.estimator = estimator or TokenEstimator()

    def split(self, text: str, max_tokens_per_chunk: int) -> list[Chunk]:
        """
        Split text into boundary-respecting chunks.

        Args:
            text: Full input text.
            max_tokens_per_chunk: Token budget per chunk.

        Returns:
            List of Chunk objects in document order.
        """
        start_time = time.time()
        max_chars = self.estimator.max_chars(max_tokens_per_chunk)

        if len(text) <= max_chars:
            return [Chunk(chunk_num=1, text=text, start=0, end=len(text))]

        spans = []
        current = None
        for piece_start, piece_end in self._iter_pieces(text, max_chars):
            if current is None:
                current = [piece_start, piece_end]
            elif piece_end - current[0] <= max_chars:
                current[1] = piece_end
            else:
                spans.append((current[0], current[1]))
                current = [piece_start, piece_end]

        if current is None:
            # Whitespace only; nothing to split on
            return [Chunk(chunk_num=1, text=text, start=0, end=len(text))]
        spans.append((current[0], current[1]))

        chunks = []
        for i, (start, end) in enumerate(spans):
            next_start = spans[i + 1][0] if i + 1 < len(spans) else len(text)
            chunks.append(Chunk(
                chunk_num=i + 1,
                text=text[start:end],
                start=start,
                end=end,
                separator=text[end:next_start],
                leading=text[:start] if i == 0 else "",
            ))

        oversized = sum(1 for chunk in chunks if chunk.char_count > max_chars)
        debug_log(
            f"[CHUNKER] {len(text)} chars -> {len(chunks)} chunks "
            f"(budget {max_chars} chars, {oversized} oversized atomic)"
        )
        debug_timing("[CHUNKER] split", time.time() - start_time)
        return chunks

    @staticmethod
    def rejoin(chunks: list[Chunk]) -> str:
        """Reassemble chunks into the original text."""
        return "".join(chunk.leading + chunk.text + chunk.separator for chunk in chunks)

    def _iter_pieces(self, text: str, max_chars: int):
        """
        Yield (start, end) spans of paragraphs, or of sentences for
        paragraphs that alone exceed max_chars. Empty spans are skipped.
        """
        for para_start, para_end in _split_spans(text, PARAGRAPH_BREAK, 0, len(text)):
            if para_end - para_start <= max_chars:
                yield para_start, para_end
                continue

            debug_log(
                f"[CHUNKER] Paragraph of {para_end - para_start} chars exceeds budget, "
                "splitting on sentences"
            )
            yield from _split_spans(text, SENTENCE_BREAK, para_start, para_end)


def _split_spans(text: str, pattern: re.Pattern, start: int, end: int) -> list[tuple[int, int]]:
    """Return the whitespace-trimmed, non-empty spans of text[start:end] between matches of pattern."""
    spans = []
    pos = start
    for match in pattern.finditer(text, start, end):
        _append_trimmed(spans, text, pos, match.start())
        pos = match.end()
    _append_trimmed(spans, text, pos, end)
    return spans


def _append_trimmed(spans: list, text: str, start: int, end: int):
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    if end > start:
        spans.append((start, end))
