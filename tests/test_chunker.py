"""
Tests for the boundary-respecting text chunker.

These tests verify:
1. Text that fits is returned as a single chunk
2. Chunks never exceed the character budget unless a single sentence does
3. Rejoining chunks reproduces the input exactly
4. Oversized paragraphs fall back to sentence boundaries
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from synopsis.summarization.chunker import TextChunker
from synopsis.summarization.token_estimator import TokenEstimator


@pytest.fixture
def chunker():
    return TextChunker(TokenEstimator(4))


def make_article(paragraphs=12, sentences=6):
    """Article with varied sentence lengths and blank-line paragraphs."""
    paras = []
    for p in range(paragraphs):
        sentences_text = [
            f"Paragraph {p} sentence {s} talks about topic {p * s} in some detail{'!' if s % 3 == 0 else '.'}"
            for s in range(sentences)
        ]
        paras.append(" ".join(sentences_text))
    return "\n\n".join(paras)


class TestSingleChunk:
    """Test inputs that fit the budget."""

    def test_short_text_is_one_chunk(self, chunker):
        chunks = chunker.split("A short article.", max_tokens_per_chunk=100)
        assert len(chunks) == 1
        assert chunks[0].text == "A short article."
        assert chunks[0].chunk_num == 1
        assert chunks[0].separator == ""


class TestParagraphSplitting:
    """Test greedy paragraph accumulation."""

    def test_paragraphs_are_grouped_within_budget(self, chunker):
        text = "\n\n".join(["a" * 90] * 5)
        chunks = chunker.split(text, max_tokens_per_chunk=50)  # 200 chars

        assert [chunk.text for chunk in chunks] == [
            "a" * 90 + "\n\n" + "a" * 90,
            "a" * 90 + "\n\n" + "a" * 90,
            "a" * 90,
        ]
        assert chunks[0].separator == "\n\n"
        assert chunks[-1].separator == ""

    def test_chunk_numbers_and_offsets(self, chunker):
        text = "\n\n".join(["b" * 100] * 4)
        chunks = chunker.split(text, max_tokens_per_chunk=50)

        assert [chunk.chunk_num for chunk in chunks] == [1, 2, 3, 4]
        for chunk in chunks:
            assert text[chunk.start:chunk.end] == chunk.text

    def test_chunks_respect_budget(self, chunker):
        text = make_article()
        max_chars = 4 * 60
        chunks = chunker.split(text, max_tokens_per_chunk=60)

        assert len(chunks) > 1
        for chunk in chunks:
            assert chunk.char_count <= max_chars


class TestSentenceFallback:
    """Test splitting of paragraphs larger than the budget."""

    def test_long_paragraph_splits_on_sentences(self, chunker):
        paragraph = " ".join(f"Sentence number {i} is here." for i in range(40))
        chunks = chunker.split(paragraph, max_tokens_per_chunk=50)

        assert len(chunks) > 1
        for chunk in chunks:
            assert chunk.char_count <= 200
            assert chunk.text.endswith(".")

    def test_single_oversized_sentence_is_kept_whole(self, chunker):
        text = "y" * 50 + "\n\n" + "x" * 500
        chunks = chunker.split(text, max_tokens_per_chunk=50)

        assert len(chunks) == 2
        assert chunks[1].text == "x" * 500


class TestRejoin:
    """Test lossless reassembly."""

    @pytest.mark.parametrize("max_tokens", [20, 50, 120, 400])
    def test_rejoin_reproduces_input(self, chunker, max_tokens):
        text = make_article()
        chunks = chunker.split(text, max_tokens_per_chunk=max_tokens)
        assert TextChunker.rejoin(chunks) == text

    def test_rejoin_keeps_leading_and_trailing_whitespace(self, chunker):
        text = "\n\n  " + make_article(paragraphs=4) + "\n\n\n"
        chunks = chunker.split(text, max_tokens_per_chunk=40)

        assert chunks[0].leading == "\n\n  "
        assert chunks[0].start == 4
        assert TextChunker.rejoin(chunks) == text

    def test_leading_whitespace_not_counted_in_budget(self, chunker):
        text = " " * 30 + "a" * 190 + "\n\n" + "b" * 190
        chunks = chunker.split(text, max_tokens_per_chunk=50)  # 200 chars

        assert [chunk.char_count for chunk in chunks] == [190, 190]
        assert all(chunk.char_count <= 200 for chunk in chunks)
        assert chunks[0].leading == " " * 30
        assert chunks[1].leading == ""
        assert TextChunker.rejoin(chunks) == text

    def test_rejoin_with_quoted_sentence_endings(self, chunker):
        paragraph = " ".join(f'He said "line {i} ends here." Then (it continued {i}.)' for i in range(30))
        chunks = chunker.split(paragraph, max_tokens_per_chunk=30)

        assert len(chunks) > 1
        assert TextChunker.rejoin(chunks) == paragraph
