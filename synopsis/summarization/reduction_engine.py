"""
Hierarchical (map-reduce) summarization.

Strategy:
1. Input fits 80% of the backend budget -> one direct call.
2. Otherwise split into chunks of floor(0.8 * budget) tokens and summarize
   each chunk (150/60 tokens), strictly in order.
3. Reduce: while more than one summary remains
   - if all summaries joined fit the budget, make the final call at the
     length planned for the ORIGINAL input and stop;
   - else join them in groups of 5, re-summarizing (180/70 tokens) only the
     groups that are still over budget.
4. After 5 reduction rounds give up combining and return the remaining
   summaries as a labelled multi-part result.

Backend errors are not caught here: the first failure aborts the run.
"""

from __future__ import annotations

import math
import time
from typing import TYPE_CHECKING

from synopsis.config import BUDGET_RATIO, MAX_REDUCTION_ROUNDS, MULTI_PART_HEADER, REDUCTION_GROUP_SIZE
from synopsis.logging_config import debug_log, debug_timing, warning
from synopsis.summarization.chunker import TextChunker
from synopsis.summarization.length_planner import (
    CHUNK_SUMMARY_SPEC,
    INTERMEDIATE_SUMMARY_SPEC,
    calculate_summary_length,
)
from synopsis.summarization.progress_reporter import ProgressReporter
from synopsis.summarization.token_estimator import TokenEstimator

if TYPE_CHECKING:
    from synopsis.ai.base import SummarizationBackend

LARGE_INPUT_TOKENS = 5000

# Progress bands
CHUNK_PROGRESS_START = 10
CHUNK_PROGRESS_SPAN = 50
COMBINE_PROGRESS_START = 60
COMBINE_PROGRESS_STEP = 5
FINAL_PROGRESS = 85


class ReductionEngine:
    """
    Turns arbitrarily long text into one summary with a budget-limited backend.

    Attributes:
        estimator: TokenEstimator shared with the chunker.
        chunker: TextChunker used for the map phase.
        progress: ProgressReporter receiving milestones.
        max_rounds: Reduction rounds before the multi-part fallback.
        group_size: Summaries combined per group in a round.
        budget_ratio: Fraction of the token budget used per call.
    """

    def __init__(
        self,
        estimator: TokenEstimator = None,
        chunker: TextChunker = None,
        progress: ProgressReporter = None,
        max_rounds: int = MAX_REDUCTION_ROUNDS,
        group_size: int = REDUCTION_GROUP_SIZE,
        budget_ratio: float = BUDGET_RATIO,
    ):
        self.estimator = estimator or TokenEstimator()
        self.chunker = chunker or TextChunker(self.estimator)
        self.progress = progress or ProgressReporter()
        self.max_rounds = max_rounds
        self.group_size = group_size
        self.budget_ratio = budget_ratio

    def summarize(self, text: str, backend: SummarizationBackend, token_budget: int) -> str:
        """
        Summarize text with the given backend.

        Args:
            text: Validated input text.
            backend: Backend performing each call.
            token_budget: Max input tokens the backend accepts per call.

        Returns:
            The final summary, or a "SUMMARY (Multi-part):" result when the
            round cap is reached.

        Raises:
            BackendError: Propagated unchanged from the first failing call.
        """
        start_time = time.time()
        tokens = self.estimator.estimate(text)
        threshold = self.budget_ratio * token_budget

        debug_log(
            f"[REDUCE] {len(text)} chars, ~{tokens} tokens, budget {token_budget} "
            f"(threshold {threshold:.0f}), backend {backend!r}"
        )

        if tokens < threshold:
            self.progress.report(60, "Generating summary...")
            summary = backend.run(text, calculate_summary_length(tokens))
            self.progress.report(100, "Complete!")
            debug_timing("[REDUCE] Direct summary", time.time() - start_time)
            return summary

        if tokens > LARGE_INPUT_TOKENS:
            self.progress.report(5, f"Large article ({tokens} tokens)...")

        summaries = self._summarize_chunks(text, backend, math.floor(threshold))
        result = self._reduce(summaries, backend, tokens, threshold)

        self.progress.report(100, "Complete!")
        debug_timing("[REDUCE] Hierarchical summary", time.time() - start_time)
        return result

    def _summarize_chunks(self, text, backend, max_tokens_per_chunk) -> list[str]:
        chunks = self.chunker.split(text, max_tokens_per_chunk)
        total = len(chunks)
        self.progress.report(CHUNK_PROGRESS_START, f"Processing {total} chunks...")

        summaries = []
        for i, chunk in enumerate(chunks):
            self.progress.report(
                CHUNK_PROGRESS_START + (i / total) * CHUNK_PROGRESS_SPAN,
                f"Chunk {i + 1}/{total}...",
            )
            summaries.append(backend.run(chunk.text, CHUNK_SUMMARY_SPEC))

        debug_log(f"[REDUCE] Map phase: {total} chunk summaries")
        return summaries

    def _reduce(self, summaries, backend, original_tokens, threshold) -> str:
        current = summaries
        iteration = 1

        while len(current) > 1:
            combined = " ".join(current)
            combined_tokens = self.estimator.estimate(combined)

            if combined_tokens < threshold:
                debug_log(f"[REDUCE] {len(current)} summaries fit ({combined_tokens} tokens), final pass")
                self.progress.report(FINAL_PROGRESS, "Creating final summary...")
                return backend.run(combined, calculate_summary_length(original_tokens))

            self.progress.report(
                min(COMBINE_PROGRESS_START + COMBINE_PROGRESS_STEP * iteration, FINAL_PROGRESS),
                f"Combining summaries (round {iteration})...",
            )
            current = self._combine_round(current, backend, threshold)
            debug_log(f"[REDUCE] Round {iteration}: {combined_tokens} tokens -> {len(current)} entries")

            iteration += 1
            if iteration > self.max_rounds:
                warning(f"Reduction stopped after {self.max_rounds} rounds with {len(current)} parts")
                return self._multi_part(current)

        return current[0]

    def _combine_round(self, current, backend, threshold) -> list[str]:
        next_round = []
        for start in range(0, len(current), self.group_size):
            group_text = " ".join(current[start:start + self.group_size])
            if self.estimator.estimate(group_text) > threshold:
                next_round.append(backend.run(group_text, INTERMEDIATE_SUMMARY_SPEC))
            else:
                next_round.append(group_text)
        return next_round

    @staticmethod
    def _multi_part(parts: list[str]) -> str:
        body = "\n\n".join(f"Part {i + 1}: {part}" for i, part in enumerate(parts))
        return f"{MULTI_PART_HEADER}\n\n{body}"
