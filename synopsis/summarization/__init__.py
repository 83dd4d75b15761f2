"""
Summarization Package for Synopsis - budget-aware hierarchical summarization.

    from synopsis.summarization import (
        ReductionEngine, TextChunker, Chunk,
        TokenEstimator, LengthSpec, calculate_summary_length,
        ProgressReporter,
    )

Architecture:
    ReductionEngine
        ├── TokenEstimator     (chars / 4 heuristic)
        ├── TextChunker        (paragraph, then sentence boundaries)
        ├── length_planner     (tiered target lengths)
        └── ProgressReporter   (best-effort milestones)
            ↓
    SummarizationBackend.run(text, spec)   (synopsis.ai)
"""

from .chunker import Chunk, TextChunker
from .length_planner import (
    CHUNK_SUMMARY_SPEC,
    INTERMEDIATE_SUMMARY_SPEC,
    LengthSpec,
    calculate_summary_length,
)
from .progress_reporter import ProgressEvent, ProgressReporter
from .reduction_engine import ReductionEngine
from .token_estimator import TokenEstimator, estimate_tokens

__all__ = [
    # Engine
    'ReductionEngine',
    # Building blocks
    'TextChunker',
    'Chunk',
    'TokenEstimator',
    'estimate_tokens',
    'LengthSpec',
    'calculate_summary_length',
    'CHUNK_SUMMARY_SPEC',
    'INTERMEDIATE_SUMMARY_SPEC',
    # Progress
    'ProgressReporter',
    'ProgressEvent',
]
