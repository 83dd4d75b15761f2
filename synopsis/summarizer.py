"""
Summarize entry point.

    from synopsis.summarizer import BackendConfig, summarize

    summary = summarize(
        article_text,
        BackendConfig(backend_kind="openai", model="gpt-4o-mini"),
        on_progress=lambda pct, msg: print(pct, msg),
    )

Validates the input, picks the backend's token budget, builds the backend
and hands the text to the ReductionEngine. Errors propagate unchanged.
"""

from dataclasses import dataclass

from synopsis.ai.factory import create_backend
from synopsis.config import MIN_ARTICLE_LENGTH, get_token_budget
from synopsis.errors import InputEmptyError, InputTooShortError, SummarizationError
from synopsis.logging_config import Timer, error, info
from synopsis.summarization.progress_reporter import ProgressReporter, ProgressSink
from synopsis.summarization.reduction_engine import ReductionEngine


@dataclass
class BackendConfig:
    """
    Which backend to summarize with.

    Attributes:
        backend_kind: 'local', 'ollama', 'huggingface', 'openai', 'claude' or 'gemini'.
        model: Model identifier; the backend's default model when None.
        credential: API key for remote providers; read from the environment when None.
    """
    backend_kind: str = "local"
    model: str | None = None
    credential: str | None = None


def validate_input(text: str) -> None:
    """
    Reject input that should never reach a backend.

    Raises:
        InputEmptyError: Empty or whitespace-only text.
        InputTooShortError: Fewer than MIN_ARTICLE_LENGTH non-blank characters.
    """
    stripped = (text or "").strip()
    if not stripped:
        raise InputEmptyError()
    if len(stripped) < MIN_ARTICLE_LENGTH:
        raise InputTooShortError(len(stripped), MIN_ARTICLE_LENGTH)


def summarize(
    text: str,
    config: BackendConfig,
    on_progress: ProgressSink | None = None,
    lifecycle=None,
) -> str:
    """
    Produce one summary of arbitrarily long text.

    Args:
        text: Article or document text.
        config: Backend selection.
        on_progress: Optional sink receiving (percent, message) milestones.
        lifecycle: WorkerLifecycleManager override for the local backend.

    Returns:
        The summary text.

    Raises:
        InputValidationError: Input rejected before any backend call.
        BackendError: First backend failure, unchanged.
        ValueError: Unknown backend kind.
    """
    validate_input(text)

    progress = ProgressReporter(on_progress)
    backend = create_backend(config, progress=progress, lifecycle=lifecycle)
    token_budget = get_token_budget(config.backend_kind, backend.model)
    engine = ReductionEngine(progress=progress)

    info(f"Summarizing {len(text)} chars with {config.backend_kind} ({backend.model}), budget {token_budget} tokens")
    try:
        with Timer("Summarize"):
            summary = engine.summarize(text, backend, token_budget)
    except SummarizationError as e:
        error(f"Summarization failed: {e}")
        raise

    info(f"Summary complete: {len(summary)} chars")
    return summary
