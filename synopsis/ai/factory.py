"""Maps a backend kind to its SummarizationBackend implementation."""

from synopsis.ai.base import SummarizationBackend
from synopsis.ai.http_backends import ClaudeBackend, GeminiBackend, HuggingFaceBackend, OpenAIBackend
from synopsis.ai.local_backend import LocalWorkerBackend
from synopsis.ai.ollama_backend import OllamaBackend
from synopsis.config import get_backend_config
from synopsis.logging_config import debug_log

REMOTE_BACKENDS = {
    'huggingface': HuggingFaceBackend,
    'openai': OpenAIBackend,
    'claude': ClaudeBackend,
    'gemini': GeminiBackend,
    'ollama': OllamaBackend,
}

BACKEND_KINDS = ('local', *REMOTE_BACKENDS)


def create_backend(config, progress=None, lifecycle=None) -> SummarizationBackend:
    """
    Build the backend for a BackendConfig.

    Args:
        config: BackendConfig (backend_kind, model, credential).
        progress: ProgressReporter for worker-side milestones (local only).
        lifecycle: WorkerLifecycleManager override (local only); defaults to
            the process-wide manager.

    Raises:
        ValueError: Unknown backend kind.
    """
    kind = config.backend_kind
    backend_config = get_backend_config(kind)
    model = config.model or backend_config['default_model']

    if kind == 'local':
        backend = LocalWorkerBackend(model, lifecycle=lifecycle, progress=progress)
    else:
        backend = REMOTE_BACKENDS[kind](model, api_key=config.credential)

    debug_log(f"[FACTORY] Created {backend!r} for backend '{kind}'")
    return backend
