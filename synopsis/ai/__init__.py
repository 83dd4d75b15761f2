"""
AI Package - summarization backends for Synopsis.

Contains:
- SummarizationBackend: capability interface every provider implements
- LocalWorkerBackend: transformers pipeline in a local worker
- OllamaBackend: local Ollama REST service
- HuggingFaceBackend, OpenAIBackend, ClaudeBackend, GeminiBackend: remote APIs
- WorkerLifecycleManager: single local worker with readiness handshake
- create_backend: backend kind -> backend instance
"""

from .base import SummarizationBackend
from .factory import BACKEND_KINDS, create_backend
from .http_backends import ClaudeBackend, GeminiBackend, HttpBackend, HuggingFaceBackend, OpenAIBackend
from .local_backend import LocalWorkerBackend
from .ollama_backend import OllamaBackend
from .worker_lifecycle import (
    ProcessWorkerHost,
    ThreadWorkerHost,
    WorkerLifecycleManager,
    WorkerState,
    get_worker_lifecycle,
)

__all__ = [
    'SummarizationBackend',
    'create_backend',
    'BACKEND_KINDS',
    'HttpBackend',
    'HuggingFaceBackend',
    'OpenAIBackend',
    'ClaudeBackend',
    'GeminiBackend',
    'OllamaBackend',
    'LocalWorkerBackend',
    'WorkerLifecycleManager',
    'WorkerState',
    'ProcessWorkerHost',
    'ThreadWorkerHost',
    'get_worker_lifecycle',
]
