"""
Backend capability interface.

Every summarization provider (remote HTTP API or the local worker) implements
SummarizationBackend.run(text, spec). The reduction engine only sees this
interface, so it stays provider-agnostic.

Architecture:
    SummarizationBackend (ABC)
        ├── LocalWorkerBackend   (transformers pipeline in the local worker)
        ├── OllamaBackend        (local Ollama REST service)
        └── HttpBackend
              ├── HuggingFaceBackend
              ├── OpenAIBackend
              ├── ClaudeBackend
              └── GeminiBackend
"""

from abc import ABC, abstractmethod

from synopsis.summarization.length_planner import LengthSpec


class SummarizationBackend(ABC):
    """
    Abstract base class for summarization backends.

    Attributes:
        name: Backend kind (matches the key in config/backends.yaml).
        model: Model identifier passed to the provider.
    """

    name: str = "backend"

    def __init__(self, model: str):
        self.model = model

    @abstractmethod
    def run(self, text: str, spec: LengthSpec) -> str:
        """
        Execute one summarization call.

        Args:
            text: Text to summarize; already within the backend's token budget.
            spec: Target min/max summary length in tokens.

        Returns:
            The generated summary.

        Raises:
            BackendError: Any provider failure (network, auth, rate limit,
                timeout, invalid response). Never retried here.
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"
