"""
Local Worker Backend
Summarizes with a transformers pipeline hosted by the local inference worker.

The worker is created on first use (see worker_lifecycle). Model-load
milestones the worker reports are forwarded to the run's progress reporter.
"""

from concurrent.futures import TimeoutError as FuturesTimeoutError

from synopsis.ai.base import SummarizationBackend
from synopsis.ai.worker_lifecycle import WorkerLifecycleManager, get_worker_lifecycle
from synopsis.config import SUMMARIZATION_TIMEOUT_SECONDS
from synopsis.errors import BackendRequestFailed, BackendTimeoutError, InvalidResponseError
from synopsis.logging_config import error
from synopsis.summarization.progress_reporter import ProgressReporter


class LocalWorkerBackend(SummarizationBackend):
    """Backend that delegates each call to the local inference worker."""

    name = "local"

    def __init__(
        self,
        model: str,
        lifecycle: WorkerLifecycleManager = None,
        timeout: float = SUMMARIZATION_TIMEOUT_SECONDS,
        progress: ProgressReporter = None,
    ):
        super().__init__(model)
        self.lifecycle = lifecycle or get_worker_lifecycle()
        self.timeout = timeout
        self.progress = progress

    def run(self, text, spec):
        session = self.lifecycle.ensure()

        payload = {
            'action': 'summarize',
            'text': text,
            'model': self.model,
            'max_length': spec.max_length,
            'min_length': spec.min_length,
        }
        on_progress = self.progress.report if self.progress else None

        try:
            response = session.request(payload, timeout=self.timeout, on_progress=on_progress)
        except FuturesTimeoutError as e:
            error(f"[LOCAL] No answer from worker within {self.timeout}s")
            raise BackendTimeoutError(self.timeout, backend=self.name) from e

        if not response.get('success'):
            raise BackendRequestFailed(
                response.get('error') or "Local worker reported a failure", backend=self.name
            )

        summary = response.get('summary')
        if not isinstance(summary, str):
            raise InvalidResponseError(f"Worker returned no summary text: {response!r}", backend=self.name)
        return summary.strip()
