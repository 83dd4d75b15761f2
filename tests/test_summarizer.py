"""
Tests for the summarize() entry point and backend factory.

Tests cover:
- Input validation before any backend call
- Token budget selection per backend/model
- Backend construction per kind
- End-to-end local summarization through an in-process worker
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from synopsis.ai.base import SummarizationBackend
from synopsis.ai.factory import create_backend
from synopsis.ai.http_backends import ClaudeBackend, HuggingFaceBackend
from synopsis.ai.inference_worker import TERMINATE
from synopsis.ai.local_backend import LocalWorkerBackend
from synopsis.ai.ollama_backend import OllamaBackend
from synopsis.ai.worker_lifecycle import ThreadWorkerHost, WorkerLifecycleManager, WorkerState
from synopsis.errors import InputEmptyError, InputTooShortError, InputValidationError, WorkerInitTimeout
from synopsis.summarization.length_planner import LengthSpec
from synopsis.summarizer import BackendConfig, summarize, validate_input

ARTICLE = "The council approved the new transit plan after a long debate. " * 20  # 1260 chars


class StubBackend(SummarizationBackend):
    name = "stub"

    def __init__(self, model="stub-model"):
        super().__init__(model)
        self.calls = []

    def run(self, text, spec):
        self.calls.append((text, spec))
        return "stub summary"


class TestValidation:
    """Input rejected before any backend is built."""

    @pytest.mark.parametrize("text", ["", "   \n\t  ", None])
    def test_empty_input(self, text):
        with pytest.raises(InputEmptyError):
            validate_input(text)

    def test_too_short_input(self):
        with pytest.raises(InputTooShortError) as exc_info:
            validate_input("Only a sentence or two.")
        assert exc_info.value.minimum == 500
        assert exc_info.value.length == len("Only a sentence or two.")

    @patch('synopsis.summarizer.create_backend')
    def test_no_backend_built_for_invalid_input(self, mock_create):
        with pytest.raises(InputValidationError):
            summarize("short", BackendConfig("openai"))
        mock_create.assert_not_called()

    def test_unknown_backend_kind(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            summarize(ARTICLE, BackendConfig("carrier-pigeon"))


class TestSummarize:
    """Budget selection and delegation to the engine."""

    @patch('synopsis.summarizer.create_backend')
    def test_direct_summary_with_progress(self, mock_create):
        backend = StubBackend()
        mock_create.return_value = backend
        sink = MagicMock()

        result = summarize(ARTICLE, BackendConfig("openai"), on_progress=sink)

        assert result == "stub summary"
        assert len(backend.calls) == 1
        # 1260 chars -> 315 tokens -> 56 clamped to 40..120
        assert backend.calls[0][1] == LengthSpec(56, 22)
        assert [c.args for c in sink.call_args_list] == [(60, "Generating summary..."), (100, "Complete!")]

    @patch('synopsis.summarizer.create_backend')
    def test_local_t5_budget_forces_chunking(self, mock_create):
        backend = StubBackend(model="t5-small")
        mock_create.return_value = backend
        text = "\n\n".join([ARTICLE] * 2)  # 2522 chars -> 631 tokens, over 0.8 * 400

        summarize(text, BackendConfig("local", model="t5-small"))

        assert len(backend.calls) > 1

    def test_end_to_end_local_worker(self):
        def pipeline_factory(model_name):
            return lambda text, **kwargs: [{'summary_text': f"summary of {len(text)} chars"}]

        manager = WorkerLifecycleManager(ThreadWorkerHost(pipeline_factory=pipeline_factory), ready_timeout=5)
        events = []
        try:
            result = summarize(
                ARTICLE,
                BackendConfig("local"),
                on_progress=lambda pct, msg: events.append((pct, msg)),
                lifecycle=manager,
            )
        finally:
            manager.shutdown()

        assert result == f"summary of {len(ARTICLE)} chars"
        assert (15, "Loading model sshleifer/distilbart-cnn-6-6...") in events
        assert (50, "Model ready!") in events
        assert events[-1] == (100, "Complete!")

    def test_silent_local_worker_fails_with_init_timeout(self):
        received = []

        def silent_worker(request_queue, response_queue, pipeline_factory=None):
            while True:
                task = request_queue.get()
                if task == TERMINATE:
                    break
                received.append(task['action'])

        manager = WorkerLifecycleManager(
            ThreadWorkerHost(worker_target=silent_worker),
            ready_timeout=0.3,
            ping_interval=0.05,
        )

        with pytest.raises(WorkerInitTimeout):
            summarize(ARTICLE, BackendConfig("local"), lifecycle=manager)

        assert manager.state is WorkerState.ABSENT
        assert received
        assert 'summarize' not in received


class TestCreateBackend:
    """Test backend kind -> implementation mapping."""

    def test_remote_backend_uses_default_model_and_credential(self):
        backend = create_backend(BackendConfig("claude", credential="sk-ant-test"))

        assert isinstance(backend, ClaudeBackend)
        assert backend.model == "claude-3-5-haiku-latest"
        assert backend.api_key == "sk-ant-test"

    def test_explicit_model(self):
        backend = create_backend(BackendConfig("huggingface", model="sshleifer/distilbart-cnn-12-6", credential="hf"))

        assert isinstance(backend, HuggingFaceBackend)
        assert backend.model == "sshleifer/distilbart-cnn-12-6"

    def test_ollama_needs_no_credential(self):
        backend = create_backend(BackendConfig("ollama"))

        assert isinstance(backend, OllamaBackend)
        assert backend.model == "gemma3:1b"

    def test_local_backend_gets_injected_lifecycle(self):
        manager = WorkerLifecycleManager(ThreadWorkerHost())
        backend = create_backend(BackendConfig("local"), lifecycle=manager)

        assert isinstance(backend, LocalWorkerBackend)
        assert backend.lifecycle is manager
        assert backend.model == "sshleifer/distilbart-cnn-6-6"

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            create_backend(BackendConfig("carrier-pigeon"))
