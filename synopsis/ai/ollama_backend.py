"""
Ollama Backend
Summarizes through a locally running Ollama service's REST API.

- No credential: Ollama listens on localhost (OLLAMA_API_BASE)
- Explicit num_ctx so CPU inference does not allocate the model's full window
- Connection is checked lazily on first use and cached
"""

import requests

from synopsis.ai.http_backends import HttpBackend
from synopsis.ai.prompts import build_summary_prompt
from synopsis.config import OLLAMA_API_BASE, OLLAMA_CONTEXT_WINDOW, SUMMARIZATION_TIMEOUT_SECONDS
from synopsis.errors import NetworkError
from synopsis.logging_config import debug, debug_log, warning
from synopsis.summarization.token_estimator import estimate_tokens


class OllamaBackend(HttpBackend):
    """
    Ollama /api/generate backend.

    Attributes:
        is_connected: Result of the last connection check.
    """

    name = "ollama"
    default_api_base = OLLAMA_API_BASE
    requires_credential = False

    def __init__(
        self,
        model,
        api_key=None,
        api_base=None,
        timeout=SUMMARIZATION_TIMEOUT_SECONDS,
        context_window=OLLAMA_CONTEXT_WINDOW,
    ):
        super().__init__(model, api_key=api_key, api_base=api_base, timeout=timeout)
        self.context_window = context_window
        self.is_connected = False

    def check_connection(self) -> bool:
        """
        Check if Ollama is running and accessible.

        Returns:
            bool: True if Ollama is accessible, False otherwise
        """
        try:
            response = requests.get(f"{self.api_base}/api/tags", timeout=5)
            self.is_connected = response.status_code == 200
            if self.is_connected:
                debug_log("[OLLAMA] Connection successful")
            else:
                debug_log(f"[OLLAMA] Connection failed: Status {response.status_code}")
        except requests.exceptions.RequestException as e:
            debug(f"Could not connect to Ollama at {self.api_base}")
            debug_log(f"[OLLAMA] Connection error: {e}")
            self.is_connected = False

        return self.is_connected

    def get_available_models(self) -> list[str]:
        """Names of the models installed in the Ollama service (empty if unreachable)."""
        if not self.is_connected and not self.check_connection():
            return []

        try:
            response = requests.get(f"{self.api_base}/api/tags", timeout=10)
            response.raise_for_status()
            names = [model['name'] for model in response.json().get('models', [])]
        except (requests.exceptions.RequestException, ValueError, KeyError) as e:
            debug_log(f"[OLLAMA] Error fetching models: {e}")
            return []

        debug_log(f"[OLLAMA] Found {len(names)} models: {names}")
        return names

    def run(self, text, spec):
        if not self.is_connected and not self.check_connection():
            raise NetworkError(
                f"Ollama not available at {self.api_base}. Is Ollama running? Start with: ollama serve",
                backend=self.name,
            )
        return super().run(text, spec)

    def build_request(self, text, spec):
        prompt = build_summary_prompt(text, spec)

        estimated = estimate_tokens(prompt)
        if estimated > self.context_window - spec.max_length:
            warning(
                f"Prompt ({estimated} estimated tokens) may be truncated. "
                f"Context window is {self.context_window} tokens."
            )

        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "num_ctx": self.context_window,
                "num_predict": spec.max_length,
                "temperature": 0.2,
            },
        }
        return f"{self.api_base}/api/generate", {}, payload

    def parse_response(self, data):
        debug_log(f"[OLLAMA] Generation complete: {data.get('eval_count', 0)} tokens")
        return data['response']
