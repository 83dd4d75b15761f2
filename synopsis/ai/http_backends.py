"""
Remote HTTP summarization backends.

One class per provider, all sharing HttpBackend's request handling:
- HuggingFaceBackend: Inference API summarization models (bart-large-cnn)
- OpenAIBackend: Chat Completions
- ClaudeBackend: Anthropic Messages API
- GeminiBackend: Gemini generateContent

Failure mapping (applies to every provider):
    connection refused / DNS / reset  -> NetworkError
    requests timeout                  -> BackendTimeoutError
    401, 403                          -> AuthError
    429                               -> RateLimitError
    502, 503, 504                     -> BackendUnavailableError
    any other non-2xx                 -> BackendRequestFailed (provider message kept)
    body not JSON / fields missing    -> InvalidResponseError
"""

import os
import time
from abc import abstractmethod
from typing import Any

import requests

from synopsis.ai.base import SummarizationBackend
from synopsis.ai.prompts import SYSTEM_PROMPT, build_summary_prompt
from synopsis.config import (
    ANTHROPIC_API_BASE,
    ANTHROPIC_API_VERSION,
    CREDENTIAL_ENV_VARS,
    GEMINI_API_BASE,
    HF_API_BASE,
    OPENAI_API_BASE,
    SUMMARIZATION_TIMEOUT_SECONDS,
)
from synopsis.errors import (
    AuthError,
    BackendRequestFailed,
    BackendTimeoutError,
    BackendUnavailableError,
    InvalidResponseError,
    NetworkError,
    RateLimitError,
)
from synopsis.logging_config import debug_log, error
from synopsis.summarization.length_planner import LengthSpec


class HttpBackend(SummarizationBackend):
    """
    Base class for backends reached over HTTP with a JSON body.

    Subclasses implement build_request() and parse_response(); this class
    owns credentials, the POST itself, and error mapping.

    Attributes:
        api_base: Provider base URL.
        api_key: Credential (from the caller, else the provider's env var).
        timeout: Hard per-call timeout in seconds.
    """

    default_api_base: str = ""
    requires_credential: bool = True

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        api_base: str | None = None,
        timeout: float = SUMMARIZATION_TIMEOUT_SECONDS,
    ):
        super().__init__(model)
        env_var = CREDENTIAL_ENV_VARS.get(self.name)
        self.api_key = api_key or (os.environ.get(env_var, "") if env_var else "")
        self.api_base = (api_base or self.default_api_base).rstrip('/')
        self.timeout = timeout

    @abstractmethod
    def build_request(self, text: str, spec: LengthSpec) -> tuple[str, dict, dict]:
        """Return (url, headers, json_payload) for one summarization call."""

    @abstractmethod
    def parse_response(self, data: Any) -> str:
        """Extract the summary from a decoded JSON response."""

    def run(self, text: str, spec: LengthSpec) -> str:
        if self.requires_credential and not self.api_key:
            env_var = CREDENTIAL_ENV_VARS.get(self.name, "the provider API key")
            raise AuthError(f"No API key configured. Pass a credential or set {env_var}.", backend=self.name)

        url, headers, payload = self.build_request(text, spec)
        debug_log(
            f"[HTTP] {self.name}: {len(text)} chars, model={self.model}, "
            f"length {spec.min_length}-{spec.max_length}"
        )

        start_time = time.time()
        data = self.post_json(url, headers, payload)

        try:
            summary = self.parse_response(data)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise InvalidResponseError(
                f"Unexpected response shape: {str(data)[:200]}", backend=self.name
            ) from e

        if not isinstance(summary, str):
            raise InvalidResponseError(f"Summary is not text: {summary!r}", backend=self.name)

        debug_log(f"[HTTP] {self.name}: {len(summary)} chars in {time.time() - start_time:.2f}s")
        return summary.strip()

    def post_json(self, url: str, headers: dict, payload: dict) -> Any:
        """
        POST a JSON payload and return the decoded JSON response.

        Raises:
            NetworkError, BackendTimeoutError, AuthError, RateLimitError,
            BackendUnavailableError, BackendRequestFailed, InvalidResponseError
        """
        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            error(f"[HTTP] {self.name}: timeout after {self.timeout}s")
            raise BackendTimeoutError(self.timeout, backend=self.name) from e
        except requests.exceptions.ConnectionError as e:
            error(f"[HTTP] {self.name}: cannot connect to {self.api_base}")
            raise NetworkError(f"Cannot connect to {self.api_base}: {e}", backend=self.name) from e
        except requests.exceptions.RequestException as e:
            raise BackendRequestFailed(f"Request failed: {e}", backend=self.name) from e

        if not 200 <= response.status_code < 300:
            self._raise_for_status(response)

        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponseError(
                f"Response is not JSON: {response.text[:200]}", backend=self.name
            ) from e

    def _raise_for_status(self, response: requests.Response):
        status = response.status_code
        message = f"HTTP {status}: {_provider_error_message(response)}"
        error(f"[HTTP] {self.name}: {message}")

        if status in (401, 403):
            raise AuthError(message, backend=self.name, status_code=status)
        if status == 429:
            raise RateLimitError(message, backend=self.name, status_code=status)
        if status in (502, 503, 504):
            raise BackendUnavailableError(message, backend=self.name)
        raise BackendRequestFailed(message, backend=self.name, status_code=status)


def _provider_error_message(response: requests.Response) -> str:
    """Pull the provider's error text out of a failed response when present."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason or "no body"

    if isinstance(data, dict):
        err = data.get('error')
        if isinstance(err, dict):
            return str(err.get('message') or err)
        if err:
            return str(err)
        if data.get('message'):
            return str(data['message'])
    return str(data)[:200]


class HuggingFaceBackend(HttpBackend):
    """Hugging Face Inference API; summarization models take length parameters directly."""

    name = "huggingface"
    default_api_base = HF_API_BASE

    def build_request(self, text, spec):
        url = f"{self.api_base}/models/{self.model}"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        payload = {
            "inputs": text,
            "parameters": {
                "max_length": spec.max_length,
                "min_length": spec.min_length,
                "do_sample": False,
            },
        }
        return url, headers, payload

    def parse_response(self, data):
        if isinstance(data, dict) and data.get('error'):
            raise BackendRequestFailed(str(data['error']), backend=self.name)
        return data[0]['summary_text']


class OpenAIBackend(HttpBackend):
    """OpenAI Chat Completions."""

    name = "openai"
    default_api_base = OPENAI_API_BASE

    def build_request(self, text, spec):
        url = f"{self.api_base}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_summary_prompt(text, spec)},
            ],
            "max_tokens": spec.max_length,
        }
        return url, headers, payload

    def parse_response(self, data):
        return data['choices'][0]['message']['content']


class ClaudeBackend(HttpBackend):
    """Anthropic Messages API."""

    name = "claude"
    default_api_base = ANTHROPIC_API_BASE

    def build_request(self, text, spec):
        url = f"{self.api_base}/messages"
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_API_VERSION,
        }
        payload = {
            "model": self.model,
            "max_tokens": spec.max_length,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": build_summary_prompt(text, spec)}],
        }
        return url, headers, payload

    def parse_response(self, data):
        parts = [block['text'] for block in data['content'] if block.get('type') == 'text']
        if not parts:
            raise KeyError('text')
        return "".join(parts)


class GeminiBackend(HttpBackend):
    """Google Gemini generateContent."""

    name = "gemini"
    default_api_base = GEMINI_API_BASE

    def build_request(self, text, spec):
        url = f"{self.api_base}/models/{self.model}:generateContent"
        headers = {"x-goog-api-key": self.api_key}
        payload = {
            "contents": [{"role": "user", "parts": [{"text": build_summary_prompt(text, spec)}]}],
            "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "generationConfig": {"maxOutputTokens": spec.max_length, "temperature": 0.2},
        }
        return url, headers, payload

    def parse_response(self, data):
        parts = data['candidates'][0]['content']['parts']
        return "".join(part.get('text', '') for part in parts)
