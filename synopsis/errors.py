"""
Exception hierarchy for Synopsis.

    SummarizationError
    ├── InputValidationError      (caller-side, no backend call attempted)
    │   ├── InputEmptyError
    │   └── InputTooShortError
    └── BackendError              (raised by backends and the local worker)
        ├── BackendUnavailableError
        │   ├── NetworkError
        │   └── WorkerInitTimeout
        ├── BackendRequestFailed
        │   ├── AuthError
        │   ├── RateLimitError
        │   └── InvalidResponseError
        └── BackendTimeoutError

Backend errors propagate unchanged to the caller of summarize(). Hitting the
reduction round cap is not an error: the engine returns a multi-part result.
"""


class SummarizationError(Exception):
    """Base exception for summarization errors."""

    pass


class InputValidationError(SummarizationError):
    """Input text was rejected before any backend call."""

    pass


class InputEmptyError(InputValidationError):
    """Input text is empty or whitespace only."""

    def __init__(self):
        super().__init__("No text to summarize")


class InputTooShortError(InputValidationError):
    """Input text is below the minimum summarizable length."""

    def __init__(self, length: int, minimum: int):
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Text is too short to summarize ({length} characters, minimum {minimum})"
        )


class BackendError(SummarizationError):
    """
    Base class for failures reported by a summarization backend.

    Attributes:
        backend: Name of the backend that failed (e.g. 'openai', 'local').
    """

    def __init__(self, message: str, backend: str | None = None):
        self.backend = backend
        super().__init__(f"[{backend}] {message}" if backend else message)


class BackendUnavailableError(BackendError):
    """Backend could not be reached or brought up."""

    pass


class NetworkError(BackendUnavailableError):
    """Remote endpoint unreachable (DNS, refused connection, reset)."""

    pass


class WorkerInitTimeout(BackendUnavailableError):
    """Local worker did not answer the readiness handshake in time."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Local worker did not become ready within {timeout_seconds:g}s",
            backend="local",
        )


class BackendRequestFailed(BackendError):
    """
    Backend answered but the request failed.

    Attributes:
        status_code: HTTP status when the failure came from an HTTP response.
    """

    def __init__(self, message: str, backend: str | None = None, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, backend=backend)


class AuthError(BackendRequestFailed):
    """Credential missing or rejected by the provider."""

    pass


class RateLimitError(BackendRequestFailed):
    """Provider rejected the request due to rate limiting."""

    pass


class InvalidResponseError(BackendRequestFailed):
    """Provider answered with a payload that could not be interpreted."""

    pass


class BackendTimeoutError(BackendError, TimeoutError):
    """A backend call exceeded its hard timeout. Never retried."""

    def __init__(self, timeout_seconds: float, backend: str | None = None):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Request timed out after {timeout_seconds:g}s", backend=backend)
