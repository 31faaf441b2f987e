"""Error classification for provider failures.

Pure classification, no side effects: maps an HTTP status and/or error
message onto an ``ErrorKind`` plus a retry hint. The status code decides
whenever it is meaningful; the message is only inspected as a fallback,
mainly for safety blocks that the provider reports with a 200 or a 400.
"""

import httpx

from genai_orchestrator.config import settings
from genai_orchestrator.errors import ErrorKind, GenerationError, ProviderError, RequestCancelled

_STATUS_KINDS: dict[int, ErrorKind] = {
    429: ErrorKind.RATE_LIMITED,
    503: ErrorKind.SERVICE_OVERLOADED,
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.UNAUTHORIZED,
}

# Checked in order; first match wins
_MESSAGE_KINDS: tuple[tuple[tuple[str, ...], ErrorKind], ...] = (
    (("safety", "blocked"), ErrorKind.CONTENT_BLOCKED),
    (("overloaded", "capacity"), ErrorKind.SERVICE_OVERLOADED),
    (("authentication", "api key not valid"), ErrorKind.UNAUTHORIZED),
)


class ErrorClassifier:
    """Turns transport and provider errors into a stable taxonomy.

    Example:
        ```python
        classifier = ErrorClassifier()
        error = classifier.classify(status_code=429)
        assert error.kind is ErrorKind.RATE_LIMITED and error.retryable
        ```
    """

    def __init__(self, retry_unknown: bool | None = None) -> None:
        """Initialize the classifier.

        Args:
            retry_unknown: Treat UNKNOWN errors as retryable.
                Defaults to settings.retry_unknown_errors.
        """
        self._retry_unknown = (
            retry_unknown if retry_unknown is not None else settings.retry_unknown_errors
        )

    def classify(self, status_code: int | None = None, message: str | None = None) -> GenerationError:
        """Classify a failure.

        Args:
            status_code: HTTP status of the failed call, if any
            message: Raw error message, if any

        Returns:
            GenerationError with kind and retry hint
        """
        message = message or ""
        kind = _STATUS_KINDS.get(status_code) if status_code is not None else None

        if kind is None:
            lowered = message.lower()
            for needles, candidate in _MESSAGE_KINDS:
                if any(needle in lowered for needle in needles):
                    kind = candidate
                    break

        if kind is None:
            kind = ErrorKind.UNKNOWN

        return GenerationError(
            kind=kind,
            message=message,
            retryable=self.is_retryable(kind),
            status_code=status_code,
        )

    def classify_exception(self, error: Exception) -> GenerationError:
        """Classify an exception raised during an attempt."""
        if isinstance(error, RequestCancelled):
            return GenerationError(kind=ErrorKind.CANCELLED, message=error.reason)

        if isinstance(error, ProviderError):
            return self.classify(error.status_code, error.message)

        if isinstance(error, httpx.TimeoutException):
            return self.classify(message=f"Request timed out: {error!r}")

        if isinstance(error, httpx.HTTPError):
            return self.classify(message=f"Transport error: {error}")

        return self.classify(message=str(error) or type(error).__name__)

    def is_retryable(self, kind: ErrorKind) -> bool:
        if kind.transient:
            return True
        return kind is ErrorKind.UNKNOWN and self._retry_unknown
