"""Error taxonomy for generation requests.

``ErrorKind`` is the stable, caller-facing classification. ``GenerationError``
is what the orchestrator returns inside a failed ``GenerationResult``.
``ProviderError`` is raised by transports and parsers and never leaves the
orchestrator.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Classification of a failed generation request."""

    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    CONTENT_BLOCKED = "content_blocked"
    SERVICE_OVERLOADED = "service_overloaded"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"

    @property
    def remediation(self) -> str:
        """User-facing hint describing what to do about this error."""
        return _REMEDIATIONS[self]

    @property
    def transient(self) -> bool:
        """Whether retrying the same request may succeed."""
        return self in (ErrorKind.RATE_LIMITED, ErrorKind.SERVICE_OVERLOADED)


_REMEDIATIONS: dict[ErrorKind, str] = {
    ErrorKind.RATE_LIMITED: "API rate limit reached. Please wait a moment and try again.",
    ErrorKind.UNAUTHORIZED: "Authentication failed. Please verify your Gemini API key.",
    ErrorKind.CONTENT_BLOCKED: "Content was blocked by safety filters. Please modify your prompt.",
    ErrorKind.SERVICE_OVERLOADED: "AI service is currently at capacity. Please try again shortly.",
    ErrorKind.CANCELLED: "The request was cancelled before it completed.",
    ErrorKind.UNKNOWN: "An unexpected error occurred. Please try again later.",
}


@dataclass(frozen=True)
class GenerationError:
    """A classified failure.

    Attributes:
        kind: Stable error classification
        message: Provider or transport detail (may be empty)
        retryable: Whether the retry executor may attempt the call again
        status_code: HTTP status of the failed attempt, if any
    """

    kind: ErrorKind
    message: str = ""
    retryable: bool = False
    status_code: int | None = None

    @property
    def remediation(self) -> str:
        return self.kind.remediation


class ProviderError(Exception):
    """Raised when the provider rejects a call or returns an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"ProviderError(status_code={self.status_code!r}, message={self.message!r})"


class RequestCancelled(Exception):
    """Raised inside the retry loop when the caller's cancel token fires."""

    def __init__(self, reason: str = "cancelled") -> None:
        super().__init__(reason)
        self.reason = reason
