"""Typed result returned across the orchestrator boundary."""

from dataclasses import dataclass
from typing import Generic, TypeVar

from genai_orchestrator.errors import ErrorKind, GenerationError

T = TypeVar("T")


@dataclass(frozen=True)
class GenerationResult(Generic[T]):
    """Either a value or a classified error, never both.

    Attributes:
        value: The successful result
        error: The classified failure
        from_cache: True when the value was served by the request cache
    """

    value: T | None = None
    error: GenerationError | None = None
    from_cache: bool = False

    @classmethod
    def ok(cls, value: T, from_cache: bool = False) -> "GenerationResult[T]":
        return cls(value=value, from_cache=from_cache)

    @classmethod
    def fail(
        cls,
        error: GenerationError | ErrorKind,
        message: str = "",
    ) -> "GenerationResult[T]":
        if isinstance(error, ErrorKind):
            error = GenerationError(kind=error, message=message)
        return cls(error=error)

    @property
    def success(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising ValueError for a failed result."""
        if self.error is not None:
            raise ValueError(f"{self.error.kind.value}: {self.error.message}")
        return self.value  # type: ignore[return-value]
