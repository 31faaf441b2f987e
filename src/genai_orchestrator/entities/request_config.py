"""Per-call request configuration."""

from dataclasses import dataclass, field

from genai_orchestrator.config import settings


@dataclass(frozen=True)
class RequestConfig:
    """Immutable configuration for one generation request.

    Attributes:
        model: Model id from the model catalog
        temperature: Sampling temperature
        max_output_tokens: Upper bound on generated tokens
        max_retries: Retries allowed for transient failures (attempts = retries + 1)
        system_instruction: Optional system prompt
        response_modalities: Modalities requested from the provider
    """

    model: str = field(default_factory=lambda: settings.default_model)
    temperature: float = 0.9
    max_output_tokens: int = 8192
    max_retries: int = field(default_factory=lambda: settings.max_retries)
    system_instruction: str | None = None
    response_modalities: tuple[str, ...] = ("TEXT", "IMAGE")

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must not be negative")
        if self.max_output_tokens < 1:
            raise ValueError("max_output_tokens must be positive")
