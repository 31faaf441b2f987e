"""Parsed model response entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AIResponse:
    """Result of one successful generation call.

    Attributes:
        text: Concatenated text parts of the first candidate
        image: First inline image as a ``data:<mime>;base64,<data>`` URI
        finish_reason: Provider finish reason (e.g. "STOP"), if reported
    """

    text: str | None = None
    image: str | None = None
    finish_reason: str | None = None

    @property
    def has_image(self) -> bool:
        return self.image is not None
