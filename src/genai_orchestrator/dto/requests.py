"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field

from genai_orchestrator.config import settings


class GenerateRequest(BaseModel):
    """Request DTO for a single generation.

    The handler converts this into a RequestConfig for the orchestrator.
    """

    prompt: str = Field(..., description="The text prompt", min_length=1)
    images: list[str] = Field(
        default_factory=list,
        description="Base64 images, optionally with a data-URI prefix",
    )
    model: str = Field(default_factory=lambda: settings.default_model, description="Model id")
    temperature: float = Field(0.9, ge=0.0, le=2.0)
    max_output_tokens: int = Field(8192, ge=1)
    max_retries: int = Field(default_factory=lambda: settings.max_retries, ge=0, le=10)
    system_instruction: str | None = Field(None, description="Optional system prompt")
    timeout: float | None = Field(
        None,
        description="Deadline in seconds for the whole request including retries",
        gt=0,
    )


class MockupRequest(BaseModel):
    """Request DTO for a product mockup."""

    logo_image: str = Field(..., description="Base64 logo or design", min_length=1)
    product_prompt: str = Field(
        ...,
        description="Product description; '{style}' is replaced by the style preset",
        min_length=1,
    )
    style: str = Field("studio", description="Style preset name")
    background_image: str | None = Field(None, description="Optional base64 background scene")
    model: str | None = Field(None, description="Model id (defaults to the configured model)")
    timeout: float | None = Field(
        None,
        description="Deadline in seconds for the whole request including retries",
        gt=0,
    )


class VariationsRequest(BaseModel):
    """Request DTO for variation generation."""

    prompt: str = Field(..., description="Base prompt", min_length=1)
    image: str = Field(..., description="Base64 source image", min_length=1)
    count: int = Field(3, ge=1, le=3, description="Number of variations")
    timeout: float | None = Field(
        None,
        description="Deadline in seconds shared by all variations",
        gt=0,
    )
