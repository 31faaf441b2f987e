"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Classified error returned to API clients."""

    kind: str = Field(..., description="Error kind, e.g. 'rate_limited'")
    message: str = Field("", description="Provider or transport detail")
    remediation: str = Field(..., description="What the user can do about it")


class GenerateResponse(BaseModel):
    """Response DTO for a single generation."""

    text: str | None = Field(None, description="Generated text")
    image: str | None = Field(None, description="Generated image as a data URI")
    finish_reason: str | None = Field(None, description="Provider finish reason")
    cached: bool = Field(False, description="Whether the response came from the cache")


class VariationsResponse(BaseModel):
    """Response DTO for variation generation."""

    variations: list[GenerateResponse] = Field(default_factory=list)
    requested: int = Field(..., ge=1)
    succeeded: int = Field(..., ge=0)


class UsageMetricsResponse(BaseModel):
    """Response DTO for usage counters."""

    request_count: int = Field(..., ge=0)
    total_input_tokens: int = Field(..., ge=0, description="Estimated, not billed, tokens")
    total_output_tokens: int = Field(..., ge=0, description="Estimated, not billed, tokens")
    estimated_cost: float = Field(..., ge=0.0, description="Estimated cost in USD")
    cache_hits: int = Field(..., ge=0)
    cache_misses: int = Field(..., ge=0)
    failed_requests: int = Field(..., ge=0)


class CacheStatsResponse(BaseModel):
    """Response DTO for request cache statistics."""

    hits: int = Field(..., ge=0)
    misses: int = Field(..., ge=0)
    size: int = Field(..., ge=0)
    hit_rate: float = Field(..., ge=0.0, le=1.0)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy', 'unconfigured' or 'unhealthy'")
    api_key_configured: bool = Field(..., description="Whether a provider API key is available")
