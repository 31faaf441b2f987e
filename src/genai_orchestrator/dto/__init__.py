"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import GenerateRequest, MockupRequest, VariationsRequest
from .responses import (
    CacheStatsResponse,
    ErrorDetail,
    GenerateResponse,
    HealthCheckResponse,
    UsageMetricsResponse,
    VariationsResponse,
)

__all__ = [
    "GenerateRequest",
    "MockupRequest",
    "VariationsRequest",
    "ErrorDetail",
    "GenerateResponse",
    "VariationsResponse",
    "UsageMetricsResponse",
    "CacheStatsResponse",
    "HealthCheckResponse",
]
