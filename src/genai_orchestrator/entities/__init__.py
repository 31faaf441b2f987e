"""Domain entities for internal representation.

These are frozen dataclasses used by services and repositories. They are
NOT used for API contracts - use DTOs from the dto package for that.

Entities should have:
- No JSON serialization logic
- No Pydantic validation
- No external dependencies
"""

from .ai_response import AIResponse
from .cache_entry import CacheEntry
from .generation_result import GenerationResult
from .request_config import RequestConfig
from .usage_metrics import CacheStats, UsageMetrics

__all__ = [
    "AIResponse",
    "CacheEntry",
    "CacheStats",
    "GenerationResult",
    "RequestConfig",
    "UsageMetrics",
]
