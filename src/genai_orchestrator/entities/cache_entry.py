"""Cache entry domain entity."""

from dataclasses import dataclass

from .ai_response import AIResponse


@dataclass(frozen=True)
class CacheEntry:
    """A cached response, owned by the request cache.

    Attributes:
        key: Cache key computed from model, prompt and image fingerprints
        response: The cached response
        created_at: Clock reading (seconds) when the entry was inserted
        ttl: Lifetime in seconds
    """

    key: str
    response: AIResponse
    created_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.created_at >= self.ttl
