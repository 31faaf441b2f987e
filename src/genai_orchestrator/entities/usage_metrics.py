"""Usage and cache statistics snapshots."""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class UsageMetrics:
    """Read-only copy of the orchestrator's usage counters.

    Token counts are estimates (see ``UsageTracker.estimate_tokens``) and
    ``estimated_cost`` is derived from them, so neither is authoritative
    for billing.
    """

    request_count: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    estimated_cost: float = 0.0
    cache_hits: int = 0
    cache_misses: int = 0
    failed_requests: int = 0

    def to_dict(self) -> dict[str, float | int]:
        return asdict(self)


@dataclass(frozen=True)
class CacheStats:
    """Request cache statistics since the last clear."""

    hits: int = 0
    misses: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, float | int]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "size": self.size,
            "hit_rate": self.hit_rate,
        }
