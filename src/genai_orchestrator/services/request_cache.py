"""In-memory request cache.

Memoizes successful responses keyed by model, prompt and image fingerprints
so identical generation requests are not paid for twice within a process.
This is not a durability mechanism: entries live in memory only.
"""

import hashlib
import threading
import time
from collections.abc import Callable, Sequence

from genai_orchestrator.config import settings
from genai_orchestrator.entities import AIResponse, CacheEntry, CacheStats
from genai_orchestrator.logger import logger

# Characters taken from the end of each encoded image
FINGERPRINT_LENGTH = 20


def compute_key(model: str, prompt: str, images: Sequence[str]) -> str:
    """Compute the cache key for a request.

    Combines the model id, the full prompt, the image count and a cheap
    fingerprint of each image (its last ``FINGERPRINT_LENGTH`` characters).
    Images are never hashed in full, so multi-megabyte payloads cost nothing.

    Args:
        model: Model id
        prompt: Full prompt text
        images: Base64-encoded images

    Returns:
        Hex digest identifying the request
    """
    fingerprints = ",".join(image[-FINGERPRINT_LENGTH:] for image in images)
    content = f"{model}:{prompt}:{len(images)}:{fingerprints}"
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class RequestCache:
    """TTL and capacity bounded memo of generation responses.

    Eviction removes the entry with the oldest ``created_at``. Hits do not
    refresh an entry, so this is insertion-order eviction rather than LRU.

    Thread-safe: all state is guarded by a lock that is never held across
    an await.
    """

    def __init__(
        self,
        ttl: float | None = None,
        capacity: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the request cache.

        Args:
            ttl: Entry lifetime in seconds. Defaults to settings.cache_ttl.
            capacity: Maximum number of entries. Defaults to settings.cache_capacity.
            clock: Monotonic clock returning seconds (injectable for tests).
        """
        self._ttl = ttl if ttl is not None else settings.cache_ttl
        self._capacity = capacity if capacity is not None else settings.cache_capacity
        if self._ttl <= 0:
            raise ValueError("ttl must be positive")
        if self._capacity < 1:
            raise ValueError("capacity must be at least 1")

        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    compute_key = staticmethod(compute_key)

    def get(self, key: str) -> AIResponse | None:
        """Return the cached response for ``key`` if present and fresh.

        An expired entry is removed and reported as a miss.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                logger.debug("Cache entry {} expired", key[:12])
                return None

            self._hits += 1
            return entry.response

    def put(self, key: str, response: AIResponse) -> None:
        """Insert a response, evicting the oldest entry when full."""
        with self._lock:
            if key not in self._entries and len(self._entries) >= self._capacity:
                oldest = min(self._entries.values(), key=lambda e: e.created_at)
                del self._entries[oldest.key]
                logger.debug("Cache full ({}), evicted {}", self._capacity, oldest.key[:12])

            self._entries[key] = CacheEntry(
                key=key,
                response=response,
                created_at=self._clock(),
                ttl=self._ttl,
            )

    def clear(self) -> None:
        """Remove all entries and reset hit/miss counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(hits=self._hits, misses=self._misses, size=len(self._entries))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def capacity(self) -> int:
        return self._capacity
