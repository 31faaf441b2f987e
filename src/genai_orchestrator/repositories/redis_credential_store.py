"""Redis implementation of CredentialStore.

Stores the API key under a single Redis string key so several service
instances share one credential. The key is read from Redis once and then
served from memory; ``set`` and ``remove`` write through.
"""

import asyncio

import redis.asyncio as redis

from genai_orchestrator.config import get_redis_client, settings
from genai_orchestrator.logger import logger


class RedisCredentialStore:
    """Redis-backed implementation of the CredentialStore protocol.

    This class satisfies the CredentialStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        key_name: str | None = None,
    ) -> None:
        """Initialize the Redis credential store.

        Args:
            redis_client: asyncio Redis client. If None, creates default.
            key_name: Redis key holding the API key. Defaults to settings.
        """
        self._client = redis_client or get_redis_client()
        self._key_name = key_name or settings.credential_key_name
        self._cached: str | None = None
        self._loaded = False
        self._lock = asyncio.Lock()

    @classmethod
    def create(cls, key_name: str | None = None) -> "RedisCredentialStore":
        """Factory method to create RedisCredentialStore with defaults."""
        return cls(key_name=key_name)

    async def get(self) -> str | None:
        if self._loaded:
            return self._cached

        async with self._lock:
            if not self._loaded:
                value = await self._client.get(self._key_name)
                if isinstance(value, bytes):
                    value = value.decode()
                self._cached = value or None
                self._loaded = True
                logger.debug(
                    "Loaded credential {} from Redis (present={})",
                    self._key_name,
                    self._cached is not None,
                )
        return self._cached

    async def set(self, api_key: str) -> None:
        async with self._lock:
            await self._client.set(self._key_name, api_key)
            self._cached = api_key
            self._loaded = True

    async def remove(self) -> None:
        async with self._lock:
            await self._client.delete(self._key_name)
            self._cached = None
            self._loaded = True

    async def has(self) -> bool:
        return bool(await self.get())

    async def close(self) -> None:
        await self._client.aclose()
