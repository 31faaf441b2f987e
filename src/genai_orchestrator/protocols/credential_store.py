"""Credential store protocol.

Holds the provider API key. The orchestrator only reads it; the write
operations exist for settings screens and admin tooling.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CredentialStore(Protocol):
    """Protocol for API key storage backends.

    Implementations are expected to load the key once and keep it in memory,
    so ``get`` is cheap enough to call on every request.
    """

    async def get(self) -> str | None:
        """Return the stored API key, or None if none is configured."""
        ...

    async def set(self, api_key: str) -> None:
        """Store a new API key, replacing any existing one."""
        ...

    async def remove(self) -> None:
        """Delete the stored API key."""
        ...

    async def has(self) -> bool:
        """Check whether a non-empty API key is stored."""
        ...
