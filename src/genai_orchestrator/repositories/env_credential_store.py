"""Environment-backed credential store.

Reads the API key from ``GEMINI_API_KEY`` (via settings, so ``.env`` files
work). ``set``/``remove`` only affect the running process.
"""

from genai_orchestrator.config import settings


class EnvCredentialStore:
    """In-memory implementation of the CredentialStore protocol."""

    def __init__(self, api_key: str | None = None) -> None:
        """Initialize the store.

        Args:
            api_key: Explicit key. Defaults to settings.gemini_api_key.
        """
        self._api_key = api_key if api_key is not None else settings.gemini_api_key

    @classmethod
    def create(cls, api_key: str | None = None) -> "EnvCredentialStore":
        return cls(api_key=api_key)

    async def get(self) -> str | None:
        return self._api_key or None

    async def set(self, api_key: str) -> None:
        self._api_key = api_key

    async def remove(self) -> None:
        self._api_key = None

    async def has(self) -> bool:
        return bool(self._api_key)
