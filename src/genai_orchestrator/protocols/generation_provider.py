"""Generation provider protocol.

Defines the transport the orchestrator drives once per attempt. Any class
with a matching ``generate`` satisfies it; ``GeminiClient`` is the default.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class GenerationProvider(Protocol):
    """Protocol for generative model transports."""

    async def generate(
        self,
        model: str,
        payload: dict[str, Any],
        api_key: str,
    ) -> dict[str, Any]:
        """Send one generation request and return the decoded JSON body.

        Args:
            model: Model id from the model catalog
            payload: Provider request body
            api_key: Credential to authenticate with

        Returns:
            The provider's JSON response

        Raises:
            ProviderError: If the provider answers with a non-success status
            httpx.HTTPError: On transport failures (timeouts, connection errors)
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
