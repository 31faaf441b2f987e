"""Repository layer for external resources.

This layer hides the provider HTTP API and credential storage behind
protocol-based interfaces, so services can be tested with doubles.

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from genai_orchestrator.protocols import CredentialStore, GenerationProvider

from .env_credential_store import EnvCredentialStore
from .gemini_client import GeminiClient, build_payload, parse_response
from .redis_credential_store import RedisCredentialStore

__all__ = [
    "CredentialStore",
    "GenerationProvider",
    "EnvCredentialStore",
    "GeminiClient",
    "RedisCredentialStore",
    "build_payload",
    "parse_response",
]
