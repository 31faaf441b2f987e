"""GenAI Orchestrator - cached, retrying and metered generative model calls.

This package provides a layered architecture around a generative image model:

Layers:
    - protocols: Interface contracts (CredentialStore, GenerationProvider)
    - repositories: Provider transport and credential storage
    - services: Request cache, error classifier, retry executor,
      usage tracker and the orchestrator façade
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from genai_orchestrator import EnvCredentialStore, GeminiClient, GenerationOrchestrator

    orchestrator = GenerationOrchestrator.create(
        provider=GeminiClient.create(),
        credentials=EnvCredentialStore.create(),
    )
    result = await orchestrator.request("A tote bag with this logo", [logo_b64])
    ```

For HTTP API:
    ```python
    from genai_orchestrator.api.app import app
    ```
"""

from genai_orchestrator.config import get_settings, settings
from genai_orchestrator.entities import (
    AIResponse,
    CacheStats,
    GenerationResult,
    RequestConfig,
    UsageMetrics,
)
from genai_orchestrator.errors import ErrorKind, GenerationError, ProviderError
from genai_orchestrator.protocols import CredentialStore, GenerationProvider
from genai_orchestrator.repositories import EnvCredentialStore, GeminiClient, RedisCredentialStore
from genai_orchestrator.services import (
    CancelToken,
    ErrorClassifier,
    GenerationOrchestrator,
    MockupService,
    RequestCache,
    RetryExecutor,
    UsageTracker,
)

__all__ = [
    # Configuration
    "settings",
    "get_settings",
    # Protocols (interfaces)
    "CredentialStore",
    "GenerationProvider",
    # Services (business logic)
    "GenerationOrchestrator",
    "MockupService",
    "RequestCache",
    "ErrorClassifier",
    "RetryExecutor",
    "UsageTracker",
    "CancelToken",
    # Repositories
    "GeminiClient",
    "EnvCredentialStore",
    "RedisCredentialStore",
    # Entities and errors
    "AIResponse",
    "CacheStats",
    "GenerationResult",
    "RequestConfig",
    "UsageMetrics",
    "ErrorKind",
    "GenerationError",
    "ProviderError",
]
