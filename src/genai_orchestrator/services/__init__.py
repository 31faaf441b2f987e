"""Service layer for business logic.

Services depend on protocols (interfaces), not concrete implementations,
which keeps them testable with a mock transport.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Provider / credentials)

Usage:
    ```python
    from genai_orchestrator.repositories import EnvCredentialStore, GeminiClient
    from genai_orchestrator.services import GenerationOrchestrator

    orchestrator = GenerationOrchestrator.create(
        provider=GeminiClient.create(),
        credentials=EnvCredentialStore.create(),
    )
    ```
"""

from .cancellation import CancelToken
from .error_classifier import ErrorClassifier
from .mockup_service import MockupService
from .orchestrator import GenerationOrchestrator, build_variation_prompts
from .request_cache import RequestCache, compute_key
from .retry_executor import RetryExecutor
from .usage_tracker import UsageTracker, estimate_tokens

__all__ = [
    "CancelToken",
    "ErrorClassifier",
    "GenerationOrchestrator",
    "MockupService",
    "RequestCache",
    "RetryExecutor",
    "UsageTracker",
    "build_variation_prompts",
    "compute_key",
    "estimate_tokens",
]
