"""Protocol interfaces for swappable implementations.

Protocols enable:
- Easy swapping of implementations (env → Redis credential store, Gemini → test double)
- Unit testing with mock implementations
- Clear separation of concerns

Usage:
    ```python
    from genai_orchestrator.protocols import CredentialStore, GenerationProvider

    store: CredentialStore = EnvCredentialStore()    # works
    store: CredentialStore = RedisCredentialStore()  # also works
    ```
"""

from .credential_store import CredentialStore
from .generation_provider import GenerationProvider

__all__ = [
    "CredentialStore",
    "GenerationProvider",
]
