"""Handler layer for HTTP endpoints.

Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Provider / credentials)
"""

from .generation_handler import GenerationHandler

__all__ = [
    "GenerationHandler",
]
