"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services built once during lifespan and stored in app.state
    - Dependency functions retrieve from request.app.state
    - No global mutable state; tests override ``get_handler``
"""

from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from genai_orchestrator.config import settings
from genai_orchestrator.handlers import GenerationHandler
from genai_orchestrator.logger import logger
from genai_orchestrator.protocols import CredentialStore
from genai_orchestrator.repositories import (
    EnvCredentialStore,
    GeminiClient,
    RedisCredentialStore,
)
from genai_orchestrator.services import GenerationOrchestrator


def get_handler(request: Request) -> GenerationHandler:
    """Dependency injection for GenerationHandler from app.state.

    Raises:
        RuntimeError: If the handler is not initialized
    """
    handler = getattr(request.app.state, "generation_handler", None)
    if handler is None:
        raise RuntimeError("GenerationHandler not initialized. Check lifespan setup.")
    return handler


def build_credential_store() -> CredentialStore:
    """Create the credential store selected by ``CREDENTIAL_BACKEND``."""
    if settings.credential_backend == "redis":
        return RedisCredentialStore.create()
    return EnvCredentialStore.create()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores them in app.state:
    1. Provider transport and credential store
    2. Orchestrator (cache, retries, usage) - app.state.orchestrator
    3. Handler (HTTP endpoints) - app.state.generation_handler
    """
    credentials = build_credential_store()
    provider = GeminiClient.create()
    orchestrator = GenerationOrchestrator.create(provider=provider, credentials=credentials)

    app.state.orchestrator = orchestrator
    app.state.generation_handler = GenerationHandler(orchestrator=orchestrator)

    logger.info(
        "Orchestrator ready (model={}, cache ttl={}s capacity={}, max_retries={}, credentials={})",
        settings.default_model,
        settings.cache_ttl,
        settings.cache_capacity,
        settings.max_retries,
        settings.credential_backend,
    )
    try:
        if not await credentials.has():
            logger.warning("No provider API key configured; generation requests will fail")
    except Exception as e:
        logger.warning("Credential store unavailable at startup: {}", e)

    yield

    await orchestrator.close()
    if isinstance(credentials, RedisCredentialStore):
        await credentials.close()
    del app.state.generation_handler
    del app.state.orchestrator
    logger.info("Orchestrator shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[GenerationHandler, Depends(get_handler)]
