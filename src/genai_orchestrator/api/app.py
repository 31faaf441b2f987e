"""FastAPI application exposing the generation orchestrator."""

from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from genai_orchestrator.api.dependencies import HandlerDep, lifespan
from genai_orchestrator.config import settings
from genai_orchestrator.dto import (
    CacheStatsResponse,
    GenerateRequest,
    GenerateResponse,
    HealthCheckResponse,
    MockupRequest,
    UsageMetricsResponse,
    VariationsRequest,
    VariationsResponse,
)

app = FastAPI(
    title="GenAI Orchestrator API",
    description="Cached, retrying and metered access to generative image models",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "GenAI Orchestrator API",
        "version": "0.1.0",
        "description": "Cached, retrying and metered access to generative image models",
        "endpoints": {
            "generate": "/generate",
            "mockups": "/mockups",
            "variations": "/variations",
            "usage": "/usage",
            "cache": "/cache",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


@app.post("/generate", response_model=GenerateResponse)
async def generate(request: GenerateRequest, handler: HandlerDep) -> GenerateResponse:
    """Generate text and/or an image from a prompt and optional images."""
    return await handler.generate(request)


@app.post("/mockups", response_model=GenerateResponse)
async def generate_mockup(request: MockupRequest, handler: HandlerDep) -> GenerateResponse:
    """Render a logo onto a product in the requested style."""
    return await handler.generate_mockup(request)


@app.post("/variations", response_model=VariationsResponse)
async def generate_variations(request: VariationsRequest, handler: HandlerDep) -> VariationsResponse:
    """Generate camera/lighting variations of a prompt (never cached)."""
    return await handler.generate_variations(request)


@app.get("/usage", response_model=UsageMetricsResponse)
async def get_usage(handler: HandlerDep) -> UsageMetricsResponse:
    """Get estimated usage and cost counters."""
    return await handler.get_usage()


@app.post("/usage/reset", response_model=dict[str, str])
async def reset_usage(handler: HandlerDep) -> dict[str, str]:
    """Reset usage counters."""
    return await handler.reset_usage()


@app.get("/cache/stats", response_model=CacheStatsResponse)
async def get_cache_stats(handler: HandlerDep) -> CacheStatsResponse:
    """Get request cache statistics."""
    return await handler.get_cache_stats()


@app.delete("/cache", response_model=dict[str, str])
async def clear_cache(handler: HandlerDep) -> dict[str, str]:
    """Clear all cached responses."""
    return await handler.clear_cache()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "genai_orchestrator.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
