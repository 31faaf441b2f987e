"""HTTP handlers for generation operations.

Handlers convert between DTOs (API contracts) and service calls. They are the
only place where a classified ``GenerationError`` becomes an HTTP status.
"""

from fastapi import HTTPException, status

from genai_orchestrator.dto import (
    CacheStatsResponse,
    ErrorDetail,
    GenerateRequest,
    GenerateResponse,
    HealthCheckResponse,
    MockupRequest,
    UsageMetricsResponse,
    VariationsRequest,
    VariationsResponse,
)
from genai_orchestrator.entities import AIResponse, RequestConfig
from genai_orchestrator.errors import ErrorKind, GenerationError
from genai_orchestrator.logger import logger
from genai_orchestrator.services import CancelToken, GenerationOrchestrator, MockupService

ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.CONTENT_BLOCKED: 422,
    ErrorKind.SERVICE_OVERLOADED: 503,
    ErrorKind.CANCELLED: 504,
    ErrorKind.UNKNOWN: 502,
}


def _to_http_error(error: GenerationError) -> HTTPException:
    detail = ErrorDetail(
        kind=error.kind.value,
        message=error.message,
        remediation=error.remediation,
    )
    return HTTPException(status_code=ERROR_STATUS[error.kind], detail=detail.model_dump())


def _to_dto(response: AIResponse, cached: bool = False) -> GenerateResponse:
    return GenerateResponse(
        text=response.text,
        image=response.image,
        finish_reason=response.finish_reason,
        cached=cached,
    )


def _cancel_token(timeout: float | None) -> CancelToken | None:
    return CancelToken(timeout=timeout) if timeout else None


class GenerationHandler:
    """HTTP handlers for generation, usage and cache operations.

    Example:
        ```python
        handler = GenerationHandler(orchestrator=orchestrator)

        @app.post("/generate", response_model=GenerateResponse)
        async def generate(request: GenerateRequest):
            return await handler.generate(request)
        ```
    """

    def __init__(self, orchestrator: GenerationOrchestrator) -> None:
        """Initialize the handler.

        Args:
            orchestrator: The generation orchestrator (required).
        """
        self._orchestrator = orchestrator
        self._mockups = MockupService(orchestrator)

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Handle POST /generate requests.

        Raises:
            HTTPException: With the status mapped from the error kind
        """
        try:
            config = RequestConfig(
                model=request.model,
                temperature=request.temperature,
                max_output_tokens=request.max_output_tokens,
                max_retries=request.max_retries,
                system_instruction=request.system_instruction,
            )
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

        result = await self._orchestrator.request(
            request.prompt, request.images, config, cancel=_cancel_token(request.timeout)
        )

        if result.error is not None:
            raise _to_http_error(result.error)
        return _to_dto(result.value, cached=result.from_cache)

    async def generate_mockup(self, request: MockupRequest) -> GenerateResponse:
        """Handle POST /mockups requests."""
        result = await self._mockups.generate_mockup(
            logo_image=request.logo_image,
            product_prompt=request.product_prompt,
            style=request.style,
            background_image=request.background_image,
            model=request.model,
            cancel=_cancel_token(request.timeout),
        )

        if result.error is not None:
            raise _to_http_error(result.error)
        return _to_dto(result.value, cached=result.from_cache)

    async def generate_variations(self, request: VariationsRequest) -> VariationsResponse:
        """Handle POST /variations requests."""
        result = await self._mockups.generate_variations(
            base_prompt=request.prompt,
            logo_image=request.image,
            count=request.count,
            cancel=_cancel_token(request.timeout),
        )

        if result.error is not None:
            raise _to_http_error(result.error)
        return VariationsResponse(
            variations=[_to_dto(response) for response in result.value],
            requested=request.count,
            succeeded=len(result.value),
        )

    async def get_usage(self) -> UsageMetricsResponse:
        """Handle GET /usage requests."""
        metrics = self._orchestrator.get_usage_metrics()
        return UsageMetricsResponse(**metrics.to_dict())

    async def reset_usage(self) -> dict:
        """Handle POST /usage/reset requests."""
        self._orchestrator.reset_usage_metrics()
        return {"message": "Usage metrics reset"}

    async def get_cache_stats(self) -> CacheStatsResponse:
        """Handle GET /cache/stats requests."""
        return CacheStatsResponse(**self._orchestrator.get_cache_stats().to_dict())

    async def clear_cache(self) -> dict:
        """Handle DELETE /cache requests."""
        self._orchestrator.clear_cache()
        return {"message": "Cache cleared successfully"}

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        Reports "unhealthy" when the credential store cannot be reached.
        """
        try:
            configured = await self._orchestrator.has_api_key()
        except Exception as e:
            logger.warning("Credential store health check failed: {}", e)
            return HealthCheckResponse(status="unhealthy", api_key_configured=False)

        return HealthCheckResponse(
            status="healthy" if configured else "unconfigured",
            api_key_configured=configured,
        )
