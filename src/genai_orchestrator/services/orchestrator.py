"""Generation request orchestrator.

Coordinates the request cache, retry executor, usage tracker and provider
transport for calls to the generative model:

    request → cache lookup → [miss] → retry loop (classify → retry/fail)
            → parse → record usage → cache insert → result

Nothing raises across the public methods: every failure comes back as a
``GenerationResult`` carrying a ``GenerationError``.
"""

import asyncio
from collections.abc import Awaitable, Sequence
from dataclasses import replace

from genai_orchestrator.config import settings
from genai_orchestrator.entities import (
    AIResponse,
    CacheStats,
    GenerationResult,
    RequestConfig,
    UsageMetrics,
)
from genai_orchestrator.errors import ErrorKind, GenerationError
from genai_orchestrator.logger import logger
from genai_orchestrator.protocols import CredentialStore, GenerationProvider
from genai_orchestrator.repositories.gemini_client import build_payload, parse_response

from .cancellation import CancelToken
from .error_classifier import ErrorClassifier
from .request_cache import RequestCache, compute_key
from .retry_executor import RetryExecutor
from .usage_tracker import UsageTracker, estimate_input_tokens, estimate_tokens

# Camera and lighting directives appended to the base prompt, one per variation
VARIATION_DIRECTIVES: tuple[str, ...] = (
    "VARIATION_A: Cinematic product shot from a dramatic high-angle bird's eye perspective. "
    "Use sharp high-contrast golden hour side-lighting.",
    "VARIATION_B: Professional close-up from a sharp 45-degree profile view. "
    "Emphasize material detail with soft diffused rim lighting.",
    "VARIATION_C: Minimalist composition with a low-angle perspective. "
    "Use cool-toned studio lighting with deep shadows.",
)

VARIATION_TEMPERATURE = 0.9


def build_variation_prompts(base_prompt: str, count: int) -> list[str]:
    """Return ``count`` deterministic variants of ``base_prompt``.

    ``count`` is clamped to the number of available directives.
    """
    count = min(count, len(VARIATION_DIRECTIVES))
    return [f"{base_prompt} {directive}" for directive in VARIATION_DIRECTIVES[:count]]


class GenerationOrchestrator:
    """Façade over caching, retries and usage accounting for one provider.

    Build one instance at startup and inject it where needed; there is no
    module-level singleton.

    Example:
        ```python
        orchestrator = GenerationOrchestrator.create(
            provider=GeminiClient.create(),
            credentials=EnvCredentialStore.create(),
        )
        result = await orchestrator.request("A mug with this logo", [logo_b64])
        if result.success:
            show(result.value.image)
        else:
            show_error(result.error.remediation)
        ```
    """

    def __init__(
        self,
        provider: GenerationProvider,
        credentials: CredentialStore,
        cache: RequestCache,
        usage: UsageTracker,
        executor: RetryExecutor,
        variation_concurrency: int | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            provider: Transport sending one request per attempt (required).
            credentials: Source of the provider API key (required).
            cache: Request cache (required).
            usage: Usage tracker shared with the executor (required).
            executor: Retry executor (required).
            variation_concurrency: Max in-flight variation requests. Defaults to settings.
        """
        self._provider = provider
        self._credentials = credentials
        self._cache = cache
        self._usage = usage
        self._executor = executor
        concurrency = variation_concurrency or settings.variation_concurrency
        self._variation_slots = asyncio.Semaphore(concurrency)

    @classmethod
    def create(
        cls,
        provider: GenerationProvider,
        credentials: CredentialStore,
        cache: RequestCache | None = None,
        classifier: ErrorClassifier | None = None,
        usage: UsageTracker | None = None,
        variation_concurrency: int | None = None,
    ) -> "GenerationOrchestrator":
        """Factory method wiring default collaborators from settings.

        Args:
            provider: Transport (required).
            credentials: Credential store (required).
            cache: Request cache. If None, uses settings TTL and capacity.
            classifier: Error classifier. If None, uses settings.
            usage: Usage tracker. If None, a fresh tracker is created.
            variation_concurrency: Max in-flight variation requests.

        Returns:
            Configured GenerationOrchestrator
        """
        usage = usage or UsageTracker()
        executor = RetryExecutor(classifier=classifier or ErrorClassifier(), usage=usage)
        return cls(
            provider=provider,
            credentials=credentials,
            cache=cache or RequestCache(),
            usage=usage,
            executor=executor,
            variation_concurrency=variation_concurrency,
        )

    async def request(
        self,
        prompt: str,
        images: Sequence[str] | None = None,
        config: RequestConfig | None = None,
        cancel: CancelToken | None = None,
    ) -> GenerationResult[AIResponse]:
        """Generate content, serving identical requests from the cache.

        Args:
            prompt: Text prompt
            images: Base64 images (data-URI prefixes allowed)
            config: Per-call configuration. Defaults to ``RequestConfig()``.
            cancel: Optional cancellation token / deadline

        Returns:
            GenerationResult with an AIResponse or a classified error
        """
        return await self._guarded(
            self._request(prompt, list(images or []), config or RequestConfig(), cancel, use_cache=True),
            label="request",
        )

    async def generate_variations(
        self,
        base_prompt: str,
        image: str,
        count: int = 3,
        config: RequestConfig | None = None,
        cancel: CancelToken | None = None,
    ) -> GenerationResult[list[AIResponse]]:
        """Generate ``count`` stylistic variations of one image prompt.

        Each variation is an independent, uncached request; they run
        concurrently, bounded by the variation semaphore. Partial failure is
        tolerated: the successful responses are returned in directive order.
        The call only fails when every variation fails.

        Args:
            base_prompt: Prompt the directives are appended to
            image: Base64 source image (e.g. the logo)
            count: Number of variations, clamped to the available directives
            config: Base configuration. Defaults to temperature 0.9.
            cancel: Optional cancellation token shared by all sub-requests

        Returns:
            GenerationResult with the successful responses or the first error
        """
        if count < 1:
            return GenerationResult.fail(ErrorKind.UNKNOWN, "count must be at least 1")

        config = config or RequestConfig(temperature=VARIATION_TEMPERATURE)
        prompts = build_variation_prompts(base_prompt, count)

        async def run(prompt: str) -> GenerationResult[AIResponse]:
            async with self._variation_slots:
                return await self._guarded(
                    self._request(prompt, [image], config, cancel, use_cache=False),
                    label="variation",
                )

        results = await asyncio.gather(*(run(prompt) for prompt in prompts))

        responses = [result.value for result in results if result.success]
        failures = [result.error for result in results if result.error is not None]

        if not responses:
            first = failures[0]
            logger.warning("All {} variations failed, first error: {}", len(prompts), first.kind.value)
            return GenerationResult.fail(
                replace(first, message=f"All {len(prompts)} variations failed: {first.message}")
            )

        if failures:
            logger.info("{}/{} variations succeeded", len(responses), len(prompts))
        return GenerationResult.ok(responses)

    def get_usage_metrics(self) -> UsageMetrics:
        return self._usage.snapshot()

    def reset_usage_metrics(self) -> None:
        self._usage.reset()

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_stats(self) -> CacheStats:
        return self._cache.stats()

    async def has_api_key(self) -> bool:
        return await self._credentials.has()

    async def close(self) -> None:
        """Release the provider's network resources."""
        await self._provider.close()

    @property
    def credentials(self) -> CredentialStore:
        return self._credentials

    async def _guarded(self, call: Awaitable[GenerationResult], label: str) -> GenerationResult:
        try:
            return await call
        except Exception as e:
            logger.exception("Unexpected error in {}: {}", label, e)
            return GenerationResult.fail(
                GenerationError(kind=ErrorKind.UNKNOWN, message=f"Internal error: {e}")
            )

    async def _request(
        self,
        prompt: str,
        images: list[str],
        config: RequestConfig,
        cancel: CancelToken | None,
        use_cache: bool,
    ) -> GenerationResult[AIResponse]:
        api_key = await self._credentials.get()
        if not api_key:
            return GenerationResult.fail(
                GenerationError(
                    kind=ErrorKind.UNAUTHORIZED,
                    message="Gemini API key not configured. Please add your API key in Settings.",
                )
            )

        key = compute_key(config.model, prompt, images) if use_cache else None
        if key is not None:
            cached = self._cache.get(key)
            if cached is not None:
                self._usage.record_cache_hit()
                logger.debug("Cache hit for {} ({})", config.model, key[:12])
                return GenerationResult.ok(cached, from_cache=True)
            self._usage.record_cache_miss()

        payload = build_payload(prompt, images, config)

        async def attempt() -> AIResponse:
            data = await self._provider.generate(config.model, payload, api_key)
            return parse_response(data)

        result = await self._executor.execute(
            attempt,
            max_retries=config.max_retries,
            cancel=cancel,
            label=config.model,
        )

        if result.error is not None:
            self._usage.record_failure()
            return result

        response = result.value
        input_tokens = estimate_input_tokens(prompt, len(images))
        output_tokens = estimate_tokens(response.text)
        self._usage.record_tokens(config.model, input_tokens, output_tokens)

        if key is not None:
            self._cache.put(key, response)

        logger.info(
            "Generated with {} (text={}, image={}, ~{} in / ~{} out tokens)",
            config.model,
            response.text is not None,
            response.has_image,
            input_tokens,
            output_tokens,
        )
        return result
