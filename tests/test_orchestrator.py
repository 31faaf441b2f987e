"""
Tests for the generation orchestrator against a scripted Gemini transport.
"""

import asyncio
import json

import httpx
import pytest
from conftest import IMAGE_MODEL, LOGO, ScriptedTransport, error_body, gemini_body

from genai_orchestrator.entities import RequestConfig
from genai_orchestrator.errors import ErrorKind
from genai_orchestrator.repositories import EnvCredentialStore, GeminiClient
from genai_orchestrator.services import (
    CancelToken,
    ErrorClassifier,
    GenerationOrchestrator,
    RequestCache,
    RetryExecutor,
    UsageTracker,
    build_variation_prompts,
)


def prompt_of(request: httpx.Request) -> str:
    return json.loads(request.content)["contents"][0]["parts"][0]["text"]


def config(**overrides) -> RequestConfig:
    return RequestConfig(model=IMAGE_MODEL, max_retries=overrides.pop("max_retries", 2), **overrides)


# =============================================================================
# Single requests
# =============================================================================


async def test_successful_request_is_parsed_and_metered(make_harness):
    harness = make_harness(ScriptedTransport((200, gemini_body(text="abcdefgh"))))

    result = await harness.orchestrator.request("Mug with logo", [LOGO], config())

    assert result.success
    assert result.from_cache is False
    assert result.value.text == "abcdefgh"
    assert result.value.image == "data:image/png;base64,aW1hZ2UtYnl0ZXM="
    assert result.value.finish_reason == "STOP"

    metrics = harness.orchestrator.get_usage_metrics()
    assert metrics.request_count == 1
    assert metrics.total_output_tokens == 2
    assert metrics.total_input_tokens > 500
    assert metrics.estimated_cost > 0
    assert metrics.failed_requests == 0


async def test_api_key_is_sent_in_header_not_query(make_harness):
    harness = make_harness(ScriptedTransport((200, gemini_body())))

    await harness.orchestrator.request("Mug", [LOGO], config())

    request = harness.transport.requests[0]
    assert request.headers["x-goog-api-key"] == "test-key"
    assert "key" not in request.url.params
    assert request.url.path.endswith("/models/gemini-2.0-flash-exp-image-generation:generateContent")


async def test_request_body_carries_images_and_generation_config(make_harness):
    harness = make_harness(ScriptedTransport((200, gemini_body())))

    await harness.orchestrator.request(
        "Mug", [LOGO], config(temperature=0.4, system_instruction="Be precise")
    )

    body = harness.transport.bodies()[0]
    parts = body["contents"][0]["parts"]
    assert parts[0] == {"text": "Mug"}
    assert parts[1]["inlineData"]["mimeType"] == "image/png"
    assert not parts[1]["inlineData"]["data"].startswith("data:")
    assert body["generationConfig"]["temperature"] == 0.4
    assert body["generationConfig"]["responseModalities"] == ["TEXT", "IMAGE"]
    assert body["systemInstruction"] == {"parts": [{"text": "Be precise"}]}


async def test_identical_request_is_served_from_cache(make_harness):
    harness = make_harness(ScriptedTransport((200, gemini_body())))

    first = await harness.orchestrator.request("Mug", [LOGO], config())
    second = await harness.orchestrator.request("Mug", [LOGO], config())

    assert len(harness.transport.requests) == 1
    assert second.from_cache is True
    assert second.value == first.value

    metrics = harness.orchestrator.get_usage_metrics()
    assert metrics.cache_hits == 1
    assert metrics.cache_misses == 1
    assert metrics.request_count == 1


async def test_different_prompt_is_not_served_from_cache(make_harness):
    harness = make_harness(ScriptedTransport((200, gemini_body())))

    await harness.orchestrator.request("Mug", [LOGO], config())
    result = await harness.orchestrator.request("Mugs", [LOGO], config())

    assert result.from_cache is False
    assert len(harness.transport.requests) == 2


async def test_expired_entry_triggers_new_call(make_harness):
    harness = make_harness(ScriptedTransport((200, gemini_body())), ttl=60)

    await harness.orchestrator.request("Mug", [LOGO], config())
    harness.clock.advance(61)
    result = await harness.orchestrator.request("Mug", [LOGO], config())

    assert result.from_cache is False
    assert len(harness.transport.requests) == 2


async def test_clear_cache_forces_new_call(make_harness):
    harness = make_harness(ScriptedTransport((200, gemini_body())))

    await harness.orchestrator.request("Mug", [LOGO], config())
    harness.orchestrator.clear_cache()
    await harness.orchestrator.request("Mug", [LOGO], config())

    assert len(harness.transport.requests) == 2
    assert harness.orchestrator.get_cache_stats().size == 1


# =============================================================================
# Failures and retries
# =============================================================================


async def test_rate_limit_is_retried_then_succeeds(make_harness):
    transport = ScriptedTransport(
        (429, error_body(429, "Resource exhausted")),
        (429, error_body(429, "Resource exhausted")),
        (200, gemini_body()),
    )
    harness = make_harness(transport)

    result = await harness.orchestrator.request("Mug", [LOGO], config(max_retries=2))

    assert result.success
    assert len(transport.requests) == 3
    assert len(harness.sleep.delays) == 2
    metrics = harness.orchestrator.get_usage_metrics()
    assert metrics.request_count == 3
    assert metrics.failed_requests == 0
    assert harness.orchestrator.get_cache_stats().size == 1


async def test_exhausted_retries_record_one_failure_and_cache_nothing(make_harness):
    harness = make_harness(ScriptedTransport((503, error_body(503, "The model is overloaded"))))

    result = await harness.orchestrator.request("Mug", [LOGO], config(max_retries=2))

    assert result.error.kind is ErrorKind.SERVICE_OVERLOADED
    assert result.error.remediation
    assert len(harness.transport.requests) == 3
    metrics = harness.orchestrator.get_usage_metrics()
    assert metrics.request_count == 3
    assert metrics.failed_requests == 1
    assert metrics.total_output_tokens == 0
    assert len(harness.cache) == 0


async def test_unauthorized_fails_fast(make_harness):
    harness = make_harness(ScriptedTransport((401, error_body(401, "API key not valid"))))

    result = await harness.orchestrator.request("Mug", [LOGO], config(max_retries=2))

    assert result.error.kind is ErrorKind.UNAUTHORIZED
    assert result.error.message == "API key not valid"
    assert len(harness.transport.requests) == 1
    assert harness.sleep.delays == []


async def test_prompt_block_is_content_blocked(make_harness):
    harness = make_harness(ScriptedTransport((200, {"promptFeedback": {"blockReason": "SAFETY"}})))

    result = await harness.orchestrator.request("Mug", [LOGO], config())

    assert result.error.kind is ErrorKind.CONTENT_BLOCKED
    assert len(harness.transport.requests) == 1


async def test_empty_candidates_are_unknown_and_terminal(make_harness):
    harness = make_harness(ScriptedTransport((200, {"candidates": []})))

    result = await harness.orchestrator.request("Mug", [LOGO], config())

    assert result.error.kind is ErrorKind.UNKNOWN
    assert "No content" in result.error.message
    assert len(harness.transport.requests) == 1


async def test_transport_failure_is_classified():
    def explode(request):
        raise httpx.ConnectError("connection refused", request=request)

    usage = UsageTracker()
    orchestrator = GenerationOrchestrator(
        provider=GeminiClient(base_url="https://gemini.test/v1beta", transport=httpx.MockTransport(explode)),
        credentials=EnvCredentialStore(api_key="test-key"),
        cache=RequestCache(),
        usage=usage,
        executor=RetryExecutor(ErrorClassifier(retry_unknown=False), usage, jitter=0.0),
    )

    result = await orchestrator.request("Mug", [LOGO], config())

    assert result.error.kind is ErrorKind.UNKNOWN
    assert "Transport error" in result.error.message
    assert usage.snapshot().failed_requests == 1


async def test_missing_api_key_makes_no_attempt(make_harness):
    harness = make_harness(ScriptedTransport((200, gemini_body())), api_key="")

    result = await harness.orchestrator.request("Mug", [LOGO], config())

    assert result.error.kind is ErrorKind.UNAUTHORIZED
    assert harness.transport.requests == []
    metrics = harness.orchestrator.get_usage_metrics()
    assert metrics.request_count == 0
    assert metrics.failed_requests == 0


async def test_unexpected_exception_becomes_unknown_result(make_harness):
    class BrokenStore(EnvCredentialStore):
        async def get(self):
            raise RuntimeError("keyring unavailable")

    harness = make_harness(ScriptedTransport((200, gemini_body())))
    harness.orchestrator._credentials = BrokenStore()

    result = await harness.orchestrator.request("Mug", [LOGO], config())

    assert result.error.kind is ErrorKind.UNKNOWN
    assert "keyring unavailable" in result.error.message


async def test_cancelled_request_records_failure(make_harness):
    harness = make_harness(ScriptedTransport((200, gemini_body())))
    token = CancelToken()
    token.cancel()

    result = await harness.orchestrator.request("Mug", [LOGO], config(), cancel=token)

    assert result.error.kind is ErrorKind.CANCELLED
    assert harness.transport.requests == []
    assert harness.orchestrator.get_usage_metrics().failed_requests == 1


async def test_deadline_cancels_slow_provider():
    class SlowProvider:
        async def generate(self, model, payload, api_key):
            await asyncio.sleep(10)
            return gemini_body()

        async def close(self):
            pass

    usage = UsageTracker()
    orchestrator = GenerationOrchestrator(
        provider=SlowProvider(),
        credentials=EnvCredentialStore(api_key="test-key"),
        cache=RequestCache(),
        usage=usage,
        executor=RetryExecutor(ErrorClassifier(), usage),
    )

    result = await asyncio.wait_for(
        orchestrator.request("Mug", [LOGO], config(), cancel=CancelToken(timeout=0.05)),
        timeout=2,
    )

    assert result.error.kind is ErrorKind.CANCELLED
    assert usage.snapshot().request_count == 1
    assert orchestrator.get_cache_stats().size == 0


# =============================================================================
# Variations
# =============================================================================


def test_variation_prompts_append_directives():
    prompts = build_variation_prompts("Tote bag", 3)

    assert len(prompts) == 3
    assert all(prompt.startswith("Tote bag ") for prompt in prompts)
    assert "VARIATION_A" in prompts[0]
    assert "VARIATION_B" in prompts[1]
    assert "VARIATION_C" in prompts[2]
    assert build_variation_prompts("Tote bag", 3) == prompts


def test_variation_prompts_clamp_to_available_directives():
    assert len(build_variation_prompts("Tote bag", 5)) == 3
    assert len(build_variation_prompts("Tote bag", 1)) == 1


async def test_variations_tolerate_partial_failure(make_harness):
    def responder(request):
        prompt = prompt_of(request)
        if "VARIATION_B" in prompt:
            return 400, error_body(400, "Invalid argument")
        return 200, gemini_body(text="A" if "VARIATION_A" in prompt else "C")

    harness = make_harness(ScriptedTransport(responder=responder))

    result = await harness.orchestrator.generate_variations("Tote bag", LOGO, count=3)

    assert result.success
    assert [response.text for response in result.value] == ["A", "C"]
    metrics = harness.orchestrator.get_usage_metrics()
    assert metrics.failed_requests == 1
    assert metrics.request_count == 3


async def test_variations_fail_only_when_all_fail(make_harness):
    harness = make_harness(ScriptedTransport((401, error_body(401, "API key not valid"))))

    result = await harness.orchestrator.generate_variations("Tote bag", LOGO, count=3)

    assert not result.success
    assert result.error.kind is ErrorKind.UNAUTHORIZED
    assert "All 3 variations failed" in result.error.message
    assert harness.orchestrator.get_usage_metrics().failed_requests == 3


async def test_variations_bypass_the_cache(make_harness):
    harness = make_harness(ScriptedTransport((200, gemini_body())))

    await harness.orchestrator.request("Tote bag", [LOGO], config())
    await harness.orchestrator.generate_variations("Tote bag", LOGO, count=3)
    await harness.orchestrator.generate_variations("Tote bag", LOGO, count=3)

    assert len(harness.transport.requests) == 7
    assert harness.orchestrator.get_cache_stats().size == 1
    metrics = harness.orchestrator.get_usage_metrics()
    assert metrics.cache_hits == 0
    assert metrics.cache_misses == 1


async def test_variations_use_high_temperature_by_default(make_harness):
    harness = make_harness(ScriptedTransport((200, gemini_body())))

    await harness.orchestrator.generate_variations("Tote bag", LOGO, count=2)

    temperatures = {body["generationConfig"]["temperature"] for body in harness.transport.bodies()}
    assert temperatures == {0.9}


@pytest.mark.parametrize("count", [0, -1])
async def test_variations_reject_non_positive_count(make_harness, count):
    harness = make_harness(ScriptedTransport((200, gemini_body())))

    result = await harness.orchestrator.generate_variations("Tote bag", LOGO, count=count)

    assert result.error.kind is ErrorKind.UNKNOWN
    assert harness.transport.requests == []


async def test_variations_count_is_clamped(make_harness):
    harness = make_harness(ScriptedTransport((200, gemini_body())))

    result = await harness.orchestrator.generate_variations("Tote bag", LOGO, count=5)

    assert len(result.value) == 3
    assert len(harness.transport.requests) == 3


async def test_variation_fan_out_is_bounded():
    class CountingProvider:
        def __init__(self):
            self.in_flight = 0
            self.peak = 0

        async def generate(self, model, payload, api_key):
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
            await asyncio.sleep(0.01)
            self.in_flight -= 1
            return gemini_body()

        async def close(self):
            pass

    provider = CountingProvider()
    usage = UsageTracker()
    orchestrator = GenerationOrchestrator(
        provider=provider,
        credentials=EnvCredentialStore(api_key="test-key"),
        cache=RequestCache(),
        usage=usage,
        executor=RetryExecutor(ErrorClassifier(), usage),
        variation_concurrency=2,
    )

    result = await orchestrator.generate_variations("Tote bag", LOGO, count=3)

    assert len(result.value) == 3
    assert provider.peak == 2


async def test_shared_token_cancels_every_variation(make_harness):
    harness = make_harness(ScriptedTransport((200, gemini_body())))
    token = CancelToken()
    token.cancel()

    result = await harness.orchestrator.generate_variations("Tote bag", LOGO, count=3, cancel=token)

    assert result.error.kind is ErrorKind.CANCELLED
    assert harness.transport.requests == []
