#!/usr/bin/env python3
"""
Demo script for the generation orchestrator.

Runs against a local mock of the Gemini API so no key or network is needed:
cache hits, retries on rate limits, fail-fast on auth errors and variation
fan-out with partial failure.
"""

import asyncio
import json

import httpx

from genai_orchestrator import (
    EnvCredentialStore,
    ErrorClassifier,
    GeminiClient,
    GenerationOrchestrator,
    RequestCache,
    RequestConfig,
    RetryExecutor,
    UsageTracker,
)

LOGO = "data:image/png;base64,iVBORw0KGgo="


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


class MockGemini:
    """Scripted stand-in for the generateContent endpoint."""

    def __init__(self) -> None:
        self.calls = 0
        self.rate_limited_left = 0
        self.reject_auth = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        prompt = json.loads(request.content)["contents"][0]["parts"][0]["text"]

        if self.reject_auth:
            return httpx.Response(401, json={"error": {"message": "API key not valid"}})
        if self.rate_limited_left:
            self.rate_limited_left -= 1
            return httpx.Response(429, json={"error": {"message": "Resource exhausted"}})
        if "VARIATION_B" in prompt:
            return httpx.Response(503, json={"error": {"message": "The model is overloaded"}})

        return httpx.Response(
            200,
            json={
                "candidates": [
                    {
                        "content": {
                            "parts": [
                                {"text": f"Rendered: {prompt[:40]}"},
                                {"inlineData": {"mimeType": "image/png", "data": "aW1n"}},
                            ]
                        },
                        "finishReason": "STOP",
                    }
                ]
            },
        )


def build_orchestrator(mock: MockGemini) -> GenerationOrchestrator:
    usage = UsageTracker()
    executor = RetryExecutor(
        classifier=ErrorClassifier(),
        usage=usage,
        base_delay=0.05,
        max_delay=0.5,
        jitter=0.05,
    )
    return GenerationOrchestrator(
        provider=GeminiClient(base_url="https://gemini.mock/v1beta", transport=httpx.MockTransport(mock)),
        credentials=EnvCredentialStore(api_key="demo-key"),
        cache=RequestCache(ttl=60, capacity=10),
        usage=usage,
        executor=executor,
    )


async def demo_cache(orchestrator: GenerationOrchestrator, mock: MockGemini) -> None:
    print_section("Request Cache")

    for attempt in range(2):
        result = await orchestrator.request("A ceramic mug with this logo", [LOGO])
        source = "cache" if result.from_cache else "provider"
        print(f"  Request {attempt + 1}: served from {source} ({mock.calls} provider calls so far)")

    stats = orchestrator.get_cache_stats()
    print(f"  Hits: {stats.hits}, misses: {stats.misses}, hit rate: {stats.hit_rate:.0%}")


async def demo_retries(orchestrator: GenerationOrchestrator, mock: MockGemini) -> None:
    print_section("Retries and Fail-Fast")

    mock.rate_limited_left = 2
    before = mock.calls
    result = await orchestrator.request("A tote bag with this logo", [LOGO], RequestConfig(max_retries=2))
    print(f"  Rate limited twice, then: success={result.success} after {mock.calls - before} calls")

    mock.reject_auth = True
    before = mock.calls
    result = await orchestrator.request("A hoodie with this logo", [LOGO], RequestConfig(max_retries=2))
    print(f"  Invalid key: {result.error.kind.value} after {mock.calls - before} call")
    print(f"  Hint: {result.error.remediation}")
    mock.reject_auth = False


async def demo_variations(orchestrator: GenerationOrchestrator) -> None:
    print_section("Variations (one overloaded)")

    result = await orchestrator.generate_variations(
        "A cap with this logo", LOGO, count=3, config=RequestConfig(max_retries=0)
    )
    print(f"  {len(result.value)} of 3 variations succeeded")
    for response in result.value:
        print(f"  - {response.text}")


async def run() -> None:
    mock = MockGemini()
    orchestrator = build_orchestrator(mock)
    try:
        await demo_cache(orchestrator, mock)
        await demo_retries(orchestrator, mock)
        await demo_variations(orchestrator)

        print_section("Usage")
        for name, value in orchestrator.get_usage_metrics().to_dict().items():
            print(f"  {name}: {value}")
    finally:
        await orchestrator.close()


def main() -> None:
    """Run all demos."""
    print("\n🚀 GenAI Orchestrator Demo")
    print("=" * 70)
    print("This demo runs the orchestrator against a mocked Gemini API")

    try:
        asyncio.run(run())

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)

    except Exception as e:
        print(f"\n❌ Error: {e}")


if __name__ == "__main__":
    main()
