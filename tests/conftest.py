"""Shared fixtures: a scripted provider transport, a fake clock and a recording sleep."""

import json
import random
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx
import pytest

from genai_orchestrator.repositories import EnvCredentialStore, GeminiClient
from genai_orchestrator.services import (
    ErrorClassifier,
    GenerationOrchestrator,
    RequestCache,
    RetryExecutor,
    UsageTracker,
)

IMAGE_MODEL = "gemini-2.5-flash-image"
BASE_URL = "https://gemini.test/v1beta"
LOGO = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="


def gemini_body(
    text: str | None = "A ceramic mug with the logo",
    image_data: str | None = "aW1hZ2UtYnl0ZXM=",
    finish_reason: str | None = "STOP",
) -> dict:
    """Build a generateContent success payload."""
    parts = []
    if text is not None:
        parts.append({"text": text})
    if image_data is not None:
        parts.append({"inlineData": {"mimeType": "image/png", "data": image_data}})
    candidate: dict = {"content": {"parts": parts}}
    if finish_reason is not None:
        candidate["finishReason"] = finish_reason
    return {"candidates": [candidate]}


def error_body(status: int, message: str) -> dict:
    return {"error": {"code": status, "message": message, "status": "ERROR"}}


Reply = tuple[int, dict]


class ScriptedTransport(httpx.MockTransport):
    """MockTransport replaying scripted replies and recording every request.

    Replies are consumed in order; the last one repeats once the script runs
    out. Pass ``responder`` instead to compute replies per request.
    """

    def __init__(
        self,
        *replies: Reply,
        responder: Callable[[httpx.Request], Reply] | None = None,
    ) -> None:
        self.replies = list(replies)
        self.responder = responder
        self.requests: list[httpx.Request] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responder is not None:
            status, body = self.responder(request)
        elif len(self.replies) > 1:
            status, body = self.replies.pop(0)
        else:
            status, body = self.replies[0]
        return httpx.Response(status, json=body)

    def bodies(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests]


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep replacement that records delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@dataclass
class Harness:
    orchestrator: GenerationOrchestrator
    transport: ScriptedTransport
    usage: UsageTracker
    cache: RequestCache
    clock: FakeClock
    sleep: RecordingSleep = field(default_factory=RecordingSleep)


def build_harness(
    transport: ScriptedTransport,
    api_key: str = "test-key",
    ttl: float = 1800.0,
    capacity: int = 50,
    variation_concurrency: int = 2,
) -> Harness:
    clock = FakeClock()
    sleep = RecordingSleep()
    usage = UsageTracker()
    cache = RequestCache(ttl=ttl, capacity=capacity, clock=clock)
    executor = RetryExecutor(
        classifier=ErrorClassifier(retry_unknown=False),
        usage=usage,
        base_delay=1.0,
        max_delay=30.0,
        jitter=1.0,
        sleep=sleep,
        rng=random.Random(7),
    )
    orchestrator = GenerationOrchestrator(
        provider=GeminiClient(base_url=BASE_URL, auth_header="x-goog-api-key", transport=transport),
        credentials=EnvCredentialStore(api_key=api_key),
        cache=cache,
        usage=usage,
        executor=executor,
        variation_concurrency=variation_concurrency,
    )
    return Harness(
        orchestrator=orchestrator,
        transport=transport,
        usage=usage,
        cache=cache,
        clock=clock,
        sleep=sleep,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_harness() -> Callable[..., Harness]:
    """Factory building an orchestrator wired to a scripted transport."""
    return build_harness
