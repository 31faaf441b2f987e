"""Bounded retry with exponential backoff and jitter.

Runs one logical request as up to ``max_retries + 1`` attempts. After a
failed attempt the error is classified; transient kinds are retried after

    delay = min(base_delay * 2 ** attempt + uniform(0, jitter), max_delay)

and everything else is returned immediately. Backoff uses ``asyncio.sleep``
so other in-flight requests keep running.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from genai_orchestrator.config import settings
from genai_orchestrator.entities import GenerationResult
from genai_orchestrator.errors import ErrorKind, GenerationError, RequestCancelled
from genai_orchestrator.logger import logger

from .cancellation import CancelToken
from .error_classifier import ErrorClassifier
from .usage_tracker import UsageTracker

T = TypeVar("T")


class RetryExecutor:
    """Executes an async operation with bounded resilience.

    Every attempt, successful or not, is recorded on the usage tracker.
    The executor never raises for attempt failures; it returns a
    ``GenerationResult`` carrying the classified error instead.
    """

    def __init__(
        self,
        classifier: ErrorClassifier,
        usage: UsageTracker,
        base_delay: float | None = None,
        max_delay: float | None = None,
        jitter: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            classifier: Maps attempt failures to error kinds.
            usage: Tracker receiving one ``record_attempt`` per attempt.
            base_delay: First backoff step in seconds. Defaults to settings.
            max_delay: Backoff cap in seconds. Defaults to settings.
            jitter: Upper bound of the random delay added to each step.
            sleep: Async sleep function (injectable for tests).
            rng: Random source for jitter (injectable for tests).
        """
        self._classifier = classifier
        self._usage = usage
        self._base_delay = base_delay if base_delay is not None else settings.retry_base_delay
        self._max_delay = max_delay if max_delay is not None else settings.retry_max_delay
        self._jitter = jitter if jitter is not None else settings.retry_jitter
        self._sleep = sleep
        self._rng = rng or random.Random()

    def backoff_delay(self, attempt: int) -> float:
        """Delay in seconds before retrying after failed attempt ``attempt`` (0-based)."""
        delay = self._base_delay * (2**attempt) + self._rng.uniform(0, self._jitter)
        return min(delay, self._max_delay)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        max_retries: int,
        cancel: CancelToken | None = None,
        label: str = "request",
    ) -> GenerationResult[T]:
        """Run ``operation`` until it succeeds, fails terminally or retries run out.

        Args:
            operation: Zero-argument factory returning a fresh awaitable per attempt
            max_retries: Retries allowed after the first attempt
            cancel: Optional cancellation token / deadline
            label: Short description used in log lines

        Returns:
            GenerationResult with the operation's value or the last error
        """
        if max_retries < 0:
            raise ValueError("max_retries must not be negative")

        attempt = 0
        while True:
            try:
                if cancel is not None:
                    cancel.check()
                self._usage.record_attempt()
                if cancel is not None:
                    value = await cancel.guard(operation())
                else:
                    value = await operation()
                return GenerationResult.ok(value)
            except RequestCancelled as e:
                logger.info("{} cancelled on attempt {}: {}", label, attempt + 1, e.reason)
                return GenerationResult.fail(ErrorKind.CANCELLED, e.reason)
            except Exception as e:  # noqa: BLE001 - every failure is classified
                error = self._classifier.classify_exception(e)

            if not error.retryable or attempt >= max_retries:
                self._log_terminal(label, attempt, max_retries, error)
                return GenerationResult.fail(error)

            delay = self.backoff_delay(attempt)
            logger.warning(
                "{} attempt {}/{} failed ({}), retrying in {:.2f}s",
                label,
                attempt + 1,
                max_retries + 1,
                error.kind.value,
                delay,
            )
            try:
                if cancel is not None:
                    await cancel.guard(self._sleep(delay))
                else:
                    await self._sleep(delay)
            except RequestCancelled as e:
                logger.info("{} cancelled during backoff: {}", label, e.reason)
                return GenerationResult.fail(ErrorKind.CANCELLED, e.reason)
            attempt += 1

    @staticmethod
    def _log_terminal(label: str, attempt: int, max_retries: int, error: GenerationError) -> None:
        if error.retryable:
            logger.warning(
                "{} gave up after {} attempts: {} {}",
                label,
                attempt + 1,
                error.kind.value,
                error.message,
            )
        else:
            logger.warning(
                "{} failed with terminal error on attempt {}/{}: {} {}",
                label,
                attempt + 1,
                max_retries + 1,
                error.kind.value,
                error.message,
            )
