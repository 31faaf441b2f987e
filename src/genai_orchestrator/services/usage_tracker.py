"""Usage and cost accounting."""

import math
import threading
from dataclasses import replace

from genai_orchestrator.entities import UsageMetrics
from genai_orchestrator.logger import logger
from genai_orchestrator.models import get_model_spec

# Flat token allowance charged per input image
IMAGE_TOKEN_ALLOWANCE = 500
CHARS_PER_TOKEN_ESTIMATE = 4


def estimate_tokens(text: str | None) -> int:
    """Estimate the token count of a text blob as ``ceil(len / 4)``.

    This is a rough heuristic for cost estimation only. Provider-billed token
    counts can differ materially, especially for non-English text.
    """
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN_ESTIMATE)


def estimate_input_tokens(prompt: str, image_count: int) -> int:
    """Estimate input tokens for a prompt plus ``image_count`` images."""
    return estimate_tokens(prompt) + image_count * IMAGE_TOKEN_ALLOWANCE


class UsageTracker:
    """Process-lifetime request, token, cost and cache counters.

    Counters only grow until ``reset`` is called. Thread-safe.

    Example:
        ```python
        usage = UsageTracker()
        usage.record_attempt()
        usage.record_tokens("gemini-2.5-flash-image", 1_000, 250)
        print(usage.snapshot().estimated_cost)
        ```
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._metrics = UsageMetrics()
        self._unpriced_models: set[str] = set()

    def _bump(self, **deltas: float) -> None:
        with self._lock:
            current = self._metrics
            self._metrics = replace(
                current,
                **{name: getattr(current, name) + delta for name, delta in deltas.items()},
            )

    def record_attempt(self) -> None:
        self._bump(request_count=1)

    def record_cache_hit(self) -> None:
        self._bump(cache_hits=1)

    def record_cache_miss(self) -> None:
        self._bump(cache_misses=1)

    def record_failure(self) -> None:
        self._bump(failed_requests=1)

    def record_tokens(self, model: str, input_tokens: int, output_tokens: int) -> float:
        """Add token counts and their estimated cost.

        Args:
            model: Model id used for the call
            input_tokens: Estimated input tokens
            output_tokens: Estimated output tokens

        Returns:
            The cost added by this call
        """
        if input_tokens < 0 or output_tokens < 0:
            raise ValueError("token counts must not be negative")

        spec = get_model_spec(model)
        if spec is None:
            cost = 0.0
            with self._lock:
                first_sighting = model not in self._unpriced_models
                self._unpriced_models.add(model)
            if first_sighting:
                logger.warning("No pricing for model {}, cost recorded as 0", model)
        else:
            cost = spec.cost(input_tokens, output_tokens)

        self._bump(
            total_input_tokens=input_tokens,
            total_output_tokens=output_tokens,
            estimated_cost=cost,
        )
        return cost

    def snapshot(self) -> UsageMetrics:
        """Return a read-only copy of the counters."""
        with self._lock:
            return self._metrics

    def reset(self) -> None:
        """Zero all counters."""
        with self._lock:
            self._metrics = UsageMetrics()
