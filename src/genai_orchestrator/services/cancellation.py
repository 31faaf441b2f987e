"""Caller-supplied cancellation signal and deadline."""

import asyncio
import time
from collections.abc import Awaitable
from typing import TypeVar

from genai_orchestrator.errors import RequestCancelled

T = TypeVar("T")


class CancelToken:
    """Cancellation signal with an optional deadline.

    One token may be shared by several concurrent requests (for example all
    sub-requests of a variation fan-out); cancelling it aborts all of them.

    Example:
        ```python
        token = CancelToken(timeout=20.0)
        task = asyncio.create_task(orchestrator.request(prompt, config=cfg, cancel=token))
        ...
        token.cancel()  # user navigated away
        ```
    """

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize the token.

        Args:
            timeout: Seconds from now after which the token counts as expired.
        """
        self._event = asyncio.Event()
        self._cancelled = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        """Fire the token. Safe to call from any thread."""
        self._cancelled = True
        loop = self._loop
        if loop is None or loop.is_closed():
            self._event.set()
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._event.set()
        else:
            loop.call_soon_threadsafe(self._event.set)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        """Raise RequestCancelled if the token is cancelled or expired."""
        if self.cancelled:
            raise RequestCancelled("cancelled by caller")
        if self.expired:
            raise RequestCancelled("deadline exceeded")

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        The awaitable is cancelled when the token is cancelled or the
        deadline passes.

        Raises:
            RequestCancelled: If the token fired before the awaitable finished.
        """
        self._loop = asyncio.get_running_loop()
        self.check()
        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {work, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            waiter.cancel()

        if work in done:
            return work.result()

        # Abandoned attempt: wait for it to unwind, its outcome is irrelevant
        work.cancel()
        await asyncio.gather(work, return_exceptions=True)
        self.check()
        raise RequestCancelled("deadline exceeded")
