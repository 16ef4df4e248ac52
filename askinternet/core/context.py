"""Cancellable request context.

Architectural role:
    One `RequestContext` is created per pipeline run and passed to every stage:
    the search call, each concurrent extraction task, both embedding calls, and the
    chat calls. Stages poll it at their checkpoints and race their I/O against it.

Cancellation model:
    Cancellation is cooperative. `cancel()` sets a flag; checkpoints raise
    `PipelineCancelledError`, and awaits wrapped in `run()` are abandoned as soon
    as the flag is set. An optional timeout behaves like a cancel at the deadline.
"""

import asyncio
import time
from typing import Any, Awaitable

from askinternet.errors import PipelineCancelledError


class RequestContext:
    """Shared cancellation signal for one pipeline run."""

    def __init__(self, timeout: float | None = None) -> None:
        self._event = asyncio.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def cancel(self) -> None:
        self._event.set()

    def remaining(self) -> float | None:
        """Seconds left until the deadline, or `None` without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise PipelineCancelledError("request context cancelled")

    async def run(self, awaitable: Awaitable[Any]) -> Any:
        """Await `awaitable` unless the context is cancelled first.

        Returns:
            The awaitable's result.

        Raises:
            PipelineCancelledError: If the context is cancelled (or its deadline
                passes) before the awaitable completes. The awaitable is cancelled.
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise PipelineCancelledError("request context cancelled")

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

        if task in done:
            return task.result()

        self._event.set()
        raise PipelineCancelledError("request context cancelled")
