"""
One-shot timers for the ephemeral store.

AsyncioScheduler  — production timers on the running event loop
ManualScheduler   — virtual clock for tests; ``await advance(seconds)``
                    fires every due callback in due order

Callbacks may return an awaitable (async cleanup such as closing a tab).
AsyncioScheduler wraps it in a task; ManualScheduler awaits it inline.
"""

import asyncio
import heapq
import inspect
import itertools
import logging
from typing import Any, Callable, Optional, Protocol

__all__ = ["TimerHandle", "Scheduler", "AsyncioScheduler", "ManualScheduler"]

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle: ...


def _log_task_error(task: "asyncio.Task") -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error("timer cleanup failed", exc_info=task.exception())


class AsyncioScheduler:
    """Schedules callbacks with ``loop.call_later`` on the running loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()

        def _fire() -> None:
            result = callback()
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                task.add_done_callback(_log_task_error)

        return loop.call_later(delay, _fire)


class _ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Deterministic virtual-time scheduler.

    Usage::

        scheduler = ManualScheduler()
        store = EphemeralStore(scheduler=scheduler)
        key = store.put(payload)
        await scheduler.advance(120)
        assert store.get(key) is None
    """

    def __init__(self) -> None:
        self.now: float = 0.0
        self._queue: list = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], Any]) -> _ManualHandle:
        handle = _ManualHandle()
        heapq.heappush(self._queue, (self.now + delay, next(self._seq), handle, callback))
        return handle

    @property
    def pending(self) -> int:
        """Number of timers that are scheduled and not cancelled."""
        return sum(1 for _, _, h, _ in self._queue if not h.cancelled)

    async def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks (and awaiting their results)."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            self.now = due
            if handle.cancelled:
                continue
            result = callback()
            if inspect.isawaitable(result):
                await result
        self.now = target
