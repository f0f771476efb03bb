"""
Trailing-edge throttle for scroll-driven progress writes.

Each call replaces the pending one and restarts the window, so a burst
of scroll events produces a single write carrying the last position.
Runs on the current asyncio event loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class TrailingThrottle:
    """Runs only the last call made within each quiet window.

    Usage:
        throttle = TrailingThrottle(0.5)
        throttle.call(tracker.record_progress, url, scroll_top, 800, 2000)
    """

    def __init__(self, window: float = 0.5):
        self.window = window
        self._handle: asyncio.TimerHandle | None = None
        self._pending: tuple[Callable[..., Awaitable[Any]], tuple, dict] | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def call(self, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> None:
        """Schedule `func(*args, **kwargs)` after the window, replacing any pending call.

        Must be called from a running event loop.
        """
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._pending = (func, args, kwargs)
        self._handle = loop.call_later(self.window, self._fire)

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending = None

    async def flush(self) -> None:
        """Run the pending call now and wait for every started call to finish."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _fire(self) -> None:
        self._handle = None
        if self._pending is None:
            return
        func, args, kwargs = self._pending
        self._pending = None
        task = asyncio.ensure_future(func(*args, **kwargs))
        self._tasks.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("Throttled call failed: %s", error)
