"""
Elapsed-time ticker.

A single asyncio task that calls back once per interval while the session
is playing. The callback receives the epoch the ticker was started with so
the controller can drop ticks that belong to an earlier play-through.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class ElapsedTicker:
    """Repeating one-second timer bound to a controller callback."""

    def __init__(self, on_tick: Callable[[int], object], interval: float = 1.0):
        self._on_tick = on_tick
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, epoch: int) -> None:
        """Start ticking for the given epoch, replacing any running timer."""
        self.stop()
        logger.debug(f"Ticker started (epoch={epoch}, interval={self.interval}s)")
        self._task = asyncio.create_task(self._run(epoch))

    def stop(self) -> None:
        """Stop ticking. No callback fires after this returns."""
        if self._task is not None:
            if not self._task.done():
                self._task.cancel()
                logger.debug("Ticker stopped")
            self._task = None

    async def aclose(self) -> None:
        """Stop and wait for the timer task to finish unwinding."""
        task = self._task
        self.stop()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _run(self, epoch: int) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self._on_tick(epoch)
