from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class HeartbeatLoop:
    """Calls ``beat`` every ``interval`` seconds until stopped.

    One tick is: beat, count, wait. The wait returns early when the stop
    event is set, so ``stop()`` never has to sit out a full interval.
    """

    def __init__(self, beat: Callable[[], Awaitable[Any]], interval: float):
        if interval < 0:
            raise ValueError("heartbeat interval must be >= 0")
        self._beat = beat
        self._interval = interval
        self._count = 0
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task | None = None

    @property
    def count(self) -> int:
        """Number of heartbeats sent so far."""
        return self._count

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Run the loop in the current task until ``stop_event`` is set."""
        stop_event = stop_event or asyncio.Event()
        self._stop_event = stop_event
        logger.debug("Heartbeat loop started (interval=%ss)", self._interval)
        try:
            while not stop_event.is_set():
                await self._beat()
                self._count += 1
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
                except asyncio.TimeoutError:
                    continue
        finally:
            logger.debug("Heartbeat loop exited after %d heartbeats", self._count)

    def start(self) -> asyncio.Task:
        """Start the loop as a background task."""
        if self.running:
            raise RuntimeError("heartbeat loop already running")
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self.run(self._stop_event))
        return self._task

    async def stop(self) -> None:
        """Signal the loop to exit and wait for it."""
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
