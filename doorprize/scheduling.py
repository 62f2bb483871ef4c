"""Repeating timers owned by a draw session."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Something that can run ``callback`` every ``interval`` seconds."""

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle: ...


class PeriodicTask:
    """Run a callback every ``interval`` seconds on the asyncio loop."""

    def __init__(
        self,
        interval: float,
        callback: Callable[[], None],
        *,
        name: Optional[str] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self._callback = callback
        self._running = True
        self._task: asyncio.Task[None] = asyncio.get_running_loop().create_task(
            self._run(), name=name
        )

    @property
    def active(self) -> bool:
        return self._running and not self._task.done()

    async def _run(self) -> None:
        while self._running:
            await asyncio.sleep(self.interval)
            # cancel() may have been called by another callback during the sleep
            if not self._running:
                break
            try:
                self._callback()
            except Exception:
                logger.exception(f"Periodic task {self._task.get_name()} callback failed")

    def cancel(self) -> None:
        if not self._running:
            return
        self._running = False
        self._task.cancel()
        logger.debug(f"Cancelled periodic task {self._task.get_name()}")


class AsyncioScheduler:
    """Scheduler creating :class:`PeriodicTask` instances on the running loop.

    ``call_every`` must be called from inside the event loop.
    """

    def call_every(self, interval: float, callback: Callable[[], None]) -> PeriodicTask:
        return PeriodicTask(interval, callback, name=f"every-{interval:g}s")


__all__ = ["AsyncioScheduler", "PeriodicTask", "Scheduler", "TimerHandle"]
