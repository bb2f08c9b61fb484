from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class TickHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Repeating-callback source used to drive heartbeat timing."""

    def call_every(self, interval: float, callback: Callable[[], None]) -> TickHandle: ...


class TaskHandle:
    """Cancelable handle around the task running a repeating tick."""

    def __init__(self, task: asyncio.Task) -> None:
        self._task = task

    def cancel(self) -> None:
        self._task.cancel()

    @property
    def active(self) -> bool:
        return not self._task.done()


class LoopScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, name: str = "xap-tick") -> None:
        self.name = name

    def call_every(self, interval: float, callback: Callable[[], None]) -> TaskHandle:
        task = asyncio.get_running_loop().create_task(self._run(interval, callback), name=self.name)
        return TaskHandle(task)

    async def _run(self, interval: float, callback: Callable[[], None]) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                callback()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.exception("Tick callback failed: %s", exc)
