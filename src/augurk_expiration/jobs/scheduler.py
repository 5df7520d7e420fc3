from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

from augurk_expiration.db.nosql.metadata import utcnow

logger = logging.getLogger(__name__)

TaskFunc = Callable[[], Awaitable[object]]


@dataclass
class ScheduledTask:
    name: str
    interval_seconds: int
    func: TaskFunc
    next_run_at: datetime
    runs: int = 0
    failures: int = 0


class InMemoryScheduler:
    """Interval scheduler for coroutine tasks, driven by `tick()` or `run()`."""

    def __init__(
        self,
        *,
        tick_interval: float = 60.0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._tasks: dict[str, ScheduledTask] = {}
        self._tick_interval = tick_interval
        self._clock = clock or utcnow
        self._stopped = asyncio.Event()

    @property
    def tasks(self) -> list[ScheduledTask]:
        return list(self._tasks.values())

    def add_task(self, name: str, interval_seconds: int, func: TaskFunc) -> ScheduledTask:
        if name in self._tasks:
            raise ValueError(f"Task '{name}' is already scheduled")
        task = ScheduledTask(
            name=name, interval_seconds=interval_seconds, func=func, next_run_at=self._clock()
        )
        self._tasks[name] = task
        return task

    async def tick(self) -> int:
        """Run every due task once; returns how many ran."""
        now = self._clock()
        ran = 0
        for task in list(self._tasks.values()):
            if task.next_run_at > now:
                continue
            ran += 1
            task.runs += 1
            try:
                await task.func()
            except Exception:
                task.failures += 1
                logger.exception("Scheduled task failed", extra={"job": task.name})
            finally:
                task.next_run_at = now + timedelta(seconds=task.interval_seconds)
        return ran

    async def run(self, *, max_loops: Optional[int] = None) -> None:
        self._stopped.clear()
        loops = 0
        while not self._stopped.is_set():
            await self.tick()
            loops += 1
            if max_loops is not None and loops >= max_loops:
                break
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self._tick_interval)
            except asyncio.TimeoutError:
                pass

    def stop(self) -> None:
        self._stopped.set()
