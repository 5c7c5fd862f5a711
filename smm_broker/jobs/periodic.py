"""Interval-driven background jobs run on the application's event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicJob:
    """Run ``func`` every ``interval`` seconds until stopped.

    A failing run is logged and the next one is still scheduled. ``stop`` never
    interrupts a run in progress; it waits for it and prevents the next one.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        func: Callable[[], Awaitable[Any]],
        *,
        run_immediately: bool = True,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self.func = func
        self.run_immediately = run_immediately
        self.runs = 0
        self.failures = 0
        self._task: Optional[asyncio.Task] = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(self._loop(), name=f"job:{self.name}")
        logger.info("Job %s started (every %ss)", self.name, self.interval)

    async def stop(self) -> None:
        task = self._task
        if task is None:
            return
        self._stopping.set()
        try:
            await task
        finally:
            self._task = None
        logger.info("Job %s stopped", self.name)

    async def run_once(self) -> None:
        self.runs += 1
        try:
            await self.func()
        except Exception:
            self.failures += 1
            logger.exception("Job %s failed", self.name)

    async def _loop(self) -> None:
        if self.run_immediately:
            await self.run_once()
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                await self.run_once()
