"""Periodic task scheduler running on the asyncio event loop.

Drives the clock tick that keeps the hover and clicked-location clocks fresh
even when the pointer is not moving.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class _Task:
    """Internal representation of a registered periodic task."""

    __slots__ = ("name", "callback", "interval", "handle", "runs")

    def __init__(self, name: str, callback: Callable[[], None], interval: float):
        self.name = name
        self.callback = callback
        self.interval = interval
        self.handle: Optional[asyncio.TimerHandle] = None
        self.runs = 0


class Scheduler:
    """Periodic task runner in the asyncio event loop.

    Usage::

        scheduler = Scheduler(loop)
        scheduler.register("clock", controller.tick, interval=1.0)
        scheduler.start()
        ...
        scheduler.stop()
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop
        self._tasks: dict[str, _Task] = {}
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def register(self, name: str, callback: Callable[[], None], interval: float) -> None:
        """Register a periodic task.

        Args:
            name: Unique task name.
            callback: Called on the loop thread every *interval* seconds.
            interval: Seconds between invocations.
        """
        if name in self._tasks:
            raise ValueError(f"Task '{name}' already registered")
        if interval <= 0:
            raise ValueError(f"Task '{name}' needs a positive interval")
        task = _Task(name, callback, interval)
        self._tasks[name] = task
        if self._running:
            self._schedule(task)

    def start(self) -> None:
        """Start all registered tasks. Thread-safe."""
        if self._running:
            return
        self._running = True
        self._loop.call_soon_threadsafe(self._start_all)

    def _start_all(self) -> None:
        for task in self._tasks.values():
            if task.handle is None:
                self._schedule(task)
        logger.info("Scheduler started with %d tasks", len(self._tasks))

    def stop(self) -> None:
        """Cancel all scheduled tasks."""
        self._running = False
        for task in self._tasks.values():
            if task.handle is not None:
                task.handle.cancel()
                task.handle = None
        logger.info("Scheduler stopped")

    def _schedule(self, task: _Task) -> None:
        task.handle = self._loop.call_later(task.interval, self._fire, task)

    def _fire(self, task: _Task) -> None:
        """Timer callback: run the task and reschedule."""
        task.handle = None
        if not self._running:
            return
        try:
            task.callback()
        except Exception:
            logger.exception("Scheduler task '%s' failed", task.name)
        task.runs += 1
        self._schedule(task)
