"""Deferred task scheduling for the post-``send()`` hand-off."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

LOGGER = logging.getLogger(__name__)

Task = Callable[..., Any]


class Scheduler(Protocol):
    def call_soon(self, callback: Task, *args: Any) -> None:
        """Run ``callback(*args)`` after the current call stack has returned."""


@dataclass
class ManualScheduler:
    """FIFO queue of deferred tasks that the test drives explicitly.

    Nothing runs until :meth:`run_pending` is called, which also runs the
    tasks queued by the tasks it executes.
    """

    _queue: deque[tuple[Task, tuple[Any, ...]]] = field(default_factory=deque, init=False, repr=False)

    def call_soon(self, callback: Task, *args: Any) -> None:
        self._queue.append((callback, args))

    @property
    def pending(self) -> int:
        return len(self._queue)

    def run_pending(self) -> int:
        executed = 0
        while self._queue:
            callback, args = self._queue.popleft()
            callback(*args)
            executed += 1
        if executed:
            LOGGER.debug("scheduler.drained", extra={"event": "scheduler.drained", "executed": executed})
        return executed

    def clear(self) -> None:
        self._queue.clear()


class AsyncioScheduler:
    """Delegate deferred tasks to an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_soon(self, callback: Task, *args: Any) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_soon(callback, *args)


__all__ = ["AsyncioScheduler", "ManualScheduler", "Scheduler", "Task"]
