"""Frame schedulers driving the self-rescheduling starfield loop."""

from __future__ import annotations

import asyncio
import itertools
from typing import Any, Callable, Protocol

FrameCallback = Callable[[float], None]


class FrameScheduler(Protocol):
    def request(self, callback: FrameCallback) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class ManualScheduler:
    """Runs frames only when ``step`` is called. Used by tests and headless hosts."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self._pending: dict[int, FrameCallback] = {}
        self._ids = itertools.count(1)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel(self, handle: Any) -> None:
        self._pending.pop(handle, None)

    def step(self, dt: float = 1 / 60) -> int:
        """Advance the clock and run every frame requested before this step."""
        self.now += dt
        due = list(self._pending.items())
        self._pending.clear()
        for _, callback in due:
            callback(self.now)
        return len(due)

    def run(self, frames: int, dt: float = 1 / 60) -> None:
        for _ in range(frames):
            self.step(dt)


class AsyncioScheduler:
    """Schedules frames on an asyncio loop at a fixed interval."""

    def __init__(self, interval: float, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._interval = interval
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def request(self, callback: FrameCallback) -> asyncio.TimerHandle:
        loop = self._get_loop()
        return loop.call_later(self._interval, lambda: callback(loop.time()))

    def cancel(self, handle: Any) -> None:
        handle.cancel()
