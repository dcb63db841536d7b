"""Cancellable delayed calls used for debounced autosave.

All schedulers here run callbacks on the caller's own thread of control:
`EventLoopScheduler` through an asyncio loop, `ManualScheduler` when its
virtual clock is advanced.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Protocol


class ScheduledCall(Protocol):
    """Handle returned by a scheduler for a pending call."""

    def cancel(self) -> None:
        """Prevent the call from running; a no-op once it ran."""


class Scheduler(Protocol):
    """Runs a callback once after a delay, unless cancelled first."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """Schedule `callback` to run after `delay` seconds."""


class EventLoopScheduler:
    """Scheduler backed by an asyncio event loop.

    Args:
        loop: Loop to schedule on. Defaults to the running loop at call time.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


@dataclass(order=True)
class _ManualCall:
    due: float
    sequence: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler with a virtual clock, advanced explicitly by the driver.

    Useful for batch drivers and deterministic tests: nothing runs until
    `advance()` moves the clock past a call's due time.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[_ManualCall] = []
        self._sequence = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualCall:
        call = _ManualCall(due=self.now + max(delay, 0.0), sequence=next(self._sequence), callback=callback)
        heapq.heappush(self._queue, call)
        return call

    @property
    def pending(self) -> int:
        """Number of scheduled calls that have not run or been cancelled."""

        return sum(1 for call in self._queue if not call.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every call that becomes due.

        Returns:
            Number of callbacks executed.
        """

        target = self.now + seconds
        executed = 0
        while self._queue and self._queue[0].due <= target:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self.now = call.due
            call.callback()
            executed += 1
        self.now = target
        return executed


class DebouncedCall:
    """Run a callback after a quiet period, restarting the delay on each trigger.

    Only the last trigger within a burst runs; earlier pending calls are
    cancelled rather than queued.
    """

    def __init__(self, scheduler: Scheduler, *, delay: float, callback: Callable[[], None]) -> None:
        self._scheduler = scheduler
        self._delay = delay
        self._callback = callback
        self._pending: ScheduledCall | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def trigger(self) -> None:
        self.cancel()
        self._pending = self._scheduler.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self) -> None:
        self._pending = None
        self._callback()
