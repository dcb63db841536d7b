"""Creation-time chart ids."""

from __future__ import annotations

import time
from typing import Callable


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class ChartIdFactory:
    """Issue chart ids from a millisecond clock.

    Ids are decimal strings of the clock reading at creation, so integer
    comparison of ids equals creation order. Two ids requested within the
    same millisecond (or after the clock stepped backwards) are bumped so
    every id is strictly greater than the previous one.

    Args:
        clock: Callable returning the current time in epoch milliseconds.
    """

    def __init__(self, clock: Callable[[], int] = _epoch_millis) -> None:
        self._clock = clock
        self._last = 0

    def observe(self, chart_id: str) -> None:
        """Record an externally created id so later ids sort after it."""

        try:
            value = int(chart_id)
        except ValueError:
            return
        self._last = max(self._last, value)

    def new_id(self) -> str:
        value = max(int(self._clock()), self._last + 1)
        self._last = value
        return str(value)
