"""Cooperative interval scheduler.

Replaces browser-style ``setInterval`` for hosts that run everything on one
execution context. Nothing runs on its own: the host advances the clock
(``advance(ms)``) from its event loop and due callbacks fire in time order.
"""

import heapq
import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class _Interval:
    handle: int
    period_ms: float
    callback: Callable[[], None]


class IntervalClock:
    """Manually advanced clock owning repeating callbacks.

    Example:
        clock = IntervalClock()
        handle = clock.set_interval(tick, 50)
        clock.advance(120)  # tick() fires twice (t=50, t=100)
        clock.clear_interval(handle)
    """

    def __init__(self) -> None:
        self._now_ms = 0.0
        self._seq = 0
        self._queue: list[tuple[float, int, int]] = []  # (due_ms, seq, handle)
        self._intervals: dict[int, _Interval] = {}
        self._next_handle = 1

    @property
    def now_ms(self) -> float:
        return self._now_ms

    @property
    def active_count(self) -> int:
        """Number of intervals currently scheduled."""
        return len(self._intervals)

    def set_interval(self, callback: Callable[[], None], period_ms: float) -> int:
        """Schedule callback every period_ms. Returns a handle for clear_interval."""
        if period_ms <= 0:
            raise ValueError(f"Interval period must be positive, got {period_ms}")
        handle = self._next_handle
        self._next_handle += 1
        self._intervals[handle] = _Interval(handle=handle, period_ms=period_ms, callback=callback)
        self._push(self._now_ms + period_ms, handle)
        return handle

    def clear_interval(self, handle: int) -> None:
        """Cancel an interval. Unknown or already-cleared handles are ignored."""
        self._intervals.pop(handle, None)

    def advance(self, elapsed_ms: float) -> int:
        """Move time forward, firing every due callback in order.

        Returns:
            Number of callbacks fired.
        """
        target = self._now_ms + elapsed_ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            interval = self._intervals.get(handle)
            if interval is None:
                continue  # Cleared while queued
            self._now_ms = due
            interval.callback()
            fired += 1
            # Callback may have cleared its own interval
            if handle in self._intervals:
                self._push(due + interval.period_ms, handle)
        self._now_ms = target
        return fired

    def _push(self, due_ms: float, handle: int) -> None:
        self._seq += 1
        heapq.heappush(self._queue, (due_ms, self._seq, handle))
