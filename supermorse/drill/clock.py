"""
Clocks and deferred tasks.

The scheduler never reads wall time or starts threads directly; it asks an
injected clock. ``SystemClock`` is used in the CLI, ``ManualClock`` drives
deterministic simulations and tests.
"""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from collections.abc import Callable
from typing import Protocol


class Cancellable(Protocol):
    """Handle for a scheduled callback."""

    def cancel(self) -> None: ...


class Clock(Protocol):
    """Time source that can also defer a callback."""

    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


# =============================================================================
# System Clock
# =============================================================================


class SystemClock:
    """Wall clock backed by ``time.time`` and daemon ``threading.Timer`` threads."""

    def now(self) -> float:
        return time.time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        timer = threading.Timer(max(0.0, delay), callback)
        timer.daemon = True
        timer.start()
        return timer


# =============================================================================
# Manual Clock
# =============================================================================


class ManualTask:
    """Deferred callback owned by a ManualClock."""

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def live(self) -> bool:
        return not (self.cancelled or self.fired)


class ManualClock:
    """
    Simulated clock for deterministic runs.

    Time only moves when ``advance`` is called. Due callbacks fire in deadline
    order (ties in scheduling order) with ``now()`` set to their deadline.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: list[tuple[float, int, ManualTask]] = []
        self._sequence = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTask:
        if any(not task.live for _, _, task in self._queue):
            self._queue = [entry for entry in self._queue if entry[2].live]
            heapq.heapify(self._queue)
        task = ManualTask(self._now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (task.due, next(self._sequence), task))
        return task

    def advance(self, seconds: float) -> int:
        """
        Move time forward, firing every callback that comes due.

        Args:
            seconds: Amount of simulated time to pass

        Returns:
            Number of callbacks fired
        """
        target = self._now + max(0.0, seconds)
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            if not task.live:
                continue
            self._now = due
            task.fired = True
            task.callback()
            fired += 1
        self._now = target
        return fired

    def pending(self) -> list[ManualTask]:
        """Live tasks that have not fired yet, soonest first."""
        return [task for _, _, task in sorted(self._queue) if task.live]
