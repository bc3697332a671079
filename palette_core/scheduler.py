from __future__ import annotations

import heapq
import itertools
import time
from dataclasses import dataclass, field
from typing import Callable, Hashable, List, Optional

Clock = Callable[[], float]


class ManualClock:
    """A clock that only moves when told to. Used by tests and the simulator."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError('cannot move a clock backwards')
        self.now += seconds
        return self.now


@dataclass(order=True)
class ScheduledTask:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    tag: Optional[Hashable] = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class TaskScheduler:
    """
    Single-threaded delayed-callback queue.

    Nothing runs on its own: the owner calls run_due() (from an event loop,
    before handling a request, or after advancing a ManualClock) and every task
    whose due time has passed fires in due order. While a task runs, now()
    reports that task's due time, so a callback that reschedules itself keeps a
    steady cadence even when run_due() is called late.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or time.monotonic
        self._queue: List[ScheduledTask] = []
        self._seq = itertools.count()
        self._current: Optional[float] = None

    def now(self) -> float:
        if self._current is not None:
            return self._current
        return self._clock()

    def call_later(self, delay: float, callback: Callable[[], None], tag: Optional[Hashable] = None) -> ScheduledTask:
        if delay < 0:
            raise ValueError('delay must not be negative')
        task = ScheduledTask(due=self.now() + delay, seq=next(self._seq), callback=callback, tag=tag)
        heapq.heappush(self._queue, task)
        return task

    def cancel_tag(self, tag: Hashable) -> int:
        """Cancels every pending task carrying this tag. Returns how many were cancelled."""
        count = 0
        for task in self._queue:
            if not task.cancelled and task.tag == tag:
                task.cancel()
                count += 1
        return count

    def pending(self, tag: Optional[Hashable] = None) -> int:
        return sum(1 for t in self._queue if not t.cancelled and (tag is None or t.tag == tag))

    def next_due(self) -> Optional[float]:
        self._drop_cancelled()
        return self._queue[0].due if self._queue else None

    def run_due(self, now: Optional[float] = None) -> int:
        """Fires all tasks due at or before `now` (default: the clock). Returns the number fired."""
        limit = self._clock() if now is None else now
        fired = 0
        while True:
            self._drop_cancelled()
            if not self._queue or self._queue[0].due > limit:
                break
            task = heapq.heappop(self._queue)
            self._current = task.due
            try:
                task.callback()
            finally:
                self._current = None
            fired += 1
        return fired

    def _drop_cancelled(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)
