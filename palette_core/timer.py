from __future__ import annotations

from typing import Callable, Hashable, Optional

from .scheduler import ScheduledTask, TaskScheduler


class CountdownTimer:
    """
    Per-level countdown that ticks once per interval on a TaskScheduler.

    The only link back to the game is `on_expire`, called once when the count
    reaches zero. stop() cancels the pending tick; a tick that belongs to an
    earlier start() is ignored.
    """

    def __init__(
        self,
        scheduler: TaskScheduler,
        on_expire: Callable[[], None],
        interval: float = 1.0,
        on_tick: Optional[Callable[[int], None]] = None,
    ) -> None:
        self._scheduler = scheduler
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._interval = interval
        self._task: Optional[ScheduledTask] = None
        self._run = 0
        self._tag: Optional[Hashable] = None
        self.remaining: Optional[int] = None
        self.running = False

    def start(self, seconds: int, tag: Optional[Hashable] = None) -> None:
        if seconds <= 0:
            raise ValueError('countdown must start above zero')
        self.stop()
        self._run += 1
        self._tag = tag
        self.remaining = int(seconds)
        self.running = True
        self._schedule(self._run)

    def stop(self) -> None:
        self.running = False
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def reset(self) -> None:
        """Stops and forgets the remaining time (session left)."""
        self.stop()
        self.remaining = None

    def _schedule(self, run: int) -> None:
        self._task = self._scheduler.call_later(self._interval, lambda: self._tick(run), tag=self._tag)

    def _tick(self, run: int) -> None:
        if not self.running or run != self._run or self.remaining is None:
            return
        self._task = None
        self.remaining -= 1
        if self._on_tick is not None:
            self._on_tick(self.remaining)
        if self.remaining <= 0:
            self.remaining = 0
            self.running = False
            self._on_expire()
            return
        self._schedule(run)
