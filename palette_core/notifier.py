from __future__ import annotations

from typing import Callable, Hashable, List, Optional

from .scheduler import ScheduledTask, TaskScheduler

Listener = Callable[[], None]


class CompletionNotifier:
    """Emits a zero-argument "finished" signal at most once per armed session, after a short delay."""

    def __init__(self, scheduler: TaskScheduler, delay: float = 0.5) -> None:
        self._scheduler = scheduler
        self._delay = delay
        self._listeners: List[Listener] = []
        self._pending: Optional[ScheduledTask] = None
        self._tag: Optional[Hashable] = None
        self.fired = False

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers a listener; the returned callable removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def arm(self, tag: Optional[Hashable] = None) -> None:
        """Prepares for a new session, dropping any signal still pending from the last one."""
        self.disarm()
        self._tag = tag
        self.fired = False

    def disarm(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    @property
    def triggered(self) -> bool:
        return self.fired or self._pending is not None

    def trigger(self) -> bool:
        """Schedules the signal. Returns False if it was already scheduled or sent."""
        if self.triggered:
            return False
        tag = self._tag
        self._pending = self._scheduler.call_later(self._delay, lambda: self._emit(tag), tag=tag)
        return True

    def _emit(self, tag: Optional[Hashable]) -> None:
        if tag != self._tag or self.fired:
            return
        self._pending = None
        self.fired = True
        for listener in list(self._listeners):
            listener()
