# netchat/session/timers.py
"""
Timers on a cooperative scheduler.

Anything with `call_later(delay, callback) -> handle` and `time()` works as
a scheduler; an asyncio event loop is the production one. Callbacks run on
the loop between other units of work, never in the middle of one.
"""
from typing import Any, Callable, Optional, Protocol


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], Any]) -> Handle: ...

    def time(self) -> float: ...


class CancelableTimer:
    """One-shot timer holding at most one pending handle."""

    def __init__(self, scheduler: Scheduler, delay: float, callback: Callable[[], Any]):
        self._scheduler = scheduler
        self.delay = delay
        self._callback = callback
        self._handle: Optional[Handle] = None
        self._deadline: Optional[float] = None
        self._remaining: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self, delay: Optional[float] = None) -> None:
        self.cancel()
        delay = self.delay if delay is None else delay
        self._deadline = self._scheduler.time() + delay
        self._handle = self._scheduler.call_later(delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._deadline = None
        self._remaining = None

    def pause(self) -> None:
        if self._handle is None:
            return
        remaining = max(0.0, self._deadline - self._scheduler.time())
        self.cancel()
        self._remaining = remaining

    def resume(self) -> None:
        if self._handle is None and self._remaining is not None:
            self.arm(self._remaining)

    def _fire(self) -> None:
        self._handle = None
        self._deadline = None
        self._callback()


class PeriodicTask:
    """Calls `callback` every `interval` seconds until stopped."""

    def __init__(self, scheduler: Scheduler, interval: float, callback: Callable[[], Any]):
        self._callback = callback
        self._timer = CancelableTimer(scheduler, interval, self._tick)
        self.running = False

    def start(self) -> None:
        if not self.running:
            self.running = True
            self._timer.arm()

    def stop(self) -> None:
        self.running = False
        self._timer.cancel()

    def _tick(self) -> None:
        if not self.running:
            return
        self._timer.arm()
        self._callback()
