"""Cancellable scheduled callbacks for the game engine.

Two schedulers share one interface, ``call_later(delay, fn, *args)``:

- ManualScheduler keeps a virtual clock that only moves when ``advance`` is
  called. Tests use it to step through ticks and reveal delays exactly.
- BackgroundScheduler sleeps in a Socket.IO background task, so it works with
  whichever async mode the server runs (threading, eventlet, gevent).
"""

import heapq
import itertools
import time
from typing import Any, Callable, List, Tuple


class TimerHandle:
    def __init__(self, callback: Callable[..., Any], args: Tuple[Any, ...] = (),
                 due: float = 0.0, clock: Callable[[], float] = time.monotonic):
        self._callback = callback
        self._args = args
        self.due = due
        self._clock = clock
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def remaining(self) -> float:
        """Seconds left until the callback is due, never negative."""
        return max(0.0, self.due - self._clock())

    def fire(self) -> None:
        if not self.active:
            return
        self.fired = True
        self._callback(*self._args)


class ManualScheduler:
    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        due = self.now + max(0.0, delay)
        handle = TimerHandle(callback, args, due=due, clock=lambda: self.now)
        heapq.heappush(self._queue, (due, next(self._seq), handle))
        return handle

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in order."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            self.now = due
            handle.fire()
        self.now = target

    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if h.active)


class BackgroundScheduler:
    """Fires callbacks from Socket.IO background tasks.

    If a lock is given, each callback runs while holding it, so callbacks
    never interleave with event handlers that take the same lock.
    """

    def __init__(self, socketio, app=None, lock=None) -> None:
        self._socketio = socketio
        self._app = app
        self._lock = lock

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        handle = TimerHandle(callback, args, due=time.monotonic() + delay)
        self._socketio.start_background_task(self._run, handle, delay)
        return handle

    def _run(self, handle: TimerHandle, delay: float) -> None:
        self._socketio.sleep(delay)
        if not handle.active:
            return
        if self._app is None:
            self._fire(handle)
            return
        with self._app.app_context():
            self._fire(handle)

    def _fire(self, handle: TimerHandle) -> None:
        if self._lock is None:
            handle.fire()
            return
        with self._lock:
            handle.fire()
