from __future__ import annotations
import asyncio
import heapq
import itertools
import logging
from typing import Any, Callable, List, Protocol, Tuple

class Scheduler(Protocol):
    """Anything that can run `fn` once after `ms` milliseconds, e.g. tkinter.Tk."""
    def after(self, ms: int, fn: Callable[[], None]) -> Any: ...


class AsyncioScheduler:
    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def after(self, ms: int, fn: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0, ms) / 1000.0, fn)


class ManualScheduler:
    """
    Scheduler driven by an explicit clock, for tests and simulations.
    Callbacks due at the same time run in the order they were scheduled.
    """
    def __init__(self):
        self.now_ms = 0
        self._queue: List[Tuple[int, int, Callable[[], None]]] = []
        self._seq = itertools.count()

    def after(self, ms: int, fn: Callable[[], None]) -> int:
        seq = next(self._seq)
        heapq.heappush(self._queue, (self.now_ms + max(0, int(ms)), seq, fn))
        return seq

    @property
    def pending(self) -> int:
        return len(self._queue)

    def advance(self, ms: int = 0) -> None:
        until = self.now_ms + ms
        while self._queue and self._queue[0][0] <= until:
            due, _, fn = heapq.heappop(self._queue)
            self.now_ms = due
            fn()
        self.now_ms = until


class Poller:
    """Runs `action` now and then again every `period_s` until stopped."""
    def __init__(self, scheduler: Scheduler, period_s: float, action: Callable[[], None], name: str = ""):
        self._scheduler = scheduler
        self._action = action
        self._interval = max(1, int(1000.0 * period_s))  # at least 1ms between runs
        self._name = name or getattr(action, "__name__", "action")
        self._running = False
        self._log = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval_ms(self) -> int:
        return self._interval

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._log.info("Polling %s every %dms", self._name, self._interval)
        self._tick()  # immediate first run

    def stop(self) -> None:
        if self._running:
            self._log.info("Stopped polling %s", self._name)
        self._running = False

    def _schedule_next(self) -> None:
        if self._running:
            self._scheduler.after(self._interval, self._tick)

    def _tick(self) -> None:
        if not self._running:
            return
        try:
            self._action()
        except Exception as e:
            self._log.exception("Poll of %s failed: %s", self._name, e)
        finally:
            self._schedule_next()
