from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Clock + one-shot timers, in milliseconds."""

    def now_ms(self) -> float: ...

    def schedule(self, callback: Callable[[], None], delay_ms: float) -> Cancellable: ...


class AsyncioScheduler:
    """
    Timers on the running asyncio loop.
    Must be used from code running on that loop (e.g. `async def` endpoints).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def now_ms(self) -> float:
        return self._get_loop().time() * 1000.0

    def schedule(self, callback: Callable[[], None], delay_ms: float) -> asyncio.TimerHandle:
        return self._get_loop().call_later(max(0.0, delay_ms) / 1000.0, callback)


class _ManualCall:
    def __init__(self, due_ms: float, seq: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __lt__(self, other: _ManualCall) -> bool:
        return (self.due_ms, self.seq) < (other.due_ms, other.seq)


class ManualScheduler:
    """
    Virtual clock. Time only moves through `advance`, which runs every callback
    that falls due, in due-time order, with `now_ms()` set to its due time.
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = float(start_ms)
        self._queue: list[_ManualCall] = []
        self._seq = itertools.count()

    def now_ms(self) -> float:
        return self._now

    def schedule(self, callback: Callable[[], None], delay_ms: float) -> _ManualCall:
        call = _ManualCall(self._now + max(0.0, delay_ms), next(self._seq), callback)
        heapq.heappush(self._queue, call)
        return call

    @property
    def pending(self) -> int:
        return sum(1 for c in self._queue if not c.cancelled)

    def advance(self, ms: float) -> None:
        target = self._now + max(0.0, ms)
        while self._queue and self._queue[0].due_ms <= target:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self._now = call.due_ms
            call.callback()
        self._now = target

    def run_until_idle(self, limit_ms: float = 60_000.0) -> None:
        """Advance until no timers remain (bounded by `limit_ms` of virtual time)."""
        deadline = self._now + limit_ms
        while self.pending and self._now < deadline:
            nxt = min(c.due_ms for c in self._queue if not c.cancelled)
            self.advance(max(0.0, min(nxt, deadline) - self._now))
