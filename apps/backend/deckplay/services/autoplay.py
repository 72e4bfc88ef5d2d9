from __future__ import annotations

import logging
from typing import Callable

from .scheduler import Cancellable, Scheduler

logger = logging.getLogger("deckplay.autoplay")


class Autoplay:
    """
    Calls `advance` every `interval_ms` while playing.
    Pausing only stops this timer; running transitions keep animating.
    """

    def __init__(self, advance: Callable[[], None], scheduler: Scheduler, interval_ms: float | None = None) -> None:
        self._advance = advance
        self._scheduler = scheduler
        self.interval_ms = interval_ms
        self.paused = True
        self._handle: Cancellable | None = None

    @property
    def enabled(self) -> bool:
        return self.interval_ms is not None and self.interval_ms > 0

    def start(self, interval_ms: float | None = None) -> None:
        if interval_ms is not None:
            self.interval_ms = interval_ms
        if not self.enabled:
            logger.warning("autoplay start ignored: no positive interval (interval_ms=%r)", self.interval_ms)
            return
        self.paused = False
        self._arm()

    def pause(self) -> None:
        self.paused = True
        self._disarm()

    def resume(self) -> None:
        if not self.enabled:
            return
        self.paused = False
        self._arm()

    def stop(self) -> None:
        self.pause()
        self.interval_ms = None

    def _arm(self) -> None:
        self._disarm()
        assert self.interval_ms is not None
        self._handle = self._scheduler.schedule(self._fire, self.interval_ms)

    def _disarm(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if self.paused or not self.enabled:
            return
        try:
            self._advance()
        except Exception:
            logger.exception("autoplay advance failed")
        if not self.paused:
            self._arm()

    def to_payload(self) -> dict:
        return {"intervalMs": self.interval_ms, "paused": self.paused}
