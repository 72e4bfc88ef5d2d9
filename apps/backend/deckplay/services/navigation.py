from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Sequence

from ..state import PlaybackState, PresentationConfig

logger = logging.getLogger("deckplay.navigation")

StateListener = Callable[[PlaybackState, PlaybackState], None]


class NavigationController:
    """
    Owns the PlaybackState and moves it in response to player intents.

    Every operation is total: out-of-range requests are ignored, never raised.
    Each accepted change swaps in a fresh frozen state, then:
    - subscribers get (previous, current) for any change (presenter mode included)
    - `on_slide_change(slide, fragment)` fires once if the position moved
    """

    def __init__(
        self,
        config: PresentationConfig,
        fragment_counts: Sequence[int] | None = None,
        *,
        loop: bool = False,
        initial_slide: int = 0,
        initial_fragment: int = 0,
        on_slide_change: Callable[[int, int], None] | None = None,
        on_end: Callable[[], None] | None = None,
    ) -> None:
        self._config = config
        self._fragment_counts: list[int] = list(fragment_counts or [])
        self.loop = loop
        self.on_slide_change = on_slide_change
        self.on_end = on_end
        self._listeners: list[StateListener] = []
        slide = max(0, initial_slide)
        if config.slide_count > 0:
            slide = min(slide, config.slide_count - 1)
        self._state = PlaybackState(current_slide=slide, current_fragment=max(0, initial_fragment))

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def config(self) -> PresentationConfig:
        return self._config

    def fragment_count(self, slide_index: int) -> int:
        if 0 <= slide_index < len(self._fragment_counts):
            return self._fragment_counts[slide_index]
        return 1

    def register_fragment_count(self, slide_index: int, count: int) -> None:
        if slide_index < 0:
            return
        if slide_index >= len(self._fragment_counts):
            self._fragment_counts.extend([1] * (slide_index + 1 - len(self._fragment_counts)))
        self._fragment_counts[slide_index] = max(1, int(count))

    def set_config(self, config: PresentationConfig) -> None:
        """Replace the config wholesale (e.g. after metadata was re-derived)."""
        self._config = config
        last = config.slide_count - 1
        if config.slide_count > 0 and self._state.current_slide > last:
            self._commit(replace(self._state, current_slide=last, current_fragment=0))

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def progress(self) -> float:
        """Position through the whole deck in [0, 1]."""
        n = self._config.slide_count
        if n <= 1:
            return 0.0 if self._state.current_slide == 0 else 1.0
        return self._state.current_slide / (n - 1)

    def next(self) -> None:
        n = self._config.slide_count
        if n <= 0:
            return
        s = self._state
        if s.current_fragment < self.fragment_count(s.current_slide) - 1:
            self._commit(replace(s, current_fragment=s.current_fragment + 1))
        elif s.current_slide < n - 1:
            self._commit(replace(s, current_slide=s.current_slide + 1, current_fragment=0))
        elif self.loop:
            self._commit(replace(s, current_slide=0, current_fragment=0))
        else:
            logger.debug("next: end of presentation reached (slide=%s)", s.current_slide)
            self._call(self.on_end)

    def prev(self) -> None:
        if self._config.slide_count <= 0:
            return
        s = self._state
        if s.current_fragment > 0:
            self._commit(replace(s, current_fragment=s.current_fragment - 1))
        elif s.current_slide > 0:
            prev_slide = s.current_slide - 1
            self._commit(
                replace(s, current_slide=prev_slide, current_fragment=self.fragment_count(prev_slide) - 1)
            )

    def go_to_slide(self, slide_index: int, fragment_index: int = 0) -> None:
        # Fragment indices past the slide's count are accepted as-is.
        if not (0 <= slide_index < self._config.slide_count) or fragment_index < 0:
            logger.debug(
                "go_to_slide ignored: slide=%s fragment=%s slideCount=%s",
                slide_index,
                fragment_index,
                self._config.slide_count,
            )
            return
        self._commit(replace(self._state, current_slide=slide_index, current_fragment=fragment_index))

    def toggle_presenter_mode(self) -> None:
        if self._config.slide_count <= 0:
            return
        self._commit(replace(self._state, is_presenter_mode=not self._state.is_presenter_mode))

    def _commit(self, new: PlaybackState) -> None:
        old = self._state
        if new == old:
            return
        self._state = new
        for listener in list(self._listeners):
            self._call(listener, old, new)
        if (old.current_slide, old.current_fragment) != (new.current_slide, new.current_fragment):
            self._call(self.on_slide_change, new.current_slide, new.current_fragment)

    @staticmethod
    def _call(fn: Callable[..., None] | None, *args: object) -> None:
        if fn is None:
            return
        try:
            fn(*args)
        except Exception:
            # Player input must never crash playback.
            logger.exception("navigation callback %r failed", fn)
