from __future__ import annotations

import logging
import uuid
from typing import Any, Callable

from fastapi.responses import Response

from ..config import frame_interval_ms
from ..state import STATE, PlaybackState
from .autoplay import Autoplay
from .deck import Deck
from .navigation import NavigationController
from .scheduler import AsyncioScheduler, Scheduler
from .transitions import TransitionEngine

logger = logging.getLogger("deckplay.session_service")

NEXT_KEYS = {"ArrowRight", " ", "Space", "Enter"}
PREV_KEYS = {"ArrowLeft", "Backspace"}


class PlaybackSession:
    """
    One playback of one deck: navigation, fragment reveal, slide transitions
    and autoplay, passed around explicitly instead of looked up globally.
    """

    def __init__(
        self,
        deck: Deck,
        *,
        scheduler: Scheduler,
        loop: bool = False,
        initial_slide: int = 0,
        initial_fragment: int = 0,
        autoplay_ms: float | None = None,
        frame_ms: float | None = None,
        on_slide_change: Callable[[int, int], None] | None = None,
        on_end: Callable[[], None] | None = None,
        session_id: str | None = None,
        allow_keyboard: bool = True,
        allow_click: bool = True,
    ) -> None:
        self.id = session_id or uuid.uuid4().hex
        self.deck = deck
        self.scheduler = scheduler
        self.is_fullscreen = False
        self.ended = False
        self._on_end = on_end
        self.allow_keyboard = allow_keyboard
        self.allow_click = allow_click

        self.controller = NavigationController(
            deck.config(),
            deck.fragment_counts,
            loop=loop,
            initial_slide=initial_slide,
            initial_fragment=initial_fragment,
            on_slide_change=on_slide_change,
            on_end=self._handle_end,
        )
        self.reveal = deck.reveal_model()
        self.transitions = TransitionEngine(
            deck.transitions,
            scheduler,
            initial_slide=self.controller.state.current_slide,
            frame_ms=frame_ms if frame_ms is not None else frame_interval_ms(),
        )
        self._unsubscribers = [
            self.controller.subscribe(self.transitions.on_state_change),
            self.controller.subscribe(self._clear_ended),
        ]
        self.autoplay = Autoplay(self.controller.next, scheduler, autoplay_ms)
        if self.autoplay.enabled:
            self.autoplay.start()

    def _handle_end(self) -> None:
        self.ended = True
        if self._on_end is not None:
            self._on_end()

    def _clear_ended(self, old: PlaybackState, new: PlaybackState) -> None:
        self.ended = False

    # ---- input adapter ----

    def handle_key(self, key: str) -> bool:
        """Map a keyboard key to an intent. Returns False when nothing was handled."""
        if not self.allow_keyboard:
            return False
        if key in NEXT_KEYS:
            self.controller.next()
        elif key in PREV_KEYS:
            self.controller.prev()
        elif key == "Home":
            self.controller.go_to_slide(0)
        elif key == "End":
            self.controller.go_to_slide(self.controller.config.slide_count - 1)
        elif key in ("f", "F"):
            self.toggle_fullscreen()
        elif key == "Escape":
            if not self.is_fullscreen:
                return False
            self.is_fullscreen = False
        elif key in ("p", "P"):
            self.controller.toggle_presenter_mode()
        else:
            return False
        return True

    def handle_click(self, x: float, width: float) -> bool:
        if not self.allow_click:
            return False
        # Left third goes back, the rest goes forward.
        if width > 0 and x < width / 3:
            self.controller.prev()
        else:
            self.controller.next()
        return True

    def toggle_fullscreen(self) -> None:
        self.is_fullscreen = not self.is_fullscreen

    def close(self) -> None:
        self.autoplay.stop()
        self.transitions.cancel()
        for unsubscribe in self._unsubscribers:
            unsubscribe()

    # ---- rendering ----

    def frame(self) -> dict[str, Any]:
        """Everything a renderer needs for the current instant."""
        state = self.controller.state
        engine = self.transitions
        return {
            "sessionId": self.id,
            "state": state.to_payload(),
            "config": self.controller.config.to_payload(),
            "fragmentCount": self.controller.fragment_count(state.current_slide),
            "progress": self.controller.progress(),
            "fragments": [s.to_payload() for s in self.reveal.styles(state.current_slide, state.current_fragment)],
            "transition": {
                "phase": engine.phase,
                "progress": engine.progress,
                "fromSlide": engine.from_slide,
                "toSlide": engine.to_slide,
                "layers": [layer.to_payload() for layer in engine.layers()],
            },
            "autoplay": self.autoplay.to_payload(),
            "isFullscreen": self.is_fullscreen,
            "input": {"allowKeyboard": self.allow_keyboard, "allowClick": self.allow_click},
            "ended": self.ended,
        }


# ---- registry helpers used by the routers ----


def create_session(deck: Deck, options: dict[str, Any]) -> PlaybackSession:
    autoplay_raw = options.get("autoplayMs")
    session = PlaybackSession(
        deck,
        scheduler=AsyncioScheduler(),
        loop=bool(options.get("loop", False)),
        initial_slide=int(options.get("initialSlide", 0) or 0),
        initial_fragment=int(options.get("initialFragment", 0) or 0),
        autoplay_ms=float(autoplay_raw) if autoplay_raw is not None else None,
        allow_keyboard=bool(options.get("allowKeyboard", True)),
        allow_click=bool(options.get("allowClick", True)),
    )
    STATE.sessions[session.id] = session
    logger.info("session %s created (%s slides, %s transitions)", session.id, deck.slide_count, len(deck.transitions))
    return session


def get_session(session_id: str) -> PlaybackSession | Response:
    session = STATE.sessions.get((session_id or "").strip())
    if session is None:
        return Response(status_code=404, content="Unknown sessionId", media_type="text/plain")
    return session


def drop_session(session_id: str) -> dict | Response:
    session = STATE.sessions.pop((session_id or "").strip(), None)
    if session is None:
        return Response(status_code=404, content="Unknown sessionId", media_type="text/plain")
    session.close()
    logger.info("session %s closed", session.id)
    return {"ok": True, "sessionId": session.id}
