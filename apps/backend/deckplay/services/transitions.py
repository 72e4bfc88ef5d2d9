from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from ..state import PlaybackState
from .scheduler import Cancellable, Scheduler
from .spring import SpringConfig

logger = logging.getLogger("deckplay.transitions")

Style = dict[str, Any]

IDLE = "idle"
TRANSITIONING = "transitioning"


# ---- Timing curves (wall-clock elapsed ms -> progress) ----


@dataclass(frozen=True)
class TransitionTiming:
    duration_ms: float
    curve: Callable[[float], float]
    kind: str = "linear"

    def __post_init__(self) -> None:
        # The engine settles on `elapsed >= duration_ms`; NaN would never get there.
        _duration(self.duration_ms)

    def progress(self, elapsed_ms: float) -> float:
        return self.curve(elapsed_ms)


def _duration(duration_ms: float) -> float:
    d = float(duration_ms)
    if not math.isfinite(d) or d < 0:
        raise ValueError(f"durationMs must be a finite number >= 0, got {duration_ms!r}")
    return d


def linear_timing(duration_ms: float = 300) -> TransitionTiming:
    d = _duration(duration_ms)

    def curve(elapsed: float) -> float:
        if d <= 0:
            return 1.0
        return min(max(elapsed, 0.0) / d, 1.0)

    return TransitionTiming(duration_ms=d, curve=curve, kind="linear")


def _ease_in_out(t: float) -> float:
    return 2 * t * t if t < 0.5 else 1 - math.pow(-2 * t + 2, 2) / 2


EASED_CURVES: dict[str, Callable[[float], float]] = {
    "linear": lambda t: t,
    "ease": _ease_in_out,
    "ease-in": lambda t: t * t,
    "ease-out": lambda t: 1 - (1 - t) * (1 - t),
    "ease-in-out": _ease_in_out,
}


def eased_timing(duration_ms: float = 300, easing: str = "ease-in-out") -> TransitionTiming:
    if easing not in EASED_CURVES:
        raise ValueError(f"Unknown easing={easing!r}; allowed: {sorted(EASED_CURVES)}")
    fn = EASED_CURVES[easing]
    base = linear_timing(duration_ms)

    def curve(elapsed: float) -> float:
        return fn(base.progress(elapsed))

    return TransitionTiming(duration_ms=base.duration_ms, curve=curve, kind=f"eased:{easing}")


def spring_timing(
    duration_ms: float = 400,
    *,
    damping: float = 20,
    stiffness: float = 100,
    mass: float = 1,
) -> TransitionTiming:
    """
    Spring-shaped progress; the whole duration covers 4 time units of the
    oscillator. Unlike fragment springs this one runs on the wall clock.
    """
    d = _duration(duration_ms)
    # Same parameter rules as fragment springs.
    cfg = SpringConfig(mass=mass, damping=damping, stiffness=stiffness)
    omega0 = cfg.omega0
    zeta = cfg.zeta

    def curve(elapsed: float) -> float:
        t = elapsed / d if d > 0 else 1.0
        if t >= 1:
            return 1.0
        tt = max(t, 0.0) * 4
        if zeta >= 1:
            return 1 - math.exp(-zeta * omega0 * tt) * (1 + zeta * omega0 * tt)
        omega_d = omega0 * math.sqrt(1 - zeta * zeta)
        return 1 - math.exp(-zeta * omega0 * tt) * math.cos(omega_d * tt)

    return TransitionTiming(duration_ms=d, curve=curve, kind="spring")


# ---- Presentations (progress -> CSS-like style) ----


@dataclass(frozen=True)
class TransitionPresentation:
    enter: Callable[[float], Style]
    exit: Callable[[float], Style]
    kind: str = "custom"


def fade(enter_from: float = 0.0, exit_to: float = 0.0) -> TransitionPresentation:
    return TransitionPresentation(
        enter=lambda p: {"opacity": enter_from + (1 - enter_from) * p},
        exit=lambda p: {"opacity": 1 - (1 - exit_to) * p},
        kind="fade",
    )


SLIDE_DIRECTIONS = ("from-left", "from-right", "from-top", "from-bottom")


def slide(direction: str = "from-right") -> TransitionPresentation:
    if direction not in SLIDE_DIRECTIONS:
        raise ValueError(f"Unknown slide direction={direction!r}; allowed: {list(SLIDE_DIRECTIONS)}")
    axis = "X" if direction in ("from-left", "from-right") else "Y"
    # Sign of the entering slide's start offset; the exiting slide moves the other way.
    sign = -1 if direction in ("from-left", "from-top") else 1

    def transform(progress: float, is_enter: bool) -> Style:
        offset = (1 - progress) if is_enter else progress
        pct = (sign if is_enter else -sign) * offset * 100
        return {"transform": f"translate{axis}({pct}%)"}

    return TransitionPresentation(
        enter=lambda p: transform(p, True),
        exit=lambda p: transform(p, False),
        kind="slide",
    )


WIPE_DIRECTIONS = ("left", "right", "up", "down")


def wipe(direction: str = "left") -> TransitionPresentation:
    if direction not in WIPE_DIRECTIONS:
        raise ValueError(f"Unknown wipe direction={direction!r}; allowed: {list(WIPE_DIRECTIONS)}")

    def clip(progress: float, is_enter: bool) -> Style:
        hidden = (1 - (progress if is_enter else 1 - progress)) * 100
        # inset(top right bottom left)
        edges = {
            "left": f"0 {hidden}% 0 0",
            "right": f"0 0 0 {hidden}%",
            "up": f"0 0 {hidden}% 0",
            "down": f"{hidden}% 0 0 0",
        }
        return {"clipPath": f"inset({edges[direction]})"}

    return TransitionPresentation(
        enter=lambda p: clip(p, True),
        exit=lambda p: clip(p, False),
        kind="wipe",
    )


FLIP_DIRECTIONS = ("horizontal", "vertical")


def flip(direction: str = "horizontal", perspective: float = 1000) -> TransitionPresentation:
    if direction not in FLIP_DIRECTIONS:
        raise ValueError(f"Unknown flip direction={direction!r}; allowed: {list(FLIP_DIRECTIONS)}")
    axis = "Y" if direction == "horizontal" else "X"
    return TransitionPresentation(
        enter=lambda p: {
            "transform": f"perspective({perspective}px) rotate{axis}({(1 - p) * -90}deg)",
            "backfaceVisibility": "hidden",
        },
        exit=lambda p: {
            "transform": f"perspective({perspective}px) rotate{axis}({p * 90}deg)",
            "backfaceVisibility": "hidden",
        },
        kind="flip",
    )


@dataclass(frozen=True)
class TransitionDescriptor:
    """Effect played across the boundary between `after_slide_index` and the next slide."""

    presentation: TransitionPresentation
    timing: TransitionTiming
    after_slide_index: int


@dataclass(frozen=True)
class Layer:
    slide_index: int
    role: str  # "enter" | "exit"
    z_index: int
    style: Style

    def to_payload(self) -> dict[str, Any]:
        return {"slideIndex": self.slide_index, "role": self.role, "zIndex": self.z_index, "style": self.style}


# ---- Engine ----


class TransitionEngine:
    """
    Idle -> Transitioning -> Idle.

    `observe` is fed every new PlaybackState. A slide-index change looks up the
    descriptor at min(old, new); without one the change is an instant cut.
    Otherwise a sampling loop on `scheduler` updates `progress` every
    `frame_ms` until the timing's duration has elapsed, then settles at 1 and
    calls `on_settle` once.

    A slide change that arrives mid-transition abandons the running loop and
    restarts from progress 0 for the latest (previous, current) pair.
    """

    def __init__(
        self,
        transitions: Sequence[TransitionDescriptor],
        scheduler: Scheduler,
        *,
        initial_slide: int = 0,
        frame_ms: float = 16,
        on_frame: Callable[[float], None] | None = None,
        on_settle: Callable[[int, int], None] | None = None,
    ) -> None:
        self._by_boundary: dict[int, TransitionDescriptor] = {}
        for t in transitions:
            self._by_boundary.setdefault(t.after_slide_index, t)
        self._scheduler = scheduler
        self._frame_ms = max(1.0, float(frame_ms))
        self.on_frame = on_frame
        self.on_settle = on_settle

        self.phase = IDLE
        self.progress = 1.0
        self.from_slide = initial_slide
        self.to_slide = initial_slide
        self.active: TransitionDescriptor | None = None
        self._started_ms = 0.0
        self._handle: Cancellable | None = None

    @property
    def is_transitioning(self) -> bool:
        return self.phase == TRANSITIONING

    @property
    def forward(self) -> bool:
        return self.to_slide > self.from_slide

    def descriptor_for(self, a: int, b: int) -> TransitionDescriptor | None:
        return self._by_boundary.get(min(a, b))

    def observe(self, state: PlaybackState) -> None:
        new_slide = state.current_slide
        if new_slide == self.to_slide:
            # Fragment-only change.
            return
        self._cancel()
        prev_slide = self.to_slide
        self.from_slide = prev_slide
        self.to_slide = new_slide

        descriptor = self.descriptor_for(prev_slide, new_slide)
        if descriptor is None:
            self.phase = IDLE
            self.active = None
            self.progress = 1.0
            logger.debug("cut %s -> %s (no transition)", prev_slide, new_slide)
            return

        if self.phase == TRANSITIONING:
            logger.debug("transition restarted mid-flight: %s -> %s", prev_slide, new_slide)
        self.phase = TRANSITIONING
        self.active = descriptor
        self.progress = 0.0
        self._started_ms = self._scheduler.now_ms()
        self._handle = self._scheduler.schedule(self._tick, self._frame_ms)

    def on_state_change(self, old: PlaybackState, new: PlaybackState) -> None:
        """NavigationController listener adapter."""
        self.observe(new)

    def _tick(self) -> None:
        self._handle = None
        if self.active is None or self.phase != TRANSITIONING:
            return
        elapsed = self._scheduler.now_ms() - self._started_ms
        if elapsed >= self.active.timing.duration_ms:
            self._settle()
            return
        try:
            progress = float(self.active.timing.progress(elapsed))
        except Exception:
            logger.exception("timing %r failed at %.1f ms; settling", self.active.timing.kind, elapsed)
            self._settle()
            return
        if not math.isfinite(progress):
            logger.warning("timing %r produced %r at %.1f ms; settling", self.active.timing.kind, progress, elapsed)
            self._settle()
            return
        self.progress = progress
        self._emit(self.on_frame, self.progress)
        self._handle = self._scheduler.schedule(self._tick, self._frame_ms)

    def _settle(self) -> None:
        self.phase = IDLE
        self.progress = 1.0
        self._emit(self.on_frame, 1.0)
        self._emit(self.on_settle, self.from_slide, self.to_slide)

    def layers(self) -> list[Layer]:
        """
        Layer stack for the renderer. While transitioning: the exiting slide
        below the entering one when moving forward, above it when moving back.
        """
        if self.phase != TRANSITIONING or self.active is None:
            return [Layer(slide_index=self.to_slide, role="enter", z_index=1, style={})]
        pres = self.active.presentation
        fwd = self.forward
        return [
            Layer(slide_index=self.from_slide, role="exit", z_index=1 if fwd else 2, style=pres.exit(self.progress)),
            Layer(slide_index=self.to_slide, role="enter", z_index=2 if fwd else 1, style=pres.enter(self.progress)),
        ]

    def cancel(self) -> None:
        """Tear down: drop any running loop and jump to the target slide."""
        self._cancel()
        self.phase = IDLE
        self.progress = 1.0

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @staticmethod
    def _emit(fn: Callable[..., None] | None, *args: object) -> None:
        if fn is None:
            return
        try:
            fn(*args)
        except Exception:
            logger.exception("transition callback %r failed", fn)
