from __future__ import annotations

from typing import Any

import numpy as np

from ..state import PlaybackState
from .deck import Deck
from .scheduler import ManualScheduler
from .spring import get_spring_duration, spring_curve
from .transitions import TransitionDescriptor, TransitionEngine


def export_steps(deck: Deck) -> list[dict[str, Any]]:
    """Fragment styles for every (slide, fragment) step, in playback order."""
    model = deck.reveal_model()
    steps: list[dict[str, Any]] = []
    for s in deck.slides:
        for fragment in range(s.fragment_count):
            steps.append(
                {
                    "slide": s.index,
                    "fragment": fragment,
                    "fragments": [st.to_payload() for st in model.styles(s.index, fragment)],
                }
            )
    return steps


def sample_transition(descriptor: TransitionDescriptor, fps: float = 60) -> dict[str, Any]:
    """
    Play one transition forward on a virtual clock and record every frame.
    Same input, same frames: nothing here reads the wall clock.
    """
    frame_ms = 1000.0 / fps
    scheduler = ManualScheduler()
    a = descriptor.after_slide_index
    engine = TransitionEngine([descriptor], scheduler, initial_slide=a, frame_ms=frame_ms)

    frames: list[dict[str, Any]] = []

    def record(progress: float) -> None:
        frames.append(
            {
                "timeMs": scheduler.now_ms(),
                "progress": progress,
                "layers": [layer.to_payload() for layer in engine.layers()],
            }
        )

    engine.on_frame = record
    engine.observe(PlaybackState(current_slide=a + 1))
    scheduler.run_until_idle(limit_ms=descriptor.timing.duration_ms + 2 * frame_ms)

    # Reference curve on an even grid, independent of the loop cadence.
    grid = np.arange(0.0, descriptor.timing.duration_ms + frame_ms, frame_ms)
    curve = np.array([descriptor.timing.progress(t) for t in grid], dtype=np.float64)
    return {
        "afterSlideIndex": a,
        "kind": descriptor.presentation.kind,
        "timing": descriptor.timing.kind,
        "durationMs": descriptor.timing.duration_ms,
        "frames": frames,
        "curve": {"timeMs": grid.tolist(), "progress": curve.tolist()},
    }


def spring_profiles(deck: Deck) -> list[dict[str, Any]]:
    """Spring progress per fragment over the steps it takes to settle."""
    out: list[dict[str, Any]] = []
    for s in deck.slides:
        for spec in s.fragments:
            cfg = spec.spring_config
            try:
                span = get_spring_duration(cfg)
            except ValueError:
                span = s.fragment_count
            span = max(1, min(span, s.fragment_count))
            curve = spring_curve(range(span + 1), cfg)
            out.append({"slide": s.index, "at": spec.at, "name": spec.name, "progress": curve.tolist()})
    return out


def export_deck(deck: Deck, *, fps: float = 60) -> dict[str, Any]:
    return {
        "config": deck.config().to_payload(),
        "fragmentCounts": deck.fragment_counts,
        "steps": export_steps(deck),
        "springs": spring_profiles(deck),
        "transitions": [sample_transition(t, fps) for t in deck.transitions],
    }
