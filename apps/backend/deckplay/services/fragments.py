from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from . import easing as easings
from .interpolate import interpolate
from .spring import SPRING_CONFIGS, SpringConfig, spring

ANIMATIONS = ("fade", "slide-up", "slide-down", "slide-left", "slide-right", "scale", "none")

# Travel distance (px) of the slide-* reveals at progress 0.
SLIDE_DISTANCE = 20.0


@dataclass(frozen=True)
class FragmentSpec:
    at: int = 0
    animation: str = "fade"
    spring_config: SpringConfig = field(default_factory=lambda: SPRING_CONFIGS["smooth"])
    name: str | None = None
    # Optional easing name (see easing.by_name) applied to opacity and offsets.
    easing: str | None = None

    def __post_init__(self) -> None:
        if self.animation not in ANIMATIONS:
            raise ValueError(f"Unsupported animation={self.animation!r}; allowed: {list(ANIMATIONS)}")
        if self.easing is not None:
            easings.by_name(self.easing)


@dataclass(frozen=True)
class FragmentStyle:
    visible: bool
    progress: float
    animation: str
    opacity: float | None = None
    translate_x: float | None = None
    translate_y: float | None = None
    scale: float | None = None
    name: str | None = None

    def to_css(self) -> dict[str, Any]:
        """CSS-like descriptor; `none` fragments carry no interpolated fields."""
        if self.animation == "none":
            return {"display": None if self.visible else "none"}
        css: dict[str, Any] = {"opacity": self.opacity, "willChange": "opacity, transform"}
        if self.translate_y is not None:
            css["transform"] = f"translateY({self.translate_y}px)"
        elif self.translate_x is not None:
            css["transform"] = f"translateX({self.translate_x}px)"
        elif self.scale is not None:
            css["transform"] = f"scale({self.scale})"
        return css

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "visible": self.visible,
            "progress": self.progress,
            "animation": self.animation,
            "style": self.to_css(),
        }


def reveal(current_fragment: int, spec: FragmentSpec) -> FragmentStyle:
    """
    Style of one fragment at the given slide-local fragment index.
    Depends only on its arguments.
    """
    visible = current_fragment >= spec.at
    progress = spring(current_fragment - spec.at, spec.spring_config) if visible else 0.0
    kind = spec.animation

    if kind == "none":
        return FragmentStyle(visible=visible, progress=progress, animation=kind, name=spec.name)

    ease = easings.by_name(spec.easing) if spec.easing else None

    def tween(start: float, end: float) -> float:
        return interpolate(progress, [0, 1], [start, end], easing=ease)

    style = FragmentStyle(visible=visible, progress=progress, animation=kind, opacity=tween(0, 1), name=spec.name)
    if kind == "slide-up":
        return replace(style, translate_y=tween(SLIDE_DISTANCE, 0))
    if kind == "slide-down":
        return replace(style, translate_y=tween(-SLIDE_DISTANCE, 0))
    if kind == "slide-left":
        return replace(style, translate_x=tween(SLIDE_DISTANCE, 0))
    if kind == "slide-right":
        return replace(style, translate_x=tween(-SLIDE_DISTANCE, 0))
    if kind == "scale":
        return replace(style, scale=tween(0.9, 1.0))
    return style


def fragment_list(
    count: int,
    *,
    start_at: int = 0,
    animation: str = "fade",
    spring_config: SpringConfig | None = None,
    easing: str | None = None,
) -> list[FragmentSpec]:
    """Sequential fragments revealed one per step, starting at `start_at`."""
    cfg = spring_config or SPRING_CONFIGS["smooth"]
    return [
        FragmentSpec(at=start_at + i, animation=animation, spring_config=cfg, easing=easing) for i in range(count)
    ]


class FragmentRevealModel:
    """
    Per-slide fragment declarations, queried with an explicit fragment index.
    Holds no playback state of its own.
    """

    def __init__(self, fragments_by_slide: dict[int, list[FragmentSpec]] | None = None) -> None:
        self._fragments: dict[int, tuple[FragmentSpec, ...]] = {
            k: tuple(v) for k, v in (fragments_by_slide or {}).items()
        }

    def fragments(self, slide_index: int) -> tuple[FragmentSpec, ...]:
        return self._fragments.get(slide_index, ())

    def styles(self, slide_index: int, fragment_index: int) -> list[FragmentStyle]:
        return [reveal(fragment_index, spec) for spec in self.fragments(slide_index)]
