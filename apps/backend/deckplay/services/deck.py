from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from ..state import PresentationConfig
from .fragments import FragmentRevealModel, FragmentSpec
from .transitions import TransitionDescriptor, TransitionPresentation, TransitionTiming, linear_timing


class DeckError(ValueError):
    """Malformed deck content; raised while the deck is assembled."""


@dataclass(frozen=True)
class SlideSpec:
    index: int
    fragment_count: int = 1
    name: str | None = None
    fragments: tuple[FragmentSpec, ...] = ()


@dataclass(frozen=True)
class Deck:
    slides: tuple[SlideSpec, ...]
    transitions: tuple[TransitionDescriptor, ...] = ()
    width: float = 1920
    height: float = 1080
    id: str = "default"

    @property
    def slide_count(self) -> int:
        return len(self.slides)

    @property
    def fragment_counts(self) -> list[int]:
        return [s.fragment_count for s in self.slides]

    def config(self) -> PresentationConfig:
        return PresentationConfig(slide_count=self.slide_count, width=self.width, height=self.height, id=self.id)

    def reveal_model(self) -> FragmentRevealModel:
        return FragmentRevealModel({s.index: list(s.fragments) for s in self.slides if s.fragments})

    def slide_index(self, name: str) -> int | None:
        for s in self.slides:
            if s.name == name:
                return s.index
        return None


@dataclass
class DeckBuilder:
    """
    Ordered slides and transitions, assembled once before playback.

        deck = (DeckBuilder()
                .slide(fragment_count=3)
                .transition(fade(), linear_timing(300))
                .slide()
                .build())

    A transition binds to the boundary after the most recently added slide.
    """

    width: float = 1920
    height: float = 1080
    id: str = "default"
    default_timing: TransitionTiming = field(default_factory=lambda: linear_timing(300))
    _slides: list[SlideSpec] = field(default_factory=list)
    _transitions: list[TransitionDescriptor] = field(default_factory=list)

    def slide(
        self,
        fragment_count: int = 1,
        *,
        name: str | None = None,
        fragments: Sequence[FragmentSpec] = (),
    ) -> DeckBuilder:
        if fragment_count < 1:
            raise DeckError(f"slide {len(self._slides)}: fragmentCount must be >= 1, got {fragment_count}")
        if name is not None and any(s.name == name for s in self._slides):
            raise DeckError(f"duplicate slide name {name!r}")
        self._slides.append(
            SlideSpec(index=len(self._slides), fragment_count=fragment_count, name=name, fragments=tuple(fragments))
        )
        return self

    def transition(self, presentation: TransitionPresentation, timing: TransitionTiming | None = None) -> DeckBuilder:
        after = len(self._slides) - 1
        if after < 0:
            raise DeckError("a transition must follow a slide")
        if any(t.after_slide_index == after for t in self._transitions):
            raise DeckError(f"slide {after} already has a transition after it")
        self._transitions.append(
            TransitionDescriptor(presentation=presentation, timing=timing or self.default_timing, after_slide_index=after)
        )
        return self

    def build(self) -> Deck:
        return Deck(
            slides=tuple(self._slides),
            transitions=tuple(self._transitions),
            width=self.width,
            height=self.height,
            id=self.id,
        )
