from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .services.session_service import PlaybackSession


@dataclass(frozen=True)
class PlaybackState:
    """
    Where playback currently is.
    - Frozen: the navigation controller swaps in a new record on every change,
      so readers always hold a consistent snapshot.
    """

    current_slide: int = 0
    current_fragment: int = 0
    is_presenter_mode: bool = False

    def to_payload(self) -> dict:
        return {
            "currentSlide": self.current_slide,
            "currentFragment": self.current_fragment,
            "isPresenterMode": self.is_presenter_mode,
        }


@dataclass(frozen=True)
class PresentationConfig:
    slide_count: int = 0
    width: float = 1920
    height: float = 1080
    id: str = "default"

    def to_payload(self) -> dict:
        return {"id": self.id, "width": self.width, "height": self.height, "slideCount": self.slide_count}


@dataclass
class AppState:
    # Live playback sessions keyed by session id.
    sessions: dict[str, PlaybackSession] = field(default_factory=dict)


STATE = AppState()
