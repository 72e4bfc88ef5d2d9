from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .config import default_transition_ms, presentation_dir
from .services.deck import Deck, DeckBuilder, DeckError
from .services.fragments import FragmentSpec, fragment_list
from .services.spring import SPRING_CONFIGS, SpringConfig
from .services.transitions import (
    TransitionPresentation,
    TransitionTiming,
    eased_timing,
    fade,
    flip,
    linear_timing,
    slide,
    spring_timing,
    wipe,
)

logger = logging.getLogger("deckplay.content_loader")

DEFAULTS = {"designWidth": 1920.0, "designHeight": 1080.0, "transitionMs": 300}

# Upper bound for a single transition; export samples every frame of it.
MAX_TRANSITION_MS = 60_000


def _load_defaults(pres_dir: Path) -> dict[str, Any]:
    fallback = dict(DEFAULTS, transitionMs=default_transition_ms())
    defaults_path = pres_dir / "defaults.json"
    if not defaults_path.exists():
        return fallback
    try:
        obj = json.loads(defaults_path.read_text(encoding="utf-8"))
        if not isinstance(obj, dict):
            raise ValueError("defaults.json must be an object")
        return {
            "designWidth": float(obj.get("designWidth", fallback["designWidth"])),
            "designHeight": float(obj.get("designHeight", fallback["designHeight"])),
            "transitionMs": int(obj.get("transitionMs", fallback["transitionMs"])),
        }
    except (ValueError, TypeError) as e:
        # Fall back; keep the server resilient.
        logger.warning("ignoring %s: %s", defaults_path, e)
        return fallback


def _spring_config(raw: Any) -> SpringConfig:
    if raw is None:
        return SPRING_CONFIGS["smooth"]
    if isinstance(raw, str):
        cfg = SPRING_CONFIGS.get(raw.strip())
        if cfg is None:
            raise DeckError(f"Unknown spring preset {raw!r}; allowed: {sorted(SPRING_CONFIGS)}")
        return cfg
    if isinstance(raw, dict):
        try:
            return SpringConfig.from_payload(raw)
        except (TypeError, ValueError) as e:
            raise DeckError(f"Invalid spring config {raw!r}: {e}") from e
    raise DeckError(f"spring must be a preset name or an object, got {type(raw).__name__}")


def _fragments(raw_slide: dict[str, Any], slide_no: int) -> list[FragmentSpec]:
    out: list[FragmentSpec] = []
    try:
        for i, f in enumerate(raw_slide.get("fragments") or []):
            if not isinstance(f, dict):
                raise DeckError(f"slide {slide_no}: fragment {i} must be an object")
            out.append(
                FragmentSpec(
                    at=int(f.get("at", 0)),
                    animation=str(f.get("animation") or "fade"),
                    spring_config=_spring_config(f.get("spring")),
                    name=f.get("name"),
                    easing=f.get("easing"),
                )
            )
        seq = raw_slide.get("fragmentList")
        if isinstance(seq, dict):
            out.extend(
                fragment_list(
                    int(seq.get("count", 0)),
                    start_at=int(seq.get("startAt", 0)),
                    animation=str(seq.get("animation") or "fade"),
                    spring_config=_spring_config(seq.get("spring")),
                    easing=seq.get("easing"),
                )
            )
    except DeckError:
        raise
    except (TypeError, ValueError) as e:
        raise DeckError(f"slide {slide_no}: {e}") from e
    return out


def _presentation(raw: Any) -> TransitionPresentation:
    if isinstance(raw, str):
        raw = {"kind": raw}
    if not isinstance(raw, dict):
        raise DeckError("transition.presentation must be a kind name or an object")
    kind = str(raw.get("kind") or "").strip().lower()
    try:
        if kind == "fade":
            return fade(float(raw.get("enterFrom", 0.0)), float(raw.get("exitTo", 0.0)))
        if kind == "slide":
            return slide(str(raw.get("direction") or "from-right"))
        if kind == "wipe":
            return wipe(str(raw.get("direction") or "left"))
        if kind == "flip":
            return flip(str(raw.get("direction") or "horizontal"), float(raw.get("perspective", 1000)))
    except (TypeError, ValueError) as e:
        raise DeckError(f"transition {kind}: {e}") from e
    raise DeckError(f"Unknown transition kind {kind!r}; allowed: ['fade', 'flip', 'slide', 'wipe']")


def _timing(raw: Any, default_ms: int) -> TransitionTiming:
    if raw is None:
        return linear_timing(default_ms)
    if not isinstance(raw, dict):
        raise DeckError("transition.timing must be an object")
    kind = str(raw.get("kind") or "linear").strip().lower()
    try:
        ms = float(raw.get("durationMs", 400 if kind == "spring" else default_ms))
    except (TypeError, ValueError) as e:
        raise DeckError(f"timing {kind}: invalid durationMs: {e}") from e
    if not (0 <= ms <= MAX_TRANSITION_MS):
        # Also rejects NaN.
        raise DeckError(f"timing {kind}: durationMs must be within 0..{MAX_TRANSITION_MS}, got {ms}")
    try:
        if kind == "linear":
            return linear_timing(ms)
        if kind == "eased":
            return eased_timing(ms, str(raw.get("easing") or "ease-in-out"))
        if kind == "spring":
            cfg = raw.get("config") or {}
            return spring_timing(
                ms,
                damping=float(cfg.get("damping", 20)),
                stiffness=float(cfg.get("stiffness", 100)),
                mass=float(cfg.get("mass", 1)),
            )
    except (AttributeError, TypeError, ValueError) as e:
        raise DeckError(f"timing {kind}: {e}") from e
    raise DeckError(f"Unknown timing kind {kind!r}; allowed: ['eased', 'linear', 'spring']")


def parse_deck(payload: dict[str, Any], defaults: dict[str, Any] | None = None) -> Deck:
    """
    Build a Deck from its JSON form:

      { "id": "talk", "width": 1920, "height": 1080,
        "items": [
          { "type": "slide", "name": "intro", "fragmentCount": 3,
            "fragments": [ { "at": 1, "animation": "slide-up", "spring": "bouncy", "easing": "cubic-out" } ],
            "fragmentList": { "count": 2, "startAt": 1, "animation": "fade" } },
          { "type": "transition", "presentation": { "kind": "fade" },
            "timing": { "kind": "linear", "durationMs": 300 } },
          { "type": "slide" }
        ] }

    Items keep their order; a transition applies after the slide before it.
    fragmentCount defaults to one past the highest fragment threshold (min 1).
    """
    if not isinstance(payload, dict):
        raise DeckError("deck must be an object")
    d = defaults or dict(DEFAULTS, transitionMs=default_transition_ms())
    items = payload.get("items")
    if not isinstance(items, list):
        raise DeckError("deck.items must be a list")

    try:
        builder = DeckBuilder(
            width=float(payload.get("width", d["designWidth"])),
            height=float(payload.get("height", d["designHeight"])),
            id=str(payload.get("id") or "default"),
            default_timing=linear_timing(int(d["transitionMs"])),
        )
    except (TypeError, ValueError) as e:
        raise DeckError(f"deck: {e}") from e

    slide_no = 0
    for item in items:
        if not isinstance(item, dict):
            raise DeckError("deck items must be objects")
        kind = str(item.get("type") or "slide").strip().lower()
        if kind == "slide":
            frags = _fragments(item, slide_no)
            derived = max([f.at + 1 for f in frags] + [1])
            try:
                count = int(item.get("fragmentCount", derived))
            except (TypeError, ValueError) as e:
                raise DeckError(f"slide {slide_no}: {e}") from e
            builder.slide(count, name=item.get("name"), fragments=frags)
            slide_no += 1
        elif kind == "transition":
            builder.transition(_presentation(item.get("presentation")), _timing(item.get("timing"), int(d["transitionMs"])))
        else:
            raise DeckError(f"Unknown item type {kind!r}; allowed: ['slide', 'transition']")

    return builder.build()


def load_deck(pres_dir: Path | None = None) -> Deck:
    pres_dir = pres_dir or presentation_dir()
    deck_path = pres_dir / "deck.json"
    if not deck_path.exists():
        raise FileNotFoundError(f"Missing deck.json at {deck_path}")
    defaults = _load_defaults(pres_dir)
    payload = json.loads(deck_path.read_text(encoding="utf-8"))
    return parse_deck(payload, defaults)
