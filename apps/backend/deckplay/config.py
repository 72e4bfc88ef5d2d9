from __future__ import annotations

import os
from pathlib import Path


REPO_ROOT = Path(__file__).resolve().parents[3]


def presentation_dir() -> Path:
    """
    Directory holding deck.json (and optional defaults.json).
    Prefer DECKPLAY_PRESENTATION_DIR, otherwise presentations/default under the repo.
    """
    raw = (os.environ.get("DECKPLAY_PRESENTATION_DIR") or "").strip()
    return Path(raw) if raw else REPO_ROOT / "presentations" / "default"


def _env_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        v = int(float(raw))
    except ValueError:
        return default
    return v if v > 0 else default


def frame_interval_ms() -> int:
    # Sampling period of the transition loop (~60 fps by default).
    return _env_int("DECKPLAY_FRAME_MS", 16)


def default_transition_ms() -> int:
    return _env_int("DECKPLAY_TRANSITION_MS", 300)


def log_level() -> str:
    return (os.environ.get("DECKPLAY_LOG_LEVEL") or "INFO").strip().upper() or "INFO"


DEV_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]
