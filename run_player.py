from __future__ import annotations

import json
import logging
import os
import signal
import subprocess
import sys
import time
from pathlib import Path

from apps.backend.deckplay.config import log_level, presentation_dir

logger = logging.getLogger("deckplay.run_player")

SAMPLE_DECK = {
    "id": "sample",
    "items": [
        {"type": "slide", "name": "title"},
        {"type": "transition", "presentation": {"kind": "fade"}, "timing": {"kind": "linear", "durationMs": 300}},
        {
            "type": "slide",
            "name": "points",
            "fragmentList": {"count": 3, "startAt": 1, "animation": "slide-up", "spring": "smooth"},
        },
        {"type": "transition", "presentation": {"kind": "slide", "direction": "from-right"}, "timing": {"kind": "spring"}},
        {"type": "slide", "name": "end"},
    ],
}


def _repo_root() -> Path:
    return Path(__file__).resolve().parent


def _ensure_sample_deck(pres_dir: Path) -> None:
    # Write a small deck on first run so POST /api/sessions works without a payload.
    deck_path = pres_dir / "deck.json"
    if deck_path.exists():
        return
    pres_dir.mkdir(parents=True, exist_ok=True)
    deck_path.write_text(json.dumps(SAMPLE_DECK, indent=2), encoding="utf-8")
    logger.info("wrote sample deck: %s", deck_path)


def _run_with_env(cmd: list[str], *, cwd: Path, env_overrides: dict[str, str]) -> subprocess.Popen:
    env = os.environ.copy()
    env.update(env_overrides)
    return subprocess.Popen(cmd, cwd=str(cwd), env=env, stdout=None, stderr=None, shell=False)


def main() -> int:
    logging.basicConfig(level=log_level(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    root = _repo_root()
    port = os.environ.get("DECKPLAY_PORT", "8000").strip() or "8000"

    _ensure_sample_deck(presentation_dir())

    backend_cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "apps.backend.deckplay.main:app",
        "--port",
        port,
        "--log-level",
        log_level().lower(),
    ]
    if os.environ.get("DECKPLAY_RELOAD", "").strip() in {"1", "true", "yes"}:
        backend_cmd.append("--reload")

    proc = _run_with_env(backend_cmd, cwd=root, env_overrides={"DECKPLAY_PRESENTATION_DIR": str(presentation_dir())})
    logger.info("Backend API: http://localhost:%s/api/health", port)
    logger.info("Press Ctrl+C to stop.")

    try:
        while True:
            code = proc.poll()
            if code is not None:
                logger.error("backend exited with code %s", code)
                return code
            time.sleep(0.2)
    except KeyboardInterrupt:
        return 0
    finally:
        if proc.poll() is None:
            if sys.platform.startswith("win"):
                proc.terminate()
            else:
                proc.send_signal(signal.SIGTERM)
            try:
                proc.wait(timeout=3)
            except subprocess.TimeoutExpired:
                proc.kill()


if __name__ == "__main__":
    raise SystemExit(main())
