import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so `import apps.backend.deckplay` works
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from apps.backend.deckplay.services.deck import DeckBuilder  # noqa: E402
from apps.backend.deckplay.services.fragments import FragmentSpec, fragment_list  # noqa: E402
from apps.backend.deckplay.services.scheduler import ManualScheduler  # noqa: E402
from apps.backend.deckplay.services.transitions import fade, linear_timing, slide  # noqa: E402


@pytest.fixture
def clock():
    return ManualScheduler()


@pytest.fixture
def sample_deck():
    """Three slides: 3 steps, 1 step, 2 steps; fade after slide 0, slide-in after slide 1."""
    return (
        DeckBuilder(id="sample")
        .slide(3, name="intro", fragments=fragment_list(2, start_at=1, animation="slide-up"))
        .transition(fade(), linear_timing(300))
        .slide(1, name="middle")
        .transition(slide("from-right"), linear_timing(200))
        .slide(2, name="end", fragments=[FragmentSpec(at=1, animation="scale", name="outro")])
        .build()
    )


@pytest.fixture
def sample_deck_payload():
    return {
        "id": "api-deck",
        "items": [
            {"type": "slide", "name": "a", "fragmentCount": 3},
            {"type": "transition", "presentation": {"kind": "fade"}, "timing": {"kind": "linear", "durationMs": 300}},
            {"type": "slide", "name": "b"},
        ],
    }
