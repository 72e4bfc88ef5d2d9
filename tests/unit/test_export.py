"""Tests for deterministic batch export."""

import pytest

from apps.backend.deckplay.services.export_service import export_deck, export_steps, sample_transition
from apps.backend.deckplay.services.transitions import TransitionDescriptor, fade, linear_timing


def test_export_is_deterministic(sample_deck):
    assert export_deck(sample_deck, fps=30) == export_deck(sample_deck, fps=30)


def test_steps_cover_every_fragment(sample_deck):
    steps = export_steps(sample_deck)
    assert [(s["slide"], s["fragment"]) for s in steps] == [(0, 0), (0, 1), (0, 2), (1, 0), (2, 0), (2, 1)]
    assert [f["visible"] for f in steps[2]["fragments"]] == [True, True]
    assert steps[3]["fragments"] == []
    assert steps[5]["fragments"][0]["name"] == "outro"


def test_sample_transition_frames():
    result = sample_transition(TransitionDescriptor(fade(), linear_timing(300), after_slide_index=0), fps=10)
    assert result["kind"] == "fade"
    assert result["timing"] == "linear"
    assert result["durationMs"] == 300
    assert [f["timeMs"] for f in result["frames"]] == pytest.approx([100, 200, 300])
    assert [f["progress"] for f in result["frames"]] == pytest.approx([1 / 3, 2 / 3, 1.0])
    mid = result["frames"][0]["layers"]
    assert [(layer["slideIndex"], layer["role"]) for layer in mid] == [(0, "exit"), (1, "enter")]
    # The settled frame shows only the target slide.
    assert [layer["slideIndex"] for layer in result["frames"][-1]["layers"]] == [1]


def test_sample_transition_reference_curve():
    result = sample_transition(TransitionDescriptor(fade(), linear_timing(300), after_slide_index=2), fps=10)
    assert result["afterSlideIndex"] == 2
    assert result["curve"]["timeMs"] == pytest.approx([0, 100, 200, 300])
    assert result["curve"]["progress"] == pytest.approx([0, 1 / 3, 2 / 3, 1])


def test_export_deck_shape(sample_deck):
    out = export_deck(sample_deck, fps=60)
    assert out["config"]["slideCount"] == 3
    assert out["fragmentCounts"] == [3, 1, 2]
    assert len(out["transitions"]) == 2
    assert all(t["frames"][-1]["progress"] == 1.0 for t in out["transitions"])
    assert len(out["springs"]) == 3
    assert all(p["progress"][0] == pytest.approx(0.0) for p in out["springs"])
