"""Tests for transition timings, presentations and the TransitionEngine."""

import pytest

from apps.backend.deckplay.services.transitions import (
    IDLE,
    TRANSITIONING,
    TransitionDescriptor,
    TransitionEngine,
    TransitionTiming,
    eased_timing,
    fade,
    flip,
    linear_timing,
    slide,
    spring_timing,
    wipe,
)
from apps.backend.deckplay.state import PlaybackState


def at(slide_index, fragment=0):
    return PlaybackState(current_slide=slide_index, current_fragment=fragment)


# ---- timings ----


def test_linear_timing():
    timing = linear_timing(300)
    assert timing.progress(0) == 0
    assert timing.progress(150) == 0.5
    assert timing.progress(300) == 1
    assert timing.progress(1000) == 1
    assert timing.progress(-20) == 0


def test_zero_duration_is_complete_immediately():
    assert linear_timing(0).progress(0) == 1.0


def test_eased_timing_curves():
    assert eased_timing(300, "ease-in").progress(150) == pytest.approx(0.25)
    assert eased_timing(300, "ease-out").progress(150) == pytest.approx(0.75)
    assert eased_timing(300, "ease-in-out").progress(150) == pytest.approx(0.5)
    assert eased_timing(300, "ease").kind == "eased:ease"


def test_eased_timing_rejects_unknown_curve():
    with pytest.raises(ValueError):
        eased_timing(300, "wobble")


def test_spring_timing_reaches_one_at_duration():
    timing = spring_timing(400)
    assert timing.progress(0) == pytest.approx(0.0)
    assert 0 < timing.progress(100) < 1
    assert timing.progress(400) == 1.0
    assert timing.kind == "spring"


# ---- presentations ----


def test_fade_opacity():
    pres = fade()
    assert pres.enter(0.25) == {"opacity": 0.25}
    assert pres.exit(0.25) == {"opacity": 0.75}
    assert fade(enter_from=0.5).enter(0) == {"opacity": 0.5}


def test_slide_from_right():
    pres = slide("from-right")
    assert pres.enter(0.0) == {"transform": "translateX(100.0%)"}
    assert pres.exit(0.5) == {"transform": "translateX(-50.0%)"}


def test_slide_from_top_uses_y_axis():
    pres = slide("from-top")
    assert pres.enter(0.0) == {"transform": "translateY(-100.0%)"}
    assert pres.exit(1.0) == {"transform": "translateY(100.0%)"}


def test_wipe_left_clip_path():
    pres = wipe("left")
    assert pres.enter(0.25) == {"clipPath": "inset(0 75.0% 0 0)"}
    assert pres.exit(0.25) == {"clipPath": "inset(0 25.0% 0 0)"}


def test_flip_rotation():
    style = flip().enter(0.5)
    assert style["transform"] == "perspective(1000px) rotateY(-45.0deg)"
    assert style["backfaceVisibility"] == "hidden"
    assert "rotateX" in flip("vertical").exit(0.5)["transform"]


@pytest.mark.parametrize("factory,direction", [(slide, "diagonal"), (wipe, "sideways"), (flip, "spin")])
def test_unknown_directions_rejected(factory, direction):
    with pytest.raises(ValueError):
        factory(direction)


# ---- engine ----


@pytest.fixture
def engine_events():
    return {"frames": [], "settled": []}


@pytest.fixture
def engine(clock, engine_events):
    return TransitionEngine(
        [TransitionDescriptor(fade(), linear_timing(300), after_slide_index=0)],
        clock,
        frame_ms=50,
        on_frame=engine_events["frames"].append,
        on_settle=lambda a, b: engine_events["settled"].append((a, b)),
    )


def test_engine_starts_idle(engine):
    assert engine.phase == IDLE
    assert engine.progress == 1.0
    assert [layer.to_payload() for layer in engine.layers()] == [
        {"slideIndex": 0, "role": "enter", "zIndex": 1, "style": {}}
    ]


def test_engine_runs_to_settle(engine, engine_events, clock):
    engine.observe(at(1))
    assert engine.phase == TRANSITIONING
    assert engine.progress == 0.0

    clock.advance(150)
    assert engine.progress == pytest.approx(0.5)
    assert engine.phase == TRANSITIONING

    clock.advance(150)
    assert engine.phase == IDLE
    assert engine.progress == 1.0
    assert engine_events["frames"][-1] == 1.0
    assert engine_events["settled"] == [(0, 1)]
    assert clock.pending == 0


def test_progress_is_monotonic(engine, engine_events, clock):
    engine.observe(at(1))
    clock.run_until_idle()
    frames = engine_events["frames"]
    assert frames == sorted(frames)
    assert frames[-1] == 1.0
    assert engine_events["settled"] == [(0, 1)]


def test_forward_layers_put_entering_slide_on_top(engine, clock):
    engine.observe(at(1))
    clock.advance(150)
    exit_layer, enter_layer = engine.layers()
    assert (exit_layer.slide_index, exit_layer.role, exit_layer.z_index) == (0, "exit", 1)
    assert (enter_layer.slide_index, enter_layer.role, enter_layer.z_index) == (1, "enter", 2)
    assert enter_layer.style == {"opacity": pytest.approx(0.5)}


def test_backward_uses_same_boundary_with_exit_on_top(engine, clock):
    engine.observe(at(1))
    clock.run_until_idle()
    engine.observe(at(0))
    assert engine.phase == TRANSITIONING
    exit_layer, enter_layer = engine.layers()
    assert (exit_layer.slide_index, exit_layer.z_index) == (1, 2)
    assert (enter_layer.slide_index, enter_layer.z_index) == (0, 1)


def test_missing_descriptor_is_an_instant_cut(engine, engine_events, clock):
    engine.observe(at(1))
    clock.run_until_idle()
    engine.observe(at(2))
    assert engine.phase == IDLE
    assert engine.to_slide == 2
    assert clock.pending == 0
    assert engine_events["settled"] == [(0, 1)]


def test_fragment_only_changes_are_ignored(engine, clock):
    engine.observe(at(0, 2))
    assert engine.phase == IDLE
    assert clock.pending == 0


def test_mid_transition_change_restarts_from_zero(engine, engine_events, clock):
    engine.observe(at(1))
    clock.advance(100)
    engine.observe(at(0))
    assert engine.phase == TRANSITIONING
    assert engine.progress == 0.0
    assert (engine.from_slide, engine.to_slide) == (1, 0)
    assert clock.pending == 1
    clock.run_until_idle()
    assert engine_events["settled"] == [(1, 0)]


def test_first_descriptor_per_boundary_wins(clock):
    engine = TransitionEngine(
        [
            TransitionDescriptor(fade(), linear_timing(100), after_slide_index=0),
            TransitionDescriptor(wipe(), linear_timing(900), after_slide_index=0),
        ],
        clock,
    )
    assert engine.descriptor_for(0, 1).timing.duration_ms == 100


def test_cancel_stops_the_loop(engine, clock):
    engine.observe(at(1))
    engine.cancel()
    assert engine.phase == IDLE
    assert clock.pending == 0


def test_callback_errors_do_not_stop_the_engine(clock):
    def boom(progress):
        raise RuntimeError("renderer gone")

    engine = TransitionEngine(
        [TransitionDescriptor(fade(), linear_timing(100), after_slide_index=0)], clock, frame_ms=20, on_frame=boom
    )
    engine.observe(at(1))
    clock.run_until_idle()
    assert engine.phase == IDLE


@pytest.mark.parametrize(
    "kwargs",
    [{"mass": 0}, {"stiffness": 0}, {"damping": -50}],
)
def test_spring_timing_rejects_invalid_parameters(kwargs):
    with pytest.raises(ValueError):
        spring_timing(400, **kwargs)


@pytest.mark.parametrize("duration", [float("nan"), float("inf"), -1])
def test_timings_reject_unusable_durations(duration):
    with pytest.raises(ValueError):
        linear_timing(duration)
    with pytest.raises(ValueError):
        spring_timing(duration)
    with pytest.raises(ValueError):
        TransitionTiming(duration_ms=duration, curve=lambda e: 1.0)


def test_failing_timing_curve_settles_the_engine(clock, caplog):
    def broken(elapsed):
        raise ArithmeticError("bad curve")

    settled = []
    engine = TransitionEngine(
        [TransitionDescriptor(fade(), TransitionTiming(300, broken, kind="broken"), after_slide_index=0)],
        clock,
        frame_ms=50,
        on_settle=lambda a, b: settled.append((a, b)),
    )
    engine.observe(at(1))
    clock.run_until_idle()
    assert engine.phase == IDLE
    assert engine.progress == 1.0
    assert settled == [(0, 1)]
    assert clock.pending == 0
    assert "settling" in caplog.text


def test_non_finite_progress_settles_the_engine(clock):
    engine = TransitionEngine(
        [TransitionDescriptor(fade(), TransitionTiming(300, lambda e: float("nan"), kind="nan"), after_slide_index=0)],
        clock,
        frame_ms=50,
    )
    engine.observe(at(1))
    clock.advance(50)
    assert engine.phase == IDLE
    assert engine.progress == 1.0
    assert clock.pending == 0
