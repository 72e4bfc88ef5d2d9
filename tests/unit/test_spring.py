"""Tests for the fragment-driven spring solver."""

import math

import numpy as np
import pytest

from apps.backend.deckplay.services.spring import (
    SPRING_CONFIGS,
    SpringConfig,
    get_spring_duration,
    spring,
    spring_curve,
)

UNDERDAMPED = ["default", "bouncy", "snappy", "heavy"]


@pytest.mark.parametrize("preset", sorted(SPRING_CONFIGS))
def test_starts_at_from(preset):
    cfg = SPRING_CONFIGS[preset]
    assert spring(0, cfg) == pytest.approx(0.0, abs=1e-12)
    assert spring(0, cfg, from_=5, to=10) == pytest.approx(5.0)


@pytest.mark.parametrize("preset", UNDERDAMPED)
def test_settles_within_tolerance_after_duration(preset):
    cfg = SPRING_CONFIGS[preset]
    duration = get_spring_duration(cfg)
    for f in range(duration, duration + 10):
        assert abs(spring(f, cfg) - 1.0) <= 0.001


def test_known_durations():
    assert get_spring_duration(SPRING_CONFIGS["default"]) == 3
    assert get_spring_duration(SPRING_CONFIGS["bouncy"]) == 4
    assert get_spring_duration(SPRING_CONFIGS["smooth"]) == 1
    assert get_spring_duration() == 3


def test_overshoot_is_clamped():
    cfg = SPRING_CONFIGS["bouncy"]
    values = [spring(f, cfg) for f in range(0, 12)]
    assert max(values) <= 1.0


def test_before_delay_returns_from():
    assert spring(1, delay=2) == 0.0
    assert spring(1, delay=2, from_=3, to=9) == 3
    assert spring(-1) == 0.0


def test_delay_shifts_the_curve():
    cfg = SPRING_CONFIGS["heavy"]
    assert spring(5, cfg, delay=2) == spring(3, cfg)


def test_critically_damped_closed_form():
    cfg = SpringConfig(mass=1, damping=20, stiffness=100)
    assert cfg.zeta == 1
    t = 0.5
    expected = 1 - (1 + 10 * t) * math.exp(-10 * t)
    assert spring(1, cfg) == pytest.approx(expected)


def test_overdamped_rises_monotonically():
    cfg = SPRING_CONFIGS["smooth"]
    values = [spring(f, cfg) for f in range(0, 8)]
    assert all(0.0 <= v <= 1.0 for v in values)
    assert values == sorted(values)
    assert values[1] > 0


def test_fixed_duration_is_capped_and_time_compressed():
    cfg = SPRING_CONFIGS["default"]
    assert spring(0, cfg, duration_in_fragments=2) == pytest.approx(0.0)
    assert spring(2, cfg, duration_in_fragments=2) == pytest.approx(1.0, abs=1e-6)
    assert spring(10, cfg, duration_in_fragments=2) == spring(2, cfg, duration_in_fragments=2)


def test_output_scaled_into_range():
    cfg = SPRING_CONFIGS["snappy"]
    raw = spring(1, cfg)
    assert spring(1, cfg, from_=10, to=20) == pytest.approx(10 + 10 * raw)


def test_config_validation():
    with pytest.raises(ValueError):
        SpringConfig(mass=0)
    with pytest.raises(ValueError):
        SpringConfig(stiffness=-1)
    with pytest.raises(ValueError):
        SpringConfig(damping=-0.5)


def test_undamped_spring_has_no_settle_duration():
    with pytest.raises(ValueError):
        get_spring_duration(SpringConfig(damping=0))


def test_spring_curve_matches_scalar_solver():
    cfg = SPRING_CONFIGS["bouncy"]
    curve = spring_curve(range(6), cfg)
    assert isinstance(curve, np.ndarray)
    assert curve.tolist() == pytest.approx([spring(f, cfg) for f in range(6)])


def test_spring_curve_handles_delay_and_fixed_duration():
    cfg = SPRING_CONFIGS["snappy"]
    frames = [0, 1, 2, 3, 4, 5, 6]
    delayed = spring_curve(frames, cfg, delay=2, from_=10, to=20)
    assert delayed[:2].tolist() == [10, 10]
    assert delayed.tolist() == pytest.approx([spring(f, cfg, delay=2, from_=10, to=20) for f in frames])
    capped = spring_curve(frames, cfg, duration_in_fragments=3)
    assert capped.tolist() == pytest.approx([spring(f, cfg, duration_in_fragments=3) for f in frames])
    assert capped[-1] == pytest.approx(spring(100, cfg, duration_in_fragments=3))


def test_from_payload_defaults():
    cfg = SpringConfig.from_payload({"damping": 8})
    assert cfg == SPRING_CONFIGS["bouncy"]
