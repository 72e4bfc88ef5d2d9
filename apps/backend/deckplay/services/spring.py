"""
Damped-spring progress driven by fragment index instead of wall-clock time.

Because the time axis is the (integer) distance from the fragment where the
animation starts, the same position always produces the same value: scrubbing,
seeking and batch export need no replay of real time.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

# Pseudo-time per fragment step.
TIME_SCALE = 0.5
# Time units the duration-normalized curve spans.
NORMALIZED_SPAN = 4.0
SETTLE_TOLERANCE = 0.001


@dataclass(frozen=True)
class SpringConfig:
    mass: float = 1.0
    damping: float = 10.0
    stiffness: float = 100.0

    def __post_init__(self) -> None:
        if not self.mass > 0:
            raise ValueError(f"mass must be > 0, got {self.mass}")
        if not self.stiffness > 0:
            raise ValueError(f"stiffness must be > 0, got {self.stiffness}")
        if not self.damping >= 0:
            raise ValueError(f"damping must be >= 0, got {self.damping}")

    @property
    def omega0(self) -> float:
        return math.sqrt(self.stiffness / self.mass)

    @property
    def zeta(self) -> float:
        return self.damping / (2 * math.sqrt(self.stiffness * self.mass))

    @classmethod
    def from_payload(cls, payload: dict | None) -> SpringConfig:
        payload = payload or {}
        return cls(
            mass=float(payload.get("mass", 1.0)),
            damping=float(payload.get("damping", 10.0)),
            stiffness=float(payload.get("stiffness", 100.0)),
        )


SPRING_CONFIGS: dict[str, SpringConfig] = {
    # No bounce; subtle reveals.
    "smooth": SpringConfig(damping=200),
    # Minimal bounce.
    "snappy": SpringConfig(damping=20, stiffness=200),
    "bouncy": SpringConfig(damping=8),
    # Slow with a small bounce.
    "heavy": SpringConfig(damping=15, stiffness=80, mass=2),
    "default": SpringConfig(),
}


def _oscillator(t, omega0: float, zeta: float):
    # Works on floats and numpy arrays alike.
    if zeta < 1:
        omega_d = omega0 * math.sqrt(1 - zeta * zeta)
        envelope = np.exp(-zeta * omega0 * t)
        return 1 - envelope * (np.cos(omega_d * t) + (zeta * omega0 / omega_d) * np.sin(omega_d * t))
    if zeta == 1:
        return 1 - (1 + omega0 * t) * np.exp(-omega0 * t)
    root = math.sqrt(zeta * zeta - 1)
    s1 = -omega0 * (zeta - root)
    s2 = -omega0 * (zeta + root)
    return 1 - (s2 * np.exp(s1 * t) - s1 * np.exp(s2 * t)) / (s2 - s1)


def _normalized_curve(p, omega0: float, zeta: float):
    # Time-compressed variant used when the caller fixes the duration.
    t = p * NORMALIZED_SPAN
    if zeta >= 1:
        return 1 - np.exp(-zeta * omega0 * t) * (1 + zeta * omega0 * t)
    omega_d = omega0 * math.sqrt(1 - zeta * zeta)
    return 1 - np.exp(-zeta * omega0 * t) * np.cos(omega_d * t)


def spring(
    fragment: float,
    config: SpringConfig | None = None,
    *,
    delay: float = 0,
    duration_in_fragments: float | None = None,
    from_: float = 0.0,
    to: float = 1.0,
) -> float:
    """
    Progress of a spring that starts `delay` fragments after `fragment == 0`.

    Returns `from_` before the start. With `duration_in_fragments` the curve is
    squeezed into that many fragments; otherwise the closed-form damped
    oscillator is evaluated at t = (fragment - delay) * TIME_SCALE.
    Overshoot above 1 is clamped.
    """
    cfg = config or SPRING_CONFIGS["default"]
    elapsed = fragment - delay
    if elapsed < 0:
        return from_

    if duration_in_fragments is not None and duration_in_fragments > 0:
        p = min(elapsed / duration_in_fragments, 1.0)
        return from_ + (to - from_) * float(_normalized_curve(p, cfg.omega0, cfg.zeta))

    progress = float(_oscillator(elapsed * TIME_SCALE, cfg.omega0, cfg.zeta))
    return from_ + (to - from_) * min(progress, 1.0)


def get_spring_duration(config: SpringConfig | None = None) -> int:
    """Fragments until the spring is within 0.1% of rest."""
    cfg = config or SPRING_CONFIGS["default"]
    decay = cfg.zeta * cfg.omega0
    if decay <= 0:
        # Undamped springs never settle.
        raise ValueError("spring with zero damping never settles")
    settle_time = -math.log(SETTLE_TOLERANCE) / decay
    return math.ceil(settle_time / TIME_SCALE)


def spring_curve(
    fragments: Iterable[float],
    config: SpringConfig | None = None,
    *,
    delay: float = 0,
    duration_in_fragments: float | None = None,
    from_: float = 0.0,
    to: float = 1.0,
) -> np.ndarray:
    """`spring` over many fragment positions at once (batch export helper)."""
    cfg = config or SPRING_CONFIGS["default"]
    elapsed = np.fromiter(fragments, dtype=np.float64) - delay
    started = elapsed >= 0
    elapsed = np.where(started, elapsed, 0.0)

    if duration_in_fragments is not None and duration_in_fragments > 0:
        p = np.minimum(elapsed / duration_in_fragments, 1.0)
        progress = _normalized_curve(p, cfg.omega0, cfg.zeta)
    else:
        progress = np.minimum(_oscillator(elapsed * TIME_SCALE, cfg.omega0, cfg.zeta), 1.0)
    return np.where(started, from_ + (to - from_) * progress, from_)
