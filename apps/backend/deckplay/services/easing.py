"""
Easing curves for `interpolate(..., easing=...)`.

Each curve maps a normalized ratio in [0, 1] to a reshaped ratio (curves like
`back` and `elastic` may leave [0, 1] in between). Combinators build the
"out" and "in-out" variants from an "in" curve.
"""
from __future__ import annotations

import math
from typing import Callable

EasingFn = Callable[[float], float]


def linear(t: float) -> float:
    return t


def quad(t: float) -> float:
    return t * t


def cubic(t: float) -> float:
    return t * t * t


def quart(t: float) -> float:
    return t * t * t * t


def quint(t: float) -> float:
    return t * t * t * t * t


def sin(t: float) -> float:
    return 1 - math.cos((t * math.pi) / 2)


def exp(t: float) -> float:
    return 0.0 if t == 0 else math.pow(2, 10 * (t - 1))


def circle(t: float) -> float:
    return 1 - math.sqrt(max(0.0, 1 - t * t))


def elastic(t: float) -> float:
    c4 = (2 * math.pi) / 3
    if t == 0:
        return 0.0
    if t == 1:
        return 1.0
    return -math.pow(2, 10 * t - 10) * math.sin((t * 10 - 10.75) * c4)


def back(t: float) -> float:
    # Overshoots below 0 before heading to 1.
    c1 = 1.70158
    c3 = c1 + 1
    return c3 * t * t * t - c1 * t * t


def bounce(t: float) -> float:
    n1 = 7.5625
    d1 = 2.75
    x = 1 - t
    if x < 1 / d1:
        return 1 - n1 * x * x
    if x < 2 / d1:
        x -= 1.5 / d1
        return 1 - (n1 * x * x + 0.75)
    if x < 2.5 / d1:
        x -= 2.25 / d1
        return 1 - (n1 * x * x + 0.9375)
    x -= 2.625 / d1
    return 1 - (n1 * x * x + 0.984375)


def in_(easing: EasingFn) -> EasingFn:
    return easing


def out(easing: EasingFn) -> EasingFn:
    def fn(t: float) -> float:
        return 1 - easing(1 - t)

    return fn


def in_out(easing: EasingFn) -> EasingFn:
    def fn(t: float) -> float:
        if t < 0.5:
            return easing(t * 2) / 2
        return 1 - easing((1 - t) * 2) / 2

    return fn


def bezier(x1: float, y1: float, x2: float, y2: float) -> EasingFn:
    """
    CSS-style cubic-bezier(x1, y1, x2, y2).
    x is solved for the curve parameter with a few Newton iterations.
    """

    def sample_x(t: float) -> float:
        return ((1 - 3 * x2 + 3 * x1) * t + (3 * x2 - 6 * x1)) * t * t + 3 * x1 * t

    def sample_y(t: float) -> float:
        return ((1 - 3 * y2 + 3 * y1) * t + (3 * y2 - 6 * y1)) * t * t + 3 * y1 * t

    def sample_dx(t: float) -> float:
        return (3 - 9 * x2 + 9 * x1) * t * t + (6 * x2 - 12 * x1) * t + 3 * x1

    def solve_x(x: float) -> float:
        t = x
        for _ in range(8):
            err = sample_x(t) - x
            if abs(err) < 1e-6:
                return t
            d = sample_dx(t)
            if abs(d) < 1e-6:
                break
            t -= err / d
        return t

    def fn(x: float) -> float:
        if x == 0 or x == 1:
            return x
        return sample_y(solve_x(x))

    return fn


NAMED: dict[str, EasingFn] = {
    "linear": linear,
    "quad": quad,
    "cubic": cubic,
    "quart": quart,
    "quint": quint,
    "sin": sin,
    "exp": exp,
    "circle": circle,
    "elastic": elastic,
    "back": back,
    "bounce": bounce,
}


def by_name(name: str) -> EasingFn:
    """
    Resolve "<curve>", "<curve>-out" or "<curve>-in-out" (e.g. "cubic-in-out").
    Plain names are the "in" variant.
    """
    if not isinstance(name, str):
        raise ValueError(f"easing must be a name, got {type(name).__name__}")
    key = name.strip().lower()
    for suffix, combinator in (("-in-out", in_out), ("-out", out), ("-in", in_)):
        if key.endswith(suffix) and key[: -len(suffix)] in NAMED:
            return combinator(NAMED[key[: -len(suffix)]])
    if key in NAMED:
        return NAMED[key]
    raise ValueError(f"Unknown easing={name!r}; allowed: {sorted(NAMED)} with optional -in/-out/-in-out")
