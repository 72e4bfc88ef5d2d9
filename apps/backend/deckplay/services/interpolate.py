from __future__ import annotations

from typing import Callable, Sequence

ALLOWED_EXTRAPOLATION = {"extend", "clamp", "identity"}


class InterpolationError(ValueError):
    """
    Malformed interpolation ranges. These are authoring mistakes, so they are
    raised eagerly instead of being papered over at playback time.
    """

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


def validate_ranges(input_range: Sequence[float], output_range: Sequence[float]) -> None:
    if len(input_range) != len(output_range):
        raise InterpolationError(
            "length_mismatch",
            f"inputRange and outputRange must have the same length ({len(input_range)} != {len(output_range)})",
        )
    if len(input_range) < 2:
        raise InterpolationError("too_few_points", "inputRange must have at least 2 values")
    for i in range(1, len(input_range)):
        if input_range[i] < input_range[i - 1]:
            raise InterpolationError(
                "not_monotonic",
                f"inputRange must be non-decreasing (index {i}: {input_range[i]} < {input_range[i - 1]})",
            )


def interpolate(
    x: float,
    input_range: Sequence[float],
    output_range: Sequence[float],
    *,
    extrapolate_left: str = "extend",
    extrapolate_right: str = "extend",
    easing: Callable[[float], float] | None = None,
) -> float:
    """
    Piecewise-linear map of `x` from input_range onto output_range.

    Outside the range each side follows its own policy:
    - extend: keep going along the nearest segment (default)
    - clamp: hold the boundary output
    - identity: return `x` unchanged

    `easing` reshapes the local segment ratio (clamped to [0, 1] first).
    """
    for side, policy in (("extrapolateLeft", extrapolate_left), ("extrapolateRight", extrapolate_right)):
        if policy not in ALLOWED_EXTRAPOLATION:
            raise InterpolationError(
                "bad_extrapolation", f"{side}={policy!r} is not one of {sorted(ALLOWED_EXTRAPOLATION)}"
            )
    validate_ranges(input_range, output_range)

    if x < input_range[0]:
        if extrapolate_left == "clamp":
            return float(output_range[0])
        if extrapolate_left == "identity":
            return float(x)

    if x > input_range[-1]:
        if extrapolate_right == "clamp":
            return float(output_range[-1])
        if extrapolate_right == "identity":
            return float(x)

    # Bracketing segment; values past either end reuse the outermost segment.
    seg = len(input_range) - 2
    for i in range(1, len(input_range)):
        if x <= input_range[i]:
            seg = i - 1
            break

    in_start = input_range[seg]
    in_end = input_range[seg + 1]
    out_start = output_range[seg]
    out_end = output_range[seg + 1]

    p = 1.0 if in_end == in_start else (x - in_start) / (in_end - in_start)
    if easing is not None:
        p = easing(max(0.0, min(1.0, p)))

    return out_start + p * (out_end - out_start)
