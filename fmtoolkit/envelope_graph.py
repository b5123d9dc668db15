"""Geometry of the envelope display: the trace outline and its scaling."""

from __future__ import annotations

Point = tuple[float, float]


def trace_points(delay, attack, hold, decay, sustain, release, height) -> list[Point]:
    """Unscaled outline of the envelope; x is time in ms, y grows downwards."""
    total = delay + attack + hold + decay + release
    sustain_y = (1.0 - sustain) * height
    sustain_length = total * 0.25
    return [
        (0.0, height),
        (delay, height),
        (delay + attack, 0.0),
        (delay + attack + hold, 0.0),
        (delay + attack + hold + decay, sustain_y),
        (delay + attack + hold + decay + sustain_length, sustain_y),
        (total + sustain_length, height),
    ]


def scale_to_fit(points, x, y, width, height) -> list[Point]:
    """Stretch the points' bounding box onto the given rectangle.

    Proportions are not preserved; an axis with no extent is placed at the
    rectangle's edge.
    """
    points = list(points)
    if not points:
        return []
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    min_x, min_y = min(xs), min(ys)
    span_x, span_y = max(xs) - min_x, max(ys) - min_y
    scale_x = width / span_x if span_x else 0.0
    scale_y = height / span_y if span_y else 0.0
    return [(x + (px - min_x) * scale_x, y + (py - min_y) * scale_y) for px, py in points]


def envelope_trace(delay, attack, hold, decay, sustain, release, width, height) -> list[Point]:
    """Envelope outline fitted to a display of the given size with a top margin."""
    points = trace_points(delay, attack, hold, decay, sustain, release, height)
    return scale_to_fit(points, 0.0, 5.0, width, height - 5.0)


def exp_curve(linear) -> float:
    """Map a 0..20000 control value onto an exponential 1e-4..1 curve."""
    val = 20000.0 - linear
    return 100.0 ** (-2.0 * (val / 20000.0))