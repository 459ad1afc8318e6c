# mini_spm/geometry.py
"""
Planar geometry helpers: segment angles and direction cosines.

Angles are measured from the +x axis, counter-clockwise, in [0, 2π).
Axis-aligned segments get the exact constants 0, π/2, π and 3π/2 so that
their direction cosines come out as exact zeros.
"""

import math
from typing import Sequence, Tuple

Point = Tuple[float, float]

HALF_PI = math.pi / 2
THREE_HALF_PI = 3 * math.pi / 2
TWO_PI = 2 * math.pi


def segment_length(p: Point, q: Point) -> float:
    return math.hypot(q[0] - p[0], q[1] - p[1])


def segment_angle(p: Point, q: Point) -> float:
    """Angle of the segment p → q with the x axis, in [0, 2π)."""
    dx = q[0] - p[0]
    dy = q[1] - p[1]

    if dy == 0.0:
        return 0.0 if dx >= 0.0 else math.pi
    if dx == 0.0:
        return HALF_PI if dy > 0.0 else THREE_HALF_PI

    angle = math.atan2(dy, dx)
    if angle < 0.0:
        angle += TWO_PI
    return angle


def direction_cosines(angle: float) -> Tuple[float, float]:
    """
    (cos, sin) of an angle, with bit-exact zeros on the axes.

    cos is 0.0 for π/2 and 3π/2; sin is 0.0 for 0 and π. Plain math.cos and
    math.sin leave ~1e-17 residues there, which would defeat the exact-zero
    row test of the assembler.
    """
    if angle == HALF_PI or angle == THREE_HALF_PI:
        l = 0.0
    else:
        l = math.cos(angle)

    if angle == 0.0 or angle == math.pi:
        m = 0.0
    else:
        m = math.sin(angle)

    return l, m


def midpoint(p: Point, q: Point) -> Point:
    return 0.5 * (p[0] + q[0]), 0.5 * (p[1] + q[1])


def is_convex(polygon: Sequence[Point]) -> bool:
    """True if the closed polygon is strictly convex (either orientation)."""
    n = len(polygon)
    sign = 0.0
    for i in range(n):
        x0, y0 = polygon[i]
        x1, y1 = polygon[(i + 1) % n]
        x2, y2 = polygon[(i + 2) % n]
        cross = (x1 - x0) * (y2 - y1) - (y1 - y0) * (x2 - x1)
        if cross == 0.0:
            return False
        if sign == 0.0:
            sign = cross
        elif cross * sign < 0.0:
            return False
    return True


def signed_area(polygon: Sequence[Point]) -> float:
    """Shoelace area, positive for an anticlockwise outline."""
    n = len(polygon)
    total = 0.0
    for i in range(n):
        x0, y0 = polygon[i]
        x1, y1 = polygon[(i + 1) % n]
        total += x0 * y1 - x1 * y0
    return 0.5 * total
