"""
Geometry utilities for the potential-field simulator.

Provides angle normalization, clamping and point/rectangle distances used by
the controller, the occupancy grid and scenario setup.
"""

from __future__ import annotations

from typing import List, Tuple
import math


# ---------------------------------------------------------------------------
# Angle helpers
# ---------------------------------------------------------------------------


def wrap_angle(theta: float) -> float:
    """Wrap angle to (-pi, pi] radians."""
    wrapped = -((math.pi - theta) % (2.0 * math.pi) - math.pi)
    # float modulo can round up to exactly 2*pi for tiny negative inputs
    if wrapped <= -math.pi:
        return math.pi
    return wrapped


def angle_diff(a: float, b: float) -> float:
    """Smallest signed difference from angle a to angle b, in (-pi, pi]."""
    return wrap_angle(b - a)


# ---------------------------------------------------------------------------
# Distances
# ---------------------------------------------------------------------------


def point_rect_distance(
    px: float,
    py: float,
    xmin: float,
    ymin: float,
    xmax: float,
    ymax: float,
) -> float:
    """
    Distance from point to axis-aligned rectangle (0 if inside).
    Uses closest-point test.
    """
    closest_x = min(max(px, xmin), xmax)
    closest_y = min(max(py, ymin), ymax)
    return math.hypot(px - closest_x, py - closest_y)


def path_length(points: List[Tuple[float, float]]) -> float:
    """Total length of a polyline."""
    total = 0.0
    for (x1, y1), (x2, y2) in zip(points, points[1:]):
        total += math.hypot(x2 - x1, y2 - y1)
    return total


# ---------------------------------------------------------------------------
# Clamping
# ---------------------------------------------------------------------------


def clamp(value: float, vmin: float, vmax: float) -> float:
    """Clamp value to [vmin, vmax]."""
    return max(vmin, min(vmax, value))
