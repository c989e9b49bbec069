"""Planar geometry primitives for landmark math.

Only the x/y image plane participates: the z channel some pose models report
is a relative depth estimate and is ignored here.
"""

from __future__ import annotations

import math
from typing import Any, Tuple


def _xy(point: Any) -> Tuple[float, float]:
    if hasattr(point, "x") and hasattr(point, "y"):
        return float(point.x), float(point.y)
    return float(point[0]), float(point[1])


def angle_between(a: Any, b: Any, c: Any) -> float:
    """Angle in degrees at vertex `b` formed by rays b->a and b->c.

    Computed from the difference of the rays' polar angles and folded into
    [0, 180]. Collinear or coincident points yield 0 or 180; NaN input yields NaN.
    """
    ax, ay = _xy(a)
    bx, by = _xy(b)
    cx, cy = _xy(c)
    radians = math.atan2(cy - by, cx - bx) - math.atan2(ay - by, ax - bx)
    angle = abs(math.degrees(radians))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def distance(p: Any, q: Any) -> float:
    """Euclidean distance between two points in normalized coordinates."""
    px, py = _xy(p)
    qx, qy = _xy(q)
    return math.hypot(qx - px, qy - py)


def midpoint(p: Any, q: Any) -> Tuple[float, float]:
    px, py = _xy(p)
    qx, qy = _xy(q)
    return (px + qx) / 2.0, (py + qy) / 2.0


def normalize_coordinates(x: float, y: float, frame_width: float, frame_height: float) -> Tuple[float, float]:
    """Convert pixel coordinates to the unit square of the frame."""
    if frame_width <= 0 or frame_height <= 0:
        raise ValueError("frame_width and frame_height must be positive.")
    return float(x) / float(frame_width), float(y) / float(frame_height)


def check_tolerance(tolerance: float) -> float:
    """Return `tolerance` as a float, rejecting zero, negative and non-finite values."""
    tol = float(tolerance)
    if not math.isfinite(tol) or tol <= 0.0:
        raise ValueError(f"tolerance must be a positive number of degrees; received {tolerance!r}.")
    return tol


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(float(value) + 0.5))


__all__ = ["angle_between", "distance", "midpoint", "normalize_coordinates", "check_tolerance", "round_half_up"]
