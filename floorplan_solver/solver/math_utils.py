from __future__ import annotations

import math
from typing import Optional, Tuple

Point2D = Tuple[float, float]


def _vec2(a: Point2D, b: Point2D) -> Point2D:
    return b[0] - a[0], b[1] - a[1]


def _add2(a: Point2D, b: Point2D) -> Point2D:
    return a[0] + b[0], a[1] + b[1]


def _scale2(v: Point2D, k: float) -> Point2D:
    return v[0] * k, v[1] * k


def _norm2(v: Point2D) -> float:
    return math.hypot(v[0], v[1])


def _dist2(a: Point2D, b: Point2D) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def _unit2(v: Point2D, eps: float) -> Optional[Point2D]:
    norm = _norm2(v)
    if norm <= eps:
        return None
    return v[0] / norm, v[1] / norm


def _direction_angle(start: Point2D, end: Point2D) -> float:
    return math.atan2(end[1] - start[1], end[0] - start[0])


def _rotate_about(point: Point2D, pivot: Point2D, theta: float) -> Point2D:
    """Rotate ``point`` around ``pivot`` by ``theta`` radians (distance preserved)."""

    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    dx = point[0] - pivot[0]
    dy = point[1] - pivot[1]
    return pivot[0] + cos_t * dx - sin_t * dy, pivot[1] + sin_t * dx + cos_t * dy


def normalize_angle(angle: float) -> float:
    """Wrap ``angle`` (radians) into ``[-pi, pi]``."""

    while angle > math.pi:
        angle -= 2.0 * math.pi
    while angle < -math.pi:
        angle += 2.0 * math.pi
    return angle


def undirected_angle_degrees(a: Tuple[Point2D, Point2D], b: Tuple[Point2D, Point2D]) -> float:
    """Angle between two segments' direction vectors folded into ``[0, 180]`` degrees."""

    relative = _direction_angle(*b) - _direction_angle(*a)
    relative %= 2.0 * math.pi
    degrees = math.degrees(relative)
    return 360.0 - degrees if degrees > 180.0 else degrees
