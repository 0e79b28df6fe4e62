"""
2D geometry helpers used by the quad search.

Points are plain ``(x, y)`` float tuples in image coordinates.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

Point = Tuple[float, float]

TWO_PI = 2.0 * math.pi

# Determinant below which two unit directions are treated as parallel.
PARALLEL_EPS = 1e-10


def mod2pi(theta: float) -> float:
    """Wrap an angle into (-pi, pi]."""
    return math.pi - (math.pi - theta) % TWO_PI


def distance(p: Point, q: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(q[0] - p[0], q[1] - p[1])


def edge_angle(p: Point, q: Point) -> float:
    """Direction of the vector p -> q."""
    return math.atan2(q[1] - p[1], q[0] - p[0])


@dataclass(frozen=True)
class Line2D:
    """Infinite line through two points, stored as anchor + unit direction."""

    px: float
    py: float
    dx: float
    dy: float

    @classmethod
    def from_points(cls, p0: Point, p1: Point) -> Line2D:
        dx = p1[0] - p0[0]
        dy = p1[1] - p0[1]
        norm = math.hypot(dx, dy)
        if norm > 0.0:
            dx /= norm
            dy /= norm
        return cls(float(p0[0]), float(p0[1]), dx, dy)

    def intersection_with(self, other: Line2D) -> Optional[Point]:
        """
        Intersect two infinite lines.

        Returns:
            The intersection point, or None when the lines are (numerically)
            parallel.
        """
        m00 = self.dx
        m01 = -other.dx
        m10 = self.dy
        m11 = -other.dy

        det = m00 * m11 - m01 * m10
        if abs(det) < PARALLEL_EPS:
            return None

        # Only the first row of the inverse is needed to solve for our own
        # line parameter.
        i00 = m11 / det
        i01 = -m01 / det

        b00 = other.px - self.px
        b10 = other.py - self.py
        t = i00 * b00 + i01 * b10

        return (self.dx * t + self.px, self.dy * t + self.py)


def intersect_segments(a: Tuple[Point, Point], b: Tuple[Point, Point]) -> Optional[Point]:
    """Intersect the infinite lines through two endpoint pairs."""
    return Line2D.from_points(*a).intersection_with(Line2D.from_points(*b))
