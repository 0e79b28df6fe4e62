"""
Synthetic tags and segment loops for tests and demos.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .geometry import Point
from .quad import Quad
from .segment import Segment


def make_segment_loop(
    corners: Sequence[Point],
    thetas: Optional[Sequence[float]] = None,
    shrink: float = 0.1,
    first_id: int = 0,
) -> List[Segment]:
    """
    Build four linked segments tracing the quad ``corners``.

    Segment k lies on the edge from corner k-1 to corner k, so intersecting
    segment k with segment k+1 recovers corner k. Each segment is shortened by
    ``shrink`` (a fraction of the edge) at both ends, like a real edge
    detection that stops short of the corner.

    Args:
        corners: Four corner points
        thetas: Optional explicit orientation per segment
        shrink: Fraction of each edge trimmed from both ends
        first_id: Id of the first segment

    Returns:
        The segments, linked 0 -> 1 -> 2 -> 3 -> 0
    """
    segments = []
    for k in range(4):
        ax, ay = corners[k - 1]
        bx, by = corners[k]
        dx, dy = bx - ax, by - ay
        segments.append(Segment(
            x0=ax + dx * shrink,
            y0=ay + dy * shrink,
            x1=bx - dx * shrink,
            y1=by - dy * shrink,
            theta=None if thetas is None else thetas[k],
            id=first_id + k,
        ))

    for k in range(4):
        segments[k].add_child(segments[(k + 1) % 4])
    return segments


def square_corners(left: float, top: float, size: float) -> List[Point]:
    """Axis-aligned square corners in the winding the quad search accepts."""
    return [
        (left, top),
        (left, top + size),
        (left + size, top + size),
        (left + size, top),
    ]


def payload_bits(code: int, dimension_bits: int) -> np.ndarray:
    """Arrange a codeword as a grid indexed ``[yb, xb]`` in tag space."""
    grid = np.zeros((dimension_bits, dimension_bits), dtype=np.uint8)
    n_bits = dimension_bits * dimension_bits
    k = 0
    for yb in range(dimension_bits - 1, -1, -1):
        for xb in range(dimension_bits):
            grid[yb, xb] = (code >> (n_bits - 1 - k)) & 1
            k += 1
    return grid


def render_tag(
    code: int,
    dimension_bits: int,
    black_border: int,
    corners: Sequence[Point],
    shape: Tuple[int, int],
    white: float = 1.0,
    black: float = 0.0,
) -> np.ndarray:
    """
    Paint a tag onto a white float32 canvas.

    Cells are placed through the quad's own bilinear mapping, so decoding the
    returned image with the same corners reads back ``code``.
    """
    quad = Quad(corners)
    lb = 2 * black_border + dimension_bits
    bits = payload_bits(code, dimension_bits)

    image = np.full(shape, white, dtype=np.float32)
    for yb in range(lb):
        for xb in range(lb):
            px, py = xb - black_border, yb - black_border
            value = black
            if 0 <= px < dimension_bits and 0 <= py < dimension_bits and bits[py, px]:
                value = white

            cell = [
                quad.interpolate01(xb / lb, yb / lb),
                quad.interpolate01((xb + 1) / lb, yb / lb),
                quad.interpolate01((xb + 1) / lb, (yb + 1) / lb),
                quad.interpolate01(xb / lb, (yb + 1) / lb),
            ]
            pts = np.round(np.array(cell)).astype(np.int32)
            cv2.fillConvexPoly(image, pts, float(value))
    return image


def rotated_corners(center: Point, size: float, angle_deg: float) -> List[Point]:
    """Square corners rotated about ``center``, same winding as square_corners."""
    half = size / 2.0
    base = square_corners(-half, -half, size)
    c, s = math.cos(math.radians(angle_deg)), math.sin(math.radians(angle_deg))
    return [(center[0] + x * c - y * s, center[1] + x * s + y * c) for x, y in base]
