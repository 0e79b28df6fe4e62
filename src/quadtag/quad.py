"""
Quad: a closed loop of four segments bounding a tag candidate.

Tag-space coordinates are normalized so that the tag face spans [0, 1] on
both axes (or [-1, 1] for ``interpolate``). The mapping to image space is a
bilinear blend of the four corners, a first-order stand-in for the true
perspective mapping.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from .geometry import Point
from .gray_model import GrayModel
from .image import FloatImage
from .segment import Segment


def is_inside_inner_border(xb: int, yb: int, lb: int) -> bool:
    return 0 < xb < lb - 1 and 0 < yb < lb - 1


def is_on_outer_border(xb: int, yb: int, lb: int) -> bool:
    return xb == -1 or xb == lb or yb == -1 or yb == lb


def is_on_inner_border(xb: int, yb: int, lb: int) -> bool:
    return xb == 0 or xb == lb - 1 or yb == 0 or yb == lb - 1


def _round_pixel(p: Point):
    # Nearest pixel for non-negative coordinates; truncates toward zero.
    return int(p[0] + 0.5), int(p[1] + 0.5)


class Quad:
    """Four sub-pixel corners plus the segments that produced them."""

    MIN_EDGE_LENGTH = 6.0
    MAX_QUAD_ASPECT_RATIO = 32.0

    def __init__(self, corners: Sequence[Point]):
        if len(corners) != 4:
            raise ValueError(f"A quad needs 4 corners, got {len(corners)}")
        self.corners: List[Point] = [(float(x), float(y)) for x, y in corners]
        self.segments: List[Segment] = []
        self.observed_perimeter: float = 0.0

        p0, p1, p2, p3 = self.corners
        self._p0 = p0
        self._p3 = p3
        self._p01 = (p1[0] - p0[0], p1[1] - p0[1])
        self._p32 = (p2[0] - p3[0], p2[1] - p3[1])

    def __repr__(self) -> str:
        corners = ", ".join(f"({x:.2f}, {y:.2f})" for x, y in self.corners)
        return f"Quad([{corners}], perimeter={self.observed_perimeter:.2f})"

    def corners_array(self) -> np.ndarray:
        """Corners as a (4, 2) float32 array."""
        return np.array(self.corners, dtype=np.float32)

    # ------------------------------------------------------------------ #
    # Tag space -> image space
    # ------------------------------------------------------------------ #
    def interpolate(self, u: float, v: float) -> Point:
        """Map (u, v) in [-1, 1]^2 to image coordinates."""
        kx = (u + 1.0) / 2.0
        ky = (v + 1.0) / 2.0
        r1x = self._p0[0] + self._p01[0] * kx
        r1y = self._p0[1] + self._p01[1] * kx
        r2x = self._p3[0] + self._p32[0] * kx
        r2y = self._p3[1] + self._p32[1] * kx
        return (r1x + (r2x - r1x) * ky, r1y + (r2y - r1y) * ky)

    def interpolate01(self, u: float, v: float) -> Point:
        """Map (u, v) in [0, 1]^2 to image coordinates."""
        return self.interpolate(2.0 * u - 1.0, 2.0 * v - 1.0)

    # ------------------------------------------------------------------ #
    # Decoding
    # ------------------------------------------------------------------ #
    def make_gray_model(self, image: FloatImage, lb: int) -> GrayModel:
        """Sample the two border rings and fit a GrayModel.

        Args:
            image: Source image
            lb: Cells per side of the tag, borders included

        Returns:
            A fitted GrayModel
        """
        model = GrayModel()

        for yb in range(-1, lb + 1):
            yn = (yb + 0.5) / lb
            for xb in range(-1, lb + 1):
                if is_inside_inner_border(xb, yb, lb):
                    continue

                xn = (xb + 0.5) / lb
                xi, yi = _round_pixel(self.interpolate01(xn, yn))
                if not image.in_bounds(xi, yi):
                    continue

                v = image.get(xi, yi)
                if is_on_outer_border(xb, yb, lb):
                    model.add_white_obs(xn, yn, v)
                elif is_on_inner_border(xb, yb, lb):
                    model.add_black_obs(xn, yn, v)

        model.fit()
        return model

    def decode_payload(
        self,
        image: FloatImage,
        model: GrayModel,
        dimension_bits: int,
        black_border: int,
    ) -> Optional[int]:
        """Threshold the payload grid into a codeword.

        The top payload row (largest y) is read first, left to right, and
        its first bit ends up as the most significant bit.

        Returns:
            The codeword, or None if any payload sample falls outside the
            image.
        """
        code = 0
        lb = 2 * black_border + dimension_bits

        for yb in range(dimension_bits - 1, -1, -1):
            yn = (black_border + yb + 0.5) / lb
            for xb in range(dimension_bits):
                xn = (black_border + xb + 0.5) / lb

                xi, yi = _round_pixel(self.interpolate01(xn, yn))
                if not image.in_bounds(xi, yi):
                    return None

                threshold = model.calc_threshold(xn, yn)
                code <<= 1
                if image.get(xi, yi) > threshold:
                    code |= 1
        return code

    def try_tag_code(self, image: FloatImage, dimension_bits: int, black_border: int) -> Optional[int]:
        """Decode the tag, returning None when the payload leaves the image."""
        lb = 2 * black_border + dimension_bits
        model = self.make_gray_model(image, lb)
        return self.decode_payload(image, model, dimension_bits, black_border)

    def to_tag_code(self, image: FloatImage, dimension_bits: int, black_border: int) -> int:
        """Decode the tag. 0 means failure and is also a valid all-zero payload."""
        code = self.try_tag_code(image, dimension_bits, black_border)
        return 0 if code is None else code
