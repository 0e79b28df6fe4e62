"""
Tests for quad interpolation, border sampling and payload decoding.
"""

import os
import sys
import unittest

import numpy as np

sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from quadtag.image import FloatImage  # type: ignore
from quadtag.quad import (  # type: ignore
    Quad,
    is_inside_inner_border,
    is_on_inner_border,
    is_on_outer_border,
)
from quadtag.synthetic import render_tag, rotated_corners, square_corners  # type: ignore


class TestQuadInterpolation(unittest.TestCase):
    """Bilinear mapping from tag space to the image."""

    def setUp(self):
        self.corners = [(10.0, 20.0), (15.0, 80.0), (90.0, 95.0), (85.0, 5.0)]
        self.quad = Quad(self.corners)

    def test_unit_square_maps_to_corners(self):
        expected = {
            (0.0, 0.0): self.corners[0],
            (1.0, 0.0): self.corners[1],
            (1.0, 1.0): self.corners[2],
            (0.0, 1.0): self.corners[3],
        }
        for (u, v), corner in expected.items():
            x, y = self.quad.interpolate01(u, v)
            self.assertAlmostEqual(x, corner[0], places=9)
            self.assertAlmostEqual(y, corner[1], places=9)

    def test_centered_coordinates(self):
        x, y = self.quad.interpolate(-1.0, -1.0)
        self.assertAlmostEqual(x, 10.0)
        self.assertAlmostEqual(y, 20.0)

        # Center of the quad is the mean of the corners for a bilinear map.
        cx, cy = self.quad.interpolate(0.0, 0.0)
        self.assertAlmostEqual(cx, np.mean([c[0] for c in self.corners]))
        self.assertAlmostEqual(cy, np.mean([c[1] for c in self.corners]))

    def test_corners_array(self):
        arr = self.quad.corners_array()
        self.assertEqual(arr.shape, (4, 2))
        self.assertEqual(arr.dtype, np.float32)

    def test_rejects_wrong_corner_count(self):
        with self.assertRaises(ValueError):
            Quad([(0, 0), (1, 0), (1, 1)])


class TestBorderPredicates(unittest.TestCase):
    """Cell classification on a (lb + 2)^2 grid."""

    def test_predicates_partition_grid(self):
        lb = 8
        counts = {"inside": 0, "outer": 0, "inner": 0}
        for yb in range(-1, lb + 1):
            for xb in range(-1, lb + 1):
                if is_inside_inner_border(xb, yb, lb):
                    counts["inside"] += 1
                elif is_on_outer_border(xb, yb, lb):
                    counts["outer"] += 1
                elif is_on_inner_border(xb, yb, lb):
                    counts["inner"] += 1
                else:
                    self.fail(f"cell ({xb}, {yb}) not classified")

        self.assertEqual(counts["inside"], (lb - 2) ** 2)
        self.assertEqual(counts["outer"], 4 * (lb + 1))
        self.assertEqual(counts["inner"], 4 * (lb - 1))


class TestQuadDecode(unittest.TestCase):
    """Round trips through a rendered synthetic tag."""

    SHAPE = (200, 200)

    def setUp(self):
        self.corners = square_corners(40, 40, 120)
        self.quad = Quad(self.corners)

    def render(self, code, dimension_bits=6, black_border=1, corners=None):
        data = render_tag(code, dimension_bits, black_border, corners or self.corners, self.SHAPE)
        return FloatImage(data)

    def test_gray_model_from_border(self):
        image = self.render(0b101010)
        model = self.quad.make_gray_model(image, 8)

        self.assertEqual(model.white_count, 4 * 9)
        self.assertEqual(model.black_count, 4 * 7)
        self.assertAlmostEqual(model.calc_threshold(0.5, 0.5), 0.5, places=5)

    def test_round_trip_decode(self):
        for code in (0x1, 0xA5C3F0F0F, 0xFFFFFFFFF, 0x123456789):
            image = self.render(code)
            self.assertEqual(self.quad.to_tag_code(image, 6, 1), code)

    def test_round_trip_wide_border(self):
        code = 0b1011001110100101
        image = self.render(code, dimension_bits=4, black_border=2)
        self.assertEqual(self.quad.to_tag_code(image, 4, 2), code)

    def test_round_trip_rotated_quad(self):
        corners = rotated_corners((100.0, 100.0), 120.0, 20.0)
        code = 0x9E3779B97
        image = self.render(code, corners=corners)
        self.assertEqual(Quad(corners).to_tag_code(image, 6, 1), code)

    def test_first_sample_is_most_significant_bit(self):
        # Only the first payload cell read (top row, left column) is white.
        code = 1 << 35
        image = self.render(code)
        self.assertEqual(self.quad.to_tag_code(image, 6, 1), code)

    def test_round_trip_under_gradient(self):
        code = 0x0F0F0F0F0
        data = render_tag(code, 6, 1, self.corners, self.SHAPE, white=0.6, black=0.1)
        ramp = np.linspace(0.0, 0.35, self.SHAPE[1], dtype=np.float32)[None, :]
        image = FloatImage(data + ramp)
        self.assertEqual(self.quad.to_tag_code(image, 6, 1), code)

    def test_all_zero_payload_is_distinguishable(self):
        image = self.render(0)
        self.assertEqual(self.quad.to_tag_code(image, 6, 1), 0)
        self.assertEqual(self.quad.try_tag_code(image, 6, 1), 0)

    def test_out_of_bounds_decode_returns_zero(self):
        image = self.render(0xFFFFFFFFF)
        outside = Quad(square_corners(120, 40, 120))

        self.assertEqual(outside.to_tag_code(image, 6, 1), 0)
        self.assertIsNone(outside.try_tag_code(image, 6, 1))

    def test_fully_outside_quad(self):
        image = self.render(0x1)
        quad = Quad(square_corners(-400, -400, 120))

        model = quad.make_gray_model(image, 8)
        self.assertEqual(model.white_count + model.black_count, 0)
        self.assertEqual(quad.to_tag_code(image, 6, 1), 0)


if __name__ == "__main__":
    unittest.main()
