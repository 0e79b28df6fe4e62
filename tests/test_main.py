"""
End-to-end test of the command-line entry point.
"""

import contextlib
import io
import json
import os
import sys
import tempfile
import unittest

import cv2
import numpy as np

sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from quadtag.main import main  # type: ignore
from quadtag.segment import segments_to_dicts  # type: ignore
from quadtag.synthetic import make_segment_loop, render_tag, square_corners  # type: ignore


class TestMain(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

        corners = square_corners(32, 32, 128)
        self.code = 0x5A5A5A5A5
        image = render_tag(self.code, 6, 1, corners, (192, 192))
        self.image_path = os.path.join(self.tmp.name, "tag.png")
        cv2.imwrite(self.image_path, (image * 255).astype(np.uint8))

        self.segments_path = os.path.join(self.tmp.name, "segments.json")
        with open(self.segments_path, "w") as f:
            json.dump(segments_to_dicts(make_segment_loop(corners)), f)

    def run_main(self, *extra):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            with self.assertRaises(SystemExit) as ctx:
                main([self.image_path, self.segments_path, *extra])
        return ctx.exception.code, stdout.getvalue()

    def test_prints_detections(self):
        status, out = self.run_main()
        self.assertEqual(status, 0)

        detections = json.loads(out)["detections"]
        self.assertEqual(len(detections), 1)
        self.assertEqual(detections[0]["code"], self.code)
        self.assertTrue(detections[0]["ok"])

    def test_writes_visualization(self):
        out_path = os.path.join(self.tmp.name, "vis.png")
        status, _ = self.run_main("--output", out_path, "--workers", "2")
        self.assertEqual(status, 0)

        vis = cv2.imread(out_path)
        self.assertIsNotNone(vis)
        self.assertEqual(vis.shape, (192, 192, 3))

    def test_missing_image_exits_with_error(self):
        self.image_path = os.path.join(self.tmp.name, "missing.png")
        status, _ = self.run_main()
        self.assertEqual(status, 1)


if __name__ == "__main__":
    unittest.main()
