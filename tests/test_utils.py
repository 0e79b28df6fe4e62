"""
Tests for configuration helpers.
"""

import json
import os
import sys
import tempfile
import unittest

sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from quadtag.utils import detector_config, get_config, save_config, validate_config  # type: ignore


class TestConfig(unittest.TestCase):

    def test_defaults_are_valid(self):
        config = get_config()
        self.assertTrue(validate_config(config))
        self.assertEqual(config["decode"]["dimension_bits"], 6)
        self.assertEqual(config["search"]["max_aspect_ratio"], 32.0)

    def test_defaults_are_not_shared(self):
        config = get_config()
        config["decode"]["dimension_bits"] = 99
        self.assertEqual(get_config()["decode"]["dimension_bits"], 6)

    def test_file_overrides_single_keys(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "config.json")
            with open(path, "w") as f:
                json.dump({"decode": {"dimension_bits": 4}}, f)
            config = get_config(path)

        self.assertEqual(config["decode"]["dimension_bits"], 4)
        self.assertEqual(config["decode"]["black_border"], 1)

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "config.json")
            config = get_config()
            config["detector"]["workers"] = 3
            self.assertTrue(save_config(config, path))
            self.assertEqual(get_config(path)["detector"]["workers"], 3)

    def test_invalid_values_fail_validation(self):
        config = get_config()
        config["decode"]["black_border"] = 0
        self.assertFalse(validate_config(config))

        config = get_config()
        config["search"]["max_aspect_ratio"] = 0.5
        self.assertFalse(validate_config(config))

        config = get_config()
        del config["detector"]
        self.assertFalse(validate_config(config))

    def test_detector_config_flattens_sections(self):
        flat = detector_config(get_config())
        self.assertEqual(flat["min_edge_length"], 6.0)
        self.assertEqual(flat["dimension_bits"], 6)
        self.assertEqual(flat["workers"], 1)
        self.assertNotIn("draw", flat)


if __name__ == "__main__":
    unittest.main()
