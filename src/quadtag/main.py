"""
Command-line entry point for quadtag.

Reads a grayscale image and the segment graph extracted from it, finds the
quads and prints the decoded detections as JSON.

Usage:
    quadtag image.png segments.json                 # Detect with defaults
    quadtag image.png segments.json -o out.png      # Also save an annotated image
    quadtag image.png segments.json --verbose       # Enable debug logging
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

import cv2

from .detector import QuadDetector
from .image import FloatImage
from .segment import load_segments
from .utils import detector_config, get_config, setup_logging, validate_config
from .visualization import draw_detections

LOGGER = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="quadtag - find fiducial quads in a segment graph and decode them",
    )
    parser.add_argument("image", help="Grayscale or color image")
    parser.add_argument("segments", help="JSON file with the segment graph")
    parser.add_argument("--config", "-c", help="JSON configuration file")
    parser.add_argument("--dimension-bits", type=int, help="Payload cells per side")
    parser.add_argument("--black-border", type=int, help="Border cells around the payload")
    parser.add_argument("--workers", "-w", type=int, help="Threads used for the search")
    parser.add_argument("--output", "-o", help="Write an annotated image here")
    parser.add_argument(
        "--verbose", "-V",
        action="store_true",
        help="Enable verbose/debug logging",
    )
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> int:
    config = get_config(args.config)
    if args.dimension_bits is not None:
        config["decode"]["dimension_bits"] = args.dimension_bits
    if args.black_border is not None:
        config["decode"]["black_border"] = args.black_border
    if args.workers is not None:
        config["detector"]["workers"] = args.workers
    if not validate_config(config):
        raise ValueError("Invalid configuration")

    raw = cv2.imread(args.image, cv2.IMREAD_GRAYSCALE)
    if raw is None:
        raise FileNotFoundError(f"Cannot read image: {args.image}")
    image = FloatImage.from_array(raw)
    segments = load_segments(args.segments)

    detector = QuadDetector(detector_config(config))
    detections = detector.detect(image, segments)

    out = {"detections": [d.to_dict() for d in detections]}
    print(json.dumps(out, indent=config["output"].get("json_indent", 2)))

    if args.output and config["output"].get("draw", True):
        vis = draw_detections(raw, detections)
        if not cv2.imwrite(args.output, vis):
            raise RuntimeError(f"Failed to write image: {args.output}")
        LOGGER.info("Wrote visualization to %s", args.output)
    return 0


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_logging(level=log_level)

    try:
        status = run(args)
    except Exception as e:
        LOGGER.exception("quadtag failed: %s", e)
        sys.exit(1)
    sys.exit(status)


if __name__ == "__main__":
    main()
