"""
quadtag - fiducial quad search and payload decoding.

This package provides functionality for:
- Enumerating closed 4-cycles in a line segment graph
- Sub-pixel corner recovery by line intersection
- Adaptive border illumination modelling
- Decoding a tag's payload grid into a codeword
"""

from .geometry import Line2D, distance, intersect_segments, mod2pi
from .segment import Segment, load_segments, segments_from_dicts, segments_to_dicts
from .image import FloatImage, load_image
from .gray_model import GrayModel
from .quad import Quad
from .quad_search import QuadSearch, QuadSearchConfig, SearchStats
from .detector import Detection, DetectorConfiguration, QuadDetector

__version__ = "0.1.0"

__all__ = [
    # Geometry
    "Line2D",
    "distance",
    "intersect_segments",
    "mod2pi",
    # Inputs
    "Segment",
    "load_segments",
    "segments_from_dicts",
    "segments_to_dicts",
    "FloatImage",
    "load_image",
    # Quads
    "GrayModel",
    "Quad",
    "QuadSearch",
    "QuadSearchConfig",
    "SearchStats",
    # Detection
    "Detection",
    "DetectorConfiguration",
    "QuadDetector",
]
