"""
Floating point grayscale raster read by the payload decoder.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

import cv2
import numpy as np


class FloatImage:
    """Row-major float32 brightness image addressed as ``(x, y)``."""

    def __init__(self, data: np.ndarray):
        if data.ndim != 2:
            raise ValueError(f"FloatImage expects a 2-D array, got shape {data.shape}")
        self.data = np.asarray(data, dtype=np.float32)

    @classmethod
    def from_array(cls, image: np.ndarray) -> FloatImage:
        """Convert a gray or BGR image; uint8 input is scaled to [0, 1]."""
        if image.ndim == 3:
            image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        if image.dtype == np.uint8:
            return cls(image.astype(np.float32) / 255.0)
        return cls(image.astype(np.float32))

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> float:
        return float(self.data[y, x])


def load_image(path: Union[str, Path]) -> FloatImage:
    """Read an image file as a normalized FloatImage."""
    img = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
    if img is None:
        raise FileNotFoundError(f"Cannot read image: {path}")
    return FloatImage.from_array(img)
