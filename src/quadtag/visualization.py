"""
Drawing helpers for detected quads.
"""

from typing import Sequence

import cv2
import numpy as np

from .detector import Detection


def to_bgr(image: np.ndarray) -> np.ndarray:
    """Convert a gray (uint8 or [0, 1] float) image to 8-bit BGR."""
    if image.dtype != np.uint8:
        image = np.clip(image * 255.0, 0, 255).astype(np.uint8)
    if image.ndim == 2:
        image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    return image.copy()


def draw_detections(image: np.ndarray, detections: Sequence[Detection]) -> np.ndarray:
    """Draw quad outlines, the first corner and the decoded code."""
    vis = to_bgr(image)
    for det in detections:
        pts = np.round(det.quad.corners_array()).astype(np.int32).reshape(-1, 1, 2)
        color = (0, 255, 0) if det.ok else (0, 0, 255)
        cv2.polylines(vis, [pts], isClosed=True, color=color, thickness=2)

        x0, y0 = pts[0, 0]
        cv2.circle(vis, (int(x0), int(y0)), 4, (255, 0, 0), -1)

        label = f"0x{det.code:x}" if det.ok else "fail"
        cx, cy = pts[:, 0, :].mean(axis=0)
        cv2.putText(vis, label, (int(cx) - 20, int(cy)),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 2, cv2.LINE_AA)
    return vis
