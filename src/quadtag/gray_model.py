"""
Adaptive illumination model for tag decoding.

Brightness samples from the white outer border and the black inner border of
a tag are fit independently to a plane over normalized tag coordinates. The
decision threshold at any point is the midpoint of the two planes, which
follows lighting gradients across the tag face.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np

LOGGER = logging.getLogger(__name__)


class PlaneFit:
    """Least-squares fit of ``v = a*x + b*y + c`` to accumulated samples."""

    def __init__(self):
        self._obs: List[Tuple[float, float, float]] = []
        self.coeffs: Optional[np.ndarray] = None

    def __len__(self) -> int:
        return len(self._obs)

    def add(self, x: float, y: float, v: float):
        self._obs.append((float(x), float(y), float(v)))

    def fit(self):
        if not self._obs:
            self.coeffs = np.zeros(3, dtype=np.float64)
            return

        obs = np.asarray(self._obs, dtype=np.float64)
        values = obs[:, 2]

        if len(obs) >= 3:
            design = np.column_stack((obs[:, 0], obs[:, 1], np.ones(len(obs))))
            solution, _, rank, _ = np.linalg.lstsq(design, values, rcond=None)
            if rank == 3:
                self.coeffs = solution
                return

        # Too few or collinear samples: a constant plane at the mean.
        LOGGER.debug("Degenerate plane fit over %d samples, using mean", len(obs))
        self.coeffs = np.array([0.0, 0.0, float(values.mean())])

    def evaluate(self, x: float, y: float) -> float:
        a, b, c = self.coeffs
        return float(a * x + b * y + c)


class GrayModel:
    """Black/white brightness model of one quad's border."""

    def __init__(self):
        self._white = PlaneFit()
        self._black = PlaneFit()
        self._fitted = False

    @property
    def white_count(self) -> int:
        return len(self._white)

    @property
    def black_count(self) -> int:
        return len(self._black)

    def add_white_obs(self, x: float, y: float, v: float):
        self._white.add(x, y, v)

    def add_black_obs(self, x: float, y: float, v: float):
        self._black.add(x, y, v)

    def fit(self):
        """Fit both planes. Must run once before calc_threshold."""
        self._white.fit()
        self._black.fit()
        self._fitted = True

    def calc_threshold(self, x: float, y: float) -> float:
        """Midpoint between the white and black planes at (x, y)."""
        if not self._fitted:
            raise RuntimeError("GrayModel.fit() must be called before calc_threshold()")
        return 0.5 * (self._white.evaluate(x, y) + self._black.evaluate(x, y))
