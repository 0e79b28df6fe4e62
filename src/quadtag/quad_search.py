"""
Backtracking search for closed 4-cycles in the segment graph.

Every closed loop of four segments is a quad candidate. Corners come from
intersecting the infinite lines of consecutive segments, which gives
sub-pixel accuracy; candidates are then checked for winding, size and
aspect ratio before being emitted as Quads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .geometry import Line2D, distance, edge_angle, mod2pi
from .quad import Quad
from .segment import Segment

LOGGER = logging.getLogger(__name__)

LOOP_LENGTH = 4


@dataclass
class QuadSearchConfig:
    """Geometric acceptance limits for quad candidates."""

    min_edge_length: float = Quad.MIN_EDGE_LENGTH
    max_aspect_ratio: float = Quad.MAX_QUAD_ASPECT_RATIO
    # Open interval around the -2*pi total turning of a simple loop.
    winding_min: float = -7.0
    winding_max: float = -5.0


@dataclass
class SearchStats:
    """Counters describing what happened to closed loops."""

    closed: int = 0
    degenerate: int = 0
    winding: int = 0
    size: int = 0
    aspect: int = 0
    emitted: int = 0

    def merge(self, other: SearchStats):
        self.closed += other.closed
        self.degenerate += other.degenerate
        self.winding += other.winding
        self.size += other.size
        self.aspect += other.aspect
        self.emitted += other.emitted


class QuadSearch:
    """Enumerates valid quads reachable from a starting segment."""

    def __init__(self, config: Optional[QuadSearchConfig] = None):
        self.config = config or QuadSearchConfig()
        self.stats = SearchStats()

    def search(self, root: Segment, quads: Optional[List[Quad]] = None) -> List[Quad]:
        """Find all quads whose canonical first segment is ``root``.

        Args:
            root: Starting segment
            quads: Optional list to append results to

        Returns:
            The list of quads (``quads`` if given)
        """
        if quads is None:
            quads = []
        self._search([root], root, quads)
        return quads

    def search_all(self, segments: Iterable[Segment]) -> List[Quad]:
        """Run search from every segment in graph order."""
        quads: List[Quad] = []
        for segment in segments:
            self.search(segment, quads)
        LOGGER.debug("Quad search stats: %s", self.stats)
        return quads

    def _search(self, path: List[Segment], parent: Segment, quads: List[Quad]):
        depth = len(path) - 1
        if depth == LOOP_LENGTH:
            if path[LOOP_LENGTH] is path[0]:
                quad = self._make_quad(path)
                if quad is not None:
                    quads.append(quad)
            return

        # Each loop can be entered from any of its four segments. Only the
        # rotation starting at the segment with the largest theta survives.
        for child in parent.children:
            if child.theta > path[0].theta:
                continue
            path.append(child)
            self._search(path, child, quads)
            path.pop()

    def _make_quad(self, path: List[Segment]) -> Optional[Quad]:
        self.stats.closed += 1

        corners = []
        perimeter = 0.0
        bad = False
        for i in range(LOOP_LENGTH):
            line_a = Line2D.from_points(path[i].p0, path[i].p1)
            line_b = Line2D.from_points(path[i + 1].p0, path[i + 1].p1)
            corner = line_a.intersection_with(line_b)
            perimeter += path[i].length
            if corner is None:
                bad = True
            corners.append(corner)

        if bad:
            self.stats.degenerate += 1
            LOGGER.debug(
                "Rejected loop %s: parallel segments (perimeter %.1f)",
                _path_ids(path), perimeter,
            )
            return None

        angles = [edge_angle(corners[i], corners[(i + 1) % 4]) for i in range(4)]
        turning = sum(mod2pi(angles[(i + 1) % 4] - angles[i]) for i in range(4))
        if not self.config.winding_min < turning < self.config.winding_max:
            self.stats.winding += 1
            LOGGER.debug("Rejected loop %s: turning angle %.3f", _path_ids(path), turning)
            return None

        edges = [distance(corners[i], corners[(i + 1) % 4]) for i in range(4)]
        diagonals = [distance(corners[0], corners[2]), distance(corners[1], corners[3])]
        if min(edges + diagonals) < self.config.min_edge_length:
            self.stats.size += 1
            LOGGER.debug("Rejected loop %s: too small", _path_ids(path))
            return None

        if max(edges) > min(edges) * self.config.max_aspect_ratio:
            self.stats.aspect += 1
            LOGGER.debug(
                "Rejected loop %s: aspect %.1f / %.1f",
                _path_ids(path), max(edges), min(edges),
            )
            return None

        quad = Quad(corners)
        quad.segments = list(path[:LOOP_LENGTH])
        quad.observed_perimeter = perimeter
        self.stats.emitted += 1
        return quad


def _path_ids(path: List[Segment]) -> List[int]:
    return [s.id for s in path]
