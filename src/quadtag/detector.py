"""
Quad detection over a whole segment graph, followed by payload decoding.

The search is sharded by starting segment. Shards share nothing but the
read-only graph; each one collects into its own list and the lists are merged
in segment order once every shard has finished.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .image import FloatImage
from .quad import Quad
from .quad_search import QuadSearch, QuadSearchConfig, SearchStats
from .segment import Segment

LOGGER = logging.getLogger(__name__)


@dataclass
class DetectorConfiguration:
    """Configuration for the quad detector."""

    dimension_bits: int = 6
    black_border: int = 1
    min_edge_length: float = Quad.MIN_EDGE_LENGTH
    max_aspect_ratio: float = Quad.MAX_QUAD_ASPECT_RATIO
    workers: int = 1
    deadline_s: Optional[float] = None  # Wall-clock budget for the search

    def search_config(self) -> QuadSearchConfig:
        return QuadSearchConfig(
            min_edge_length=self.min_edge_length,
            max_aspect_ratio=self.max_aspect_ratio,
        )


@dataclass
class Detection:
    """A quad and the result of decoding it."""

    quad: Quad
    code: int
    ok: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "corners": [[x, y] for x, y in self.quad.corners],
            "code": self.code,
            "ok": self.ok,
            "observed_perimeter": self.quad.observed_perimeter,
            "segments": [s.id for s in self.quad.segments],
        }


class QuadDetector:
    """Finds quads in a segment graph and decodes their payloads."""

    def __init__(self, config: Optional[Dict] = None):
        cfg_dict = dict(config or {})
        self.config = DetectorConfiguration(**{
            k: v for k, v in cfg_dict.items()
            if k in DetectorConfiguration.__dataclass_fields__
        })
        if self.config.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.config.workers}")
        if self.config.dimension_bits < 1 or self.config.black_border < 1:
            raise ValueError("dimension_bits and black_border must be positive")

        self.stats = SearchStats()

        LOGGER.info(
            "QuadDetector initialized: %dx%d payload, border=%d, workers=%d",
            self.config.dimension_bits,
            self.config.dimension_bits,
            self.config.black_border,
            self.config.workers,
        )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def find_quads(self, segments: Sequence[Segment]) -> List[Quad]:
        """Search every segment as a loop start and collect valid quads."""
        self.stats = SearchStats()
        started = time.monotonic()

        if self.config.workers == 1:
            shards = [self._run_shard(s, started) for s in segments]
        else:
            with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
                futures = [pool.submit(self._run_shard, s, started) for s in segments]
                shards = [f.result() for f in futures]

        quads: List[Quad] = []
        skipped = 0
        for shard in shards:
            if shard is None:
                skipped += 1
                continue
            shard_quads, shard_stats = shard
            quads.extend(shard_quads)
            self.stats.merge(shard_stats)

        if skipped:
            LOGGER.warning(
                "Search deadline of %.3fs reached, skipped %d of %d segments",
                self.config.deadline_s, skipped, len(segments),
            )
        LOGGER.info(
            "Found %d quads from %d segments (%d closed loops)",
            len(quads), len(segments), self.stats.closed,
        )
        return quads

    def decode(self, image: FloatImage, quads: Sequence[Quad]) -> List[Detection]:
        """Decode each quad's payload."""
        detections = []
        for quad in quads:
            code = quad.try_tag_code(image, self.config.dimension_bits, self.config.black_border)
            if code is None:
                LOGGER.debug("Payload of %r leaves the image", quad)
                detections.append(Detection(quad=quad, code=0, ok=False))
            else:
                detections.append(Detection(quad=quad, code=code, ok=True))
        return detections

    def detect(self, image: FloatImage, segments: Sequence[Segment]) -> List[Detection]:
        """Find quads and decode them."""
        return self.decode(image, self.find_quads(segments))

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _run_shard(self, root: Segment, started: float):
        if self.config.deadline_s is not None and time.monotonic() - started > self.config.deadline_s:
            return None
        search = QuadSearch(self.config.search_config())
        return search.search(root), search.stats
