"""
Line segments and the segment graph the quad search walks.

Segments come from an upstream edge/segment extractor that has already
linked each segment to the plausible next edges ("children") with the
correct handedness. This module only adapts that graph into Python objects.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .geometry import Point

LOGGER = logging.getLogger(__name__)


@dataclass(eq=False)
class Segment:
    """A detected straight edge and its outgoing links in the segment graph.

    Equality is identity: a loop only closes on the very same segment object.
    """

    x0: float
    y0: float
    x1: float
    y1: float
    theta: Optional[float] = None
    length: Optional[float] = None
    children: List["Segment"] = field(default_factory=list, repr=False)
    id: int = -1

    def __post_init__(self):
        if self.theta is None:
            self.theta = math.atan2(self.y1 - self.y0, self.x1 - self.x0)
        if self.length is None:
            self.length = math.hypot(self.x1 - self.x0, self.y1 - self.y0)

    @property
    def p0(self) -> Point:
        return (self.x0, self.y0)

    @property
    def p1(self) -> Point:
        return (self.x1, self.y1)

    def add_child(self, child: "Segment"):
        self.children.append(child)


def segments_from_dicts(records: Iterable[Dict[str, Any]]) -> List[Segment]:
    """Build a linked segment graph from plain records.

    Each record needs ``x0, y0, x1, y1`` and may carry ``id``, ``theta``,
    ``length`` and ``children`` (a list of ids). Ids default to the record
    position.

    Raises:
        ValueError: on duplicate ids or children that reference unknown ids.
    """
    records = list(records)
    segments: List[Segment] = []
    by_id: Dict[int, Segment] = {}

    for index, record in enumerate(records):
        seg_id = int(record.get("id", index))
        if seg_id in by_id:
            raise ValueError(f"Duplicate segment id: {seg_id}")
        try:
            segment = Segment(
                x0=float(record["x0"]),
                y0=float(record["y0"]),
                x1=float(record["x1"]),
                y1=float(record["y1"]),
                theta=record.get("theta"),
                length=record.get("length"),
                id=seg_id,
            )
        except KeyError as e:
            raise ValueError(f"Segment record {index} is missing {e}") from e
        segments.append(segment)
        by_id[seg_id] = segment

    for record, segment in zip(records, segments):
        for child_id in record.get("children", []):
            child = by_id.get(int(child_id))
            if child is None:
                raise ValueError(
                    f"Segment {segment.id} references unknown child {child_id}"
                )
            segment.add_child(child)

    LOGGER.debug("Loaded segment graph with %d segments", len(segments))
    return segments


def segments_to_dicts(segments: Iterable[Segment]) -> List[Dict[str, Any]]:
    """Serialize a segment graph into records accepted by segments_from_dicts."""
    return [
        {
            "id": s.id,
            "x0": s.x0,
            "y0": s.y0,
            "x1": s.x1,
            "y1": s.y1,
            "theta": s.theta,
            "length": s.length,
            "children": [c.id for c in s.children],
        }
        for s in segments
    ]


def load_segments(path: Union[str, Path]) -> List[Segment]:
    """Read a segment graph from a JSON file.

    The file holds either a list of records or ``{"segments": [...]}``.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Cannot read segments: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("segments", [])
    return segments_from_dicts(data)
