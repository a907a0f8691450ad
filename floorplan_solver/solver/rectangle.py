"""Detection of four-sided, right-angled closed loops ("rooms").

A dimension change on one wall of a rectangle is propagated to the opposite
wall so that the four corners stay square. Detection is purely analytical:
it reads positions and adjacency and never modifies anything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

from ..graph import Line, Point2D, VertexId
from ..logging_utils import apply_debug_logging
from .math_utils import undirected_angle_degrees

logger = logging.getLogger(__name__)

RIGHT_ANGLE_MIN = 85.0
RIGHT_ANGLE_MAX = 95.0
_SIDES = 4


class GraphView(Protocol):
    """What the detector needs from a graph: adjacency and current positions."""

    def lines_connected_to_vertex(self, vertex_id: VertexId) -> List[Line]: ...

    def position(self, vertex_id: VertexId) -> Point2D: ...


@dataclass(frozen=True)
class Rectangle:
    """Four lines in walk order and the corner vertices in the same order.

    ``lines[i]`` joins ``vertices[i]`` and ``vertices[(i + 1) % 4]``.
    """

    lines: Tuple[Line, Line, Line, Line]
    vertices: Tuple[VertexId, VertexId, VertexId, VertexId]

    def index_of(self, line: Line) -> int:
        for idx, candidate in enumerate(self.lines):
            if candidate.id == line.id:
                return idx
        return -1

    def opposite_line(self, line: Line) -> Optional[Line]:
        idx = self.index_of(line)
        if idx < 0:
            return None
        return self.lines[(idx + 2) % _SIDES]


def _walk_loop(start_line: Line, graph: GraphView) -> Optional[Tuple[List[Line], List[VertexId]]]:
    path = [start_line]
    corners = [start_line.start_vertex_id, start_line.end_vertex_id]
    origin = start_line.start_vertex_id
    frontier = start_line.end_vertex_id

    for _ in range(_SIDES):
        if frontier == origin:
            return path, corners[:-1]
        seen = {line.id for line in path}
        candidates = [line for line in graph.lines_connected_to_vertex(frontier) if line.id not in seen]
        if not candidates:
            logger.debug("Open chain at vertex %s", frontier)
            return None
        if len(candidates) > 1:
            logger.debug("Branch at vertex %s (%d candidates)", frontier, len(candidates))
            return None
        step = candidates[0]
        path.append(step)
        frontier = step.other_vertex(frontier)
        corners.append(frontier)
    return None


def corner_angles(path: List[Line], graph: GraphView) -> List[float]:
    """Angle in degrees (folded to ``[0, 180]``) between consecutive path lines."""

    angles = []
    for idx, line in enumerate(path):
        following = path[(idx + 1) % len(path)]
        first = (graph.position(line.start_vertex_id), graph.position(line.end_vertex_id))
        second = (graph.position(following.start_vertex_id), graph.position(following.end_vertex_id))
        angles.append(undirected_angle_degrees(first, second))
    return angles


def detect_rectangle(
    line: Line,
    graph: GraphView,
    *,
    min_angle: float = RIGHT_ANGLE_MIN,
    max_angle: float = RIGHT_ANGLE_MAX,
) -> Optional[Rectangle]:
    """Return the rectangle ``line`` belongs to, or ``None``.

    The walk starts at ``line`` and follows the single unvisited line at each
    frontier vertex; a dead end or a branch aborts. The loop must close after
    exactly four lines and every corner must lie within ``[min_angle,
    max_angle]`` degrees.
    """

    walked = _walk_loop(line, graph)
    if walked is None:
        return None
    path, corners = walked
    if len(path) != _SIDES:
        return None
    for angle in corner_angles(path, graph):
        if angle < min_angle or angle > max_angle:
            logger.debug("Loop through %s rejected: corner angle %.3f", line.id, angle)
            return None
    return Rectangle(lines=tuple(path), vertices=tuple(corners))  # type: ignore[arg-type]


apply_debug_logging(globals(), logger=logger, skip={"corner_angles"})


__all__ = [
    "GraphView",
    "RIGHT_ANGLE_MAX",
    "RIGHT_ANGLE_MIN",
    "Rectangle",
    "corner_angles",
    "detect_rectangle",
]
