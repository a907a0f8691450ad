"""Point/segment graph consumed by the constraint solver."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Mapping, Tuple

VertexId = str
LineId = str
Point2D = Tuple[float, float]

EPSILON = 1e-6


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class LineSegment:
    """Straight segment between two positions, derived on demand."""

    start: Point2D
    end: Point2D

    @property
    def length(self) -> float:
        return math.hypot(self.end[0] - self.start[0], self.end[1] - self.start[1])

    @property
    def midpoint(self) -> Point2D:
        return ((self.start[0] + self.end[0]) * 0.5, (self.start[1] + self.end[1]) * 0.5)

    def angle(self) -> float:
        """Direction of ``start -> end`` in radians, within ``[-pi, pi]``."""

        return math.atan2(self.end[1] - self.start[1], self.end[0] - self.start[0])

    def direction(self) -> Point2D:
        """Unit vector from start to end; zero vector for a degenerate segment."""

        length = self.length
        if length <= EPSILON:
            return (0.0, 0.0)
        return ((self.end[0] - self.start[0]) / length, (self.end[1] - self.start[1]) / length)

    def is_horizontal(self, tolerance: float = 0.01) -> bool:
        angle = abs(self.angle())
        return angle < tolerance or abs(angle - math.pi) < tolerance

    def is_vertical(self, tolerance: float = 0.01) -> bool:
        angle = abs(self.angle())
        return abs(angle - math.pi / 2.0) < tolerance

    def closest_point_to(self, point: Point2D) -> Point2D:
        dx = self.end[0] - self.start[0]
        dy = self.end[1] - self.start[1]
        length_sq = dx * dx + dy * dy
        if length_sq <= EPSILON * EPSILON:
            return self.start
        t = ((point[0] - self.start[0]) * dx + (point[1] - self.start[1]) * dy) / length_sq
        t = min(1.0, max(0.0, t))
        return (self.start[0] + t * dx, self.start[1] + t * dy)

    def distance_to_point(self, point: Point2D) -> float:
        closest = self.closest_point_to(point)
        return math.hypot(point[0] - closest[0], point[1] - closest[1])


@dataclass(frozen=True)
class Vertex:
    """Corner or wall endpoint. ``fixed`` vertices are never moved by the solver."""

    id: VertexId
    position: Point2D
    fixed: bool = False

    def __post_init__(self) -> None:
        x, y = self.position
        object.__setattr__(self, "position", (float(x), float(y)))

    @classmethod
    def at(cls, x: float, y: float, fixed: bool = False) -> "Vertex":
        return cls(id=new_id(), position=(x, y), fixed=fixed)

    def moved_to(self, position: Point2D) -> "Vertex":
        return replace(self, position=position)


@dataclass(frozen=True)
class Line:
    """Connection between two vertices.

    A line stores vertex ids only. Its geometry is recomputed from the
    current vertex positions on every call and is never cached.
    """

    start_vertex_id: VertexId
    end_vertex_id: VertexId
    id: LineId = field(default_factory=new_id)

    @classmethod
    def between(cls, start: Vertex, end: Vertex) -> "Line":
        return cls(start_vertex_id=start.id, end_vertex_id=end.id)

    @property
    def vertex_ids(self) -> Tuple[VertexId, VertexId]:
        return (self.start_vertex_id, self.end_vertex_id)

    def touches(self, vertex_id: VertexId) -> bool:
        return vertex_id == self.start_vertex_id or vertex_id == self.end_vertex_id

    def other_vertex(self, vertex_id: VertexId) -> VertexId:
        if vertex_id == self.start_vertex_id:
            return self.end_vertex_id
        if vertex_id == self.end_vertex_id:
            return self.start_vertex_id
        raise KeyError(f"Line {self.id} does not touch vertex {vertex_id}")

    def geometry(self, vertices: Mapping[VertexId, Vertex]) -> LineSegment:
        try:
            start = vertices[self.start_vertex_id]
        except KeyError as exc:
            raise KeyError(f"Line {self.id} references missing start vertex {self.start_vertex_id}") from exc
        try:
            end = vertices[self.end_vertex_id]
        except KeyError as exc:
            raise KeyError(f"Line {self.id} references missing end vertex {self.end_vertex_id}") from exc
        return LineSegment(start.position, end.position)

    def length(self, vertices: Mapping[VertexId, Vertex]) -> float:
        return self.geometry(vertices).length

    def midpoint(self, vertices: Mapping[VertexId, Vertex]) -> Point2D:
        return self.geometry(vertices).midpoint


@dataclass(frozen=True)
class Graph:
    """Immutable snapshot of vertices and the lines connecting them."""

    vertices: Dict[VertexId, Vertex] = field(default_factory=dict)
    lines: List[Line] = field(default_factory=list)

    @classmethod
    def build(cls, vertices: Iterable[Vertex], lines: Iterable[Line] = ()) -> "Graph":
        return cls(vertices={vertex.id: vertex for vertex in vertices}, lines=list(lines))

    def vertex(self, vertex_id: VertexId) -> Vertex:
        try:
            return self.vertices[vertex_id]
        except KeyError as exc:
            raise KeyError(f"Unknown vertex '{vertex_id}'") from exc

    def line(self, line_id: LineId) -> Line:
        for line in self.lines:
            if line.id == line_id:
                return line
        raise KeyError(f"Unknown line '{line_id}'")

    def has_line(self, line_id: LineId) -> bool:
        return any(line.id == line_id for line in self.lines)

    def line_ids(self) -> List[LineId]:
        return [line.id for line in self.lines]

    def position(self, vertex_id: VertexId) -> Point2D:
        return self.vertex(vertex_id).position

    def is_fixed(self, vertex_id: VertexId) -> bool:
        return self.vertex(vertex_id).fixed

    def lines_connected_to_vertex(self, vertex_id: VertexId) -> List[Line]:
        return [line for line in self.lines if line.touches(vertex_id)]

    def geometry(self, line_id: LineId) -> LineSegment:
        return self.line(line_id).geometry(self.vertices)

    def positions(self) -> Dict[VertexId, Point2D]:
        return {vertex_id: vertex.position for vertex_id, vertex in self.vertices.items()}

    def with_vertex(self, vertex: Vertex) -> "Graph":
        vertices = dict(self.vertices)
        vertices[vertex.id] = vertex
        return replace(self, vertices=vertices)

    def with_line(self, line: Line) -> "Graph":
        return replace(self, lines=[*self.lines, line])

    def with_positions(self, positions: Mapping[VertexId, Point2D]) -> "Graph":
        """Return a copy with the given vertices moved; other vertices are shared."""

        vertices = dict(self.vertices)
        for vertex_id, position in positions.items():
            vertices[vertex_id] = self.vertex(vertex_id).moved_to(position)
        return replace(self, vertices=vertices)


__all__ = [
    "EPSILON",
    "Graph",
    "Line",
    "LineId",
    "LineSegment",
    "Point2D",
    "Vertex",
    "VertexId",
    "new_id",
]
