"""Core data structures for the relaxation solver."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

import numpy as np

from ..diagnostics import DiagnosticEvent
from ..graph import Graph, Line, LineId, Point2D, VertexId

SolveStatus = Literal["idle", "converged", "iteration_limit"]


@dataclass
class SolverOptions:
    """Numeric knobs of the relaxation loop."""

    max_iterations: int = 100
    # Positional tolerance in length units; angles use the same value in degrees.
    tolerance: float = 1e-3
    relaxation_factor: float = 0.5
    epsilon: float = 1e-6
    rectangle_min_angle: float = 85.0
    rectangle_max_angle: float = 95.0
    propagate_rectangles: bool = True

    def __post_init__(self) -> None:
        if int(self.max_iterations) < 1:
            raise ValueError("max_iterations must be at least 1")
        if not (math.isfinite(self.tolerance) and self.tolerance > 0.0):
            raise ValueError("tolerance must be a positive finite number")
        if not 0.0 < self.relaxation_factor <= 1.0:
            raise ValueError("relaxation_factor must be in (0, 1]")
        if not (math.isfinite(self.epsilon) and self.epsilon > 0.0):
            raise ValueError("epsilon must be a positive finite number")
        if not 0.0 <= self.rectangle_min_angle <= 90.0 <= self.rectangle_max_angle <= 180.0:
            raise ValueError("rectangle angle band must contain 90 degrees")
        self.max_iterations = int(self.max_iterations)

    @property
    def angular_tolerance(self) -> float:
        """``tolerance`` read as degrees and converted to radians."""

        return math.radians(self.tolerance)


@dataclass
class ConstraintResidual:
    constraint_id: str
    kind: str
    error: float
    satisfied: bool

    def as_dict(self) -> Dict[str, object]:
        return {
            "id": self.constraint_id,
            "kind": self.kind,
            "error": self.error,
            "satisfied": self.satisfied,
        }


@dataclass
class ConvergenceReport:
    status: SolveStatus
    converged: bool
    iterations: int
    max_error: float
    max_displacement: float = 0.0
    worst_constraint_id: Optional[str] = None
    residual_breakdown: List[Dict[str, object]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    events: List[DiagnosticEvent] = field(default_factory=list)

    def events_of(self, kind: str) -> List[DiagnosticEvent]:
        return [event for event in self.events if event.kind == kind]


class WorkingGraph:
    """Mutable positions for one solve call over an immutable :class:`Graph`.

    Positions live in an ``(n, 2)`` array indexed like ``index``; topology
    (lines and adjacency) is frozen for the duration of the call.
    """

    def __init__(self, graph: Graph) -> None:
        self.source = graph
        self.vertex_order: List[VertexId] = list(graph.vertices)
        self.index: Dict[VertexId, int] = {vid: idx for idx, vid in enumerate(self.vertex_order)}
        self.coords = np.array(
            [graph.vertices[vid].position for vid in self.vertex_order], dtype=float
        ).reshape(-1, 2)
        self.initial = self.coords.copy()
        self.fixed = np.array([graph.vertices[vid].fixed for vid in self.vertex_order], dtype=bool)
        self.lines: Dict[LineId, Line] = {line.id: line for line in graph.lines}
        self._adjacency: Dict[VertexId, List[Line]] = {vid: [] for vid in self.vertex_order}
        for line in graph.lines:
            for vid in line.vertex_ids:
                self._adjacency.setdefault(vid, []).append(line)

    def line(self, line_id: LineId) -> Line:
        try:
            return self.lines[line_id]
        except KeyError as exc:
            raise KeyError(f"Unknown line '{line_id}'") from exc

    def lines_connected_to_vertex(self, vertex_id: VertexId) -> List[Line]:
        return list(self._adjacency.get(vertex_id, ()))

    def connection_count(self, vertex_id: VertexId) -> int:
        return len(self._adjacency.get(vertex_id, ()))

    def _idx(self, vertex_id: VertexId) -> int:
        try:
            return self.index[vertex_id]
        except KeyError as exc:
            raise KeyError(f"Unknown vertex '{vertex_id}'") from exc

    def position(self, vertex_id: VertexId) -> Point2D:
        row = self.coords[self._idx(vertex_id)]
        return float(row[0]), float(row[1])

    def is_fixed(self, vertex_id: VertexId) -> bool:
        return bool(self.fixed[self._idx(vertex_id)])

    def endpoints(self, line: Line) -> Tuple[Point2D, Point2D]:
        return self.position(line.start_vertex_id), self.position(line.end_vertex_id)

    def move(self, vertex_id: VertexId, position: Point2D) -> None:
        idx = self._idx(vertex_id)
        if self.fixed[idx]:
            raise ValueError(f"refusing to move fixed vertex '{vertex_id}'")
        self.coords[idx, 0] = position[0]
        self.coords[idx, 1] = position[1]

    def max_displacement(self) -> float:
        if not self.coords.size:
            return 0.0
        deltas = self.coords - self.initial
        return float(np.max(np.hypot(deltas[:, 0], deltas[:, 1])))

    def to_graph(self) -> Graph:
        changed = np.any(self.coords != self.initial, axis=1)
        moved = {
            self.vertex_order[idx]: (float(self.coords[idx, 0]), float(self.coords[idx, 1]))
            for idx in np.flatnonzero(changed)
        }
        if not moved:
            return self.source
        return self.source.with_positions(moved)


__all__ = [
    "ConstraintResidual",
    "ConvergenceReport",
    "SolveStatus",
    "SolverOptions",
    "WorkingGraph",
]
