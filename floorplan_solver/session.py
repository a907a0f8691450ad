"""Caller-side store wiring edit requests to the DOF gate and the solver.

The session owns one graph snapshot and the live constraint map. Requests are
processed synchronously and must be serialized by the caller; every solve
publishes a fresh :class:`Graph` value instead of mutating the previous one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Union

from .constraints import Constraint, ConstraintId, constraint_line_ids, with_enabled, with_id
from .graph import Graph, Point2D, VertexId
from .printer import format_constraint, format_report
from .solver import (
    ConstraintAnalysis,
    ConvergenceReport,
    Rejected,
    SolverOptions,
    ValidationResult,
    analyze_dof,
    find_conflicting_constraints,
    solve,
    would_over_constrain,
)
from .validate import ValidationError, validate, validate_constraint

logger = logging.getLogger(__name__)


# Requests ------------------------------------------------------------------


@dataclass(frozen=True)
class ConstraintAdded:
    constraint: Constraint


@dataclass(frozen=True)
class ConstraintRemoved:
    constraint_id: ConstraintId


@dataclass(frozen=True)
class ConstraintModified:
    constraint_id: ConstraintId
    new_constraint: Constraint


@dataclass(frozen=True)
class ConstraintToggled:
    constraint_id: ConstraintId
    enabled: bool


@dataclass(frozen=True)
class SolveConstraints:
    pass


@dataclass(frozen=True)
class VertexDragEnded:
    vertex_id: VertexId
    final_position: Point2D


SessionRequest = Union[
    ConstraintAdded,
    ConstraintRemoved,
    ConstraintModified,
    ConstraintToggled,
    SolveConstraints,
    VertexDragEnded,
]


# Published events ------------------------------------------------------------


@dataclass(frozen=True)
class ConstraintConflict:
    message: str
    conflicting_constraint_ids: List[ConstraintId]
    candidate: Constraint
    current_dof: int
    after_dof: int


@dataclass(frozen=True)
class GraphUpdated:
    graph: Graph
    report: ConvergenceReport


SessionEvent = Union[ConstraintConflict, GraphUpdated]
Listener = Callable[[SessionEvent], None]


class ConstraintConflictError(RuntimeError):
    """Raised instead of (in addition to) publishing a conflict when requested."""

    def __init__(self, conflict: ConstraintConflict):
        super().__init__(conflict.message)
        self.conflict = conflict


@dataclass
class ConstraintSession:
    graph: Graph = field(default_factory=Graph)
    constraints: Dict[ConstraintId, Constraint] = field(default_factory=dict)
    options: Optional[SolverOptions] = None
    raise_on_conflict: bool = False
    last_report: Optional[ConvergenceReport] = field(default=None, init=False)
    _listeners: List[Listener] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.constraints, dict):
            self.constraints = {constraint.id: constraint for constraint in self.constraints}
        validate(self.graph, self.constraints)

    # Listeners

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # Queries

    def analysis(self) -> ConstraintAnalysis:
        return analyze_dof(self.graph, self.constraints)

    def constraint(self, constraint_id: ConstraintId) -> Constraint:
        try:
            return self.constraints[constraint_id]
        except KeyError as exc:
            raise KeyError(f"Unknown constraint '{constraint_id}'") from exc

    # Requests

    def dispatch(self, request: SessionRequest) -> object:
        if isinstance(request, ConstraintAdded):
            return self.add_constraint(request.constraint)
        if isinstance(request, ConstraintRemoved):
            return self.remove_constraint(request.constraint_id)
        if isinstance(request, ConstraintModified):
            return self.modify_constraint(request.constraint_id, request.new_constraint)
        if isinstance(request, ConstraintToggled):
            return self.toggle_constraint(request.constraint_id, request.enabled)
        if isinstance(request, SolveConstraints):
            return self.solve()
        if isinstance(request, VertexDragEnded):
            return self.vertex_drag_ended(request.vertex_id, request.final_position)
        raise TypeError(f"unsupported request {type(request).__name__}")

    def add_constraint(self, constraint: Constraint) -> ValidationResult:
        if constraint.id in self.constraints:
            raise ValidationError(f'constraint id "{constraint.id}" is already in use')
        validate_constraint(self.graph, constraint)

        result = self._gate(self.constraints, constraint)
        if isinstance(result, Rejected):
            return result

        logger.info("Constraint accepted: %s (%s)", format_constraint(constraint), result.status)
        self.constraints = {**self.constraints, constraint.id: constraint}
        self.solve()
        return result

    def remove_constraint(self, constraint_id: ConstraintId) -> Optional[Constraint]:
        if constraint_id not in self.constraints:
            logger.debug("Constraint %s already absent", constraint_id)
            return None
        removed = self.constraints[constraint_id]
        self.constraints = {cid: c for cid, c in self.constraints.items() if cid != constraint_id}
        logger.info("Constraint removed: %s", format_constraint(removed))
        return removed

    def modify_constraint(self, constraint_id: ConstraintId, new_constraint: Constraint) -> ValidationResult:
        self.constraint(constraint_id)
        candidate = with_id(new_constraint, constraint_id)
        validate_constraint(self.graph, candidate)

        remaining = {cid: c for cid, c in self.constraints.items() if cid != constraint_id}
        result = self._gate(remaining, candidate)
        if isinstance(result, Rejected):
            return result

        logger.info("Constraint modified: %s (%s)", format_constraint(candidate), result.status)
        self.constraints = {**self.constraints, constraint_id: candidate}
        self.solve()
        return result

    def toggle_constraint(self, constraint_id: ConstraintId, enabled: bool) -> Optional[ValidationResult]:
        current = self.constraint(constraint_id)
        updated = with_enabled(current, enabled)
        result: Optional[ValidationResult] = None
        if enabled:
            remaining = {cid: c for cid, c in self.constraints.items() if cid != constraint_id}
            result = self._gate(remaining, updated)
            if isinstance(result, Rejected):
                return result

        logger.info("Constraint toggled: %s -> %s", constraint_id, enabled)
        self.constraints = {**self.constraints, constraint_id: updated}
        if enabled:
            self.solve()
        return result

    def solve(self) -> ConvergenceReport:
        graph, report = solve(self.graph, self.constraints, self.options)
        self.graph = graph
        self.last_report = report
        if report.status != "idle":
            logger.info("Solve finished: %s", format_report(report))
        self._publish(GraphUpdated(graph=graph, report=report))
        return report

    def vertex_drag_ended(self, vertex_id: VertexId, final_position: Point2D) -> ConvergenceReport:
        self.graph = self.graph.with_positions({vertex_id: final_position})
        return self.solve()

    def replace_graph(self, graph: Graph) -> List[ConstraintId]:
        """Adopt an externally edited graph; constraints on vanished lines are dropped."""

        present = set(graph.line_ids())
        dropped = [
            cid
            for cid, constraint in self.constraints.items()
            if not all(line_id in present for line_id in constraint_line_ids(constraint))
        ]
        kept = {cid: c for cid, c in self.constraints.items() if cid not in dropped}
        validate(graph, kept)
        self.graph = graph
        self.constraints = kept
        if dropped:
            logger.info("Dropped %d constraint(s) referencing removed lines", len(dropped))
        return dropped

    # Internals

    def _gate(self, base: Mapping[ConstraintId, Constraint], candidate: Constraint) -> ValidationResult:
        result = would_over_constrain(self.graph, base, candidate)
        if isinstance(result, Rejected):
            conflict = ConstraintConflict(
                message=result.reason,
                conflicting_constraint_ids=find_conflicting_constraints(
                    self.graph, [*base.values(), candidate]
                ),
                candidate=candidate,
                current_dof=result.current_dof,
                after_dof=result.after_dof,
            )
            logger.warning(
                "Constraint rejected: %s (current DOF: %d, after: %d)",
                format_constraint(candidate),
                result.current_dof,
                result.after_dof,
            )
            self._publish(conflict)
            if self.raise_on_conflict:
                raise ConstraintConflictError(conflict)
        return result
