"""Degrees-of-freedom bookkeeping for a graph and its constraint set.

In 2D every free vertex carries two positional unknowns and fixed vertices
carry none. Each enabled constraint removes exactly one, whatever its kind::

    dof = 2 * free_vertices - enabled_constraints

``dof < 0`` is over-constrained, ``dof == 0`` well-constrained and
``dof > 0`` under-constrained (still valid, the solution is not unique).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Union

from ..constraints import Constraint, ConstraintId, as_constraint_list, constraint_kind
from ..graph import Graph
from ..logging_utils import apply_debug_logging

logger = logging.getLogger(__name__)

ConstraintsLike = Union[Mapping[ConstraintId, Constraint], Iterable[Constraint]]

DOF_PER_VERTEX = 2


@dataclass(frozen=True)
class ConstraintAnalysis:
    free_vertex_count: int
    constraint_count: int
    constrained_dof: int
    degrees_of_freedom: int
    is_over_constrained: bool
    is_well_constrained: bool
    is_under_constrained: bool

    @property
    def status(self) -> str:
        return describe_dof(self.degrees_of_freedom)


@dataclass(frozen=True)
class Accepted:
    new_dof: int
    status: str

    accepted = True


@dataclass(frozen=True)
class Rejected:
    reason: str
    current_dof: int
    after_dof: int

    accepted = False


ValidationResult = Union[Accepted, Rejected]


def describe_dof(dof: int) -> str:
    if dof == 0:
        return "Well-constrained"
    if dof > 0:
        return f"Underconstrained ({dof} DOF remaining)"
    return f"Overconstrained ({-dof} redundant)"


def dof_removed_by(constraint: Constraint) -> int:
    # Every kind costs one DOF in this model; the dispatch keeps the union closed.
    kind = constraint_kind(constraint)
    if kind in ("distance", "angle", "parallel", "perpendicular"):
        return 1
    raise TypeError(f"unsupported constraint kind {kind!r}")


def analyze_dof(graph: Graph, constraints: ConstraintsLike) -> ConstraintAnalysis:
    """Count the degrees of freedom left by ``constraints`` on ``graph``."""

    items = as_constraint_list(constraints)
    free_vertex_count = sum(1 for vertex in graph.vertices.values() if not vertex.fixed)
    total_dof = free_vertex_count * DOF_PER_VERTEX
    constrained_dof = sum(dof_removed_by(constraint) for constraint in items if constraint.enabled)
    dof = total_dof - constrained_dof

    logger.debug(
        "DOF analysis: free_vertices=%d constraints=%d enabled_dof=%d dof=%d",
        free_vertex_count,
        len(items),
        constrained_dof,
        dof,
    )
    return ConstraintAnalysis(
        free_vertex_count=free_vertex_count,
        constraint_count=len(items),
        constrained_dof=constrained_dof,
        degrees_of_freedom=dof,
        is_over_constrained=dof < 0,
        is_well_constrained=dof == 0,
        is_under_constrained=dof > 0,
    )


def would_over_constrain(
    graph: Graph,
    constraints: ConstraintsLike,
    candidate: Constraint,
) -> ValidationResult:
    """Check whether committing ``candidate`` would drive the DOF negative.

    For a modification, pass ``constraints`` with the old constraint already
    removed so that re-submitting an unchanged constraint is not rejected.
    """

    current = analyze_dof(graph, constraints)
    after = current.degrees_of_freedom - dof_removed_by(candidate)
    if after < 0:
        return Rejected(
            reason="Adding this constraint would overconstrain the system",
            current_dof=current.degrees_of_freedom,
            after_dof=after,
        )
    return Accepted(new_dof=after, status=describe_dof(after))


def find_conflicting_constraints(graph: Graph, constraints: ConstraintsLike) -> List[ConstraintId]:
    """Approximate conflict report: every constraint id when over-constrained.

    This is not a dependency analysis; callers should read the result as
    "all of these are suspect".
    """

    items = as_constraint_list(constraints)
    if not analyze_dof(graph, items).is_over_constrained:
        return []
    return [constraint.id for constraint in items]


apply_debug_logging(globals(), logger=logger)


__all__ = [
    "Accepted",
    "ConstraintAnalysis",
    "Rejected",
    "ValidationResult",
    "analyze_dof",
    "describe_dof",
    "dof_removed_by",
    "find_conflicting_constraints",
    "would_over_constrain",
]
