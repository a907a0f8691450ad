"""Gauss-Seidel relaxation loop over a graph and its enabled constraints."""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional, Tuple, Union

from ..constraints import Constraint, ConstraintId, constraint_kind, enabled_constraints, sort_by_priority
from ..diagnostics import CONVERGED, NON_CONVERGENCE, DiagnosticSink, Diagnostics
from ..graph import Graph
from ..logging_utils import apply_debug_logging
from .appliers import SolveContext, apply_constraint
from .config import get_solver_options
from .model import ConstraintResidual, ConvergenceReport, SolverOptions, WorkingGraph

logger = logging.getLogger(__name__)

ConstraintsLike = Union[Mapping[ConstraintId, Constraint], Iterable[Constraint]]


def solve(
    graph: Graph,
    constraints: ConstraintsLike,
    options: Optional[SolverOptions] = None,
    *,
    diagnostics: Optional[DiagnosticSink] = None,
) -> Tuple[Graph, ConvergenceReport]:
    """Relax ``graph`` towards the enabled ``constraints``.

    Constraints run in priority order (perpendicular/parallel, distance,
    angle; stable within a priority) once per pass, Gauss-Seidel style, until
    the largest pre-correction error of a pass drops below the tolerance or
    ``max_iterations`` passes have run. The input graph is not modified; the
    returned graph carries the new positions even when the loop did not
    converge.
    """

    opts = options if options is not None else get_solver_options()
    diag = Diagnostics(logger, diagnostics)
    active = sort_by_priority(enabled_constraints(constraints))

    if not active:
        logger.debug("No enabled constraints; nothing to solve")
        return graph, ConvergenceReport(status="idle", converged=True, iterations=0, max_error=0.0)

    work = WorkingGraph(graph)
    ctx = SolveContext(work=work, options=opts, diagnostics=diag)
    logger.debug("Solving %d constraints over %d vertices", len(active), len(work.vertex_order))

    residuals: List[ConstraintResidual] = []
    max_error = 0.0
    worst_id: Optional[str] = None
    iterations = 0
    converged = False

    for iteration in range(opts.max_iterations):
        residuals = []
        max_error = 0.0
        worst_id = None
        for constraint in active:
            error = apply_constraint(constraint, ctx)
            magnitude = abs(error)
            residuals.append(
                ConstraintResidual(
                    constraint_id=constraint.id,
                    kind=constraint_kind(constraint),
                    error=error,
                    satisfied=magnitude < opts.tolerance,
                )
            )
            if magnitude > max_error:
                max_error = magnitude
                worst_id = constraint.id
        iterations = iteration + 1
        logger.debug("Iteration %d: max error = %.6g (%s)", iteration, max_error, worst_id)
        if max_error < opts.tolerance:
            converged = True
            break

    if converged:
        diag.emit(
            CONVERGED,
            f"constraints converged in {iterations} iteration(s) (max error {max_error:.3e})",
            level=logging.INFO,
            iterations=iterations,
        )
    else:
        diag.emit(
            NON_CONVERGENCE,
            f"constraints did not converge within {opts.max_iterations} iterations; "
            f"max error {max_error:.3e} at constraint {worst_id}",
            constraint_id=worst_id,
            iterations=iterations,
            max_error=max_error,
        )

    report = ConvergenceReport(
        status="converged" if converged else "iteration_limit",
        converged=converged,
        iterations=iterations,
        max_error=max_error,
        max_displacement=work.max_displacement(),
        worst_constraint_id=worst_id,
        residual_breakdown=[residual.as_dict() for residual in residuals],
        warnings=diag.warnings(),
        events=list(diag.events),
    )
    return work.to_graph(), report


apply_debug_logging(globals(), logger=logger)


__all__ = ["solve"]
