from .graph import EPSILON, Graph, Line, LineSegment, Vertex
from .constraints import (
    Angle,
    Constraint,
    Distance,
    Parallel,
    Perpendicular,
    constraint_kind,
    constraint_priority,
    sort_by_priority,
)
from .validate import validate, validate_constraint, validate_graph, ValidationError
from .consistency import check_consistency, ConsistencyWarning
from .printer import format_constraint, format_constraints, format_graph, format_report
from .diagnostics import DiagnosticEvent, Diagnostics
from .solver import (
    Accepted,
    ConstraintAnalysis,
    ConvergenceReport,
    Rectangle,
    Rejected,
    SolverOptions,
    ValidationResult,
    analyze_dof,
    detect_rectangle,
    find_conflicting_constraints,
    get_solver_options,
    set_solver_options,
    solve,
    would_over_constrain,
)
from .session import (
    ConstraintAdded,
    ConstraintConflict,
    ConstraintConflictError,
    ConstraintModified,
    ConstraintRemoved,
    ConstraintSession,
    ConstraintToggled,
    GraphUpdated,
    SolveConstraints,
    VertexDragEnded,
)

__all__ = [
    'EPSILON',
    'Graph',
    'Line',
    'LineSegment',
    'Vertex',
    'Angle',
    'Constraint',
    'Distance',
    'Parallel',
    'Perpendicular',
    'constraint_kind',
    'constraint_priority',
    'sort_by_priority',
    'validate',
    'validate_constraint',
    'validate_graph',
    'ValidationError',
    'check_consistency',
    'ConsistencyWarning',
    'format_constraint',
    'format_constraints',
    'format_graph',
    'format_report',
    'DiagnosticEvent',
    'Diagnostics',
    'Accepted',
    'ConstraintAnalysis',
    'ConvergenceReport',
    'Rectangle',
    'Rejected',
    'SolverOptions',
    'ValidationResult',
    'analyze_dof',
    'detect_rectangle',
    'find_conflicting_constraints',
    'get_solver_options',
    'set_solver_options',
    'solve',
    'would_over_constrain',
    'ConstraintAdded',
    'ConstraintConflict',
    'ConstraintConflictError',
    'ConstraintModified',
    'ConstraintRemoved',
    'ConstraintSession',
    'ConstraintToggled',
    'GraphUpdated',
    'SolveConstraints',
    'VertexDragEnded',
]
