"""Solver façade: DOF validation, rectangle detection and relaxation."""

from __future__ import annotations

from .appliers import SolveContext, apply_angle_family, apply_constraint, apply_distance
from .config import get_solver_options, reset_solver_options, set_solver_options
from .dof import (
    Accepted,
    ConstraintAnalysis,
    Rejected,
    ValidationResult,
    analyze_dof,
    describe_dof,
    find_conflicting_constraints,
    would_over_constrain,
)
from .model import ConstraintResidual, ConvergenceReport, SolveStatus, SolverOptions, WorkingGraph
from .rectangle import RIGHT_ANGLE_MAX, RIGHT_ANGLE_MIN, Rectangle, corner_angles, detect_rectangle
from .solver_core import solve

__all__ = [
    "Accepted",
    "ConstraintAnalysis",
    "ConstraintResidual",
    "ConvergenceReport",
    "RIGHT_ANGLE_MAX",
    "RIGHT_ANGLE_MIN",
    "Rectangle",
    "Rejected",
    "SolveContext",
    "SolveStatus",
    "SolverOptions",
    "ValidationResult",
    "WorkingGraph",
    "analyze_dof",
    "apply_angle_family",
    "apply_constraint",
    "apply_distance",
    "corner_angles",
    "describe_dof",
    "detect_rectangle",
    "find_conflicting_constraints",
    "get_solver_options",
    "reset_solver_options",
    "set_solver_options",
    "solve",
    "would_over_constrain",
]
