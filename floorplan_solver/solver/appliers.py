"""Per-kind corrections applied once per relaxation pass.

Each applier reads the current working positions, moves at most the free
vertices it owns, and returns the constraint error measured *before* its
correction. Distance errors are in length units, angle errors in degrees.
Appliers never raise for odd geometry: they report a diagnostic and return
the unresolved error instead.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from ..constraints import AngleFamily, Constraint, Distance, constraint_kind, target_angle_degrees
from ..diagnostics import (
    DEGENERATE_GEOMETRY,
    LOCKED_VERTEX,
    NON_ADJACENT_LINES,
    OVER_CONSTRAINED_ENDPOINTS,
    Diagnostics,
)
from ..graph import Line, VertexId
from .math_utils import (
    _add2,
    _direction_angle,
    _dist2,
    _rotate_about,
    _scale2,
    _unit2,
    _vec2,
    normalize_angle,
)
from .model import SolverOptions, WorkingGraph
from .rectangle import Rectangle, detect_rectangle

logger = logging.getLogger(__name__)


@dataclass
class SolveContext:
    work: WorkingGraph
    options: SolverOptions
    diagnostics: Diagnostics


def apply_constraint(constraint: Constraint, ctx: SolveContext) -> float:
    kind = constraint_kind(constraint)
    if kind == "distance":
        return apply_distance(constraint, ctx)  # type: ignore[arg-type]
    if kind in ("angle", "parallel", "perpendicular"):
        return apply_angle_family(constraint, ctx)  # type: ignore[arg-type]
    raise TypeError(f"no applier for constraint kind {kind!r}")


# ---------------------------------------------------------------------------
# Distance


def apply_distance(constraint: Distance, ctx: SolveContext) -> float:
    work = ctx.work
    line = work.line(constraint.line_id)
    start, end = work.endpoints(line)
    length = _dist2(start, end)
    error = length - constraint.target_distance

    if abs(error) < ctx.options.tolerance:
        return error

    if length < ctx.options.epsilon:
        ctx.diagnostics.emit_once(
            DEGENERATE_GEOMETRY,
            f"line {line.id} has coincident endpoints; distance correction skipped",
            constraint_id=constraint.id,
            line_id=line.id,
        )
        return error

    if _preserve_angles(constraint, line, ctx):
        return error

    logger.debug("Distance %s: rotation-tolerant fallback (error=%.6g)", constraint.id, error)
    return _relax_distance(constraint, line, error, ctx)


def _preserve_angles(constraint: Distance, line: Line, ctx: SolveContext) -> bool:
    """Stage 1: hit the target exactly without rotating neighbouring walls."""

    work = ctx.work
    a, b = line.start_vertex_id, line.end_vertex_id
    connections_a = work.connection_count(a)
    connections_b = work.connection_count(b)
    if connections_a <= 1 and connections_b <= 1:
        return False

    if ctx.options.propagate_rectangles:
        rectangle = detect_rectangle(
            line,
            work,
            min_angle=ctx.options.rectangle_min_angle,
            max_angle=ctx.options.rectangle_max_angle,
        )
        if rectangle is not None and _propagate_rectangle(rectangle, constraint.target_distance, ctx):
            logger.debug("Distance %s: propagated to opposite wall", constraint.id)
            return True

    fixed_a = work.is_fixed(a)
    fixed_b = work.is_fixed(b)
    if fixed_a and fixed_b:
        # Stage 2 emits the over_constrained_endpoints warning for this case.
        logger.debug("Distance %s: both endpoints fixed, angle preservation impossible", constraint.id)
        return False

    if not fixed_a and not fixed_b:
        # Anchor the better-connected endpoint; ties keep the start vertex.
        anchor, mover = (a, b) if connections_a >= connections_b else (b, a)
    elif fixed_a:
        anchor, mover = a, b
    else:
        anchor, mover = b, a

    target = _along(work, anchor, mover, constraint.target_distance, ctx.options.epsilon)
    if target is None:
        return False
    work.move(mover, target)
    logger.debug("Distance %s: anchored %s, moved %s", constraint.id, anchor, mover)
    return True


def _along(
    work: WorkingGraph, anchor: VertexId, mover: VertexId, distance: float, eps: float
) -> Optional[Tuple[float, float]]:
    anchor_pos = work.position(anchor)
    unit = _unit2(_vec2(anchor_pos, work.position(mover)), eps)
    if unit is None:
        return None
    return _add2(anchor_pos, _scale2(unit, distance))


def _propagate_rectangle(rectangle: Rectangle, distance: float, ctx: SolveContext) -> bool:
    """Resize a wall and its opposite wall together, keeping the two side walls.

    ``rectangle.lines[0]`` is the constrained wall (v0-v1) and ``lines[2]``
    its opposite (v2-v3). Either the v0/v3 side stays put and v1, v2 move, or
    the v1/v2 side stays put and v0, v3 move. Both movers must be free.
    """

    work = ctx.work
    v0, v1, v2, v3 = rectangle.vertices
    options = ((v0, v1, v3, v2), (v1, v0, v2, v3))
    for anchor_a, mover_a, anchor_b, mover_b in options:
        if work.is_fixed(mover_a) or work.is_fixed(mover_b):
            continue
        target_a = _along(work, anchor_a, mover_a, distance, ctx.options.epsilon)
        target_b = _along(work, anchor_b, mover_b, distance, ctx.options.epsilon)
        if target_a is None or target_b is None:
            return False
        work.move(mover_a, target_a)
        work.move(mover_b, target_b)
        return True
    return False


def _relax_distance(constraint: Distance, line: Line, error: float, ctx: SolveContext) -> float:
    """Stage 2: inverse-mass weighted position correction along the segment."""

    work = ctx.work
    a, b = line.start_vertex_id, line.end_vertex_id
    p1, p2 = work.endpoints(line)
    w1 = 0.0 if work.is_fixed(a) else 1.0
    w2 = 0.0 if work.is_fixed(b) else 1.0
    w_sum = w1 + w2
    if w_sum <= ctx.options.epsilon:
        ctx.diagnostics.emit_once(
            OVER_CONSTRAINED_ENDPOINTS,
            f"line {line.id} has both endpoints fixed; distance {constraint.target_distance:g} unsatisfiable",
            constraint_id=constraint.id,
            line_id=line.id,
        )
        return error

    # Gradient of the length with respect to p1.
    normal = _unit2(_vec2(p2, p1), ctx.options.epsilon)
    if normal is None:
        ctx.diagnostics.emit_once(
            DEGENERATE_GEOMETRY,
            f"line {line.id} collapsed during relaxation; distance correction skipped",
            constraint_id=constraint.id,
            line_id=line.id,
        )
        return error

    step = error * ctx.options.relaxation_factor
    if w1:
        work.move(a, _add2(p1, _scale2(normal, -(w1 / w_sum) * step)))
    if w2:
        work.move(b, _add2(p2, _scale2(normal, (w2 / w_sum) * step)))
    return error


# ---------------------------------------------------------------------------
# Angle / Parallel / Perpendicular


def _shared_vertex(first: Line, second: Line) -> Optional[VertexId]:
    if first.id == second.id:
        return None
    shared = set(first.vertex_ids) & set(second.vertex_ids)
    if len(shared) != 1:
        return None
    return shared.pop()


def _effective_target(kind: str, nominal: float, current: float) -> float:
    # Lines are undirected: perpendicular accepts +-90 and parallel 0 or 180,
    # whichever is nearer. A generic angle keeps its signed target.
    if kind == "perpendicular":
        return math.copysign(math.pi / 2.0, current) if current != 0.0 else math.pi / 2.0
    if kind == "parallel":
        return 0.0 if abs(current) <= math.pi / 2.0 else math.copysign(math.pi, current)
    return nominal


def _connection_total(work: WorkingGraph, line: Line) -> int:
    return work.connection_count(line.start_vertex_id) + work.connection_count(line.end_vertex_id)


def apply_angle_family(constraint: AngleFamily, ctx: SolveContext) -> float:
    work = ctx.work
    first = work.line(constraint.line_id1)
    second = work.line(constraint.line_id2)
    pivot = _shared_vertex(first, second)
    if pivot is None:
        ctx.diagnostics.emit_once(
            NON_ADJACENT_LINES,
            f"lines {first.id} and {second.id} do not share exactly one vertex; "
            f"{constraint_kind(constraint)} constraint ignored",
            constraint_id=constraint.id,
            line_ids=(first.id, second.id),
        )
        return 0.0

    first_pts = work.endpoints(first)
    second_pts = work.endpoints(second)
    kind = constraint_kind(constraint)
    current = normalize_angle(_direction_angle(*second_pts) - _direction_angle(*first_pts))
    target = _effective_target(kind, math.radians(target_angle_degrees(constraint)), current)
    error = normalize_angle(current - target)
    error_degrees = math.degrees(error)

    if abs(error) < ctx.options.angular_tolerance:
        return error_degrees

    eps = ctx.options.epsilon
    if _dist2(*first_pts) < eps or _dist2(*second_pts) < eps:
        ctx.diagnostics.emit_once(
            DEGENERATE_GEOMETRY,
            f"{kind} constraint {constraint.id} references a zero-length line; correction skipped",
            constraint_id=constraint.id,
        )
        return error_degrees

    # Rotate the less connected line; ties rotate the second line.
    if _connection_total(work, second) <= _connection_total(work, first):
        rotating, theta = second, -error
    else:
        rotating, theta = first, error

    far = rotating.other_vertex(pivot)
    if work.is_fixed(far):
        ctx.diagnostics.emit_once(
            LOCKED_VERTEX,
            f"vertex {far} is fixed; cannot rotate line {rotating.id} for {kind} constraint {constraint.id}",
            constraint_id=constraint.id,
            vertex_id=far,
        )
        return error_degrees

    rotated = _rotate_about(work.position(far), work.position(pivot), theta * ctx.options.relaxation_factor)
    work.move(far, rotated)
    logger.debug(
        "%s %s: rotated line %s about %s by %.6g deg (error %.6g deg)",
        kind,
        constraint.id,
        rotating.id,
        pivot,
        math.degrees(theta * ctx.options.relaxation_factor),
        error_degrees,
    )
    return error_degrees


__all__ = [
    "SolveContext",
    "apply_angle_family",
    "apply_constraint",
    "apply_distance",
]
