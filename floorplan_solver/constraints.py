"""Dimensional and angular constraints over graph lines.

The constraint family is closed: ``Distance``, ``Angle``, ``Parallel`` and
``Perpendicular``. Code that dispatches on the kind goes through
:func:`constraint_kind`, which raises ``TypeError`` for anything else.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Literal, Mapping, Tuple, Union

from .graph import LineId, new_id

ConstraintId = str
ConstraintKind = Literal["distance", "angle", "parallel", "perpendicular"]


@dataclass(frozen=True)
class Distance:
    """Lock a line to ``target_distance`` world units."""

    line_id: LineId
    target_distance: float
    id: ConstraintId = field(default_factory=new_id)
    enabled: bool = True
    user_set: bool = True

    def __post_init__(self) -> None:
        value = float(self.target_distance)
        if not math.isfinite(value) or value <= 0.0:
            raise ValueError(f"target_distance must be a positive finite number, got {self.target_distance!r}")
        object.__setattr__(self, "target_distance", value)


@dataclass(frozen=True)
class Angle:
    """Lock the signed angle from ``line_id1`` to ``line_id2``, in degrees."""

    line_id1: LineId
    line_id2: LineId
    target_angle_degrees: float
    id: ConstraintId = field(default_factory=new_id)
    enabled: bool = True
    user_set: bool = True

    def __post_init__(self) -> None:
        value = float(self.target_angle_degrees)
        if not math.isfinite(value):
            raise ValueError(f"target_angle_degrees must be finite, got {self.target_angle_degrees!r}")
        object.__setattr__(self, "target_angle_degrees", value % 360.0)


@dataclass(frozen=True)
class Parallel:
    line_id1: LineId
    line_id2: LineId
    id: ConstraintId = field(default_factory=new_id)
    enabled: bool = True


@dataclass(frozen=True)
class Perpendicular:
    line_id1: LineId
    line_id2: LineId
    id: ConstraintId = field(default_factory=new_id)
    enabled: bool = True


Constraint = Union[Distance, Angle, Parallel, Perpendicular]
AngleFamily = Union[Angle, Parallel, Perpendicular]

# Solving order only; higher runs first. Right angles are defended before lengths.
_PRIORITY: Dict[ConstraintKind, int] = {
    "perpendicular": 3,
    "parallel": 3,
    "distance": 2,
    "angle": 1,
}


def constraint_kind(constraint: Constraint) -> ConstraintKind:
    if isinstance(constraint, Distance):
        return "distance"
    if isinstance(constraint, Angle):
        return "angle"
    if isinstance(constraint, Parallel):
        return "parallel"
    if isinstance(constraint, Perpendicular):
        return "perpendicular"
    raise TypeError(f"unsupported constraint type {type(constraint).__name__}")


def constraint_priority(constraint: Constraint) -> int:
    return _PRIORITY[constraint_kind(constraint)]


def constraint_line_ids(constraint: Constraint) -> Tuple[LineId, ...]:
    if constraint_kind(constraint) == "distance":
        return (constraint.line_id,)  # type: ignore[union-attr]
    return (constraint.line_id1, constraint.line_id2)  # type: ignore[union-attr]


def target_angle_degrees(constraint: AngleFamily) -> float:
    kind = constraint_kind(constraint)
    if kind == "parallel":
        return 0.0
    if kind == "perpendicular":
        return 90.0
    if kind == "angle":
        return constraint.target_angle_degrees  # type: ignore[union-attr]
    raise TypeError(f"{type(constraint).__name__} is not an angle constraint")


def is_angle_family(constraint: Constraint) -> bool:
    return constraint_kind(constraint) != "distance"


def with_enabled(constraint: Constraint, enabled: bool) -> Constraint:
    return replace(constraint, enabled=enabled)


def with_id(constraint: Constraint, constraint_id: ConstraintId) -> Constraint:
    return replace(constraint, id=constraint_id)


def references_line(constraint: Constraint, line_id: LineId) -> bool:
    return line_id in constraint_line_ids(constraint)


def constraints_referencing_line(
    constraints: Iterable[Constraint], line_id: LineId
) -> List[Constraint]:
    return [constraint for constraint in constraints if references_line(constraint, line_id)]


def as_constraint_list(
    constraints: Union[Mapping[ConstraintId, Constraint], Iterable[Constraint]],
) -> List[Constraint]:
    """Accept the live id-keyed map or any iterable; keeps enumeration order."""

    if isinstance(constraints, Mapping):
        return list(constraints.values())
    return list(constraints)


def enabled_constraints(
    constraints: Union[Mapping[ConstraintId, Constraint], Iterable[Constraint]],
) -> List[Constraint]:
    return [constraint for constraint in as_constraint_list(constraints) if constraint.enabled]


def sort_by_priority(constraints: Iterable[Constraint]) -> List[Constraint]:
    # sorted() is stable, so equal priorities keep their enumeration order.
    return sorted(constraints, key=constraint_priority, reverse=True)


__all__ = [
    "Angle",
    "AngleFamily",
    "Constraint",
    "ConstraintId",
    "ConstraintKind",
    "Distance",
    "Parallel",
    "Perpendicular",
    "as_constraint_list",
    "constraint_kind",
    "constraint_line_ids",
    "constraint_priority",
    "constraints_referencing_line",
    "enabled_constraints",
    "is_angle_family",
    "references_line",
    "sort_by_priority",
    "target_angle_degrees",
    "with_enabled",
    "with_id",
]
