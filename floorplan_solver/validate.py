import math
from typing import Iterable, Mapping, Set, Union

from .constraints import (
    Constraint,
    ConstraintId,
    as_constraint_list,
    constraint_kind,
    constraint_line_ids,
    is_angle_family,
)
from .graph import Graph


class ValidationError(Exception):
    pass


def validate_graph(graph: Graph) -> None:
    for key, vertex in graph.vertices.items():
        if key != vertex.id:
            raise ValidationError(f'vertex stored under "{key}" has id "{vertex.id}"')
        if not all(math.isfinite(c) for c in vertex.position):
            raise ValidationError(f'vertex {vertex.id} has a non-finite position {vertex.position!r}')

    seen: Set[str] = set()
    for line in graph.lines:
        if line.id in seen:
            raise ValidationError(f'duplicate line id "{line.id}"')
        seen.add(line.id)
        for vid in line.vertex_ids:
            if vid not in graph.vertices:
                raise ValidationError(f'line {line.id} references missing vertex "{vid}"')
        if line.start_vertex_id == line.end_vertex_id:
            raise ValidationError(f'line {line.id} starts and ends at vertex "{line.start_vertex_id}"')


def validate_constraint(graph: Graph, constraint: Constraint) -> None:
    kind = constraint_kind(constraint)
    line_ids = constraint_line_ids(constraint)
    for line_id in line_ids:
        if not graph.has_line(line_id):
            raise ValidationError(f'{kind} constraint {constraint.id} references missing line "{line_id}"')
    if is_angle_family(constraint) and line_ids[0] == line_ids[1]:
        raise ValidationError(f'{kind} constraint {constraint.id} must reference two different lines')


def validate(
    graph: Graph,
    constraints: Union[Mapping[ConstraintId, Constraint], Iterable[Constraint]] = (),
) -> None:
    validate_graph(graph)
    if isinstance(constraints, Mapping):
        for key, constraint in constraints.items():
            if key != constraint.id:
                raise ValidationError(f'constraint stored under "{key}" has id "{constraint.id}"')
    ids: Set[str] = set()
    for constraint in as_constraint_list(constraints):
        if constraint.id in ids:
            raise ValidationError(f'duplicate constraint id "{constraint.id}"')
        ids.add(constraint.id)
        validate_constraint(graph, constraint)
