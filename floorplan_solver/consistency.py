from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Set, Tuple, Union

from .constraints import Constraint, ConstraintId, as_constraint_list, constraint_kind
from .graph import EPSILON, Graph, Line

LinePair = Tuple[str, str]


@dataclass
class ConsistencyWarning:
    kind: str
    message: str
    constraint_ids: List[str] = field(default_factory=list)
    line_ids: List[str] = field(default_factory=list)

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        return self.message


def _pair_key(a: str, b: str) -> LinePair:
    return (a, b) if a <= b else (b, a)


def _shared_vertices(first: Line, second: Line) -> Set[str]:
    return set(first.vertex_ids) & set(second.vertex_ids)


def _lines_by_id(graph: Graph) -> Dict[str, Line]:
    return {line.id: line for line in graph.lines}


def check_consistency(
    graph: Graph,
    constraints: Union[Mapping[ConstraintId, Constraint], Iterable[Constraint]],
) -> List[ConsistencyWarning]:
    """Report constraints the solver will not be able to make progress on.

    Only enabled constraints are inspected, and dangling references are
    skipped here; ``validate`` is the place that rejects them.
    """

    warnings: List[ConsistencyWarning] = []
    lines = _lines_by_id(graph)
    distance_by_line: Dict[str, List[str]] = {}
    kinds_by_pair: Dict[LinePair, Dict[str, str]] = {}

    for constraint in as_constraint_list(constraints):
        if not constraint.enabled:
            continue
        kind = constraint_kind(constraint)
        if kind == 'distance':
            line = lines.get(constraint.line_id)
            if line is None or not all(vid in graph.vertices for vid in line.vertex_ids):
                continue
            distance_by_line.setdefault(line.id, []).append(constraint.id)
            if line.length(graph.vertices) < EPSILON:
                warnings.append(
                    ConsistencyWarning(
                        kind='degenerate_geometry',
                        message=f'distance constraint {constraint.id} is on zero-length line {line.id}',
                        constraint_ids=[constraint.id],
                        line_ids=[line.id],
                    )
                )
            if all(graph.is_fixed(vid) for vid in line.vertex_ids):
                warnings.append(
                    ConsistencyWarning(
                        kind='over_constrained_endpoints',
                        message=f'distance constraint {constraint.id} is on line {line.id} whose endpoints are both fixed',
                        constraint_ids=[constraint.id],
                        line_ids=[line.id],
                    )
                )
            continue

        first = lines.get(constraint.line_id1)
        second = lines.get(constraint.line_id2)
        if first is None or second is None:
            continue
        kinds_by_pair.setdefault(_pair_key(first.id, second.id), {}).setdefault(kind, constraint.id)
        if first.id == second.id or len(_shared_vertices(first, second)) != 1:
            warnings.append(
                ConsistencyWarning(
                    kind='non_adjacent_lines',
                    message=(
                        f'{kind} constraint {constraint.id} needs lines sharing one vertex; '
                        f'{first.id} and {second.id} do not'
                    ),
                    constraint_ids=[constraint.id],
                    line_ids=[first.id, second.id],
                )
            )

    for line_id, ids in distance_by_line.items():
        if len(ids) > 1:
            warnings.append(
                ConsistencyWarning(
                    kind='duplicate_distance',
                    message=f'line {line_id} has {len(ids)} distance constraints',
                    constraint_ids=list(ids),
                    line_ids=[line_id],
                )
            )

    for pair, kinds in kinds_by_pair.items():
        if 'parallel' in kinds and 'perpendicular' in kinds:
            warnings.append(
                ConsistencyWarning(
                    kind='parallel_and_perpendicular',
                    message=f'lines {pair[0]} and {pair[1]} are constrained both parallel and perpendicular',
                    constraint_ids=[kinds['parallel'], kinds['perpendicular']],
                    line_ids=list(pair),
                )
            )

    return warnings
