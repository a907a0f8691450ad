from typing import Iterable

from .constraints import Constraint, constraint_kind, target_angle_degrees
from .graph import Graph, Line


def _short(identifier: str, width: int = 8) -> str:
    return identifier if len(identifier) <= width else identifier[:width]


def _flag(constraint: Constraint) -> str:
    return '' if constraint.enabled else ' [disabled]'


def format_line(line: Line) -> str:
    return f"{_short(line.id)}({_short(line.start_vertex_id)}-{_short(line.end_vertex_id)})"


def format_constraint(constraint: Constraint) -> str:
    kind = constraint_kind(constraint)
    if kind == 'distance':
        body = f"distance {_short(constraint.line_id)} = {constraint.target_distance:g}"
    elif kind == 'angle':
        body = (
            f"angle {_short(constraint.line_id1)} -> {_short(constraint.line_id2)}"
            f" = {target_angle_degrees(constraint):g}deg"
        )
    else:
        body = f"{kind} {_short(constraint.line_id1)} {_short(constraint.line_id2)}"
    return f"{body}{_flag(constraint)}"


def format_constraints(constraints: Iterable[Constraint]) -> str:
    return '\n'.join(format_constraint(c) for c in constraints)


def format_graph(graph: Graph) -> str:
    rows = []
    for vertex in graph.vertices.values():
        x, y = vertex.position
        lock = ' fixed' if vertex.fixed else ''
        rows.append(f"vertex {_short(vertex.id)} ({x:.6g}, {y:.6g}){lock}")
    for line in graph.lines:
        rows.append(f"line {format_line(line)} length={line.length(graph.vertices):.6g}")
    return '\n'.join(rows)


def format_report(report) -> str:
    text = f"{report.status}: {report.iterations} iteration(s), max error {report.max_error:.3g}"
    if report.worst_constraint_id is not None and not report.converged:
        text += f" at {_short(report.worst_constraint_id)}"
    if report.warnings:
        text += f", {len(report.warnings)} warning(s)"
    return text
