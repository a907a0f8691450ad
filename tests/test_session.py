import math

import pytest

from floorplan_solver.constraints import Angle, Distance, Perpendicular
from floorplan_solver.graph import Graph, Line, Vertex
from floorplan_solver.session import (
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
from floorplan_solver.solver import Accepted, Rejected
from floorplan_solver.validate import ValidationError


def triangle_graph():
    return Graph.build(
        [Vertex('a', (0, 0), True), Vertex('b', (100, 0)), Vertex('c', (0, 100))],
        [Line('a', 'b', id='ab'), Line('b', 'c', id='bc'), Line('c', 'a', id='ca')],
    )


def full_triangle_session(**kwargs):
    session = ConstraintSession(graph=triangle_graph(), **kwargs)
    for constraint in (
        Distance('ab', 100, id='d1'),
        Distance('ca', 100, id='d2'),
        Distance('bc', 100 * math.sqrt(2), id='d3'),
        Angle('ab', 'ca', -90, id='a1'),
    ):
        assert session.add_constraint(constraint).accepted
    return session


def record(session):
    events = []
    session.subscribe(events.append)
    return events


def test_add_constraint_commits_and_solves():
    session = ConstraintSession(graph=triangle_graph())
    events = record(session)

    result = session.add_constraint(Distance('ab', 150, id='d'))

    assert isinstance(result, Accepted)
    assert result.new_dof == 3
    assert 'd' in session.constraints
    assert abs(session.graph.geometry('ab').length - 150) < 1e-3
    assert session.graph.position('a') == (0.0, 0.0)
    assert isinstance(events[-1], GraphUpdated)
    assert events[-1].graph is session.graph
    assert session.last_report is events[-1].report


def test_each_accepted_addition_removes_one_dof():
    session = ConstraintSession(graph=triangle_graph())
    before = session.analysis().degrees_of_freedom

    for expected, constraint in enumerate(
        (Distance('ab', 100), Distance('ca', 100), Perpendicular('ab', 'ca')), start=1
    ):
        assert session.add_constraint(constraint).accepted
        assert session.analysis().degrees_of_freedom == before - expected


def test_over_constraining_addition_is_rejected_and_state_is_untouched():
    session = full_triangle_session()
    events = record(session)
    graph_before = session.graph
    constraints_before = dict(session.constraints)

    result = session.add_constraint(Perpendicular('ab', 'bc', id='extra'))

    assert isinstance(result, Rejected)
    assert (result.current_dof, result.after_dof) == (0, -1)
    assert session.graph is graph_before
    assert session.constraints == constraints_before
    assert len(events) == 1
    conflict = events[0]
    assert isinstance(conflict, ConstraintConflict)
    assert conflict.candidate.id == 'extra'
    assert conflict.conflicting_constraint_ids == ['d1', 'd2', 'd3', 'a1', 'extra']
    assert 'overconstrain' in conflict.message


def test_raise_on_conflict():
    session = full_triangle_session(raise_on_conflict=True)

    with pytest.raises(ConstraintConflictError) as exc:
        session.add_constraint(Perpendicular('ab', 'bc', id='extra'))

    assert exc.value.conflict.after_dof == -1
    assert 'extra' not in session.constraints


def test_add_constraint_with_dangling_line_raises():
    session = ConstraintSession(graph=triangle_graph())

    with pytest.raises(ValidationError):
        session.add_constraint(Distance('nope', 10))


def test_add_constraint_with_duplicate_id_raises():
    session = ConstraintSession(graph=triangle_graph())
    session.add_constraint(Distance('ab', 120, id='d'))

    with pytest.raises(ValidationError):
        session.add_constraint(Distance('bc', 120, id='d'))


def test_modify_keeps_id_and_does_not_double_count():
    session = full_triangle_session()

    result = session.modify_constraint('d1', Distance('ab', 120))

    assert isinstance(result, Accepted)
    assert result.new_dof == 0
    assert session.constraints['d1'].target_distance == 120.0
    assert list(session.constraints) == ['d1', 'd2', 'd3', 'a1']


def test_modify_unknown_constraint_raises_key_error():
    session = ConstraintSession(graph=triangle_graph())

    with pytest.raises(KeyError):
        session.modify_constraint('missing', Distance('ab', 10))


def test_remove_constraint_does_not_solve():
    session = ConstraintSession(graph=triangle_graph())
    session.add_constraint(Distance('ab', 150, id='d'))
    events = record(session)
    graph_before = session.graph

    removed = session.remove_constraint('d')

    assert removed.id == 'd'
    assert session.constraints == {}
    assert session.graph is graph_before
    assert events == []
    assert session.remove_constraint('d') is None


def test_disabling_skips_validation_and_enabling_is_gated():
    session = full_triangle_session()
    session.toggle_constraint('a1', False)
    assert session.add_constraint(Perpendicular('ab', 'bc', id='p')).accepted

    result = session.toggle_constraint('a1', True)

    assert isinstance(result, Rejected)
    assert session.constraints['a1'].enabled is False
    assert session.analysis().degrees_of_freedom == 0


def test_toggle_back_on_when_room_exists():
    session = ConstraintSession(graph=triangle_graph())
    session.add_constraint(Distance('ab', 150, id='d'))
    assert session.toggle_constraint('d', False) is None
    assert session.analysis().degrees_of_freedom == 4

    result = session.toggle_constraint('d', True)

    assert isinstance(result, Accepted)
    assert session.constraints['d'].enabled
    assert session.analysis().degrees_of_freedom == 3


def test_vertex_drag_end_publishes_position_then_resolves():
    session = ConstraintSession(graph=triangle_graph())
    session.add_constraint(Distance('ab', 100, id='d'))

    report = session.vertex_drag_ended('b', (0, -300))

    assert report.converged
    bx, by = session.graph.position('b')
    assert abs(math.hypot(bx, by) - 100) < 1e-3
    # The correction acts along the dragged direction.
    assert abs(bx) < 1e-6 and by < 0


def test_dispatch_routes_requests():
    session = ConstraintSession(graph=triangle_graph())
    events = record(session)

    assert session.dispatch(ConstraintAdded(Distance('ab', 150, id='d'))).accepted
    session.dispatch(ConstraintModified('d', Distance('ab', 120)))
    session.dispatch(ConstraintToggled('d', False))
    session.dispatch(SolveConstraints())
    session.dispatch(VertexDragEnded('c', (0, 50)))
    session.dispatch(ConstraintRemoved('d'))

    assert session.constraints == {}
    assert session.graph.position('c') == (0.0, 50.0)
    assert all(isinstance(event, GraphUpdated) for event in events)
    assert events[-1].report.status == 'idle'
    with pytest.raises(TypeError):
        session.dispatch(object())


def test_unsubscribe_stops_delivery():
    session = ConstraintSession(graph=triangle_graph())
    events = []
    unsubscribe = session.subscribe(events.append)
    unsubscribe()

    session.solve()

    assert events == []


def test_replace_graph_drops_constraints_on_removed_lines():
    session = ConstraintSession(graph=triangle_graph())
    session.add_constraint(Distance('ab', 100, id='d1'))
    session.add_constraint(Perpendicular('ab', 'ca', id='p1'))
    session.add_constraint(Distance('bc', 140, id='d2'))
    trimmed = Graph(
        vertices=dict(session.graph.vertices),
        lines=[line for line in session.graph.lines if line.id != 'bc'],
    )

    dropped = session.replace_graph(trimmed)

    assert dropped == ['d2']
    assert list(session.constraints) == ['d1', 'p1']
    assert session.graph is trimmed


def test_session_accepts_iterable_of_constraints():
    session = ConstraintSession(graph=triangle_graph(), constraints=[Distance('ab', 100, id='d')])

    assert list(session.constraints) == ['d']
    assert session.analysis().degrees_of_freedom == 3
