import math

import pytest

from floorplan_solver.graph import Graph, Line, LineSegment, Vertex


def vertex(vid, x, y, fixed=False):
    return Vertex(vid, (x, y), fixed)


def test_segment_length_midpoint_and_angle():
    seg = LineSegment((0.0, 0.0), (3.0, 4.0))

    assert seg.length == 5.0
    assert seg.midpoint == (1.5, 2.0)
    assert math.isclose(seg.angle(), math.atan2(4.0, 3.0))
    dx, dy = seg.direction()
    assert math.isclose(dx, 0.6) and math.isclose(dy, 0.8)


def test_degenerate_segment_direction_is_zero():
    seg = LineSegment((2.0, 2.0), (2.0, 2.0))

    assert seg.length == 0.0
    assert seg.direction() == (0.0, 0.0)
    assert seg.closest_point_to((5.0, 5.0)) == (2.0, 2.0)


@pytest.mark.parametrize(
    'end, horizontal, vertical',
    [
        ((10.0, 0.0), True, False),
        ((-10.0, 0.0), True, False),
        ((0.0, 10.0), False, True),
        ((0.0, -10.0), False, True),
        ((10.0, 10.0), False, False),
    ],
)
def test_segment_orientation(end, horizontal, vertical):
    seg = LineSegment((0.0, 0.0), end)

    assert seg.is_horizontal() is horizontal
    assert seg.is_vertical() is vertical


def test_closest_point_is_clamped_to_segment():
    seg = LineSegment((0.0, 0.0), (10.0, 0.0))

    assert seg.closest_point_to((4.0, 3.0)) == (4.0, 0.0)
    assert seg.closest_point_to((-5.0, 1.0)) == (0.0, 0.0)
    assert seg.closest_point_to((15.0, 0.0)) == (10.0, 0.0)
    assert math.isclose(seg.distance_to_point((4.0, 3.0)), 3.0)


def test_vertex_positions_are_float_tuples():
    v = Vertex('a', [1, 2])

    assert v.position == (1.0, 2.0)
    assert isinstance(v.position[0], float)
    assert v.fixed is False


def test_vertex_at_generates_distinct_ids():
    first = Vertex.at(0, 0)
    second = Vertex.at(0, 0, fixed=True)

    assert first.id != second.id
    assert second.fixed


def test_line_geometry_is_derived_from_current_positions():
    a = vertex('a', 0, 0)
    b = vertex('b', 3, 4)
    line = Line('a', 'b', id='ab')
    vertices = {'a': a, 'b': b}

    assert line.length(vertices) == 5.0
    assert line.midpoint(vertices) == (1.5, 2.0)

    moved = {'a': a, 'b': b.moved_to((6, 8))}
    assert line.length(moved) == 10.0


def test_line_other_vertex_and_touches():
    line = Line('a', 'b', id='ab')

    assert line.other_vertex('a') == 'b'
    assert line.other_vertex('b') == 'a'
    assert line.touches('a') and not line.touches('c')
    with pytest.raises(KeyError):
        line.other_vertex('c')


def test_line_geometry_missing_vertex_raises_key_error():
    line = Line('a', 'zz', id='l')

    with pytest.raises(KeyError) as exc:
        line.geometry({'a': vertex('a', 0, 0)})

    assert 'zz' in str(exc.value)


def test_line_between_uses_vertex_ids():
    a = Vertex.at(0, 0)
    b = Vertex.at(1, 0)
    line = Line.between(a, b)

    assert line.vertex_ids == (a.id, b.id)
    assert line.id


def test_graph_lookup_and_adjacency():
    graph = Graph.build(
        [vertex('a', 0, 0), vertex('b', 10, 0), vertex('c', 10, 10)],
        [Line('a', 'b', id='ab'), Line('b', 'c', id='bc')],
    )

    assert graph.line('bc').end_vertex_id == 'c'
    assert graph.has_line('ab') and not graph.has_line('ca')
    assert graph.line_ids() == ['ab', 'bc']
    assert [line.id for line in graph.lines_connected_to_vertex('b')] == ['ab', 'bc']
    assert graph.lines_connected_to_vertex('a')[0].id == 'ab'
    assert graph.geometry('bc').length == 10.0
    with pytest.raises(KeyError):
        graph.line('missing')
    with pytest.raises(KeyError):
        graph.vertex('missing')


def test_with_positions_returns_new_snapshot():
    graph = Graph.build([vertex('a', 0, 0), vertex('b', 10, 0)], [Line('a', 'b', id='ab')])

    moved = graph.with_positions({'b': (20, 0)})

    assert moved is not graph
    assert moved.position('b') == (20.0, 0.0)
    assert graph.position('b') == (10.0, 0.0)
    assert moved.vertices['a'] is graph.vertices['a']


def test_with_vertex_and_with_line_extend_copies():
    graph = Graph.build([vertex('a', 0, 0)])

    extended = graph.with_vertex(vertex('b', 5, 0)).with_line(Line('a', 'b', id='ab'))

    assert set(extended.vertices) == {'a', 'b'}
    assert extended.line_ids() == ['ab']
    assert graph.lines == []
    assert set(graph.vertices) == {'a'}
