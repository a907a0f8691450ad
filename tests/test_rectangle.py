from floorplan_solver.graph import Graph, Line, Vertex
from floorplan_solver.solver import Rectangle, corner_angles, detect_rectangle


def polygon(points, extra_lines=()):
    """Closed loop through ``points`` (name -> (x, y)) in insertion order."""

    names = list(points)
    vertices = [Vertex(name, pos) for name, pos in points.items()]
    lines = [
        Line(a, b, id=f'{a}{b}')
        for a, b in zip(names, names[1:] + names[:1])
    ]
    return Graph.build(vertices, [*lines, *extra_lines])


def room(width=300, height=200):
    return polygon({'A': (0, 0), 'B': (width, 0), 'C': (width, height), 'D': (0, height)})


def test_detects_axis_aligned_rectangle():
    graph = room()

    rect = detect_rectangle(graph.line('AB'), graph)

    assert isinstance(rect, Rectangle)
    assert [line.id for line in rect.lines] == ['AB', 'BC', 'CD', 'DA']
    assert rect.vertices == ('A', 'B', 'C', 'D')
    assert all(abs(angle - 90.0) < 1e-9 for angle in corner_angles(list(rect.lines), graph))


def test_opposite_line():
    graph = room()

    rect = detect_rectangle(graph.line('BC'), graph)

    assert rect.opposite_line(graph.line('BC')).id == 'DA'
    assert rect.opposite_line(graph.line('CD')).id == 'AB'
    assert rect.opposite_line(Line('A', 'C', id='diag')) is None


def test_detection_starts_from_any_wall():
    graph = room()

    rect = detect_rectangle(graph.line('CD'), graph)

    assert rect is not None
    assert rect.lines[0].id == 'CD'
    assert rect.vertices == ('C', 'D', 'A', 'B')


def test_rotated_rectangle_is_detected():
    graph = polygon({'A': (0, 0), 'B': (30, 40), 'C': (-10, 70), 'D': (-40, 30)})

    assert detect_rectangle(graph.line('AB'), graph) is not None


def test_corner_within_tolerance_band_is_accepted():
    # Corner at B is about 87 degrees.
    graph = polygon({'A': (0, 0), 'B': (300, 0), 'C': (310, 200), 'D': (0, 200)})

    assert detect_rectangle(graph.line('AB'), graph) is not None


def test_skewed_quadrilateral_is_rejected():
    graph = polygon({'A': (0, 0), 'B': (300, 0), 'C': (360, 200), 'D': (60, 200)})

    assert detect_rectangle(graph.line('AB'), graph) is None


def test_triangle_and_pentagon_are_not_rectangles():
    tri = polygon({'A': (0, 0), 'B': (100, 0), 'C': (0, 100)})
    pent = polygon({'A': (0, 0), 'B': (100, 0), 'C': (100, 100), 'D': (50, 150), 'E': (0, 100)})

    assert detect_rectangle(tri.line('AB'), tri) is None
    assert detect_rectangle(pent.line('AB'), pent) is None


def test_open_chain_is_not_a_rectangle():
    graph = Graph.build(
        [Vertex('A', (0, 0)), Vertex('B', (100, 0)), Vertex('C', (100, 100)), Vertex('D', (0, 100))],
        [Line('A', 'B', id='AB'), Line('B', 'C', id='BC'), Line('C', 'D', id='CD')],
    )

    assert detect_rectangle(graph.line('AB'), graph) is None


def test_branch_aborts_detection():
    spur = Line('B', 'E', id='BE')
    graph = room().with_vertex(Vertex('E', (400, 0))).with_line(spur)

    assert detect_rectangle(graph.line('AB'), graph) is None


def test_custom_angle_band():
    graph = polygon({'A': (0, 0), 'B': (300, 0), 'C': (310, 200), 'D': (0, 200)})

    assert detect_rectangle(graph.line('AB'), graph, min_angle=89.0, max_angle=91.0) is None
