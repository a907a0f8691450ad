from floorplan_solver.constraints import Angle, Distance, Parallel, Perpendicular
from floorplan_solver.graph import Graph, Line, Vertex
from floorplan_solver.printer import format_constraint, format_constraints, format_graph, format_report
from floorplan_solver.solver import ConvergenceReport


def test_format_each_constraint_kind():
    assert format_constraint(Distance('wall', 250, id='d')) == 'distance wall = 250'
    assert format_constraint(Angle('w1', 'w2', 45, id='a')) == 'angle w1 -> w2 = 45deg'
    assert format_constraint(Parallel('w1', 'w2', id='q')) == 'parallel w1 w2'
    assert format_constraint(Perpendicular('w1', 'w2', id='p')) == 'perpendicular w1 w2'


def test_disabled_constraints_are_marked():
    assert format_constraint(Distance('wall', 2.5, enabled=False)) == 'distance wall = 2.5 [disabled]'


def test_long_ids_are_shortened():
    text = format_constraint(Distance('0123456789abcdef', 10))

    assert text == 'distance 01234567 = 10'


def test_format_constraints_one_per_line():
    text = format_constraints([Distance('a', 1), Parallel('a', 'b')])

    assert text.splitlines() == ['distance a = 1', 'parallel a b']


def test_format_graph():
    graph = Graph.build(
        [Vertex('a', (0, 0), True), Vertex('b', (3, 4))],
        [Line('a', 'b', id='ab')],
    )

    assert format_graph(graph).splitlines() == [
        'vertex a (0, 0) fixed',
        'vertex b (3, 4)',
        'line ab(a-b) length=5',
    ]


def test_format_report():
    converged = ConvergenceReport(status='converged', converged=True, iterations=3, max_error=0.0004)
    stuck = ConvergenceReport(
        status='iteration_limit',
        converged=False,
        iterations=100,
        max_error=12.5,
        worst_constraint_id='0123456789',
        warnings=['vertex is fixed'],
    )

    assert format_report(converged) == 'converged: 3 iteration(s), max error 0.0004'
    assert format_report(stuck) == 'iteration_limit: 100 iteration(s), max error 12.5 at 01234567, 1 warning(s)'
