"""Example session: square up a drawn room and resize one wall."""

from floorplan_solver import (
    ConstraintSession,
    Distance,
    Graph,
    Line,
    Perpendicular,
    Vertex,
    check_consistency,
    format_graph,
    format_report,
)


def build_room() -> Graph:
    vertices = [
        Vertex("A", (0.0, 0.0), fixed=True),
        Vertex("B", (298.0, 3.0)),
        Vertex("C", (301.0, 204.0)),
        Vertex("D", (-2.0, 199.0)),
    ]
    lines = [
        Line("A", "B", id="south"),
        Line("B", "C", id="east"),
        Line("C", "D", id="north"),
        Line("D", "A", id="west"),
    ]
    return Graph.build(vertices, lines)


def main() -> None:
    session = ConstraintSession(graph=build_room())
    session.subscribe(lambda event: print("event:", type(event).__name__))

    for constraint in (
        Perpendicular("south", "east"),
        Perpendicular("east", "north"),
        Perpendicular("north", "west"),
        Distance("south", 300.0),
        Distance("east", 200.0),
    ):
        result = session.add_constraint(constraint)
        print("accepted" if result.accepted else "rejected", "->", session.analysis().status)

    for warning in check_consistency(session.graph, session.constraints):
        print("warning:", warning.message)

    report = session.solve()
    print(format_report(report))
    print(format_graph(session.graph))


if __name__ == "__main__":
    main()
