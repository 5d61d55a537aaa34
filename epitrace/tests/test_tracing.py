"""Tests for the tracing facade."""

from datetime import date

import pytest

from epitrace.config import TraceConfig
from epitrace.errors import InvalidArgument
from epitrace.parser.movements import Movements
from epitrace.tracing import build_queries, network_summary, shortest_paths, trace


@pytest.fixture
def movements():
    return Movements.from_rows(
        [
            {"source": "A", "destination": "B", "t": "2023-01-10"},
            {"source": "B", "destination": "C", "t": "2023-01-20"},
            {"source": "A", "destination": "C", "t": "2023-01-05"},
        ]
    )


def test_build_queries_from_t_end_and_days(movements):
    batch = build_queries(movements, "A", t_end="2023-02-01", days=90)

    end = date(2023, 2, 1).toordinal()
    assert len(batch.queries) == 1
    query = batch.queries[0]
    assert query.root == movements.node_id("A")
    assert query.in_window == (end - 90, end)
    assert query.out_window == (end - 90, end)
    assert query.max_distance is None
    assert batch.windows(0)["in_begin"] == date(2022, 11, 3)


def test_build_queries_uses_config_days(movements):
    batch = build_queries(
        movements, ["A", "B"], t_end="2023-02-01", config=TraceConfig(days=10)
    )

    assert [q.out_window[1] - q.out_window[0] for q in batch.queries] == [10, 10]


def test_build_queries_explicit_bounds(movements):
    batch = build_queries(
        movements,
        ["A", "C"],
        in_begin="2023-01-01",
        in_end="2023-01-31",
        out_begin=["2023-01-01", "2023-01-15"],
        out_end="2023-01-31",
        max_distance=2,
    )

    assert batch.queries[1].out_window[0] == date(2023, 1, 15).toordinal()
    assert batch.queries[1].in_window[0] == date(2023, 1, 1).toordinal()
    assert all(q.max_distance == 2 for q in batch.queries)


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({}, "Either t_end"),
        ({"in_begin": "2023-01-01"}, "Missing window bounds"),
        ({"t_end": 5, "days": 3}, "must be dates"),
        ({"t_end": "2023-02-01", "days": -1}, "non-negative"),
        ({"t_end": ["2023-02-01", "2023-02-02", "2023-02-03"]}, "3 values"),
        ({"t_end": "2023-02-01", "max_distance": -2}, "max_distance"),
        (
            {
                "in_begin": "2023-02-01",
                "in_end": "2023-01-01",
                "out_begin": "2023-01-01",
                "out_end": "2023-02-01",
            },
            "in_begin is after in_end",
        ),
    ],
)
def test_build_queries_rejects_bad_arguments(movements, kwargs, message):
    with pytest.raises(InvalidArgument, match=message):
        build_queries(movements, ["A", "B"], **kwargs)


def test_trace_rows(movements):
    result = trace(movements, "A", t_end="2023-02-01", days=90)

    assert result.roots == ("A",)
    assert result.ingoing() == []
    rows = result.outgoing()
    assert [(r.record, r.distance) for r in rows] == [(0, 1), (1, 2), (2, 1)]
    assert [(r.source, r.destination) for r in rows] == [("A", "B"), ("B", "C"), ("A", "C")]
    assert rows[1].t == date(2023, 1, 20)
    assert rows[0].out_end == date(2023, 2, 1)
    assert result.as_dicts()[0]["root"] == "A"


def test_trace_max_distance(movements):
    result = trace(movements, "A", t_end="2023-02-01", days=90, max_distance=1)

    assert [r.record for r in result] == [0, 2]


def test_shortest_paths_rows(movements):
    rows = shortest_paths(movements, ["A", "C"], t_end="2023-02-01", days=90)

    assert [(r.query, r.direction, r.record, r.distance) for r in rows] == [
        (0, "out", 0, 1),
        (0, "out", 2, 1),
        (1, "in", 2, 1),
        (1, "in", 1, 1),
    ]
    assert rows[2].source == "A"
    assert rows[3].as_dict()["t"] == date(2023, 1, 20)


def test_network_summary_rows(movements):
    rows = network_summary(
        movements,
        ["A", "A", "C"],
        t_end=["2023-01-15", "2023-02-01", "2023-02-01"],
        days=[10, 10, 30],
    )

    first, second, third = rows
    assert (first.out_degree, first.outgoing_contact_chain) == (2, 2)
    assert (second.out_degree, second.outgoing_contact_chain) == (0, 0)
    assert (third.in_degree, third.ingoing_contact_chain) == (2, 2)
    assert first.in_begin == date(2023, 1, 5)
    assert [row.query for row in rows] == [0, 1, 2]


def test_unknown_root_reaches_nothing(movements):
    rows = network_summary(movements, "Z", t_end="2023-02-01", days=90)

    assert rows[0].root == "Z"
    assert rows[0].in_degree == rows[0].out_degree == 0
    assert rows[0].ingoing_contact_chain == rows[0].outgoing_contact_chain == 0


def test_empty_movements_give_empty_results():
    movements = Movements.from_rows([])

    assert len(trace(movements, "A", t_end=100, days=50)) == 0
    assert shortest_paths(movements, ["A", "B"], t_end=100, days=50) == []
    summary = network_summary(movements, "A", t_end=100, days=50)
    assert summary[0].out_degree == 0
    assert summary[0].in_end == 100


def test_parallel_facade_matches_serial(movements):
    roots = ["A", "B", "C", "A"]

    serial = trace(movements, roots, t_end="2023-02-01", days=90)
    parallel = trace(movements, roots, t_end="2023-02-01", days=90, workers=2)

    assert parallel == serial


def test_package_level_entry_points(movements):
    import epitrace

    rows = epitrace.network_summary(movements, "A", t_end="2023-02-01", days=90)
    assert rows[0].out_degree == 2
    assert len(epitrace.trace(movements, "A", t_end="2023-02-01", days=90)) == 3
    assert len(epitrace.shortest_paths(movements, "A", t_end="2023-02-01", days=90)) == 2
