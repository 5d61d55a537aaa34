"""Tests for movement loading and validation."""

from datetime import date
from pathlib import Path

import pytest

from epitrace.errors import InvalidArgument
from epitrace.parser.movements import Movements, load_movements_csv, parse_time


def write_csv(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_parse_time_accepts_dates_and_integers():
    assert parse_time("2023-01-10") == (date(2023, 1, 10).toordinal(), True)
    assert parse_time(date(2023, 1, 10)) == (date(2023, 1, 10).toordinal(), True)
    assert parse_time(" 42 ") == (42, False)
    assert parse_time(7) == (7, False)
    assert parse_time("10/01/2023", "%d/%m/%Y") == (date(2023, 1, 10).toordinal(), True)


@pytest.mark.parametrize("value", ["", "yesterday", None, 1.5, True])
def test_parse_time_rejects_garbage(value):
    with pytest.raises(InvalidArgument):
        parse_time(value)


def test_from_rows_maps_identifiers_to_sorted_dense_ids():
    movements = Movements.from_rows(
        [
            {"source": "farm-b", "destination": "farm-a", "t": 3},
            {"source": "farm-c", "destination": "farm-b", "t": 1},
        ]
    )

    assert movements.identifiers == ("farm-a", "farm-b", "farm-c")
    assert movements.source == (1, 2)
    assert movements.destination == (0, 1)
    assert movements.t == (3, 1)
    assert not movements.dated
    assert len(movements) == 2
    assert movements.node_id("farm-c") == 2
    assert movements.label(0) == "farm-a"
    assert movements.format_time(3) == 3


def test_from_rows_with_dates():
    movements = Movements.from_rows(
        [{"source": "A", "destination": "B", "t": "2023-01-10"}]
    )

    assert movements.dated
    assert movements.format_time(movements.t[0]) == date(2023, 1, 10)


def test_mixed_time_kinds_rejected():
    rows = [
        {"source": "A", "destination": "B", "t": "2023-01-10"},
        {"source": "B", "destination": "C", "t": 5},
    ]
    with pytest.raises(InvalidArgument, match="mixes"):
        Movements.from_rows(rows)


def test_missing_column_rejected():
    with pytest.raises(InvalidArgument, match="missing columns: t"):
        Movements.from_rows([{"source": "A", "destination": "B"}])


def test_missing_identifier_rejected():
    with pytest.raises(InvalidArgument, match="Missing destination in row 0"):
        Movements.from_rows([{"source": "A", "destination": " ", "t": 1}])


def test_length_mismatch_rejected():
    with pytest.raises(InvalidArgument, match="same length"):
        Movements(source=(0,), destination=(1,), t=(), identifiers=("A", "B"))


def test_unknown_identifier_rejected():
    movements = Movements.from_rows([{"source": "A", "destination": "B", "t": 1}])

    with pytest.raises(InvalidArgument, match="Unknown identifier"):
        movements.node_id("Z")


def test_with_identifiers_appends_new_labels():
    movements = Movements.from_rows([{"source": "B", "destination": "D", "t": 1}])

    extended = movements.with_identifiers(["A", "B"])

    assert extended.identifiers == ("B", "D", "A")
    assert extended.source == movements.source
    assert extended.node_id("A") == 2
    assert movements.with_identifiers(["D"]) is movements


def test_build_index_from_movements():
    movements = Movements.from_rows(
        [
            {"source": "A", "destination": "B", "t": 2},
            {"source": "A", "destination": "B", "t": 1},
        ]
    )

    pair = movements.build_index()

    assert pair.node_count == 2
    assert [e.record_id for e in pair.outgoing.bucket(0, 1)] == [1, 0]


def test_load_csv(tmp_path):
    path = write_csv(
        tmp_path / "movements.csv",
        "source,destination,t,n\n"
        "A,B,2023-01-10,5\n"
        "B,C,2023-01-20,2\n",
    )

    movements = load_movements_csv(path)

    assert movements.identifiers == ("A", "B", "C")
    assert movements.dated
    assert movements.t[1] - movements.t[0] == 10


def test_load_csv_missing_column(tmp_path):
    path = write_csv(tmp_path / "movements.csv", "source,t\nA,1\n")

    with pytest.raises(InvalidArgument, match="missing columns: destination"):
        load_movements_csv(path)


def test_load_csv_short_row(tmp_path):
    path = write_csv(tmp_path / "movements.csv", "source,destination,t\nA,B\n")

    with pytest.raises(InvalidArgument, match="Row 0"):
        load_movements_csv(path)


def test_load_csv_missing_file(tmp_path):
    with pytest.raises(InvalidArgument, match="not found"):
        load_movements_csv(tmp_path / "nope.csv")
