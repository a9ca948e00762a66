import pytest

from app.services.aggregation import aggregate, group_label, parse_number


def test_sums_per_group_in_first_seen_order() -> None:
    rows = [
        {"month": "Jan", "sales": "10"},
        {"month": "Feb", "sales": "20"},
        {"month": "Jan", "sales": "5"},
    ]

    series = aggregate(rows, "month", "sales")

    assert series.labels == ["Jan", "Feb"]
    assert series.values == [15, 20]


def test_labels_are_not_sorted() -> None:
    rows = [{"k": key, "v": 1} for key in ["B", "A", "B", "C", "A"]]

    series = aggregate(rows, "k", "v")

    assert series.labels == ["B", "A", "C"]
    assert series.values == [2, 2, 1]


def test_missing_or_empty_group_key_is_unknown() -> None:
    rows = [{"v": 3}, {"k": "", "v": 4}, {"k": None, "v": 1}, {"k": "x", "v": 2}]

    series = aggregate(rows, "k", "v")

    assert series.to_dict() == {"labels": ["Unknown", "x"], "values": [8, 2]}


def test_bad_values_count_as_zero_and_totals_are_conserved() -> None:
    rows = [
        {"k": "a", "v": "1.5"},
        {"k": "b", "v": "n/a"},
        {"k": "a", "v": 2},
        {"k": "c"},
        {"k": "b", "v": "7kg"},
    ]

    series = aggregate(rows, "k", "v")

    assert dict(zip(series.labels, series.values)) == {"a": 3.5, "b": 7, "c": 0}
    assert sum(series.values) == sum(parse_number(r.get("v")) for r in rows)


def test_field_absent_from_every_row() -> None:
    series = aggregate([{"a": 1}, {"a": 2}], "missing", "also_missing")
    assert series.labels == ["Unknown"]
    assert series.values == [0]


def test_empty_input() -> None:
    series = aggregate([], "x", "y")
    assert series.labels == []
    assert series.values == []


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12abc", 12),
        (" 3.5 ", 3.5),
        ("-2", -2),
        (".5", 0.5),
        ("1e3", 1000),
        ("abc", 0),
        ("", 0),
        (None, 0),
        (True, 0),
        (float("nan"), 0),
        ("1e999", 0),
        (4, 4),
    ],
)
def test_parse_number(raw, expected) -> None:
    assert parse_number(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [(2020.0, "2020"), (1.5, "1.5"), (0, "0"), ("East", "East"), ("", "Unknown")],
)
def test_group_label(raw, expected) -> None:
    assert group_label(raw) == expected
