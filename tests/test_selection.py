"""Unit tests for year selection and week aggregation."""

from __future__ import annotations

import math
import random

import pytest

from wnvweek.indices import build_indices
from wnvweek.models import ALL_YEARS, WeeklyRecord
from wnvweek.selection import (
    aggregate_by_week,
    available_years,
    chart_view,
    parse_selection,
    positive_rate,
    select_year,
    sort_by_week,
)

pytestmark = pytest.mark.unit


def _rec(year, week, cases, tests, mosq, rate=0.0) -> WeeklyRecord:
    return WeeklyRecord(year=year, week=week, positive_cases=cases, total_tests=tests,
                        total_mosquitoes=mosq, positive_rate=rate)


def test_all_years_example_sums_one_week() -> None:
    """2020 and 2021 week 1 collapse into one synthetic record."""

    records = [_rec(2020, 1, 2, 10, 100), _rec(2021, 1, 3, 15, 50)]

    out = select_year(records, ALL_YEARS)

    assert len(out) == 1
    r = out[0]
    assert r.year is None
    assert (r.week, r.positive_cases, r.total_tests, r.total_mosquitoes) == (1, 5, 25, 150)
    assert r.positive_rate == pytest.approx(20.0)


def test_concrete_year_returns_rows_unchanged() -> None:
    records = [_rec(2020, 1, 2, 10, 100, 20.0), _rec(2021, 1, 3, 15, 50, 20.0)]

    out = select_year(records, 2020)

    assert out == [records[0]]
    assert out[0] is records[0]


def test_concrete_year_preserves_file_order(records) -> None:
    out = select_year(records, 2020)

    assert [r.week for r in out] == [3, 1, 2]
    assert all(r.year == 2020 for r in out)


def test_concrete_year_with_prebuilt_index(records) -> None:
    idx = build_indices(records)

    assert select_year(records, 2021, idx=idx) == [records[2], records[3]]


def test_all_years_one_record_per_distinct_week(records) -> None:
    out = select_year(records, ALL_YEARS)

    assert [r.week for r in out] == [1, 2, 3]
    assert len(out) == len({r.week for r in records})


def test_aggregation_is_order_independent(records) -> None:
    """Sums do not depend on the input order."""

    expected = aggregate_by_week(records)
    shuffled = list(records)
    for seed in range(5):
        random.Random(seed).shuffle(shuffled)
        assert aggregate_by_week(shuffled) == expected


def test_aggregated_rate_is_zero_without_tests() -> None:
    out = aggregate_by_week([_rec(2020, 9, 0, 0, 40, 55.0), _rec(2021, 9, 0, 0, 10, 12.0)])

    assert out[0].positive_rate == 0.0
    assert not math.isnan(out[0].positive_rate)


def test_aggregated_rate_recomputed_from_sums(records) -> None:
    week2 = [r for r in aggregate_by_week(records) if r.week == 2][0]

    # 2021 w2 has no tests, 2020 w2 has 1 of 8
    assert week2.positive_rate == pytest.approx(1 / 8 * 100)


def test_per_year_view_keeps_file_rate() -> None:
    """Only the aggregated view recomputes positive_rate."""

    records = [_rec(2020, 1, 2, 10, 100, 99.0)]

    assert select_year(records, 2020)[0].positive_rate == 99.0
    assert select_year(records, ALL_YEARS)[0].positive_rate == pytest.approx(20.0)


def test_aggregation_does_not_mutate_input(records) -> None:
    before = list(records)

    aggregate_by_week(records)

    assert records == before


def test_unknown_year_gives_empty_view(records) -> None:
    assert select_year(records, 1999) == []
    assert chart_view(records, 1999) == []


def test_empty_input_all_years_is_empty() -> None:
    assert select_year([], ALL_YEARS) == []


def test_chart_view_sorts_by_week(records) -> None:
    assert [r.week for r in chart_view(records, 2020)] == [1, 2, 3]


def test_invalid_selection_string_raises(records) -> None:
    with pytest.raises(ValueError):
        select_year(records, "everything")


def test_available_years_sorted_distinct(records) -> None:
    assert available_years(records) == [2020, 2021]


def test_positive_rate_helper() -> None:
    assert positive_rate(5, 25) == pytest.approx(20.0)
    assert positive_rate(3, 0) == 0.0
    assert positive_rate(float("nan"), 10) == 0.0


@pytest.mark.parametrize("text, expected", [("all", ALL_YEARS), ("ALL", ALL_YEARS), (" 2021 ", 2021)])
def test_parse_selection(text, expected) -> None:
    assert parse_selection(text) == expected


def test_parse_selection_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        parse_selection("twenty")


def test_all_years_with_bad_week_cells_stays_sorted_and_merged(csv_file) -> None:
    """Non-numeric weeks collapse into one trailing record; valid weeks stay ordered."""

    from wnvweek.loader import load_weekly_csv

    path = csv_file(
        "2020,3,1,10,100,10\n"
        "2020,x,2,10,100,20\n"
        "2020,1,3,10,100,30\n"
        "2021,y,4,10,100,40\n"
        "2021,2,5,10,100,50\n"
    )

    out = select_year(load_weekly_csv(path), ALL_YEARS)

    assert [r.week for r in out[:3]] == [1, 2, 3]
    assert len(out) == 4
    nan_week = out[3]
    assert math.isnan(nan_week.week)
    assert (nan_week.positive_cases, nan_week.total_tests) == (6, 20)
    assert nan_week.positive_rate == pytest.approx(30.0)


def test_sort_by_week_puts_nan_weeks_last() -> None:
    nan = float("nan")
    rows = [_rec(2020, 5, 1, 1, 1), _rec(2020, nan, 1, 1, 1), _rec(2020, 2, 1, 1, 1), _rec(2021, nan, 1, 1, 1)]

    out = sort_by_week(rows)

    assert [r.week for r in out[:2]] == [2, 5]
    assert all(math.isnan(r.week) for r in out[2:])
    assert out[2] is rows[1]
