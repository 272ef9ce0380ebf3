"""Unit tests for the weekly engine session."""

from __future__ import annotations

import csv
import json

import pytest

from wnvweek.engine import WeeklyEngine
from wnvweek.models import ALL_YEARS, WeeklyRecord

pytestmark = pytest.mark.unit


def test_engine_starts_on_all_years(records) -> None:
    engine = WeeklyEngine(records=records)

    assert engine.state.selection == ALL_YEARS
    assert [r.week for r in engine.view] == [1, 2, 3]
    assert engine.years == [2020, 2021]


def test_select_and_history(records) -> None:
    engine = WeeklyEngine(records=records)

    engine.select(2020)
    engine.select(2021)
    assert engine.state.selection == 2021

    assert engine.undo()
    assert engine.state.selection == 2020
    assert engine.redo()
    assert engine.state.selection == 2021
    assert not engine.redo()


def test_summary_totals_for_selection(records) -> None:
    engine = WeeklyEngine(records=records)
    engine.select(2020)

    s = engine.summary()

    assert s["weeks"] == 3
    assert s["positive_cases"] == 7
    assert s["total_tests"] == 38
    assert s["total_mosquitoes"] == 1600
    assert s["positive_rate"] == pytest.approx(7 / 38 * 100)
    assert s["peak_cases_week"] == 3
    assert s["peak_mosquitoes_week"] == 2


def test_summary_of_empty_view(records) -> None:
    engine = WeeklyEngine(records=records)
    engine.select(1999)

    s = engine.summary()

    assert s["weeks"] == 0
    assert s["positive_rate"] == 0.0
    assert s["peak_cases_week"] is None


def test_export_csv_aggregated_view(records, tmp_path) -> None:
    engine = WeeklyEngine(records=records)
    path = tmp_path / "out.csv"

    engine.export_csv(str(path))

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["week"] for r in rows] == ["1", "2", "3"]
    assert rows[0]["year"] == ""
    assert rows[0]["positive_cases"] == "5"


def test_export_json_writes_nan_as_null(tmp_path) -> None:
    nan = float("nan")
    engine = WeeklyEngine(records=[
        WeeklyRecord(year=2020, week=4, positive_cases=nan, total_tests=5, total_mosquitoes=10, positive_rate=nan),
    ])
    engine.select(2020)
    path = tmp_path / "out.json"

    engine.export_json(str(path))

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload == [{
        "year": 2020, "week": 4, "positive_cases": None, "total_tests": 5,
        "total_mosquitoes": 10, "positive_rate": None,
    }]
