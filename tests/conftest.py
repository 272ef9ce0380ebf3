"""Shared fixtures for wnvweek tests."""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pytest

from wnvweek.models import WeeklyRecord

CSV_HEADER = "year,week,positive_cases,total_tests,total_mosquitoes,positive_rate\n"


@pytest.fixture
def records() -> list[WeeklyRecord]:
    """Two years, partially overlapping weeks, file order not sorted by week."""

    return [
        WeeklyRecord(year=2020, week=3, positive_cases=4, total_tests=20, total_mosquitoes=300, positive_rate=20.0),
        WeeklyRecord(year=2020, week=1, positive_cases=2, total_tests=10, total_mosquitoes=100, positive_rate=20.0),
        WeeklyRecord(year=2021, week=1, positive_cases=3, total_tests=15, total_mosquitoes=50, positive_rate=20.0),
        WeeklyRecord(year=2021, week=2, positive_cases=0, total_tests=0, total_mosquitoes=75, positive_rate=0.0),
        WeeklyRecord(year=2020, week=2, positive_cases=1, total_tests=8, total_mosquitoes=1200, positive_rate=12.5),
    ]


@pytest.fixture
def csv_file(tmp_path):
    """Write a CSV with the standard header and return a writer function."""

    def _write(rows: str, name: str = "weekly_aggregated_data.csv", header: str = CSV_HEADER):
        path = tmp_path / name
        path.write_text(header + rows, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")
