"""
Dataset loader (CSV -> WeeklyRecord list)
=========================================

This module reads the weekly aggregated surveillance file and converts each
row into a `WeeklyRecord`.

Key ideas:
- Header names are the contract: year, week, positive_cases, total_tests,
  total_mosquitoes, positive_rate. We also accept the same names with other
  spacing/casing ("Positive Cases").
- Numeric coercion never raises: non-numeric text becomes NaN, a blank cell
  becomes 0. NaN is not guarded further downstream.
- The only failure is `LoadFailure`: the source could not be read at all, or
  a required column is missing.
"""

from __future__ import annotations
from typing import List, Union
import logging
import math
import os
import re
import zipfile
import pandas as pd
from .models import WeeklyRecord

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = "weekly_aggregated_data.csv"

COLUMNS = ("year", "week", "positive_cases", "total_tests", "total_mosquitoes", "positive_rate")


class LoadFailure(Exception):
    """The data source could not be loaded (terminal for the session)."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{os.path.basename(path) or path}: {message}")
        self.path = path
        self.message = message


def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())

def _col(df: pd.DataFrame, name: str) -> str:
    cols = list(df.columns)
    if name in cols:
        return name
    norm_map = {_norm(c): c for c in cols}
    nn = _norm(name)
    if nn in norm_map:
        return norm_map[nn]
    raise KeyError(f"Missing required column '{name}'. Available={cols}")

def _to_number(series: pd.Series) -> pd.Series:
    """Coerce a text column to numbers (blank -> 0, junk -> NaN)."""
    s = series.astype(str).str.strip()
    s = s.where(s != "", "0")
    return pd.to_numeric(s, errors="coerce")

def _to_int_or_nan(x) -> Union[int, float]:
    """Integral values become int; anything else stays float (NaN included)."""
    fx = float(x)
    if math.isfinite(fx) and fx.is_integer():
        return int(fx)
    return fx

def _read_frame(path: str) -> pd.DataFrame:
    ext = os.path.splitext(path)[1].lower()
    if ext in (".xlsx", ".xls"):
        return pd.read_excel(path, engine="openpyxl", dtype=str, keep_default_na=False)
    return pd.read_csv(path, dtype=str, keep_default_na=False)

def load_weekly_csv(path: str) -> List[WeeklyRecord]:
    """
    Load the weekly surveillance file into a list of records (file order).

    Raises:
        LoadFailure: the file cannot be read or a required column is missing.
    """
    try:
        df = _read_frame(path)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise LoadFailure(path, str(e)) from e
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)

    try:
        cols = {name: _col(df, name) for name in COLUMNS}
    except KeyError as e:
        raise LoadFailure(path, e.args[0]) from e

    parsed = {name: _to_number(df[col]) for name, col in cols.items()}
    for name, values in parsed.items():
        bad = int(values.isna().sum())
        if bad:
            logger.debug("column %s: %d non-numeric cell(s) coerced to NaN", name, bad)

    records: List[WeeklyRecord] = []
    for y, w, pc, tt, tm, pr in zip(*(parsed[name] for name in COLUMNS)):
        records.append(WeeklyRecord(
            year=_to_int_or_nan(y),
            week=_to_int_or_nan(w),
            positive_cases=_to_int_or_nan(pc),
            total_tests=_to_int_or_nan(tt),
            total_mosquitoes=_to_int_or_nan(tm),
            positive_rate=float(pr),
        ))
    logger.info("loaded %d weekly records from %s", len(records), path)
    return records
