from __future__ import annotations

"""
wnvweek report generator
------------------------
This module writes a DOCX surveillance report for one selection (a single
year or all years aggregated by week).

Design goals:
- Keep wnvweek usable without python-docx installed (lazy imports).
- Reuse the interactive chart's renderer for the report figure, so the
  picture in the report is exactly what the window shows.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence
import math
import os
import tempfile

from .models import ALL_YEARS, WeeklyRecord
from .selection import Selection, positive_rate
from .tooltips import format_count, format_plain, format_rate


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Weekly WNV Surveillance Report"
    subtitle: str = "Positive mosquito pools and mosquito abundance by week"
    dataset_name: str = "Weekly aggregated surveillance data (CSV)"
    file_name: Optional[str] = None

    # Optional: REPL commands that produced the selection
    command_log: Optional[List[str]] = None


def selection_label(selection: Selection) -> str:
    return "All Years (aggregated by week)" if selection == ALL_YEARS else f"Year {selection}"


def _count_nan(values) -> int:
    return sum(1 for v in values if isinstance(v, float) and math.isnan(v))


def generate_docx_report(
    records: Sequence[WeeklyRecord],
    out_path: str,
    selection: Selection = ALL_YEARS,
    *,
    config: Optional[ReportConfig] = None,
) -> str:
    """
    Generate a DOCX report (summary, chart, weekly table) for `selection`.

    `records` is the full loaded dataset; the selection is applied here the
    same way the chart applies it.
    """
    config = config or ReportConfig()

    # Lazy imports: only required when a report is requested.
    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    from .chart import render_chart

    canvas = render_chart(records, selection, with_controls=False)
    view = canvas.view
    if not view:
        canvas.close()
        raise ValueError(f"No records to report on for {selection_label(selection)}.")

    # -----------------------------
    # 1) Summary numbers
    # -----------------------------
    cases = sum(r.positive_cases for r in view)
    tests = sum(r.total_tests for r in view)
    mosquitoes = sum(r.total_mosquitoes for r in view)
    finite_cases = [r for r in view if not math.isnan(float(r.positive_cases))]
    peak = max(finite_cases, key=lambda r: r.positive_cases) if finite_cases else None

    # -----------------------------
    # 2) Build DOCX report
    # -----------------------------
    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    _kv("Dataset", config.dataset_name)
    if config.file_name:
        _kv("Data file", config.file_name)
    _kv("Scope", selection_label(selection))
    _kv("Weeks in scope", str(len(view)))
    _kv("Positive cases", format_plain(cases))
    _kv("Total tests", format_count(tests))
    _kv("Overall positive rate", format_rate(positive_rate(cases, tests)))
    _kv("Total mosquitoes", format_count(mosquitoes))
    if peak is not None:
        _kv("Peak week (cases)", f"Week {format_plain(peak.week)} ({format_plain(peak.positive_cases)} cases)")

    if config.command_log:
        doc.add_paragraph("")
        doc.add_heading("Command log (reproducibility)", level=1)
        for line in config.command_log:
            doc.add_paragraph(line, style="List Bullet")

    doc.add_paragraph("")
    doc.add_heading("Weekly chart", level=1)
    # The chart only needs to exist on disk while it is embedded
    with tempfile.TemporaryDirectory(prefix="wnvweek_report_") as tmpdir:
        chart_path = canvas.save(os.path.join(tmpdir, "weekly_chart.png"))
        canvas.close()
        doc.add_picture(chart_path, width=Inches(6.5))
    doc.add_paragraph(
        "Top: WNV-positive cases per week. Bottom: total mosquitoes collected per week. "
        "Curves are monotone interpolations through the weekly values."
    )

    doc.add_paragraph("")
    doc.add_heading("Data completeness", level=1)
    t2 = doc.add_table(rows=1, cols=2)
    t2.rows[0].cells[0].text = "Field"
    t2.rows[0].cells[1].text = "Non-numeric cells"
    for name, getter in [
        ("Positive cases", lambda r: r.positive_cases),
        ("Total tests", lambda r: r.total_tests),
        ("Total mosquitoes", lambda r: r.total_mosquitoes),
        ("Positive rate", lambda r: r.positive_rate),
    ]:
        row = t2.add_row().cells
        row[0].text = name
        row[1].text = str(_count_nan([getter(r) for r in view]))

    doc.add_paragraph("")
    doc.add_heading("Weekly values", level=1)
    t = doc.add_table(rows=1, cols=5)
    h = t.rows[0].cells
    h[0].text = "Week"
    h[1].text = "Positive Cases"
    h[2].text = "Total Tests"
    h[3].text = "Positive Rate"
    h[4].text = "Total Mosquitoes"
    for r in view:
        cells = t.add_row().cells
        cells[0].text = format_plain(r.week)
        cells[1].text = format_plain(r.positive_cases)
        cells[2].text = format_count(r.total_tests)
        cells[3].text = format_rate(r.positive_rate)
        cells[4].text = format_count(r.total_mosquitoes)

    doc.add_heading("Notes", level=1)
    if selection == ALL_YEARS:
        doc.add_paragraph(
            "Values are summed over all years for each week; the positive rate is "
            "recomputed from the summed cases and tests (0 when no tests were run)."
        )
    else:
        doc.add_paragraph("Positive rates are taken from the data file as-is.")

    # -----------------------------
    # Reproducibility footer
    # -----------------------------
    from datetime import datetime as _dt
    from . import __version__ as wnvweek_version

    doc.add_paragraph("")
    doc.add_paragraph(f"wnvweek version: {wnvweek_version}")
    doc.add_paragraph(f"Report generated at: {_dt.now().isoformat(timespec='seconds')}")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    return out_path
