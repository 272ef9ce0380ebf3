"""
wnvweek Command Line Interface (CLI)
====================================

Open the interactive chart (year buttons + hover tooltips):

    python -m wnvweek.cli --csv weekly_aggregated_data.csv

Write a static image / exports without opening a window:

    python -m wnvweek.cli --year 2021 --save chart.png --no-show
    python -m wnvweek.cli --export-csv all_years.csv --report report.docx --no-show

Or explore the data from a small REPL (`--repl`).

The CLI never modifies the data file. It loads it once and works on an
in-memory selection.
"""

from __future__ import annotations
import argparse, logging, os, shlex
from typing import Optional, Sequence
from .engine import WeeklyEngine
from .loader import DEFAULT_DATA_FILE, LoadFailure, load_weekly_csv
from .models import ALL_YEARS
from .selection import parse_selection
from .tooltips import format_count, format_plain, format_rate

HELP = """
Commands:
  help
  years                      list years present in the data
  year <Y|all>               select one year, or all years aggregated by week
  show [n]                   print the first n weeks of the current view
  stats                      totals for the current view
  reset                      back to all years
  undo
  redo

  export csv "<out.csv>"
  export json "<out.json>"
  plot "<out.png>"           save the chart for the current selection
  report "<out.docx>"        DOCX report for the current selection
  quit
"""


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="wnvweek", description="Weekly WNV mosquito surveillance chart")
    ap.add_argument("--csv", default=DEFAULT_DATA_FILE, help="Path to the weekly aggregated CSV (or .xlsx)")
    ap.add_argument("--year", default=ALL_YEARS, help="Initial selection: a year or 'all' (default)")
    ap.add_argument("--save", help="Write the chart to this image file (png/svg/pdf)")
    ap.add_argument("--export-csv", help="Export the selected weeks to CSV")
    ap.add_argument("--export-json", help="Export the selected weeks to JSON")
    ap.add_argument("--report", help="Write a DOCX report for the selection")
    ap.add_argument("--no-show", action="store_true", help="Do not open the interactive window")
    ap.add_argument("--repl", action="store_true", help="Start the interactive command loop")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the wnvweek CLI.

    1) Load dataset (a load failure is terminal: error message / error panel)
    2) Apply the initial selection, run exports
    3) Show the chart, or start the REPL
    """
    ap = build_parser()
    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.no_show:
        import matplotlib
        matplotlib.use("Agg")
    try:
        selection = parse_selection(args.year)
    except ValueError as e:
        ap.error(str(e))

    print("Loading dataset...")
    try:
        records = load_weekly_csv(args.csv)
    except LoadFailure as e:
        print(f"Error loading data: {e}")
        if not args.no_show:
            from .chart import ChartCanvas
            canvas = ChartCanvas()
            canvas.render_error(os.path.basename(args.csv), e.message)
            canvas.show()
        return 1

    engine = WeeklyEngine(records=records, dataset_path=args.csv)
    print(f"Loaded {len(records)} weekly records ({len(engine.years)} years).")
    if selection != ALL_YEARS:
        engine.select(selection)
        if not engine.view:
            print(f"No rows for year {selection}.")

    if args.export_csv:
        engine.export_csv(args.export_csv)
        print(f"Exported CSV to {args.export_csv}")
    if args.export_json:
        engine.export_json(args.export_json)
        print(f"Exported JSON to {args.export_json}")
    if args.report:
        _write_report(engine, args.report)

    if args.repl:
        repl(engine)
        return 0

    if args.save or not args.no_show:
        from .chart import render_chart
        canvas = render_chart(records, engine.state.selection)
        if args.save:
            canvas.save(args.save)
            print(f"Chart written to {args.save}")
        if args.no_show:
            canvas.close()
        else:
            canvas.show()
    return 0


def repl(engine: WeeklyEngine) -> None:
    print("Type 'help' for commands.")
    while True:
        try:
            line = input("wnvweek> ")
        except EOFError:
            break
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower() in ("quit", "exit"):
            break
        # Keep a lightweight log of commands for the report (reproducibility).
        if stripped.split()[0].lower() not in ("help", "show", "stats", "years"):
            engine.command_log.append(stripped)
        try:
            handle(engine, stripped)
        except (ValueError, OSError, ImportError) as e:
            print(f"Error: {e}")


def handle(engine: WeeklyEngine, line: str) -> None:
    """Handle one REPL command line."""
    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP)
        return

    if cmd == "years":
        print(", ".join(str(y) for y in engine.years) or "(no years)")
        return

    if cmd == "year":
        if len(parts) < 2:
            raise ValueError("usage: year <Y|all>")
        view = engine.select(parse_selection(parts[1]))
        print(f"Selected {engine.state.selection}. Weeks={len(view)}")
        return

    if cmd == "reset":
        engine.reset()
        print("Selection reset to all years.")
        return

    if cmd == "undo":
        print("Undone." if engine.undo() else "Nothing to undo.")
        return

    if cmd == "redo":
        print("Redone." if engine.redo() else "Nothing to redo.")
        return

    if cmd == "show":
        n = int(parts[1]) if len(parts) >= 2 else 10
        _print_rows(engine.view[:n])
        return

    if cmd == "stats":
        s = engine.summary()
        print(f"Selection: {s['selection']} | weeks={s['weeks']}")
        print(f"cases={format_plain(s['positive_cases'])} tests={format_count(s['total_tests'])} "
              f"rate={format_rate(s['positive_rate'])} mosquitoes={format_count(s['total_mosquitoes'])}")
        print(f"peak week (cases)={s['peak_cases_week']} | peak week (mosquitoes)={s['peak_mosquitoes_week']}")
        return

    if cmd == "export":
        if len(parts) < 3:
            raise ValueError('usage: export csv "out.csv"  OR  export json "out.json"')
        fmt, out_path = parts[1].lower(), parts[2]
        if fmt == "csv":
            engine.export_csv(out_path)
        elif fmt == "json":
            engine.export_json(out_path)
        else:
            raise ValueError("export format must be: csv | json")
        print(f"Exported {fmt.upper()} to {out_path}")
        return

    if cmd == "plot":
        if len(parts) < 2:
            raise ValueError('usage: plot "out.png"')
        from .chart import render_chart
        canvas = render_chart(engine.records, engine.state.selection, with_controls=False)
        canvas.save(parts[1])
        canvas.close()
        print(f"Chart written to {parts[1]}")
        return

    if cmd == "report":
        if len(parts) < 2:
            raise ValueError('usage: report "out.docx"')
        _write_report(engine, parts[1])
        return

    print("Unknown command. Type 'help'.")


def _write_report(engine: WeeklyEngine, path: str) -> None:
    from .report import ReportConfig, generate_docx_report
    cfg = ReportConfig(
        file_name=os.path.basename(engine.dataset_path) if engine.dataset_path else None,
        command_log=engine.command_log,
    )
    generate_docx_report(engine.records, path, engine.state.selection, config=cfg)
    print(f"Report written to {path}")


def _print_rows(rows):
    for r in rows:
        year = "all" if r.year is None else format_plain(r.year)
        print(f"[{year} w{format_plain(r.week)}] cases={format_plain(r.positive_cases)} "
              f"tests={format_count(r.total_tests)} rate={format_rate(r.positive_rate)} "
              f"mosquitoes={format_count(r.total_mosquitoes)}")


if __name__ == "__main__":
    raise SystemExit(main())
