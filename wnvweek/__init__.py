"""
wnvweek package
===============

Weekly West Nile Virus (WNV) mosquito surveillance chart.

- The CLI entry point is in `wnvweek/cli.py`.
- CSV loading is in `wnvweek/loader.py`.
- Year selection and week aggregation are in `wnvweek/selection.py`.
- The two-panel interactive chart is in `wnvweek/chart.py`.
"""

__version__ = '0.3.1'
