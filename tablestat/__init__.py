"""tablestat: statistics and contingency analysis for in-memory tables.

This package provides special functions, a chi-squared distribution utility,
descriptive column statistics, a column-major table, and one-way/cross-table
analysis built on top of them.
"""

__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy imports for main package exports."""
    if name in ("Table", "ColumnType"):
        from tablestat.core import table

        return getattr(table, name)
    if name == "ColumnStats":
        from tablestat.core.column_stats import ColumnStats

        return ColumnStats
    if name == "Chi2":
        from tablestat.core.chi2 import Chi2

        return Chi2
    if name == "TableAnalysis":
        from tablestat.analysis.table_analysis import TableAnalysis

        return TableAnalysis
    if name == "FrameStats":
        from tablestat.analysis.frame_stats import FrameStats

        return FrameStats
    if name == "run_request":
        from tablestat.tools.runner import run_request

        return run_request
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Chi2",
    "ColumnStats",
    "ColumnType",
    "FrameStats",
    "Table",
    "TableAnalysis",
    "run_request",
    "__version__",
]
