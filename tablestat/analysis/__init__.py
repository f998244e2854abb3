"""Table analysis for tablestat.

This module contains:
- One-way frequency tables and two-way contingency tables
- Whole-table cross-tabulation and min-max normalization
- Column statistics, fences, quantiles and z-scoring over named columns
"""

from tablestat.analysis.frame_stats import (
    ColumnSummary,
    DoubleStat,
    FrameStats,
    SingleStat,
)
from tablestat.analysis.table_analysis import (
    Cell,
    CrossTableResult,
    CrossTableRow,
    CrossTabulationResult,
    TableAnalysis,
)

__all__ = [
    # Contingency analysis
    "TableAnalysis",
    "Cell",
    "CrossTableRow",
    "CrossTableResult",
    "CrossTabulationResult",
    # Column statistics
    "FrameStats",
    "SingleStat",
    "DoubleStat",
    "ColumnSummary",
]
