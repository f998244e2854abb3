"""Core functionality for tablestat.

This module contains:
- Special functions (log-gamma, incomplete beta and gamma)
- Chi-squared distribution
- Single-column descriptive statistics
- Column-major table store
- Analysis request model
"""

from tablestat.core.chi2 import Chi2
from tablestat.core.column_stats import ColumnStats, Fences
from tablestat.core.errors import (
    DegenerateVarianceError,
    NumericNonConvergenceError,
    TablestatError,
)
from tablestat.core.table import ColumnType, SplitResult, Table

__all__ = [
    "Chi2",
    "ColumnStats",
    "ColumnType",
    "DegenerateVarianceError",
    "Fences",
    "NumericNonConvergenceError",
    "SplitResult",
    "Table",
    "TablestatError",
]


def __getattr__(name: str):
    """Lazy imports for modules that depend on the analysis layer."""
    if name in ("AnalysisRequest", "Operation"):
        from tablestat.core import request

        return getattr(request, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
