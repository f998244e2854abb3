"""Statistics over named columns of a table.

``FrameStats`` applies ``ColumnStats`` to table columns: five-number
summaries, single- and two-column statistics, outlier fences, quantiles,
z-scoring of the whole table and full descriptive summaries.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

import numpy as np

from tablestat.config import get_settings
from tablestat.core.column_stats import ColumnStats, Fences, is_number
from tablestat.core.errors import DegenerateVarianceError
from tablestat.core.table import ColumnType, Table

logger = logging.getLogger(__name__)


class SingleStat(str, Enum):
    """Statistics that reduce one column to a single number."""

    MIN = "min"
    MAX = "max"
    RANGE = "range"
    MEAN = "mean"
    MEDIAN = "median"
    MODE = "mode"
    HARMONIC_MEAN = "harmonic_mean"
    GEOMETRIC_MEAN = "geometric_mean"
    STDDEV = "stddev"
    SKEWNESS = "skewness"
    KURTOSIS = "kurtosis"
    COEFFICIENT_OF_VARIATION = "coefficient_of_variation"
    COUNT = "count"


class DoubleStat(str, Enum):
    """Statistics that reduce two columns to a single number."""

    CORRELATION = "correlation"
    COVARIANCE = "covariance"


@dataclass
class ColumnSummary:
    """Descriptive summary of one numeric column.

    Attributes:
        column: Column name
        count: Number of values
        mean: Arithmetic mean
        median: Median value
        std: Sample standard deviation
        min: Minimum value
        max: Maximum value
        q1: First quartile (five-number summary)
        q3: Third quartile (five-number summary)
        iqr: Interquartile range
        skewness: Sample skewness (None for fewer than 3 values)
        kurtosis: Sample excess kurtosis (None for fewer than 4 values)
    """

    column: str
    count: int
    mean: float
    median: float
    std: float
    min: float
    max: float
    q1: float
    q3: float
    iqr: float
    skewness: float | None = None
    kurtosis: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "column": self.column,
            "count": self.count,
            "mean": self.mean,
            "median": self.median,
            "std": self.std,
            "min": self.min,
            "max": self.max,
            "q1": self.q1,
            "q3": self.q3,
            "iqr": self.iqr,
            "skewness": self.skewness,
            "kurtosis": self.kurtosis,
        }

    def format_for_display(self) -> str:
        """Format as human-readable string."""
        lines = [
            f"**{self.column}** (n={self.count})",
            f"  Mean: {self.mean:.4g}",
            f"  Median: {self.median:.4g}",
            f"  Std Dev: {self.std:.4g}",
            f"  Range: [{self.min:.4g}, {self.max:.4g}]",
            f"  IQR: [{self.q1:.4g}, {self.q3:.4g}]",
        ]
        return "\n".join(lines)


class FrameStats:
    """Column statistics for a ``Table``.

    Example:
        >>> table = Table.from_rows([["x"], [1], [2], [3], [4]], [ColumnType.NUMERIC])
        >>> stats = FrameStats()
        >>> stats.summary(table, "x")
        [1, 1.5, 2.5, 3.5, 4]
        >>> stats.single_stat(table, "x", SingleStat.MEAN)
        2.5
    """

    def __init__(self) -> None:
        self._stats = ColumnStats()

    def _load(self, table: Table, column: str) -> bool:
        data = table.get_column(column)
        if not data:
            logger.debug(f"Column '{column}' is empty or unknown")
            return False
        self._stats.data = data
        return True

    def summary(self, table: Table, column: str) -> list[float]:
        """Five-number summary of a numeric column (empty if unknown)."""
        if not self._load(table, column):
            return []
        return self._stats.five_number_summary

    def single_stat(self, table: Table, column: str, kind: SingleStat | str) -> float:
        """Compute one statistic of a numeric column.

        Returns:
            The statistic, or 0 if the column is empty/unknown or the kind
            is not recognised
        """
        try:
            kind = SingleStat(kind)
        except ValueError:
            return 0

        if not self._load(table, column):
            return 0

        s = self._stats
        if kind == SingleStat.MIN:
            return s.min
        if kind == SingleStat.MAX:
            return s.max
        if kind == SingleStat.RANGE:
            return s.max - s.min
        if kind == SingleStat.MEAN:
            return s.mean
        if kind == SingleStat.MEDIAN:
            return s.median
        if kind == SingleStat.MODE:
            return s.mode
        if kind == SingleStat.STDDEV:
            return s.std
        if kind == SingleStat.GEOMETRIC_MEAN:
            return s.geometric_mean
        if kind == SingleStat.HARMONIC_MEAN:
            return s.harmonic_mean
        if kind == SingleStat.SKEWNESS:
            return s.skewness
        if kind == SingleStat.KURTOSIS:
            return s.kurtosis
        if kind == SingleStat.COEFFICIENT_OF_VARIATION:
            return s.coefficient_of_variation
        return s.samples

    def double_stat(
        self,
        table: Table,
        column1: str,
        column2: str,
        kind: DoubleStat | str,
    ) -> float:
        """Correlation or covariance of two numeric columns (0 if invalid)."""
        try:
            kind = DoubleStat(kind)
        except ValueError:
            return 0

        x = table.get_column(column1)
        y = table.get_column(column2)
        if not x or not y:
            return 0

        if kind == DoubleStat.CORRELATION:
            return self._stats.correlation(x, y)
        return self._stats.covariance(x, y)

    def fences(self, table: Table, column: str, multiplier: float | None = None) -> Fences:
        """Tukey outlier fences of a column ((0, 0) if empty or unknown)."""
        if not self._load(table, column):
            return Fences(lower=0.0, upper=0.0)
        if multiplier is None:
            multiplier = get_settings().fence_multiplier
        return self._stats.fences(multiplier)

    def quantiles(self, table: Table, column: str, p: float | None = None) -> list[float]:
        """Quantiles of a column at multiples of ``p`` (see ``ColumnStats.quantiles``)."""
        if not self._load(table, column):
            return []
        if p is None:
            p = get_settings().default_quantile
        return self._stats.quantiles(p)

    def z_score(
        self,
        table: Table,
        on_degenerate: Literal["nan", "raise"] | None = None,
    ) -> list[list[Any]]:
        """Standardize every numeric column to zero mean and unit variance.

        Works on a copy: the table itself is unchanged. Non-numeric columns
        are copied through; missing cells in numeric columns become NaN.

        Args:
            table: Source table
            on_degenerate: What to do with a column of zero spread: "nan"
                fills it with NaN, "raise" raises DegenerateVarianceError.
                Defaults to the ``degenerate_variance`` setting.

        Returns:
            Column-major list of columns

        Raises:
            DegenerateVarianceError: For a constant column under "raise"
        """
        policy = on_degenerate or get_settings().degenerate_variance
        output: list[list[Any]] = []

        for name, column, column_type in zip(table.categories, table.table, table.data_types):
            if column_type != ColumnType.NUMERIC or not column:
                output.append(column)
                continue

            self._stats.data = column
            if self._stats.samples == 0:
                output.append([math.nan] * len(column))
                continue
            mu = self._stats.mean
            sigma = self._stats.std

            if sigma == 0:
                if policy == "raise":
                    raise DegenerateVarianceError(name)
                logger.warning(f"z_score: column '{name}' has zero spread, filling with NaN")
                output.append([math.nan] * len(column))
                continue

            values = np.array([v if is_number(v) else np.nan for v in column], dtype=float)
            output.append(((values - mu) / sigma).tolist())

        return output

    def describe(self, table: Table, columns: list[str] | None = None) -> list[ColumnSummary]:
        """Descriptive summaries for numeric columns.

        Args:
            table: Source table
            columns: Column names (None = all numeric columns)

        Returns:
            One ColumnSummary per known, non-empty column
        """
        if columns is None:
            columns = [
                name
                for name, column_type in zip(table.categories, table.data_types)
                if column_type == ColumnType.NUMERIC
            ]

        summaries = []
        for column in columns:
            if not self._load(table, column):
                continue

            s = self._stats
            five = s.five_number_summary
            summaries.append(
                ColumnSummary(
                    column=column,
                    count=s.samples,
                    mean=s.mean,
                    median=s.median,
                    std=s.std,
                    min=s.min,
                    max=s.max,
                    q1=five[1],
                    q3=five[3],
                    iqr=five[3] - five[1],
                    skewness=s.skewness if s.samples >= 3 else None,
                    kurtosis=s.kurtosis if s.samples >= 4 else None,
                )
            )

        return summaries
