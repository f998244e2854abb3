"""One-way tables, cross tables and cross-tabulation for tabular data.

This module provides:
- One-way frequency tables of a single column
- Two-way contingency tables (CrossTable) with chi-squared significance
- Whole-table cross-tabulation of numeric count columns
- Min-max normalization of numeric columns

Example:
    >>> analysis = TableAnalysis()
    >>> result = analysis.cross_table(
    ...     table, "Model", "Color",
    ...     grouping=["Black Silver White Gray", "Blue Gold Green Red Yellow"],
    ...     column_names=["Simple-Color", "Bold-Color"],
    ... )
    >>> print(result.format_for_display())
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, NamedTuple

import numpy as np

from tablestat.config import get_settings
from tablestat.core.chi2 import Chi2
from tablestat.core.column_stats import is_number
from tablestat.core.table import ColumnType, Table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cell:
    """One interior cell of a contingency table.

    Attributes:
        n: Observed count
        r: Fraction of the row total
        c: Fraction of the column total
        t: Fraction of the table total
    """

    n: float
    r: float
    c: float
    t: float

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return {"n": self.n, "r": self.r, "c": self.c, "t": self.t}


@dataclass
class CrossTableRow:
    """Cells for one row category followed by the row total."""

    cells: list[Cell]
    total: float

    def to_list(self) -> list[Any]:
        """Cells as dictionaries with the row total appended."""
        return [cell.to_dict() for cell in self.cells] + [self.total]


@dataclass
class CrossTableResult:
    """Result from a two-way contingency analysis.

    Attributes:
        chi2: Total chi-squared statistic
        df: Degrees of freedom, (rows - 1) * (columns - 1)
        q: Probability that the table relationships occur by chance
            (-1 when chi2 is not positive)
        columns: Column (group) names
        rows: Row category -> cells plus row total, in first-seen order
        unmatched: Observations whose value matched no group (dropped)
    """

    chi2: float = 0.0
    df: int = 0
    q: float = -1.0
    columns: list[str] = field(default_factory=list)
    rows: dict[Any, CrossTableRow] = field(default_factory=dict)
    unmatched: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "chi2": self.chi2,
            "df": self.df,
            "q": self.q,
            "columns": self.columns,
            "unmatched": self.unmatched,
            "table": {str(key): row.to_list() for key, row in self.rows.items()},
        }

    def format_for_display(self) -> str:
        """Format as a plain-text grid of counts."""
        if self.is_empty:
            return "Empty cross table."

        header = ["", *self.columns, "Total"]
        lines = [" | ".join(header)]
        for key, row in self.rows.items():
            counts = [f"{cell.n:g}" for cell in row.cells]
            lines.append(" | ".join([str(key), *counts, f"{row.total:g}"]))

        lines.append(f"chi2 = {self.chi2:.4g}, df = {self.df}, q = {self.q:.4g}")
        return "\n".join(lines)


@dataclass
class CrossTabulationResult:
    """Result from a whole-table cross-tabulation.

    Attributes:
        chi2: Total chi-squared statistic
        df: Degrees of freedom, (rows - 1) * (columns - 1)
        q: Probability that the table relationships occur by chance
        labels: Row labels (the table's first column)
        columns: Names of the observation columns
        table: One list of cells per observation column, ordered by column
    """

    chi2: float = 0.0
    df: int = 0
    q: float = -1.0
    labels: list[Any] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    table: list[list[Cell]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "chi2": self.chi2,
            "df": self.df,
            "q": self.q,
            "labels": self.labels,
            "columns": self.columns,
            "table": [[cell.to_dict() for cell in column] for column in self.table],
        }


class _Decomposition(NamedTuple):
    row_totals: np.ndarray
    col_totals: np.ndarray
    grand_total: float
    r: np.ndarray
    c: np.ndarray
    t: np.ndarray
    chi2: float


def _decompose(counts: np.ndarray) -> _Decomposition:
    """Marginals, cell fractions and chi-squared for a rows x columns count matrix."""
    row_totals = counts.sum(axis=1)
    col_totals = counts.sum(axis=0)
    grand_total = float(counts.sum())

    # Expected counts under independence
    expected = np.outer(row_totals, col_totals) / grand_total

    with np.errstate(divide="ignore", invalid="ignore"):
        contributions = np.where(expected > 0, (counts - expected) ** 2 / expected, 0.0)
        r = np.where(row_totals[:, None] != 0, counts / row_totals[:, None], 0.0)
        c = np.where(col_totals[None, :] != 0, counts / col_totals[None, :], 0.0)

    return _Decomposition(
        row_totals=row_totals,
        col_totals=col_totals,
        grand_total=grand_total,
        r=r,
        c=c,
        t=counts / grand_total,
        chi2=float(contributions.sum()),
    )


def _as_number(value: Any) -> float:
    number = float(value)
    return int(number) if number.is_integer() else number


class TableAnalysis:
    """Frequency and contingency analysis over a ``Table``."""

    def __init__(self) -> None:
        self._chi2 = Chi2()

    def one_way_table(
        self,
        table: Table,
        column: str,
        as_percentage: bool = False,
    ) -> dict[Any, float]:
        """Frequency count of each distinct value in a column.

        Args:
            table: Source table
            column: Column name
            as_percentage: Replace counts by their percentage of the total,
                rounded (two decimal places by default)

        Returns:
            Value -> count (or percentage) in first-seen order; empty if the
            column is unknown
        """
        data = table.get_column(column)
        if not data:
            logger.debug(f"one_way_table: column '{column}' is empty or unknown")
            return {}

        counts: dict[Any, float] = {}
        for item in data:
            counts[item] = counts.get(item, 0) + 1

        if as_percentage:
            decimals = get_settings().percentage_decimals
            n = len(data)
            counts = {item: round(100.0 * count / n, decimals) for item, count in counts.items()}

        return counts

    def cross_table(
        self,
        table: Table,
        row_column: str,
        col_column: str,
        grouping: Sequence[str] | None = None,
        column_names: Sequence[str] | None = None,
    ) -> CrossTableResult:
        """Contingency table between two columns with chi-squared significance.

        Args:
            table: Source table
            row_column: Independent variable; its distinct values are the rows
            col_column: Dependent variable counted into the columns
            grouping: Optional space-delimited value lists, one per output
                column. For example ``["Black Silver White Gray", "Blue Gold
                Green Red Yellow"]`` counts colors into two columns. Without a
                grouping every distinct value of ``col_column`` is a column.
            column_names: Optional names for the groups; defaults to ``G0``,
                ``G1``, ... when missing or not matching the grouping length

        Returns:
            CrossTableResult; empty if either column is unknown or no value
            falls into any group
        """
        x = table.get_column(row_column)
        y = table.get_column(col_column)

        if not x or not y:
            logger.debug(f"cross_table: '{row_column}' or '{col_column}' is empty or unknown")
            return CrossTableResult()

        if grouping:
            groups = [set(g.split()) for g in grouping]
            if column_names is not None and len(column_names) == len(groups):
                names = [str(name) for name in column_names]
            else:
                names = [f"G{j}" for j in range(len(groups))]

            def group_of(value: Any) -> int | None:
                text = str(value)
                for j, group in enumerate(groups):
                    if text in group:
                        return j
                return None

        else:
            distinct = list(dict.fromkeys(y))
            positions = {value: j for j, value in enumerate(distinct)}
            if column_names is not None and len(column_names) == len(distinct):
                names = [str(name) for name in column_names]
            else:
                names = [str(value) for value in distinct]
            group_of = positions.get

        columns = len(names)
        counts: dict[Any, list[int]] = {}
        unmatched = 0

        for item, value in zip(x, y):
            j = group_of(value)
            if j is None:
                unmatched += 1
                continue
            if item not in counts:
                counts[item] = [0] * columns
            counts[item][j] += 1

        if unmatched:
            logger.debug(f"cross_table: {unmatched} values of '{col_column}' matched no group")

        if not counts:
            return CrossTableResult(columns=names, unmatched=unmatched)

        keys = list(counts)
        matrix = np.array([counts[key] for key in keys], dtype=float)
        dec = _decompose(matrix)

        rows: dict[Any, CrossTableRow] = {}
        for i, key in enumerate(keys):
            cells = [
                Cell(
                    n=counts[key][j],
                    r=float(dec.r[i, j]),
                    c=float(dec.c[i, j]),
                    t=float(dec.t[i, j]),
                )
                for j in range(columns)
            ]
            rows[key] = CrossTableRow(cells=cells, total=int(dec.row_totals[i]))

        df = (len(keys) - 1) * (columns - 1)
        self._chi2.nu = df

        return CrossTableResult(
            chi2=dec.chi2,
            df=df,
            q=self._chi2.q_value(dec.chi2),
            columns=names,
            rows=rows,
            unmatched=unmatched,
        )

    def cross_tabulation(self, table: Table) -> CrossTabulationResult:
        """Cross-tabulate the first column against every other column.

        The first column labels the rows; every other column must hold
        numeric counts. The expected-count and chi-squared decomposition is
        the same as ``cross_table``, applied to the whole table at once.

        Returns:
            CrossTabulationResult ordered by column; empty if the table has
            no rows, fewer than two columns, a non-numeric count column, or a
            zero grand total
        """
        if table.size == 0 or table.column_count < 2:
            return CrossTabulationResult()

        if any(t != ColumnType.NUMERIC for t in table.data_types[1:]):
            logger.debug("cross_tabulation: every column after the first must be numeric")
            return CrossTabulationResult()

        data = table.table
        labels = data[0]
        names = table.categories[1:]

        # rows x columns count matrix; missing counts are zero
        matrix = np.array(
            [[v if is_number(v) else 0.0 for v in column] for column in data[1:]],
            dtype=float,
        ).T
        if matrix.sum() == 0:
            logger.debug("cross_tabulation: grand total is zero")
            return CrossTabulationResult(labels=labels, columns=names)

        dec = _decompose(matrix)
        n, columns = matrix.shape

        cells = [
            [
                Cell(
                    n=_as_number(matrix[i, j]),
                    r=float(dec.r[i, j]),
                    c=float(dec.c[i, j]),
                    t=float(dec.t[i, j]),
                )
                for i in range(n)
            ]
            for j in range(columns)
        ]

        df = (n - 1) * (columns - 1)
        self._chi2.nu = df

        return CrossTabulationResult(
            chi2=dec.chi2,
            df=df,
            q=self._chi2.q_value(dec.chi2),
            labels=labels,
            columns=names,
            table=cells,
        )

    def normalize(self, table: Table) -> list[list[Any]]:
        """Min-max scale every numeric column to [0, 1].

        Works on a copy: the table itself is unchanged. Non-numeric columns
        are copied through and constant columns become all zeros. Missing
        cells in numeric columns become NaN.

        Returns:
            Column-major list of columns
        """
        output: list[list[Any]] = []
        for column, column_type in zip(table.table, table.data_types):
            if column_type != ColumnType.NUMERIC or not column:
                output.append(column)
                continue

            values = np.array([v if is_number(v) else np.nan for v in column], dtype=float)
            if np.isnan(values).all():
                output.append(values.tolist())
                continue

            low = np.nanmin(values)
            span = np.nanmax(values) - low
            if span == 0:
                output.append(np.where(np.isnan(values), np.nan, 0.0).tolist())
            else:
                output.append(((values - low) / span).tolist())

        return output

    @staticmethod
    def to_array(frequencies: Mapping[Any, float]) -> list[dict[str, Any]]:
        """Convert a one-way table into ``[{"item": ..., "count": ...}, ...]``."""
        return [{"item": item, "count": count} for item, count in frequencies.items()]
