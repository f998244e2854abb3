"""Analysis request model for tablestat.

An ``AnalysisRequest`` describes one computation against a table: a column
statistic, a frequency or contingency table, or a transformed copy of the
table. Requests are validated before execution so that callers get a clear
error instead of an empty result.

Example:
    >>> from tablestat.core.request import AnalysisRequest
    >>> request = AnalysisRequest(
    ...     operation="cross_table",
    ...     column="Model",
    ...     column2="Color",
    ...     grouping=["Black Silver White Gray", "Blue Gold Green Red Yellow"],
    ...     column_names=["Simple-Color", "Bold-Color"],
    ... )
    >>> request.get_request_summary()["operation"]
    'cross_table'
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tablestat.analysis.frame_stats import DoubleStat, SingleStat


class Operation(str, Enum):
    """Operations an analysis request can ask for."""

    SUMMARY = "summary"  # five-number summary
    SINGLE_STAT = "single_stat"  # one statistic of one column
    DOUBLE_STAT = "double_stat"  # correlation/covariance of two columns
    FENCES = "fences"  # Tukey outlier fences
    QUANTILES = "quantiles"  # interpolated quantiles
    DESCRIBE = "describe"  # full descriptive summaries
    ONE_WAY_TABLE = "one_way_table"  # frequency table
    CROSS_TABLE = "cross_table"  # two-way contingency table
    CROSS_TABULATION = "cross_tabulation"  # whole-table cross-tabulation
    NORMALIZE = "normalize"  # min-max scaled copy
    Z_SCORE = "z_score"  # standardized copy

    @classmethod
    def requires_column(cls, op: Operation) -> bool:
        """Check if operation needs a ``column``."""
        return op in (
            cls.SUMMARY,
            cls.SINGLE_STAT,
            cls.DOUBLE_STAT,
            cls.FENCES,
            cls.QUANTILES,
            cls.ONE_WAY_TABLE,
            cls.CROSS_TABLE,
        )

    @classmethod
    def requires_second_column(cls, op: Operation) -> bool:
        """Check if operation needs a ``column2``."""
        return op in (cls.DOUBLE_STAT, cls.CROSS_TABLE)


class AnalysisRequest(BaseModel):
    """A single validated analysis request.

    Attributes:
        operation: What to compute
        column: Primary column (rows for cross_table)
        column2: Second column (columns for cross_table)
        columns: Columns to describe (None = all numeric)
        stat: Statistic for single_stat
        double_stat: Statistic for double_stat
        p: Quantile step for quantiles (None = configured default)
        multiplier: IQR multiplier for fences (None = configured default)
        as_percentage: Percentages instead of counts for one_way_table
        grouping: Space-delimited value groups for cross_table
        column_names: Names for the cross_table groups
    """

    model_config = ConfigDict(use_enum_values=False, validate_assignment=True)

    operation: Operation = Field(..., description="Operation to perform")
    column: str | None = Field(default=None, description="Primary column name")
    column2: str | None = Field(default=None, description="Second column name")
    columns: list[str] | None = Field(default=None, description="Columns to describe")
    stat: SingleStat | None = Field(default=None, description="Single-column statistic")
    double_stat: DoubleStat | None = Field(
        default=None, description="Two-column statistic"
    )
    p: float | None = Field(
        default=None, ge=0.01, le=0.99, description="Quantile step in [0.01, 0.99]"
    )
    multiplier: float | None = Field(
        default=None, gt=0.0, description="IQR multiplier for fences"
    )
    as_percentage: bool = Field(default=False, description="Report percentages")
    grouping: list[str] | None = Field(default=None, description="Value groups")
    column_names: list[str] | None = Field(default=None, description="Group names")

    @field_validator("grouping")
    @classmethod
    def validate_grouping(cls, v: list[str] | None) -> list[str] | None:
        """Reject groups that contain no values."""
        if v is None:
            return v
        for i, group in enumerate(v):
            if not group.split():
                raise ValueError(f"Group {i} is empty; each group needs at least one value")
        return v

    @model_validator(mode="after")
    def validate_parameters_for_operation(self) -> Self:
        """Validate that the parameters the operation needs are present."""
        op = self.operation

        if Operation.requires_column(op) and not self.column:
            raise ValueError(f"Operation '{op.value}' requires a column, but none provided")
        if Operation.requires_second_column(op) and not self.column2:
            raise ValueError(
                f"Operation '{op.value}' requires a second column (column2), but none provided"
            )
        if op == Operation.SINGLE_STAT and self.stat is None:
            raise ValueError("Operation 'single_stat' requires a stat, but none provided")
        if op == Operation.DOUBLE_STAT and self.double_stat is None:
            raise ValueError(
                "Operation 'double_stat' requires a double_stat, but none provided"
            )
        if (
            self.column_names is not None
            and self.grouping is not None
            and len(self.column_names) != len(self.grouping)
        ):
            raise ValueError(
                f"column_names has {len(self.column_names)} entries but grouping "
                f"has {len(self.grouping)}"
            )
        return self

    def get_request_summary(self) -> dict[str, Any]:
        """Get a compact summary of the request (only the fields that are set).

        Returns:
            Dictionary with request components
        """
        summary: dict[str, Any] = {"operation": self.operation.value}
        for name in ("column", "column2", "columns", "p", "multiplier", "grouping", "column_names"):
            value = getattr(self, name)
            if value is not None:
                summary[name] = value
        if self.stat is not None:
            summary["stat"] = self.stat.value
        if self.double_stat is not None:
            summary["double_stat"] = self.double_stat.value
        if self.as_percentage:
            summary["as_percentage"] = True
        return summary

    def to_python_code(self) -> str:
        """Generate Python code that reproduces this request.

        Returns:
            Python code string operating on a ``table`` variable
        """
        op = self.operation

        if op in (
            Operation.ONE_WAY_TABLE,
            Operation.CROSS_TABLE,
            Operation.CROSS_TABULATION,
            Operation.NORMALIZE,
        ):
            lines = [
                "from tablestat.analysis.table_analysis import TableAnalysis",
                "",
                "analysis = TableAnalysis()",
            ]
            if op == Operation.ONE_WAY_TABLE:
                call = f"analysis.one_way_table(table, {self.column!r}, as_percentage={self.as_percentage})"
            elif op == Operation.CROSS_TABLE:
                call = (
                    f"analysis.cross_table(table, {self.column!r}, {self.column2!r}, "
                    f"grouping={self.grouping!r}, column_names={self.column_names!r})"
                )
            elif op == Operation.CROSS_TABULATION:
                call = "analysis.cross_tabulation(table)"
            else:
                call = "analysis.normalize(table)"
        else:
            lines = [
                "from tablestat.analysis.frame_stats import DoubleStat, FrameStats, SingleStat",
                "",
                "stats = FrameStats()",
            ]
            if op == Operation.SUMMARY:
                call = f"stats.summary(table, {self.column!r})"
            elif op == Operation.SINGLE_STAT:
                call = f"stats.single_stat(table, {self.column!r}, SingleStat.{self.stat.name})"
            elif op == Operation.DOUBLE_STAT:
                call = (
                    f"stats.double_stat(table, {self.column!r}, {self.column2!r}, "
                    f"DoubleStat.{self.double_stat.name})"
                )
            elif op == Operation.FENCES:
                call = f"stats.fences(table, {self.column!r}, multiplier={self.multiplier!r})"
            elif op == Operation.QUANTILES:
                call = f"stats.quantiles(table, {self.column!r}, p={self.p!r})"
            elif op == Operation.DESCRIBE:
                call = f"stats.describe(table, columns={self.columns!r})"
            else:
                call = "stats.z_score(table)"

        lines.append(f"result = {call}")
        return "\n".join(lines)
