"""Request execution for tablestat.

This module is the entry point for callers that describe work as data (a
dict decoded from JSON, for example) rather than calling the engine directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from tablestat.analysis.frame_stats import FrameStats
from tablestat.analysis.table_analysis import TableAnalysis
from tablestat.core.errors import TablestatError
from tablestat.core.request import AnalysisRequest, Operation
from tablestat.core.table import Table

logger = logging.getLogger(__name__)


@dataclass
class RequestResult:
    """Complete result from running an analysis request.

    Attributes:
        success: Whether the request executed successfully
        operation: Operation that was requested (None if it failed validation)
        data: Plain, JSON-serializable result (None if failed)
        error: Error message if the request failed
        suggestions: Suggestions for fixing a failed request
    """

    success: bool
    operation: str | None = None
    data: Any = None
    error: str | None = None
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "operation": self.operation,
            "data": self.data,
            "error": self.error,
            "suggestions": self.suggestions,
        }


def _validation_failure(e: ValidationError) -> RequestResult:
    error_messages = []
    suggestions = []

    for error in e.errors():
        loc = " -> ".join(str(part) for part in error["loc"])
        msg = error["msg"]
        error_messages.append(f"{loc}: {msg}" if loc else msg)

        if "requires a column" in msg or "requires a second column" in msg:
            suggestions.append("Name the column(s) the operation should read")
        elif "requires a stat" in msg or "requires a double_stat" in msg:
            suggestions.append("Choose a statistic, e.g. 'mean' or 'correlation'")
        elif error["loc"] and error["loc"][0] == "operation":
            suggestions.append(
                "Valid operations: " + ", ".join(op.value for op in Operation)
            )

    return RequestResult(
        success=False,
        error=f"Request validation failed: {'; '.join(error_messages)}",
        suggestions=suggestions or ["Check the request format"],
    )


def _execute(table: Table, request: AnalysisRequest) -> Any:
    op = request.operation
    stats = FrameStats()
    analysis = TableAnalysis()

    if op == Operation.SUMMARY:
        return stats.summary(table, request.column)
    if op == Operation.SINGLE_STAT:
        return stats.single_stat(table, request.column, request.stat)
    if op == Operation.DOUBLE_STAT:
        return stats.double_stat(table, request.column, request.column2, request.double_stat)
    if op == Operation.FENCES:
        return stats.fences(table, request.column, request.multiplier).to_dict()
    if op == Operation.QUANTILES:
        return stats.quantiles(table, request.column, request.p)
    if op == Operation.DESCRIBE:
        return [s.to_dict() for s in stats.describe(table, request.columns)]
    if op == Operation.ONE_WAY_TABLE:
        frequencies = analysis.one_way_table(table, request.column, request.as_percentage)
        return analysis.to_array(frequencies)
    if op == Operation.CROSS_TABLE:
        return analysis.cross_table(
            table,
            request.column,
            request.column2,
            grouping=request.grouping,
            column_names=request.column_names,
        ).to_dict()
    if op == Operation.CROSS_TABULATION:
        return analysis.cross_tabulation(table).to_dict()
    if op == Operation.NORMALIZE:
        return analysis.normalize(table)
    return stats.z_score(table)


def run_request(table: Table, request: AnalysisRequest | dict[str, Any]) -> RequestResult:
    """Validate and execute one analysis request against a table.

    Invalid requests and engine errors are reported in the result rather
    than raised.

    Args:
        table: Table to analyse
        request: AnalysisRequest or its dict form

    Returns:
        RequestResult with plain data or an error

    Example:
        >>> result = run_request(table, {"operation": "summary", "column": "x"})
        >>> result.data
        [1, 1.5, 2.5, 3.5, 4]
    """
    if not isinstance(request, AnalysisRequest):
        try:
            request = AnalysisRequest(**request)
        except ValidationError as e:
            return _validation_failure(e)

    operation = request.operation.value

    for name in (request.column, request.column2, *(request.columns or [])):
        if name is not None and name not in table:
            return RequestResult(
                success=False,
                operation=operation,
                error=f"Column '{name}' not found in table",
                suggestions=[f"Available columns: {', '.join(table.categories)}"],
            )

    try:
        data = _execute(table, request)
    except TablestatError as e:
        return RequestResult(success=False, operation=operation, error=str(e))
    except Exception as e:
        logger.exception(f"Request execution failed: {operation}")
        return RequestResult(
            success=False,
            operation=operation,
            error=f"Request execution failed: {e}",
        )

    return RequestResult(success=True, operation=operation, data=data)
