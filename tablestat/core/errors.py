"""Exception types raised by the statistics engine.

Most invalid statistical input is reported through sentinel values (0, empty
lists, -1 from ``Chi2.q_value``). The exceptions here cover the two cases where
a sentinel would hide a real problem from the caller.
"""


class TablestatError(Exception):
    """Base class for engine errors."""


class NumericNonConvergenceError(TablestatError, ArithmeticError):
    """An iterative approximation did not converge within its iteration cap.

    Attributes:
        routine: Name of the routine that gave up
        iterations: Number of iterations performed
    """

    def __init__(self, routine: str, iterations: int) -> None:
        self.routine = routine
        self.iterations = iterations
        super().__init__(f"{routine} did not converge after {iterations} iterations")


class DegenerateVarianceError(TablestatError, ZeroDivisionError):
    """A column has zero spread, so it cannot be standardized.

    Attributes:
        column: Name of the offending column
    """

    def __init__(self, column: str) -> None:
        self.column = column
        super().__init__(f"Column '{column}' has zero standard deviation")
