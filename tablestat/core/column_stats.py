"""Descriptive statistics on a single column of numeric data.

Assign a data set, then query statistics across it. The most commonly used
values (min, max, mean, standard deviation, median, mode) are memoized and
recomputed only after new data is assigned. The algorithms favour numerical
stability over raw speed, which suits report-sized data sets:
- Standard deviation uses Welford's recurrence
- Median and quartiles sort a copy of the data
- Quantiles use straight linear interpolation

Example:
    >>> stats = ColumnStats([2, 4, 4, 4, 5, 5, 7, 9])
    >>> stats.mean
    5.0
    >>> stats.five_number_summary
    [2, 4.0, 4.5, 6.0, 9]
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from tablestat.core.chi2 import Chi2

HARMONIC_ZERO_TOL = 1.0e-9
QUANTILE_HIT_TOL = 0.001


@dataclass(frozen=True)
class Fences:
    """Tukey outlier fences.

    Attributes:
        lower: Q1 - k * IQR
        upper: Q3 + k * IQR
    """

    lower: float
    upper: float

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return {"lower": self.lower, "upper": self.upper}


def is_number(value: Any) -> bool:
    """True for real numbers other than NaN; None, strings and booleans are not numbers."""
    if not isinstance(value, numbers.Real) or isinstance(value, bool):
        return False
    if isinstance(value, numbers.Integral):
        return True
    return not math.isnan(value)


def _median_of_sorted(values: Sequence[float]) -> float:
    n = len(values)
    m = n // 2
    if n % 2 == 0:
        return 0.5 * (values[m - 1] + values[m])
    return values[m]


class ColumnStats:
    """Statistics over one numeric sequence at a time.

    Attributes:
        data: Numeric values of the assigned data; None, NaN, strings and
            booleans are skipped (assignment clears all memoized values)
        samples: Number of values in the data set
    """

    def __init__(self, data: Sequence[float] | None = None) -> None:
        self._data: list[float] = []
        self._cache: dict[str, Any] = {}
        if data is not None:
            self.data = data

    @property
    def data(self) -> list[float]:
        return list(self._data)

    @data.setter
    def data(self, values: Sequence[float] | None) -> None:
        if values is None or len(values) == 0:
            self._data = []
        else:
            self._data = [v for v in values if is_number(v)]
        self._cache.clear()

    @property
    def samples(self) -> int:
        return len(self._data)

    def _memo(self, key: str, compute: Callable[[], Any]) -> Any:
        if key not in self._cache:
            self._cache[key] = compute()
        return self._cache[key]

    # === Memoized statistics ===

    @property
    def min(self) -> float:
        """Minimum value (0 for an empty data set)."""
        if not self._data:
            return 0
        return self._memo("min", lambda: min(self._data))

    @property
    def max(self) -> float:
        """Maximum value (0 for an empty data set)."""
        if not self._data:
            return 0
        return self._memo("max", lambda: max(self._data))

    @property
    def mean(self) -> float:
        """Arithmetic mean (0 for an empty data set)."""
        if not self._data:
            return 0
        return self._memo("mean", lambda: math.fsum(self._data) / len(self._data))

    @property
    def std(self) -> float:
        """Sample standard deviation by Welford's method (0 for n <= 1)."""
        if len(self._data) <= 1:
            return 0.0
        return self._memo("std", self._welford_std)

    def _welford_std(self) -> float:
        m = 0.0
        s = 0.0
        for i, value in enumerate(self._data):
            d = value - m
            m += d / (i + 1)
            s += (value - m) * d
        return math.sqrt(s / (len(self._data) - 1))

    @property
    def median(self) -> float:
        """Median value (0 for an empty data set)."""
        if not self._data:
            return 0
        return self._memo("median", lambda: _median_of_sorted(sorted(self._data)))

    @property
    def mode(self) -> float:
        """Most frequent value; ties go to the value seen first (0 when empty)."""
        if not self._data:
            return 0
        return self._memo("mode", self._compute_mode)

    def _compute_mode(self) -> float:
        counts: dict[float, int] = {}
        for value in self._data:
            counts[value] = counts.get(value, 0) + 1

        # Numeric equality groups 1 and 1.0; dicts keep first-seen order and
        # max() keeps the first of equal counts
        return max(counts.items(), key=lambda item: item[1])[0]

    # === Order statistics ===

    @property
    def five_number_summary(self) -> list[float]:
        """Min, first quartile, median, third quartile and max.

        When n is odd the median is a datum and is included in both the lower
        and upper halves; each quartile is the median of its half.
        """
        n = len(self._data)
        if n == 0:
            return []
        if n == 1:
            return [self._data[0]] * 5

        data = sorted(self._data)
        m = n // 2
        if n % 2 == 0:
            median = 0.5 * (data[m - 1] + data[m])
            lower = data[:m]
            upper = data[m:]
        else:
            median = data[m]
            lower = data[: m + 1]
            upper = data[m:]

        return [
            data[0],
            _median_of_sorted(lower),
            median,
            _median_of_sorted(upper),
            data[-1],
        ]

    def fences(self, multiplier: float = 1.5) -> Fences:
        """Tukey fences from the five-number summary ((0, 0) when empty)."""
        summary = self.five_number_summary
        if not summary:
            return Fences(lower=0.0, upper=0.0)

        q1 = summary[1]
        q3 = summary[3]
        iqr = q3 - q1
        return Fences(lower=q1 - multiplier * iqr, upper=q3 + multiplier * iqr)

    def quantiles(self, p: float = 0.25) -> list[float]:
        """Quantiles at multiples of ``p`` by linear interpolation.

        The result always starts with the minimum and ends with the maximum,
        so p = 0.25 returns five values and p = 0.1 returns eleven. The
        quartiles can differ from ``five_number_summary``, which uses a
        different method.

        Args:
            p: Quantile step in [0.01, 0.99]; NaN or out-of-range values fall
                back to 0.25

        Returns:
            List of quantiles, or an empty list when n < 2
        """
        if p is None or math.isnan(p) or p < 0.01 or p > 0.99:
            p = 0.25

        n = len(self._data)
        if n < 2:
            return []

        n1 = n - 1
        fractions = [i / n1 for i in range(n)]
        data = sorted(self._data)

        result: list[float] = [data[0]]
        q = 0.0
        for _ in range(math.floor(1.0 / p) - 1):
            q += p
            r = min(math.floor(q * n1), n - 2)

            if abs(fractions[r] - q) < QUANTILE_HIT_TOL:
                result.append(data[r])
            else:
                t = (q - fractions[r]) / (fractions[r + 1] - fractions[r])
                result.append((1.0 - t) * data[r] + t * data[r + 1])

        result.append(data[-1])
        return result

    # === Infrequent statistics (not memoized) ===

    @property
    def geometric_mean(self) -> float:
        """Geometric mean; NaN if the product of the data is negative."""
        n = len(self._data)
        if n == 0:
            return 0
        product = math.prod(self._data)
        if product < 0:
            return math.nan
        return product ** (1.0 / n)

    @property
    def harmonic_mean(self) -> float:
        """Harmonic mean; values within 1e-9 of zero contribute no reciprocal."""
        n = len(self._data)
        if n == 0:
            return 0

        s = sum(1.0 / v for v in self._data if abs(v) > HARMONIC_ZERO_TOL)
        if s == 0:
            return 0.0
        return n / s

    @property
    def coefficient_of_variation(self) -> float:
        """Standard deviation as a percentage of the mean (0 when the mean is 0)."""
        mean = self.mean
        if mean == 0:
            return 0.0
        return 100.0 * self.std / mean

    @property
    def skewness(self) -> float:
        """Adjusted Fisher-Pearson sample skewness (0 for n < 3)."""
        n = len(self._data)
        if n < 3:
            return 0.0

        u = self.mean
        m2 = sum((v - u) ** 2 for v in self._data) / n
        if m2 == 0:
            return 0.0
        m3 = sum((v - u) ** 3 for v in self._data) / n

        return math.sqrt(n * (n - 1)) / (n - 2) * m3 / m2**1.5

    @property
    def kurtosis(self) -> float:
        """Sample excess kurtosis (0 for n < 4)."""
        n = len(self._data)
        if n < 4:
            return 0.0

        u = self.mean
        s = self.std
        if s == 0:
            return 0.0
        s4 = sum((v - u) ** 4 for v in self._data)

        n1 = n - 1
        n2 = n - 2
        n3 = n - 3
        a = (n * (n + 1) * s4) / (n1 * n2 * n3 * s**4)
        b = 3.0 * n1 * n1 / (n2 * n3)
        return a - b

    def confidence_interval(self, t: float = 0.9) -> tuple[float, float]:
        """Two-sided confidence interval for the mean.

        Args:
            t: Confidence level, clamped to [0.01, 0.99] (NaN means 0.9)

        Returns:
            (left, right) interval, or (0, 0) for an empty data set
        """
        if t is None or math.isnan(t):
            t = 0.9
        t = min(max(0.01, t), 0.99)

        n = len(self._data)
        if n == 0:
            return (0.0, 0.0)

        # z^2 is chi-squared with one degree of freedom
        z = math.sqrt(Chi2(1).inverse_cdf(t))
        d = z * self.std / math.sqrt(n)
        u = self.mean
        return (u - d, u + d)

    # === Two-sample statistics ===

    @staticmethod
    def _paired(
        x: Sequence[float] | None, y: Sequence[float] | None
    ) -> tuple[list[float], list[float]]:
        """Pairs where both values are numbers ([], [] if the inputs are unusable)."""
        if x is None or y is None or len(x) != len(y):
            return [], []
        pairs = [(xi, yi) for xi, yi in zip(x, y) if is_number(xi) and is_number(yi)]
        if len(pairs) < 2:
            return [], []
        return [p[0] for p in pairs], [p[1] for p in pairs]

    def covariance(self, x: Sequence[float] | None, y: Sequence[float] | None) -> float:
        """Sample covariance of two equal-length sequences (0 if invalid).

        Pairs with a missing or non-numeric value are skipped. The instance's
        own data is left untouched.
        """
        xs, ys = self._paired(x, y)
        if not xs:
            return 0.0

        x_mean = ColumnStats(xs).mean
        y_mean = ColumnStats(ys).mean
        s = sum((xi - x_mean) * (yi - y_mean) for xi, yi in zip(xs, ys))
        return s / (len(xs) - 1.0)

    def correlation(self, x: Sequence[float] | None, y: Sequence[float] | None) -> float:
        """Pearson correlation of two equal-length sequences (0 if invalid)."""
        xs, ys = self._paired(x, y)
        if not xs:
            return 0.0

        x_std = ColumnStats(xs).std
        y_std = ColumnStats(ys).std
        if x_std == 0 or y_std == 0:
            return 0.0
        return self.covariance(xs, ys) / (x_std * y_std)
