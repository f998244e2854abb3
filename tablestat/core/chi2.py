"""Chi-squared distribution utilities.

Example:
    >>> from tablestat.core.chi2 import Chi2
    >>> dist = Chi2(nu=3)
    >>> round(dist.cdf(7.815), 3)
    0.95
    >>> round(dist.inverse_cdf(0.95), 3)
    7.815
"""

from __future__ import annotations

import math

from tablestat.core.special import (
    incomplete_gamma_p,
    inverse_incomplete_gamma_p,
    log_gamma,
)

LN_2 = 0.693147180559945309


class Chi2:
    """Chi-squared distribution with ``nu`` degrees of freedom.

    The log-normalization constant of the density is recomputed whenever
    ``nu`` is assigned, so the two never drift apart.

    Attributes:
        nu: Degrees of freedom (positive integer, defaults to 1 on bad input)
    """

    def __init__(self, nu: float = 1) -> None:
        self._nu = 1
        self._fac = 0.0
        self.nu = nu

    @property
    def nu(self) -> int:
        """Degrees of freedom."""
        return self._nu

    @nu.setter
    def nu(self, value: float) -> None:
        try:
            nu = float(value)
        except (TypeError, ValueError):
            nu = 1.0
        if math.isnan(nu) or math.isinf(nu) or nu < 1.0:
            nu = 1.0

        self._nu = int(math.floor(nu))
        self._fac = LN_2 * (0.5 * self._nu) + log_gamma(0.5 * self._nu)

    def density(self, x2: float) -> float:
        """Probability density at ``x2`` (0 for x2 <= 0, NaN or infinite)."""
        if math.isnan(x2) or math.isinf(x2) or x2 <= 0.0:
            return 0.0
        return math.exp(-0.5 * (x2 - (self._nu - 2.0) * math.log(x2)) - self._fac)

    def cdf(self, x2: float) -> float:
        """Probability that a chi-squared variate is below ``x2`` (0 for x2 <= 0 or NaN)."""
        if math.isnan(x2) or x2 <= 0.0:
            return 0.0
        return incomplete_gamma_p(0.5 * self._nu, 0.5 * x2)

    def q_value(self, x2: float) -> float:
        """Probability of a chi-squared value at least this large arising by chance.

        Returns:
            1 - cdf(x2), or -1 when ``x2`` is NaN or not positive
        """
        if math.isnan(x2) or x2 <= 0.0:
            return -1.0
        return 1.0 - incomplete_gamma_p(0.5 * self._nu, 0.5 * x2)

    def inverse_cdf(self, p: float) -> float:
        """Critical chi-squared value for probability ``p``.

        Out-of-range or NaN probabilities are clamped to 0.
        """
        if math.isnan(p) or p < 0.0 or p > 1.0:
            p = 0.0
        return 2.0 * inverse_incomplete_gamma_p(p, 0.5 * self._nu)

    def __repr__(self) -> str:
        return f"Chi2(nu={self._nu})"
