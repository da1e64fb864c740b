"""Standard normal distribution on 18-decimal fixed-point values.

The curve needs Φ and Φ⁻¹ to agree with each other to within a few wei so
that a reserve solved through Φ lands back on the curve when re-checked
through Φ⁻¹. Both are evaluated with mpmath at 50 significant digits and
rounded to the nearest point of the WAD grid:

- Φ and φ are mpmath's ncdf and npdf.
- Φ⁻¹(p) is seeded from scipy's double-precision ndtri and refined with
  mpmath's findroot against the Φ above.

Results are cached: the solvers evaluate the same points repeatedly while
iterating.
"""

from __future__ import annotations

from functools import lru_cache

from mpmath import mp, mpf
from scipy.special import ndtri

from rmm.math.fixed_point import ONE_18, InvalidProbability

__all__ = ["normal_cdf", "normal_pdf", "normal_quantile"]

# Working precision in significant digits
PRECISION_DIGITS = 50


def _to_wad(value: mpf) -> int:
    return int(mp.nint(value * ONE_18))


def _lower_quantile(q: mpf) -> mpf:
    """Quantile for q in (0, 0.5]."""
    seed = mpf(float(ndtri(float(q))))
    return mp.findroot(lambda z: mp.ncdf(z) - q, seed)


@lru_cache(maxsize=65_536)
def normal_cdf(x: int) -> int:
    """Standard normal CDF Φ(x) for an 18-decimal fixed-point x.

    Returns:
        Probability in [0, 10^18]
    """
    with mp.workdps(PRECISION_DIGITS):
        return _to_wad(mp.ncdf(mpf(x) / ONE_18))


@lru_cache(maxsize=65_536)
def normal_pdf(x: int) -> int:
    """Standard normal density φ(x) for an 18-decimal fixed-point x."""
    with mp.workdps(PRECISION_DIGITS):
        return _to_wad(mp.npdf(mpf(x) / ONE_18))


@lru_cache(maxsize=65_536)
def normal_quantile(p: int) -> int:
    """Inverse standard normal CDF Φ⁻¹(p) for an 18-decimal probability.

    Exactly antisymmetric: normal_quantile(10^18 - p) == -normal_quantile(p).

    Raises:
        InvalidProbability: If p is not strictly between 0 and 10^18
    """
    if p <= 0 or p >= ONE_18:
        raise InvalidProbability(f"Quantile requires 0 < p < 1, got {p}")

    with mp.workdps(PRECISION_DIGITS):
        if 2 * p > ONE_18:
            return -_to_wad(_lower_quantile(mpf(ONE_18 - p) / ONE_18))
        return _to_wad(_lower_quantile(mpf(p) / ONE_18))
