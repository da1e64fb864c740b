"""Pluggable numeric kernel for the curve math.

The curve functions only touch ln/exp/sqrt and the Gaussian through this
interface, so an alternative approximation can be swapped in and its error
bounds tested independently of the curve logic.
"""

from typing import Protocol, runtime_checkable

from rmm.math import fixed_point, gaussian


@runtime_checkable
class NumericKernel(Protocol):
    """Transcendental functions over 18-decimal fixed-point ints."""

    def ln(self, x: int) -> int:
        """Natural logarithm, x > 0."""
        ...

    def exp(self, x: int) -> int:
        """Exponential."""
        ...

    def sqrt(self, x: int) -> int:
        """Square root, x >= 0."""
        ...

    def cdf(self, x: int) -> int:
        """Standard normal CDF."""
        ...

    def pdf(self, x: int) -> int:
        """Standard normal density."""
        ...

    def quantile(self, p: int) -> int:
        """Inverse standard normal CDF, 0 < p < 1."""
        ...


class WadKernel:
    """Default kernel: LogExpMath ln/exp and 50-digit Gaussian functions."""

    def ln(self, x: int) -> int:
        return fixed_point.ln(x)

    def exp(self, x: int) -> int:
        return fixed_point.exp(x)

    def sqrt(self, x: int) -> int:
        return fixed_point.sqrt(x)

    def cdf(self, x: int) -> int:
        return gaussian.normal_cdf(x)

    def pdf(self, x: int) -> int:
        return gaussian.normal_pdf(x)

    def quantile(self, p: int) -> int:
        return gaussian.normal_quantile(p)


DEFAULT_KERNEL: NumericKernel = WadKernel()
