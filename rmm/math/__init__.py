"""Mathematical primitives for the curve engine.

This package provides:
- 18-decimal fixed-point arithmetic with directed rounding
- ln/exp/sqrt on fixed-point values
- the standard normal CDF, density and quantile
- NumericKernel, the interface the curve math is written against
"""

from rmm.math.fixed_point import (
    Bfp,
    DomainError,
    InvalidExponent,
    InvalidProbability,
    div_down,
    div_up,
    exp,
    ln,
    mul_down,
    mul_up,
    sqrt,
)
from rmm.math.gaussian import normal_cdf, normal_pdf, normal_quantile
from rmm.math.kernel import DEFAULT_KERNEL, NumericKernel, WadKernel

__all__ = [
    "Bfp",
    "DEFAULT_KERNEL",
    "DomainError",
    "InvalidExponent",
    "InvalidProbability",
    "NumericKernel",
    "WadKernel",
    "div_down",
    "div_up",
    "exp",
    "ln",
    "mul_down",
    "mul_up",
    "normal_cdf",
    "normal_pdf",
    "normal_quantile",
    "sqrt",
]
