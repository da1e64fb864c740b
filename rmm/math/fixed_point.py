"""18-decimal fixed-point arithmetic.

All values are Python ints scaled by 10^18 ("WAD"). Signed values are
supported throughout; every result is checked against the int256 range and
raises Overflow rather than wrapping.

Rounding convention:
- *_down truncates toward zero
- *_up rounds away from zero

Callers pick the direction that favors the pool: amounts the pool receives
round up, amounts it pays out round down.

ln/exp follow the digit-extraction and series scheme of Balancer's
LogExpMath.sol:
https://github.com/balancer-labs/balancer-v2-monorepo/blob/6c9e24e22d0c46cca6dd15861d3d33da61a60b98/pkg/solidity-utils/contracts/math/LogExpMath.sol
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from math import isqrt
from typing import ClassVar

from rmm.safe_int import DivisionByZero, check_int256

__all__ = [
    "Bfp",
    # Errors
    "DomainError",
    "InvalidExponent",
    "InvalidProbability",
    # Arithmetic
    "mul_down",
    "mul_up",
    "div_down",
    "div_up",
    # Transcendentals
    "ln",
    "exp",
    "sqrt",
    # Constants
    "ONE_18",
    "ONE_20",
    "ONE_36",
    "MAX_NATURAL_EXPONENT",
    "MIN_NATURAL_EXPONENT",
]

# =============================================================================
# Constants
# =============================================================================

ONE_18 = 10**18
ONE_20 = 10**20
ONE_36 = 10**36

# exp() domain: e^130 still fits in int256, e^-41 is about one wei
MAX_NATURAL_EXPONENT = 130 * ONE_18
MIN_NATURAL_EXPONENT = -41 * ONE_18

# ln() switches to the 36-decimal series on (0.9, 1.1)
LN_36_LOWER_BOUND = ONE_18 - 10**17
LN_36_UPPER_BOUND = ONE_18 + 10**17

# Digit-extraction tables: X_* are powers of two, A_* = e^X_*.
# The first two entries are 18-decimal, the rest 20-decimal.
X_18 = {
    0: 128 * ONE_18,  # 2^7
    1: 64 * ONE_18,  # 2^6
}
A_18 = {
    0: 38877084059945950922200000000000000000000000000000000000,  # e^128
    1: 6235149080811616882910000000,  # e^64
}

X_20 = {
    2: 3_200_000_000_000_000_000_000,  # 32 * ONE_20 = 2^5
    3: 1_600_000_000_000_000_000_000,  # 16 * ONE_20 = 2^4
    4: 800_000_000_000_000_000_000,  # 8 * ONE_20 = 2^3
    5: 400_000_000_000_000_000_000,  # 4 * ONE_20 = 2^2
    6: 200_000_000_000_000_000_000,  # 2 * ONE_20 = 2^1
    7: 100_000_000_000_000_000_000,  # 1 * ONE_20 = 2^0
    8: 50_000_000_000_000_000_000,  # 0.5 * ONE_20 = 2^-1
    9: 25_000_000_000_000_000_000,  # 0.25 * ONE_20 = 2^-2
    10: 12_500_000_000_000_000_000,  # 0.125 * ONE_20 = 2^-3
    11: 6_250_000_000_000_000_000,  # 0.0625 * ONE_20 = 2^-4
}
A_20 = {
    2: 7_896_296_018_268_069_516_100_000_000_000_000,  # e^32
    3: 888_611_052_050_787_263_676_000_000,  # e^16
    4: 298_095_798_704_172_827_474_000,  # e^8
    5: 5_459_815_003_314_423_907_810,  # e^4
    6: 738_905_609_893_065_022_723,  # e^2
    7: 271_828_182_845_904_523_536,  # e^1
    8: 164_872_127_070_012_814_685,  # e^0.5
    9: 128_402_541_668_774_148_407,  # e^0.25
    10: 113_314_845_306_682_631_683,  # e^0.125
    11: 106_449_445_891_785_942_956,  # e^0.0625
}


# =============================================================================
# Error classes
# =============================================================================


class DomainError(ValueError):
    """A kernel function was called outside its valid input range."""

    pass


class InvalidExponent(DomainError):
    """Exponent is outside [MIN_NATURAL_EXPONENT, MAX_NATURAL_EXPONENT]."""

    pass


class InvalidProbability(DomainError):
    """Quantile argument is outside the open interval (0, 1)."""

    pass


# =============================================================================
# Rounded multiplication and division
# =============================================================================


def _div_trunc(a: int, b: int) -> int:
    """a / b truncated toward zero (Python's // floors negative quotients)."""
    if b == 0:
        raise DivisionByZero(f"Division by zero: {a} / 0")

    if (a >= 0) == (b >= 0):
        return a // b
    return -(abs(a) // abs(b))


def _div_away(a: int, b: int) -> int:
    """Integer division rounding away from zero."""
    if b == 0:
        raise DivisionByZero(f"Division by zero: {a} / 0")
    quotient = (abs(a) + abs(b) - 1) // abs(b)
    return quotient if (a >= 0) == (b >= 0) else -quotient


def mul_down(a: int, b: int) -> int:
    """Multiply, truncating toward zero: (a * b) / 10^18."""
    product = check_int256(a * b)
    return _div_trunc(product, ONE_18)


def mul_up(a: int, b: int) -> int:
    """Multiply, rounding away from zero."""
    product = check_int256(a * b)
    return _div_away(product, ONE_18)


def div_down(a: int, b: int) -> int:
    """Divide, truncating toward zero: (a * 10^18) / b.

    Raises:
        DivisionByZero: If b is zero
    """
    numerator = check_int256(a * ONE_18)
    return check_int256(_div_trunc(numerator, b))


def div_up(a: int, b: int) -> int:
    """Divide, rounding away from zero.

    Raises:
        DivisionByZero: If b is zero
    """
    numerator = check_int256(a * ONE_18)
    return check_int256(_div_away(numerator, b))


# =============================================================================
# Transcendentals
# =============================================================================


def _ln(a: int) -> int:
    """ln(a) for a > 0, 18-decimal in and out.

    Strips large powers of e from a, then sums 2 * artanh((a - 1)/(a + 1))
    on the remainder. Everything after the reciprocal step is positive, so
    plain floor division is exact truncation here.
    """
    if a < ONE_18:
        # ln(a) = -ln(1/a)
        return -_ln((ONE_18 * ONE_18) // a)

    sum_val = 0

    for i in range(2):
        if a >= A_18[i] * ONE_18:
            a //= A_18[i]
            sum_val += X_18[i]

    sum_val *= 100
    a *= 100

    for i in range(2, 12):
        if a >= A_20[i]:
            a = (a * ONE_20) // A_20[i]
            sum_val += X_20[i]

    # 2 * (z + z^3/3 + z^5/5 + ...)
    z = ((a - ONE_20) * ONE_20) // (a + ONE_20)
    z_squared = (z * z) // ONE_20

    num = z
    series_sum = num

    for i in range(3, 12, 2):
        num = (num * z_squared) // ONE_20
        series_sum += num // i

    series_sum *= 2

    return (sum_val + series_sum) // 100


def _ln_36(x: int) -> int:
    """ln(x) as a 36-decimal value, for x near 1."""
    x *= ONE_18
    # z < 0 for x < 1
    z = _div_trunc((x - ONE_36) * ONE_36, x + ONE_36)
    z_squared = _div_trunc(z * z, ONE_36)

    num = z
    series_sum = num

    for i in range(3, 16, 2):
        num = _div_trunc(num * z_squared, ONE_36)
        series_sum += _div_trunc(num, i)

    return series_sum * 2


def ln(x: int) -> int:
    """Natural logarithm of a positive 18-decimal fixed-point value.

    Raises:
        DomainError: If x <= 0
    """
    if x <= 0:
        raise DomainError(f"ln is undefined for non-positive input {x}")
    if LN_36_LOWER_BOUND < x < LN_36_UPPER_BOUND:
        return _div_trunc(_ln_36(x), ONE_18)
    return _ln(x)


def exp(x: int) -> int:
    """e^x for an 18-decimal x.

    Splits x into table exponents plus a remainder below 1/4, whose
    exponential is a 12-term Taylor series.

    Raises:
        InvalidExponent: If x is outside [MIN_NATURAL_EXPONENT, MAX_NATURAL_EXPONENT]
    """
    if not (MIN_NATURAL_EXPONENT <= x <= MAX_NATURAL_EXPONENT):
        raise InvalidExponent(f"Exponent {x} outside valid range")

    if x < 0:
        return (ONE_18 * ONE_18) // exp(-x)

    if x >= X_18[0]:
        x -= X_18[0]
        first_an = A_18[0]
    elif x >= X_18[1]:
        x -= X_18[1]
        first_an = A_18[1]
    else:
        first_an = 1

    x *= 100
    product = ONE_20
    for i in range(2, 10):
        if x >= X_20[i]:
            x -= X_20[i]
            product = (product * A_20[i]) // ONE_20

    series_sum = ONE_20 + x
    term = x

    for i in range(2, 13):
        term = ((term * x) // ONE_20) // i
        series_sum += term

    return check_int256((((product * series_sum) // ONE_20) * first_an) // 100)


def sqrt(x: int) -> int:
    """Square root of an 18-decimal fixed-point value, rounded down.

    Raises:
        DomainError: If x < 0
    """
    if x < 0:
        raise DomainError(f"sqrt is undefined for negative input {x}")
    return isqrt(x * ONE_18)


# =============================================================================
# Bfp class (wrapper for convenient usage)
# =============================================================================


class Bfp:
    """18-decimal fixed-point number stored as int.

    All values are stored as integers scaled by 10^18 and may be negative.
    Example: 1.5 is stored as 1_500_000_000_000_000_000

    Arithmetic delegates to mul_down/mul_up/div_down/div_up, so rounding
    direction and int256 checks are the same as for the plain functions.
    """

    ONE: ClassVar[int] = ONE_18

    __slots__ = ("value",)
    __hash__ = None  # type: ignore[assignment]  # Unhashable since we define __eq__

    def __init__(self, value: int) -> None:
        """Create Bfp from raw scaled value."""
        self.value = value

    @classmethod
    def from_wei(cls, wei: int) -> Bfp:
        """Create from raw wei value (already scaled to 18 decimals)."""
        return cls(wei)

    @classmethod
    def from_decimal(cls, d: Decimal) -> Bfp:
        """Create from decimal (will be scaled by 10^18), rounding half-up."""
        return cls(int((d * cls.ONE).to_integral_value(rounding=ROUND_HALF_UP)))

    @classmethod
    def from_int(cls, i: int) -> Bfp:
        """Create from integer (will be scaled by 10^18)."""
        return cls(i * cls.ONE)

    def to_decimal(self) -> Decimal:
        """Convert to Decimal for display."""
        return Decimal(self.value) / Decimal(self.ONE)

    def mul_down(self, other: Bfp) -> Bfp:
        return Bfp(mul_down(self.value, other.value))

    def mul_up(self, other: Bfp) -> Bfp:
        return Bfp(mul_up(self.value, other.value))

    def div_down(self, other: Bfp) -> Bfp:
        return Bfp(div_down(self.value, other.value))

    def div_up(self, other: Bfp) -> Bfp:
        return Bfp(div_up(self.value, other.value))

    def complement(self) -> Bfp:
        """Return 1 - self. Clamps to 0 if self > 1."""
        return Bfp(max(0, self.ONE - self.value))

    def __repr__(self) -> str:
        return f"Bfp({self.value})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value <= other.value
