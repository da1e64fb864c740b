"""Checked integers for reserve, liquidity and share bookkeeping.

Pool amounts are unbounded Python ints that must stay within the 256-bit
ranges the settlement layer can represent. SafeInt wraps one of them so
that moving a reserve cannot silently go wrong:

- subtracting past zero raises Underflow
- dividing by zero raises DivisionByZero
- leaving the uint256/int256 range raises Overflow on conversion

The same error classes are raised by the fixed-point kernel.

Usage:
    from rmm.safe_int import S

    new_reserve = (S(reserve) + signed_delta).to_uint256()
    remaining = (S(reserve) - amount_out).value
"""

from __future__ import annotations

UINT256_MAX = 2**256 - 1
INT256_MAX = 2**255 - 1
INT256_MIN = -(2**255)


class SafeIntError(ArithmeticError):
    """Base class for checked arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Amount would go below zero."""

    pass


class Overflow(SafeIntError):
    """Value does not fit in 256 bits."""

    pass


def check_int256(value: int) -> int:
    """Return value if it fits in int256.

    Raises:
        Overflow: If value is outside [-2^255, 2^255 - 1]
    """
    if value > INT256_MAX or value < INT256_MIN:
        raise Overflow(f"Value outside int256 range: {value}")
    return value


class SafeInt:
    """Integer amount with checked subtraction and division.

    Addition takes signed operands so a signed delta can be applied to an
    unsigned reserve; the sign of the result is checked by to_uint256().
    Intermediate products are unbounded until converted.
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _extract_value(other))

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Raises Underflow if the result would be negative."""
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Floor division (rounds down for non-negative operands)."""
        return SafeInt(self._value // _nonzero(self._value, other))

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Division rounding up, for non-negative operands."""
        return SafeInt(-(-self._value // _nonzero(self._value, other)))

    def to_uint256(self) -> int:
        """Plain int, checked against [0, 2^256 - 1].

        Raises:
            Underflow: If value is negative
            Overflow: If value exceeds 2^256 - 1
        """
        if self._value < 0:
            raise Underflow(f"Negative value cannot be uint256: {self._value}")
        if self._value > UINT256_MAX:
            raise Overflow(f"Value exceeds uint256 max: {self._value}")
        return self._value

    def to_int256(self) -> int:
        """Plain int, checked against the int256 range."""
        return check_int256(self._value)


def _extract_value(x: SafeInt | int) -> int:
    if isinstance(x, SafeInt):
        return x._value
    return x


def _nonzero(numerator: int, divisor: SafeInt | int) -> int:
    value = _extract_value(divisor)
    if value == 0:
        raise DivisionByZero(f"Division by zero: {numerator} / 0")
    return value


# Short alias used throughout the curve code
S = SafeInt
