"""Tests for 18-decimal fixed-point arithmetic and ln/exp/sqrt."""

from decimal import Decimal, localcontext

import pytest

from rmm.math.fixed_point import (
    MAX_NATURAL_EXPONENT,
    ONE_18,
    Bfp,
    DomainError,
    InvalidExponent,
    div_down,
    div_up,
    exp,
    ln,
    mul_down,
    mul_up,
    sqrt,
)
from rmm.safe_int import DivisionByZero, Overflow

# ln/exp agree with 50-digit Decimal to within this many wei
LOG_EXP_TOLERANCE = 10**6


def decimal_ln(x: int) -> int:
    with localcontext() as ctx:
        ctx.prec = 50
        return int((Decimal(x) / ONE_18).ln() * ONE_18)


def decimal_exp(x: int) -> int:
    with localcontext() as ctx:
        ctx.prec = 50
        return int((Decimal(x) / ONE_18).exp() * ONE_18)


class TestRoundedMultiplication:
    """mul_down truncates toward zero, mul_up rounds away from zero."""

    def test_exact_product(self):
        assert mul_down(2 * ONE_18, 3 * ONE_18) == 6 * ONE_18
        assert mul_up(2 * ONE_18, 3 * ONE_18) == 6 * ONE_18

    def test_positive_rounding(self):
        """3 wei * 0.5 = 1.5 wei."""
        assert mul_down(3, ONE_18 // 2) == 1
        assert mul_up(3, ONE_18 // 2) == 2

    def test_negative_rounding(self):
        """-3 wei * 0.5 = -1.5 wei."""
        assert mul_down(-3, ONE_18 // 2) == -1
        assert mul_up(-3, ONE_18 // 2) == -2

    def test_overflow_raises(self):
        """Products beyond int256 raise instead of wrapping."""
        with pytest.raises(Overflow):
            mul_down(2**200, 2**200)
        with pytest.raises(Overflow):
            mul_up(-(2**200), 2**200)


class TestRoundedDivision:
    """div_down truncates toward zero, div_up rounds away from zero."""

    def test_one_third(self):
        assert div_down(1, 3) == 333333333333333333
        assert div_up(1, 3) == 333333333333333334

    def test_negative_one_third(self):
        assert div_down(-1, 3) == -333333333333333333
        assert div_up(-1, 3) == -333333333333333334

    def test_exact_quotient(self):
        assert div_down(6 * ONE_18, 2 * ONE_18) == 3 * ONE_18
        assert div_up(6 * ONE_18, 2 * ONE_18) == 3 * ONE_18

    def test_division_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            div_down(ONE_18, 0)
        with pytest.raises(DivisionByZero):
            div_up(ONE_18, 0)

    def test_numerator_overflow_raises(self):
        with pytest.raises(Overflow):
            div_down(2**250, 1)


class TestLn:
    """Natural logarithm."""

    def test_ln_one_is_zero(self):
        assert ln(ONE_18) == 0

    @pytest.mark.parametrize(
        "x",
        [
            10**12,  # 1e-6
            ONE_18 // 3,
            95 * 10**16,  # 0.95, high precision path
            105 * 10**16,  # 1.05, high precision path
            2 * ONE_18,
            2718281828459045235,
            10**6 * ONE_18,
        ],
    )
    def test_ln_matches_decimal(self, x):
        """ln agrees with a 50-digit reference."""
        assert abs(ln(x) - decimal_ln(x)) <= LOG_EXP_TOLERANCE

    def test_ln_is_negative_below_one(self):
        assert ln(ONE_18 // 2) < 0

    @pytest.mark.parametrize("x", [0, -1, -ONE_18])
    def test_ln_non_positive_raises(self, x):
        with pytest.raises(DomainError):
            ln(x)


class TestExp:
    """Exponential."""

    def test_exp_zero_is_one(self):
        assert exp(0) == ONE_18

    @pytest.mark.parametrize(
        "x",
        [ONE_18, -ONE_18, ONE_18 // 10, -(ONE_18 // 10), 5 * ONE_18, -5 * ONE_18],
    )
    def test_exp_matches_decimal(self, x):
        """exp agrees with a 50-digit reference."""
        assert abs(exp(x) - decimal_exp(x)) <= LOG_EXP_TOLERANCE

    def test_exp_out_of_range_raises(self):
        with pytest.raises(InvalidExponent):
            exp(MAX_NATURAL_EXPONENT + 1)
        with pytest.raises(InvalidExponent):
            exp(-42 * ONE_18)

    def test_invalid_exponent_is_domain_error(self):
        assert issubclass(InvalidExponent, DomainError)

    def test_ln_exp_round_trip(self):
        x = 3 * ONE_18 // 10
        assert abs(ln(exp(x)) - x) <= LOG_EXP_TOLERANCE


class TestSqrt:
    """Square root, rounded down."""

    def test_perfect_square(self):
        assert sqrt(4 * ONE_18) == 2 * ONE_18

    def test_sqrt_two(self):
        assert sqrt(2 * ONE_18) == 1414213562373095048

    def test_sqrt_zero(self):
        assert sqrt(0) == 0

    def test_sqrt_negative_raises(self):
        with pytest.raises(DomainError):
            sqrt(-1)


class TestBfp:
    """Value wrapper over the rounded operations."""

    def test_constructors(self):
        assert Bfp.from_int(3).value == 3 * ONE_18
        assert Bfp.from_wei(7).value == 7
        assert Bfp.from_decimal(Decimal("1.5")).value == 15 * ONE_18 // 10

    def test_from_decimal_rounds_half_up(self):
        assert Bfp.from_decimal(Decimal("0.0000000000000000005")).value == 1
        assert Bfp.from_decimal(Decimal("0.0000000000000000004")).value == 0
        assert Bfp.from_decimal(Decimal("-0.25")).value == -ONE_18 // 4

    def test_to_decimal(self):
        assert Bfp(15 * ONE_18 // 10).to_decimal() == Decimal("1.5")

    def test_operations_match_plain_functions(self):
        a, b = Bfp(10 * ONE_18), Bfp(3 * ONE_18)
        assert a.mul_down(b).value == mul_down(a.value, b.value)
        assert a.mul_up(Bfp(1)).value == mul_up(a.value, 1)
        assert a.div_down(b).value == 3333333333333333333
        assert a.div_up(b).value == 3333333333333333334
        assert Bfp(-10 * ONE_18).div_up(b).value == -3333333333333333334

    def test_division_by_zero(self):
        with pytest.raises(DivisionByZero):
            Bfp(ONE_18).div_down(Bfp(0))

    def test_complement(self):
        """1 - fee, clamped at zero."""
        assert Bfp(3 * 10**15).complement() == Bfp(ONE_18 - 3 * 10**15)
        assert Bfp(2 * ONE_18).complement() == Bfp(0)

    def test_ordering(self):
        assert Bfp(1) < Bfp(2)
        assert Bfp(2) <= Bfp(2)
        assert Bfp(2) != Bfp(3)
        assert Bfp(2) != 2
        assert repr(Bfp(5)) == "Bfp(5)"
