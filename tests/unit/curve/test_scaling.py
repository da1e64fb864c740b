"""Tests for decimal scaling, fee validation and the yield index."""

import pytest

from rmm.constants import WAD
from rmm.curve.errors import InvalidFeeError, InvalidScalingFactorError
from rmm.curve.scaling import (
    YieldIndex,
    scale_down_down,
    scale_down_up,
    scale_up,
    scaling_factor_for_decimals,
    validate_fee,
)


class TestScalingFactor:
    @pytest.mark.parametrize("decimals,factor", [(18, 1), (6, 10**12), (0, 10**18)])
    def test_factor_for_decimals(self, decimals, factor):
        assert scaling_factor_for_decimals(decimals) == factor

    @pytest.mark.parametrize("decimals", [-1, 19])
    def test_unsupported_decimals_raise(self, decimals):
        with pytest.raises(InvalidScalingFactorError):
            scaling_factor_for_decimals(decimals)


class TestScaleUpDown:
    """Scaling between native decimals and 18-decimal fixed-point."""

    def test_scale_up_6_decimal(self):
        assert scale_up(1_500_000, 10**12) == 15 * 10**17

    def test_scale_down_rounds_toward_pool(self):
        amount = 1_500_000_000_001
        assert scale_down_down(amount, 10**12) == 1
        assert scale_down_up(amount, 10**12) == 2

    def test_scale_down_exact(self):
        assert scale_down_down(3 * 10**12, 10**12) == 3
        assert scale_down_up(3 * 10**12, 10**12) == 3

    def test_scale_down_up_zero(self):
        assert scale_down_up(0, 10**12) == 0

    @pytest.mark.parametrize("fn", [scale_up, scale_down_down, scale_down_up])
    def test_non_positive_factor_raises(self, fn):
        with pytest.raises(InvalidScalingFactorError):
            fn(100, 0)


class TestValidateFee:
    def test_valid_fees(self):
        assert validate_fee(0) == 0
        assert validate_fee(10**15) == 10**15
        assert validate_fee(WAD - 1) == WAD - 1

    @pytest.mark.parametrize("fee", [-1, WAD, 2 * WAD])
    def test_invalid_fees_raise(self, fee):
        with pytest.raises(InvalidFeeError):
            validate_fee(fee)


class TestYieldIndex:
    """Wrapped token to asset conversion."""

    def test_default_is_one_to_one(self):
        index = YieldIndex()
        assert index.wrapped_to_asset(7 * WAD) == 7 * WAD
        assert index.asset_to_wrapped(7 * WAD) == 7 * WAD

    def test_accrued_yield(self):
        index = YieldIndex(rate=11 * WAD // 10)
        assert index.wrapped_to_asset(100 * WAD) == 110 * WAD
        assert index.asset_to_wrapped(110 * WAD) == 100 * WAD

    def test_rounding_directions(self):
        index = YieldIndex(rate=3 * WAD // 2)
        assert index.wrapped_to_asset(1) == 1
        assert index.wrapped_to_asset_up(1) == 2
        assert index.asset_to_wrapped(1) == 0
        assert index.asset_to_wrapped_up(1) == 1

    @pytest.mark.parametrize("rate", [0, -WAD])
    def test_non_positive_rate_raises(self, rate):
        with pytest.raises(InvalidScalingFactorError):
            YieldIndex(rate=rate)
