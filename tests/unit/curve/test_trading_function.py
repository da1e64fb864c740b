"""Tests for the covered-call trading function and spot price."""

import pytest

from rmm.constants import TRADING_FUNCTION_TOLERANCE, WAD
from rmm.curve.trading_function import (
    asset_ratio,
    claim_ratio,
    compute_sigma_sqrt_tau,
    compute_spot_price,
    trading_function,
    within_tolerance,
)
from rmm.math.fixed_point import InvalidProbability
from tests.helpers import INIT_PRICE, SIGMA, CurveState


def residual(state: CurveState, **overrides: int) -> int:
    params = {
        "reserve_asset": state.reserve_asset,
        "reserve_claim": state.reserve_claim,
        "liquidity": state.liquidity,
        "strike": state.strike,
        "sigma": state.sigma,
        "tau": state.tau,
    }
    params.update(overrides)
    return trading_function(**params)


class TestSigmaSqrtTau:
    def test_one_year(self):
        assert compute_sigma_sqrt_tau(SIGMA, WAD) == SIGMA

    def test_quarter_year(self):
        """sqrt(0.25) = 0.5."""
        assert compute_sigma_sqrt_tau(SIGMA, WAD // 4) == SIGMA // 2

    def test_zero_at_maturity(self):
        assert compute_sigma_sqrt_tau(SIGMA, 0) == 0


class TestRatios:
    def test_asset_ratio(self):
        assert asset_ratio(400 * WAD, 1000 * WAD) == 4 * 10**17

    def test_claim_ratio(self):
        assert claim_ratio(900 * WAD, 1000 * WAD, 3 * WAD // 2) == 6 * 10**17


class TestTradingFunction:
    """Residual of the curve in quantile space."""

    def test_zero_when_uninitialized(self):
        assert trading_function(0, 0, 0, WAD, SIGMA, WAD) == 0

    def test_solved_state_is_within_tolerance(self, curve_state):
        assert within_tolerance(residual(curve_state))

    def test_excess_claim_is_positive(self, curve_state):
        """Holding more than the curve requires pushes the residual up."""
        assert residual(curve_state, reserve_claim=curve_state.reserve_claim + WAD) > 0

    def test_missing_claim_is_negative(self, curve_state):
        assert residual(curve_state, reserve_claim=curve_state.reserve_claim - WAD) < 0

    def test_more_liquidity_is_negative(self, curve_state):
        assert residual(curve_state, liquidity=curve_state.liquidity + WAD) < 0

    def test_maturity_line(self):
        """At tau = 0 the curve is x/L + y/(K*L) = 1."""
        strike = 3 * WAD // 2
        assert trading_function(400 * WAD, 900 * WAD, 1000 * WAD, strike, SIGMA, 0) == 0

    def test_empty_reserve_raises(self, curve_state):
        with pytest.raises(InvalidProbability):
            residual(curve_state, reserve_asset=0)

    def test_reserve_beyond_liquidity_raises(self, curve_state):
        with pytest.raises(InvalidProbability):
            residual(curve_state, reserve_asset=curve_state.liquidity + 1)


class TestWithinTolerance:
    def test_bounds_are_inclusive(self):
        assert within_tolerance(TRADING_FUNCTION_TOLERANCE)
        assert within_tolerance(-TRADING_FUNCTION_TOLERANCE)
        assert not within_tolerance(TRADING_FUNCTION_TOLERANCE + 1)
        assert not within_tolerance(-TRADING_FUNCTION_TOLERANCE - 1)

    def test_custom_tolerance(self):
        assert not within_tolerance(1, tolerance=0)
        assert within_tolerance(0, tolerance=0)


class TestSpotPrice:
    def test_matches_initialization_price(self, curve_state):
        price = compute_spot_price(
            curve_state.reserve_asset,
            curve_state.liquidity,
            curve_state.strike,
            curve_state.sigma,
            curve_state.tau,
        )
        assert abs(price - INIT_PRICE) <= 10**9

    def test_equals_strike_at_maturity(self):
        assert compute_spot_price(400 * WAD, 1000 * WAD, 3 * WAD // 2, SIGMA, 0) == 3 * WAD // 2

    def test_price_rises_as_asset_is_drained(self, curve_state):
        """Less asset in the pool makes it more expensive."""
        prices = [
            compute_spot_price(
                x, curve_state.liquidity, curve_state.strike, curve_state.sigma, curve_state.tau
            )
            for x in (1200 * WAD, 1000 * WAD, 800 * WAD, 600 * WAD)
        ]
        assert prices == sorted(prices)
