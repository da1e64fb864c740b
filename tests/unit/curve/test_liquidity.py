"""Tests for proportional allocation and deallocation."""

from rmm.constants import WAD
from rmm.curve.liquidity import (
    LiquidityDelta,
    compute_allocation_given_asset,
    compute_allocation_given_claim,
    compute_deallocation,
    compute_shares_to_burn,
    compute_shares_to_mint,
)
from rmm.curve.trading_function import trading_function, within_tolerance

# x = 1000, y = 500, L = 2000
RESERVES = (1000 * WAD, 500 * WAD, 2000 * WAD)


class TestAllocation:
    def test_given_asset(self):
        assert compute_allocation_given_asset(10 * WAD, *RESERVES) == LiquidityDelta(
            10 * WAD, 5 * WAD, 20 * WAD
        )

    def test_given_claim(self):
        assert compute_allocation_given_claim(5 * WAD, *RESERVES) == LiquidityDelta(
            10 * WAD, 5 * WAD, 20 * WAD
        )

    def test_rounding_favors_pool(self):
        """Liquidity rounds down, the other leg rounds up."""
        delta = compute_allocation_given_asset(1, 3, 1, 3)
        assert delta.delta_liquidity == 1
        assert delta.delta_claim == 1

        delta = compute_allocation_given_claim(1, 1, 3, 2)
        assert delta.delta_liquidity == 0
        assert delta.delta_asset == 1

    def test_allocation_stays_on_curve(self, curve_state):
        delta = compute_allocation_given_asset(
            137 * WAD, curve_state.reserve_asset, curve_state.reserve_claim, curve_state.liquidity
        )
        residual = trading_function(
            curve_state.reserve_asset + delta.delta_asset,
            curve_state.reserve_claim + delta.delta_claim,
            curve_state.liquidity + delta.delta_liquidity,
            curve_state.strike,
            curve_state.sigma,
            curve_state.tau,
        )
        assert within_tolerance(residual)


class TestDeallocation:
    def test_proportional(self):
        assert compute_deallocation(20 * WAD, *RESERVES) == LiquidityDelta(
            10 * WAD, 5 * WAD, 20 * WAD
        )

    def test_rounds_down(self):
        delta = compute_deallocation(1, 2, 2, 3)
        assert delta.delta_asset == 0
        assert delta.delta_claim == 0

    def test_deallocation_stays_on_curve(self, curve_state):
        delta = compute_deallocation(
            curve_state.liquidity // 3,
            curve_state.reserve_asset,
            curve_state.reserve_claim,
            curve_state.liquidity,
        )
        residual = trading_function(
            curve_state.reserve_asset - delta.delta_asset,
            curve_state.reserve_claim - delta.delta_claim,
            curve_state.liquidity - delta.delta_liquidity,
            curve_state.strike,
            curve_state.sigma,
            curve_state.tau,
        )
        assert within_tolerance(residual)


class TestShares:
    def test_first_deposit_mints_one_to_one(self):
        assert compute_shares_to_mint(5 * WAD, 0, 0) == 5 * WAD

    def test_mint_proportional_to_supply(self):
        """Supply 1000 over liquidity 2000: each unit of liquidity is half a share."""
        assert compute_shares_to_mint(20 * WAD, 2000 * WAD, 1000 * WAD) == 10 * WAD

    def test_burn_rounds_up(self):
        assert compute_shares_to_burn(1, 3, 10) == 4
        assert compute_shares_to_burn(3, 3, 10) == 10
