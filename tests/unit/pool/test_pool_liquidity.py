"""Tests for allocating and deallocating pool liquidity."""

import pytest

from rmm.constants import SECONDS_PER_DAY, WAD
from rmm.pool import InsufficientLiquidity, MaturityReached, SlippageExceeded
from tests.helpers import MATURITY, T0


def assert_on_curve(pool) -> None:
    assert abs(pool.trading_function()) <= pool.config.tolerance


class TestAllocate:
    def test_allocate_in_terms_of_asset(self, initialized_pool, settlement):
        before = initialized_pool.state
        quote = initialized_pool.allocate(True, 100 * WAD, 0, T0)

        after = initialized_pool.state
        assert quote.delta_asset == 100 * WAD
        assert quote.delta_liquidity == before.total_liquidity * 100 // 1000
        # First deposit minted shares 1:1 with liquidity
        assert quote.shares_to_mint == quote.delta_liquidity
        assert after.reserve_asset == before.reserve_asset + 100 * WAD
        assert after.reserve_claim == before.reserve_claim + quote.delta_claim
        assert after.total_liquidity == before.total_liquidity + quote.delta_liquidity
        assert after.lp_supply == before.lp_supply + quote.shares_to_mint
        assert settlement.calls[-1] == (
            "allocate",
            {
                "asset": 100 * WAD,
                "claim": quote.delta_claim_native,
                "lp": -quote.shares_to_mint,
            },
        )
        assert_on_curve(initialized_pool)

    def test_allocate_in_terms_of_claim(self, initialized_pool):
        before = initialized_pool.state
        quote = initialized_pool.allocate(False, 50 * WAD, 0, T0)

        expected_asset = -(-before.reserve_asset * 50 * WAD // before.reserve_claim)
        assert quote.delta_claim == 50 * WAD
        assert quote.delta_asset == expected_asset
        assert_on_curve(initialized_pool)

    def test_allocate_after_time_passes(self, initialized_pool):
        initialized_pool.allocate(True, 10 * WAD, 0, T0 + 90 * SECONDS_PER_DAY)
        assert initialized_pool.state.last_update_timestamp == T0 + 90 * SECONDS_PER_DAY
        assert_on_curve(initialized_pool)

    def test_allocate_quote_matches_execution(self, initialized_pool):
        quote = initialized_pool.quote_allocate(True, 25 * WAD, T0)
        assert initialized_pool.allocate(True, 25 * WAD, 0, T0) == quote

    def test_min_liquidity_slippage(self, initialized_pool):
        before = initialized_pool.state
        with pytest.raises(SlippageExceeded):
            initialized_pool.allocate(True, 10 * WAD, 1000 * WAD, T0)
        assert initialized_pool.state == before

    def test_allocate_at_maturity_raises(self, initialized_pool):
        with pytest.raises(MaturityReached):
            initialized_pool.allocate(True, 10 * WAD, 0, MATURITY)


class TestDeallocate:
    def test_deallocate_tenth(self, initialized_pool, settlement):
        before = initialized_pool.state
        delta_liquidity = before.total_liquidity // 10
        quote = initialized_pool.deallocate(delta_liquidity, 0, 0, T0)

        after = initialized_pool.state
        assert 99 * WAD < quote.delta_asset_native <= 100 * WAD
        assert after.reserve_asset == before.reserve_asset - quote.delta_asset
        assert after.reserve_claim == before.reserve_claim - quote.delta_claim
        assert after.total_liquidity == before.total_liquidity - delta_liquidity
        assert after.lp_supply == before.lp_supply - quote.shares_to_burn
        assert settlement.calls[-1] == (
            "deallocate",
            {
                "asset": -quote.delta_asset_native,
                "claim": -quote.delta_claim_native,
                "lp": quote.shares_to_burn,
            },
        )
        assert_on_curve(initialized_pool)

    def test_allocate_then_deallocate_returns_no_more(self, initialized_pool):
        allocated = initialized_pool.allocate(True, 100 * WAD, 0, T0)
        released = initialized_pool.deallocate(allocated.delta_liquidity, 0, 0, T0)
        assert released.delta_asset_native <= allocated.delta_asset_native
        assert released.delta_claim_native <= allocated.delta_claim_native
        assert released.shares_to_burn >= allocated.shares_to_mint

    def test_cannot_remove_all_liquidity(self, initialized_pool):
        with pytest.raises(InsufficientLiquidity):
            initialized_pool.deallocate(initialized_pool.state.total_liquidity, 0, 0, T0)

    def test_min_output_slippage(self, initialized_pool):
        delta_liquidity = initialized_pool.state.total_liquidity // 10
        with pytest.raises(SlippageExceeded):
            initialized_pool.deallocate(delta_liquidity, 1000 * WAD, 0, T0)
        with pytest.raises(SlippageExceeded):
            initialized_pool.deallocate(delta_liquidity, 0, 1000 * WAD, T0)

    def test_deallocate_at_maturity(self, initialized_pool):
        """Liquidity can leave after maturity, when the strike is par."""
        pre = initialized_pool.pre_compute(MATURITY)
        assert pre.strike == WAD
        assert pre.tau == 0

        quote = initialized_pool.deallocate(pre.liquidity // 2, 0, 0, MATURITY)
        assert quote.delta_asset > 0
        assert initialized_pool.state.strike == WAD
        assert initialized_pool.implied_rate() == 0
        assert_on_curve(initialized_pool)
