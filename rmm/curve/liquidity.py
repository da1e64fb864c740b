"""Proportional liquidity allocation and deallocation.

Adding or removing both reserves in proportion to liquidity leaves x/L and
y/(K*L) unchanged, so the curve residual only moves by rounding. The pool
receives rounded-up reserves and pays out rounded-down ones.
"""

from dataclasses import dataclass

from rmm.safe_int import S


@dataclass(frozen=True)
class LiquidityDelta:
    """Reserve and liquidity deltas for an allocation or deallocation."""

    delta_asset: int
    delta_claim: int
    delta_liquidity: int


def compute_allocation_given_asset(
    amount_asset: int, reserve_asset: int, reserve_claim: int, liquidity: int
) -> LiquidityDelta:
    """Allocation sized by the asset amount.

    ΔL = L * Δx / x (down), Δy = y * Δx / x (up).
    """
    delta_liquidity = (S(liquidity) * amount_asset // reserve_asset).value
    delta_claim = (S(reserve_claim) * amount_asset).ceiling_div(reserve_asset).value
    return LiquidityDelta(amount_asset, delta_claim, delta_liquidity)


def compute_allocation_given_claim(
    amount_claim: int, reserve_asset: int, reserve_claim: int, liquidity: int
) -> LiquidityDelta:
    """Allocation sized by the claim amount.

    ΔL = L * Δy / y (down), Δx = x * Δy / y (up).
    """
    delta_liquidity = (S(liquidity) * amount_claim // reserve_claim).value
    delta_asset = (S(reserve_asset) * amount_claim).ceiling_div(reserve_claim).value
    return LiquidityDelta(delta_asset, amount_claim, delta_liquidity)


def compute_deallocation(
    delta_liquidity: int, reserve_asset: int, reserve_claim: int, liquidity: int
) -> LiquidityDelta:
    """Reserves released by burning delta_liquidity, both rounded down."""
    delta_asset = (S(reserve_asset) * delta_liquidity // liquidity).value
    delta_claim = (S(reserve_claim) * delta_liquidity // liquidity).value
    return LiquidityDelta(delta_asset, delta_claim, delta_liquidity)


def compute_shares_to_mint(delta_liquidity: int, liquidity: int, total_supply: int) -> int:
    """LP shares for new liquidity, rounded down. 1:1 for the first deposit."""
    if total_supply == 0:
        return delta_liquidity
    return (S(total_supply) * delta_liquidity // liquidity).value


def compute_shares_to_burn(delta_liquidity: int, liquidity: int, total_supply: int) -> int:
    """LP shares retired for removed liquidity, rounded up."""
    return (S(total_supply) * delta_liquidity).ceiling_div(liquidity).value
