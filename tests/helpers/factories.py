"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_curve_state, make_pool
    # or
    from tests.helpers.factories import make_curve_state

    state = make_curve_state(price=WAD)
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from rmm.config import PoolConfig
from rmm.curve.scaling import YieldIndex
from rmm.curve.solvers import compute_liquidity_given_asset, solve_reserve_claim
from rmm.pool import RmmPool
from tests.helpers.constants import (
    FEE,
    INIT_ASSET,
    INIT_PRICE,
    INIT_STRIKE,
    MATURITY,
    ONE_YEAR_TAU,
    SIGMA,
    T0,
)


@dataclass(frozen=True)
class CurveState:
    """Reserves and parameters of a point on the curve."""

    reserve_asset: int
    reserve_claim: int
    liquidity: int
    strike: int
    sigma: int
    tau: int


@dataclass
class RecordingSettlement:
    """Settlement that records every call and can be told to fail."""

    calls: list[tuple[str, dict[str, int]]] = field(default_factory=list)
    fail_with: Exception | None = None

    def settle(self, operation: str, amounts: Mapping[str, int]) -> None:
        self.calls.append((operation, dict(amounts)))
        if self.fail_with is not None:
            raise self.fail_with


def make_curve_state(
    price: int = INIT_PRICE,
    reserve_asset: int = INIT_ASSET,
    strike: int = INIT_STRIKE,
    sigma: int = SIGMA,
    tau: int = ONE_YEAR_TAU,
) -> CurveState:
    """Build a state on the curve the way pool initialization does.

    Args:
        price: Spot price of the asset in claim units (default: 1.0)
        reserve_asset: Asset reserve (default: 1000)
        strike: Strike (default: 1.5)
        sigma: Volatility (default: 0.8)
        tau: Years to maturity (default: 1.0)

    Returns:
        CurveState whose claim reserve is solved from the asset reserve
    """
    liquidity = compute_liquidity_given_asset(reserve_asset, price, strike, sigma, tau)
    reserve_claim = solve_reserve_claim(reserve_asset, liquidity, strike, sigma, tau)
    return CurveState(reserve_asset, reserve_claim, liquidity, strike, sigma, tau)


def make_config(**overrides: int) -> PoolConfig:
    """Reference pool parameters: sigma 0.8, fee 0.1%, one year to maturity."""
    params = {"sigma": SIGMA, "fee": FEE, "maturity": MATURITY}
    params.update(overrides)
    return PoolConfig(**params)


def make_pool(
    config: PoolConfig | None = None,
    settlement: RecordingSettlement | None = None,
    index: YieldIndex | None = None,
    price: int | None = INIT_PRICE,
    asset_amount: int = INIT_ASSET,
    strike: int = INIT_STRIKE,
    timestamp: int = T0,
) -> RmmPool:
    """Create a pool, initialized unless price is None."""
    pool = RmmPool(config or make_config(), index=index, settlement=settlement)
    if price is not None:
        pool.initialize(price, asset_amount, strike, timestamp)
    return pool
