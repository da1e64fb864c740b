"""Covered-call curve: trading function, solvers, fees and trade sizing."""

from rmm.curve.errors import (
    CurveError,
    InvalidFeeError,
    InvalidScalingFactorError,
    LiquidityDidNotConverge,
    ReserveRatioOutOfRange,
)
from rmm.curve.fees import (
    SwapDelta,
    compute_delta_liquidity_asset_in,
    compute_delta_liquidity_asset_out,
    compute_delta_liquidity_claim_in,
    compute_delta_liquidity_claim_out,
    compute_swap_asset_in,
    compute_swap_asset_out,
    compute_swap_claim_in,
    compute_swap_claim_out,
)
from rmm.curve.liquidity import (
    LiquidityDelta,
    compute_allocation_given_asset,
    compute_allocation_given_claim,
    compute_deallocation,
)
from rmm.curve.price_memory import (
    anchor_strike_and_liquidity,
    compute_implied_rate,
    compute_strike_given_last_price,
)
from rmm.curve.scaling import YieldIndex, scale_down_down, scale_down_up, scale_up
from rmm.curve.search import SearchResult, is_a_smaller_approx_b, size_trade_for_target_input
from rmm.curve.solvers import (
    compute_liquidity_given_asset,
    compute_max_claim_ratio,
    solve_liquidity,
    solve_reserve_asset,
    solve_reserve_claim,
)
from rmm.curve.tau import compute_tau, future_tau, last_tau
from rmm.curve.trading_function import compute_spot_price, trading_function

__all__ = [
    "CurveError",
    "InvalidFeeError",
    "InvalidScalingFactorError",
    "LiquidityDelta",
    "LiquidityDidNotConverge",
    "ReserveRatioOutOfRange",
    "SearchResult",
    "SwapDelta",
    "YieldIndex",
    "anchor_strike_and_liquidity",
    "compute_allocation_given_asset",
    "compute_allocation_given_claim",
    "compute_deallocation",
    "compute_delta_liquidity_asset_in",
    "compute_delta_liquidity_asset_out",
    "compute_delta_liquidity_claim_in",
    "compute_delta_liquidity_claim_out",
    "compute_implied_rate",
    "compute_liquidity_given_asset",
    "compute_max_claim_ratio",
    "compute_spot_price",
    "compute_strike_given_last_price",
    "compute_swap_asset_in",
    "compute_swap_asset_out",
    "compute_swap_claim_in",
    "compute_swap_claim_out",
    "compute_tau",
    "future_tau",
    "is_a_smaller_approx_b",
    "last_tau",
    "scale_down_down",
    "scale_down_up",
    "scale_up",
    "size_trade_for_target_input",
    "solve_liquidity",
    "solve_reserve_asset",
    "solve_reserve_claim",
    "trading_function",
]
