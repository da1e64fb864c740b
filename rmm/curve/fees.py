"""Fee-adjusted swap deltas.

A swap fee is not paid out anywhere: it stays in the pool as extra
liquidity. The fee portion of a trade, valued in claim units at the
pre-trade spot price P, is converted to liquidity in proportion to the
pool's value

    ΔL = L * fee_value / (P * x + y)

and the swap is then solved on the curve with liquidity L + ΔL. Every ΔL
here is non-negative for a non-negative fee.

Amounts are 18-decimal fixed-point in asset units (x) and claim units (y).
"""

from dataclasses import dataclass

import structlog

from rmm.math.fixed_point import Bfp, div_down, mul_down, mul_up
from rmm.math.kernel import DEFAULT_KERNEL, NumericKernel
from rmm.safe_int import S

from .solvers import solve_reserve_asset, solve_reserve_claim
from .trading_function import compute_spot_price

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapDelta:
    """Result of routing a trade through the fee-bearing curve.

    Attributes:
        amount_in: Amount the pool receives (asset or claim units)
        amount_out: Amount the pool pays out (the other leg)
        delta_liquidity: Liquidity retained from the fee (>= 0)
    """

    amount_in: int
    amount_out: int
    delta_liquidity: int


def _delta_liquidity_for_fee_value(
    fee_value: int, reserve_asset: int, reserve_claim: int, liquidity: int, price: int
) -> int:
    """Liquidity backed by fee_value claim units, rounded down."""
    pool_value = mul_up(price, reserve_asset) + reserve_claim
    return div_down(mul_down(liquidity, fee_value), pool_value)


def compute_delta_liquidity_asset_in(
    amount_in: int, reserve_asset: int, reserve_claim: int, liquidity: int, fee: int, price: int
) -> int:
    """Liquidity created by the fee on an asset input.

    Formula:
        ΔL = P * L * (amount_in * fee) / (P * x + y)
    """
    fees = mul_up(amount_in, fee)
    return _delta_liquidity_for_fee_value(
        mul_down(price, fees), reserve_asset, reserve_claim, liquidity, price
    )


def compute_delta_liquidity_claim_in(
    amount_in: int, reserve_asset: int, reserve_claim: int, liquidity: int, fee: int, price: int
) -> int:
    """Liquidity created by the fee on a claim input.

    Formula:
        ΔL = L * (amount_in * fee) / (P * x + y)
    """
    fees = mul_up(amount_in, fee)
    return _delta_liquidity_for_fee_value(fees, reserve_asset, reserve_claim, liquidity, price)


def compute_delta_liquidity_claim_out(
    amount_out: int,
    reserve_asset: int,
    reserve_claim: int,
    liquidity: int,
    fee: int,
    price: int,
    strike: int,
    sigma: int,
    tau: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> tuple[int, int]:
    """Liquidity and asset input for an exact claim output.

    The fee-free input a0 is solved on the current curve, grossed up to
    a0 / (1 - fee), and the difference is priced as an asset-in fee. The
    input actually required is then re-solved with the fee liquidity in
    place.

    Returns:
        (delta_liquidity, amount_in)

    Raises:
        Underflow: If amount_out exceeds the claim reserve
    """
    next_claim = (S(reserve_claim) - amount_out).value
    fee_free_in = max(
        solve_reserve_asset(next_claim, liquidity, strike, sigma, tau, kernel) - reserve_asset, 0
    )
    fees = Bfp(fee_free_in).div_up(Bfp(fee).complement()).value - fee_free_in
    delta_liquidity = _delta_liquidity_for_fee_value(
        mul_down(price, fees), reserve_asset, reserve_claim, liquidity, price
    )
    next_asset = solve_reserve_asset(
        next_claim, liquidity + delta_liquidity, strike, sigma, tau, kernel
    )
    return delta_liquidity, max(next_asset - reserve_asset, 0)


def compute_delta_liquidity_asset_out(
    amount_out: int,
    reserve_asset: int,
    reserve_claim: int,
    liquidity: int,
    fee: int,
    price: int,
    strike: int,
    sigma: int,
    tau: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> tuple[int, int]:
    """Liquidity and claim input for an exact asset output.

    Mirror image of compute_delta_liquidity_claim_out with the fee priced
    as a claim-in fee.

    Returns:
        (delta_liquidity, amount_in)

    Raises:
        Underflow: If amount_out exceeds the asset reserve
    """
    next_asset = (S(reserve_asset) - amount_out).value
    fee_free_in = max(
        solve_reserve_claim(next_asset, liquidity, strike, sigma, tau, kernel) - reserve_claim, 0
    )
    fees = Bfp(fee_free_in).div_up(Bfp(fee).complement()).value - fee_free_in
    delta_liquidity = _delta_liquidity_for_fee_value(
        fees, reserve_asset, reserve_claim, liquidity, price
    )
    next_claim = solve_reserve_claim(
        next_asset, liquidity + delta_liquidity, strike, sigma, tau, kernel
    )
    return delta_liquidity, max(next_claim - reserve_claim, 0)


# =============================================================================
# Swap directions
# =============================================================================


def compute_swap_asset_in(
    amount_in: int,
    reserve_asset: int,
    reserve_claim: int,
    liquidity: int,
    strike: int,
    sigma: int,
    tau: int,
    fee: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> SwapDelta:
    """Exact asset in, claim out."""
    price = compute_spot_price(reserve_asset, liquidity, strike, sigma, tau, kernel)
    delta_liquidity = compute_delta_liquidity_asset_in(
        amount_in, reserve_asset, reserve_claim, liquidity, fee, price
    )
    next_claim = solve_reserve_claim(
        reserve_asset + amount_in, liquidity + delta_liquidity, strike, sigma, tau, kernel
    )
    amount_out = max(reserve_claim - next_claim, 0)
    logger.debug(
        "swap_asset_in",
        amount_in=amount_in,
        amount_out=amount_out,
        delta_liquidity=delta_liquidity,
        price=price,
    )
    return SwapDelta(amount_in, amount_out, delta_liquidity)


def compute_swap_claim_in(
    amount_in: int,
    reserve_asset: int,
    reserve_claim: int,
    liquidity: int,
    strike: int,
    sigma: int,
    tau: int,
    fee: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> SwapDelta:
    """Exact claim in, asset out."""
    price = compute_spot_price(reserve_asset, liquidity, strike, sigma, tau, kernel)
    delta_liquidity = compute_delta_liquidity_claim_in(
        amount_in, reserve_asset, reserve_claim, liquidity, fee, price
    )
    next_asset = solve_reserve_asset(
        reserve_claim + amount_in, liquidity + delta_liquidity, strike, sigma, tau, kernel
    )
    amount_out = max(reserve_asset - next_asset, 0)
    logger.debug(
        "swap_claim_in",
        amount_in=amount_in,
        amount_out=amount_out,
        delta_liquidity=delta_liquidity,
        price=price,
    )
    return SwapDelta(amount_in, amount_out, delta_liquidity)


def compute_swap_claim_out(
    amount_out: int,
    reserve_asset: int,
    reserve_claim: int,
    liquidity: int,
    strike: int,
    sigma: int,
    tau: int,
    fee: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> SwapDelta:
    """Asset in, exact claim out."""
    price = compute_spot_price(reserve_asset, liquidity, strike, sigma, tau, kernel)
    delta_liquidity, amount_in = compute_delta_liquidity_claim_out(
        amount_out, reserve_asset, reserve_claim, liquidity, fee, price, strike, sigma, tau, kernel
    )
    logger.debug(
        "swap_claim_out",
        amount_in=amount_in,
        amount_out=amount_out,
        delta_liquidity=delta_liquidity,
        price=price,
    )
    return SwapDelta(amount_in, amount_out, delta_liquidity)


def compute_swap_asset_out(
    amount_out: int,
    reserve_asset: int,
    reserve_claim: int,
    liquidity: int,
    strike: int,
    sigma: int,
    tau: int,
    fee: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> SwapDelta:
    """Claim in, exact asset out."""
    price = compute_spot_price(reserve_asset, liquidity, strike, sigma, tau, kernel)
    delta_liquidity, amount_in = compute_delta_liquidity_asset_out(
        amount_out, reserve_asset, reserve_claim, liquidity, fee, price, strike, sigma, tau, kernel
    )
    logger.debug(
        "swap_asset_out",
        amount_in=amount_in,
        amount_out=amount_out,
        delta_liquidity=delta_liquidity,
        price=price,
    )
    return SwapDelta(amount_in, amount_out, delta_liquidity)
