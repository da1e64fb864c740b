"""Implied-rate memory and strike anchoring.

The pool does not keep its strike as a free parameter. After every
adjustment it records the annualized rate implied by its spot price, and
before the next trade it derives the strike that reproduces that rate at
the new time to maturity. As τ shrinks this walks the strike toward par.
"""

import structlog

from rmm.constants import ANCHOR_MAX_ITERATIONS, ANCHOR_PRECISION, SECONDS_PER_YEAR, WAD
from rmm.math.fixed_point import div_down, mul_down
from rmm.math.kernel import DEFAULT_KERNEL, NumericKernel

from .solvers import solve_liquidity
from .trading_function import asset_ratio, compute_sigma_sqrt_tau

logger = structlog.get_logger()


def compute_implied_rate(
    spot_price: int, time_to_expiry_seconds: int, kernel: NumericKernel = DEFAULT_KERNEL
) -> int:
    """Annualized continuously compounded rate implied by a spot price.

    rate = ln(P) * SECONDS_PER_YEAR / time_to_expiry

    Zero at or past maturity.
    """
    if time_to_expiry_seconds <= 0:
        return 0
    return div_down(kernel.ln(spot_price) * SECONDS_PER_YEAR, time_to_expiry_seconds * WAD)


def compute_price_given_rate(
    rate: int, time_to_expiry_seconds: int, kernel: NumericKernel = DEFAULT_KERNEL
) -> int:
    """Inverse of compute_implied_rate: exp(rate * time_to_expiry / year)."""
    if time_to_expiry_seconds <= 0:
        return WAD
    return kernel.exp(div_down(rate * time_to_expiry_seconds, SECONDS_PER_YEAR * WAD))


def compute_strike_given_last_price(
    reserve_asset: int,
    liquidity: int,
    sigma: int,
    tau: int,
    last_implied_price: int,
    time_to_expiry_seconds: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> int:
    """Strike at which the pool's spot price equals its remembered price.

    K = P_last / exp(Φ⁻¹(1 - x/L) * σ√τ - σ²τ/2)

    Exactly par (1.0) at maturity.
    """
    if tau == 0:
        return WAD

    target_price = compute_price_given_rate(last_implied_price, time_to_expiry_seconds, kernel)
    sigma_sqrt_tau = compute_sigma_sqrt_tau(sigma, tau, kernel)
    d1 = kernel.quantile(WAD - asset_ratio(reserve_asset, liquidity))
    exponent = mul_down(d1, sigma_sqrt_tau) - mul_down(sigma_sqrt_tau, sigma_sqrt_tau) // 2
    return div_down(target_price, kernel.exp(exponent))


def anchor_strike_and_liquidity(
    reserve_asset: int,
    reserve_claim: int,
    liquidity: int,
    sigma: int,
    tau: int,
    last_implied_price: int,
    time_to_expiry_seconds: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> tuple[int, int]:
    """Jointly derive the strike and liquidity for the current reserves.

    The strike depends on x/L and the liquidity consistent with both
    reserves depends on the strike, so a single pass lets the spot price
    drift from the remembered one. Iterates strike(L) and
    solve_liquidity(strike) until L is stable to one part in 10^12.

    The returned liquidity is always solved for the returned strike, so the
    pair satisfies the curve whether or not the iteration settled.

    Returns:
        (strike, liquidity)
    """
    if tau == 0:
        return WAD, solve_liquidity(reserve_asset, reserve_claim, WAD, sigma, tau, kernel)

    strike = WAD
    for iteration in range(1, ANCHOR_MAX_ITERATIONS + 1):
        strike = compute_strike_given_last_price(
            reserve_asset, liquidity, sigma, tau, last_implied_price, time_to_expiry_seconds, kernel
        )
        solved = solve_liquidity(reserve_asset, reserve_claim, strike, sigma, tau, kernel)
        settled = abs(solved - liquidity) * ANCHOR_PRECISION <= solved
        liquidity = solved
        if settled:
            logger.debug(
                "strike_anchored", strike=strike, liquidity=liquidity, iterations=iteration
            )
            return strike, liquidity

    logger.debug(
        "strike_anchor_unsettled",
        strike=strike,
        liquidity=liquidity,
        iterations=ANCHOR_MAX_ITERATIONS,
    )
    return strike, liquidity
