"""Inversions of the covered-call trading function.

solve_reserve_claim and solve_reserve_asset are closed form. Solved reserves
are rounded up so that rounding dust stays in the pool and the residual of
the solved state is never meaningfully negative.

Liquidity has no closed form once both reserves are pinned (L appears inside
both quantiles), so solve_liquidity uses a bracketed Newton iteration on the
residual, which is strictly decreasing in L.

Before maturity the reserve solvers only accept and return reserve ratios
in [MIN_RESERVE_RATIO, MAX_RESERVE_RATIO] and raise ReserveRatioOutOfRange
otherwise. Inside that range a solved state re-checks to within
TRADING_FUNCTION_TOLERANCE. solve_liquidity and trading_function are not
range-checked.
"""

import structlog

from rmm.constants import MAX_RESERVE_RATIO, MIN_RESERVE_RATIO, WAD
from rmm.math.fixed_point import DomainError, div_down, mul_down, mul_up
from rmm.math.kernel import DEFAULT_KERNEL, NumericKernel
from rmm.safe_int import S

from .errors import LiquidityDidNotConverge, ReserveRatioOutOfRange
from .trading_function import asset_ratio, claim_ratio, compute_sigma_sqrt_tau

logger = structlog.get_logger()

# Maximum iterations for the liquidity Newton iteration
_LIQUIDITY_MAX_ITERATIONS = 255

# Quantile-space distance kept between the claim capacity and the point where
# the solved asset ratio would reach MIN_RESERVE_RATIO
_CAPACITY_MARGIN = 10**6


def _check_ratio(name: str, ratio: int) -> int:
    """Return ratio if it lies in [MIN_RESERVE_RATIO, MAX_RESERVE_RATIO].

    Raises:
        ReserveRatioOutOfRange: Otherwise
    """
    if not MIN_RESERVE_RATIO <= ratio <= MAX_RESERVE_RATIO:
        raise ReserveRatioOutOfRange(name, ratio)
    return ratio


def solve_reserve_claim(
    reserve_asset: int,
    liquidity: int,
    strike: int,
    sigma: int,
    tau: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> int:
    """Claim reserve implied by the asset reserve and liquidity.

    Formula:
        y = K * L * Φ(Φ⁻¹(1 - x/L) - σ√τ)

    At τ = 0 this is exactly K * (L - x).

    Raises:
        Underflow: If x > L at maturity
        ReserveRatioOutOfRange: If x/L or the solved y/(K*L) is outside
            [MIN_RESERVE_RATIO, MAX_RESERVE_RATIO] before maturity
    """
    if tau == 0:
        return mul_up(strike, (S(liquidity) - reserve_asset).value)

    sigma_sqrt_tau = compute_sigma_sqrt_tau(sigma, tau, kernel)
    ratio = _check_ratio("asset", asset_ratio(reserve_asset, liquidity))
    d1 = kernel.quantile(WAD - ratio)
    probability = _check_ratio("claim", kernel.cdf(d1 - sigma_sqrt_tau))
    return mul_up(mul_up(strike, liquidity), probability)


def solve_reserve_asset(
    reserve_claim: int,
    liquidity: int,
    strike: int,
    sigma: int,
    tau: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> int:
    """Asset reserve implied by the claim reserve and liquidity.

    Formula:
        x = L * (1 - Φ(Φ⁻¹(y / (K * L)) + σ√τ))

    At τ = 0 this is exactly L - y/K.

    Raises:
        Underflow: If y/K > L at maturity
        ReserveRatioOutOfRange: If y/(K*L) or the solved x/L is outside
            [MIN_RESERVE_RATIO, MAX_RESERVE_RATIO] before maturity
    """
    if tau == 0:
        return (S(liquidity) - div_down(reserve_claim, strike)).value

    sigma_sqrt_tau = compute_sigma_sqrt_tau(sigma, tau, kernel)
    ratio = _check_ratio("claim", claim_ratio(reserve_claim, liquidity, strike))
    quantile = kernel.quantile(ratio)
    probability = kernel.cdf(quantile + sigma_sqrt_tau)
    return mul_up(liquidity, _check_ratio("asset", WAD - probability))


def _residual_and_slope(
    reserve_asset: int,
    reserve_claim: int,
    liquidity: int,
    strike: int,
    sigma_sqrt_tau: int,
    kernel: NumericKernel,
) -> tuple[int, int]:
    """Residual at L and the magnitude of L * dResidual/dL.

    d/dL Φ⁻¹(r/L) = -(r/L) / (L * φ(Φ⁻¹(r/L))), so
    -L * dResidual/dL = a/φ(α) + b/φ(β).
    """
    a = asset_ratio(reserve_asset, liquidity)
    b = claim_ratio(reserve_claim, liquidity, strike)
    alpha = kernel.quantile(a)
    beta = kernel.quantile(b)
    residual = alpha + beta + sigma_sqrt_tau

    pdf_alpha = kernel.pdf(alpha)
    pdf_beta = kernel.pdf(beta)
    if pdf_alpha == 0 or pdf_beta == 0:
        return residual, 0
    return residual, div_down(a, pdf_alpha) + div_down(b, pdf_beta)


def solve_liquidity(
    reserve_asset: int,
    reserve_claim: int,
    strike: int,
    sigma: int,
    tau: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> int:
    """Liquidity consistent with both reserves under the given strike.

    Algorithm:
        1. Lower bound lo = x + y/K: there x/L + y/(K*L) = 1, so the
           residual is σ√τ > 0
        2. Double an upper bound until the residual turns negative
        3. Newton steps from lo, falling back to bisection whenever a step
           leaves the bracket, until L moves by at most 1 wei
        4. Max iterations: 255

    At τ = 0 the closed form x + y/K applies.

    Raises:
        DomainError: If either reserve is not positive
        LiquidityDidNotConverge: If iteration doesn't converge
    """
    if reserve_asset <= 0 or reserve_claim <= 0:
        raise DomainError(
            f"Liquidity requires positive reserves, got x={reserve_asset}, y={reserve_claim}"
        )

    lo = reserve_asset + div_down(reserve_claim, strike)
    if tau == 0:
        return lo

    sigma_sqrt_tau = compute_sigma_sqrt_tau(sigma, tau, kernel)

    def residual_at(liquidity: int) -> int:
        a = asset_ratio(reserve_asset, liquidity)
        b = claim_ratio(reserve_claim, liquidity, strike)
        return kernel.quantile(a) + kernel.quantile(b) + sigma_sqrt_tau

    hi = 2 * lo
    for _ in range(_LIQUIDITY_MAX_ITERATIONS):
        if residual_at(hi) < 0:
            break
        lo, hi = hi, 2 * hi
    else:
        raise LiquidityDidNotConverge("Could not bracket the liquidity root")

    liquidity = lo
    for _ in range(_LIQUIDITY_MAX_ITERATIONS):
        residual, slope = _residual_and_slope(
            reserve_asset, reserve_claim, liquidity, strike, sigma_sqrt_tau, kernel
        )
        if residual == 0:
            return liquidity
        if residual > 0:
            lo = liquidity
        else:
            hi = liquidity

        if slope > 0:
            candidate = liquidity + div_down(mul_down(residual, liquidity), slope)
        else:
            candidate = hi
        # Keep the iterate strictly inside the bracket
        if not lo < candidate < hi:
            candidate = (lo + hi) // 2

        if abs(candidate - liquidity) <= 1 or hi - lo <= 1:
            return candidate
        liquidity = candidate

    raise LiquidityDidNotConverge(
        f"Liquidity did not converge after {_LIQUIDITY_MAX_ITERATIONS} iterations"
    )


def compute_liquidity_given_asset(
    reserve_asset: int,
    spot_price: int,
    strike: int,
    sigma: int,
    tau: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> int:
    """Liquidity that prices the asset at spot_price when the pool holds x.

    Formula:
        d1 = (ln(S/K) + σ²τ/2) / σ√τ
        L = x / (1 - Φ(d1))

    Rounded down.

    Raises:
        DomainError: At maturity, where price no longer determines liquidity
        ReserveRatioOutOfRange: If the implied x/L is outside
            [MIN_RESERVE_RATIO, MAX_RESERVE_RATIO]
    """
    sigma_sqrt_tau = compute_sigma_sqrt_tau(sigma, tau, kernel)
    if sigma_sqrt_tau == 0:
        raise DomainError("Liquidity given price is undefined at maturity")

    log_moneyness = kernel.ln(div_down(spot_price, strike))
    half_variance = mul_down(sigma_sqrt_tau, sigma_sqrt_tau) // 2
    d1 = div_down(log_moneyness + half_variance, sigma_sqrt_tau)
    return div_down(reserve_asset, _check_ratio("asset", WAD - kernel.cdf(d1)))


def compute_max_claim_ratio(
    sigma: int, tau: int, kernel: NumericKernel = DEFAULT_KERNEL
) -> int:
    """Largest y/(K*L) a claim-in trade may push the pool to.

    Bounded by MAX_RESERVE_RATIO and, before maturity, by the claim ratio at
    which solve_reserve_asset would return x/L = MIN_RESERVE_RATIO:

        Φ(Φ⁻¹(MAX_RESERVE_RATIO) - σ√τ)

    less a small quantile-space margin.
    """
    if tau == 0:
        return MAX_RESERVE_RATIO
    boundary = (
        kernel.quantile(MAX_RESERVE_RATIO)
        - compute_sigma_sqrt_tau(sigma, tau, kernel)
        - _CAPACITY_MARGIN
    )
    return min(MAX_RESERVE_RATIO, kernel.cdf(boundary))
