"""Covered-call trading function.

The pool's reserves satisfy the RMM-01 invariant

    y = K * L * Φ(Φ⁻¹(1 - x/L) - σ√τ)

where x is the asset reserve (in asset units), y the claim reserve, L the
liquidity, K the strike, σ the volatility and τ the time to maturity in
years. Written in quantile space (Φ⁻¹ is antisymmetric, so
Φ⁻¹(1 - x/L) = -Φ⁻¹(x/L)) the residual is

    Φ⁻¹(x/L) + Φ⁻¹(y / (K * L)) + σ√τ

which is zero on the curve, positive when the pool holds more than the curve
requires and negative when it holds less. At τ = 0 the curve is the line
x/L + y/(K*L) = 1: the claim redeems at the strike.

All values are 18-decimal fixed-point ints.
"""

from rmm.constants import TRADING_FUNCTION_TOLERANCE, WAD
from rmm.math.fixed_point import div_down, mul_down
from rmm.math.kernel import DEFAULT_KERNEL, NumericKernel


def compute_sigma_sqrt_tau(sigma: int, tau: int, kernel: NumericKernel = DEFAULT_KERNEL) -> int:
    """σ√τ, rounded down. Zero at maturity."""
    if tau == 0:
        return 0
    return mul_down(sigma, kernel.sqrt(tau))


def asset_ratio(reserve_asset: int, liquidity: int) -> int:
    """x / L, rounded down."""
    return div_down(reserve_asset, liquidity)


def claim_ratio(reserve_claim: int, liquidity: int, strike: int) -> int:
    """y / (K * L), rounded down."""
    return div_down(reserve_claim, mul_down(strike, liquidity))


def trading_function(
    reserve_asset: int,
    reserve_claim: int,
    liquidity: int,
    strike: int,
    sigma: int,
    tau: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> int:
    """Signed residual of the curve for the given state.

    Returns 0 for an uninitialized pool (liquidity == 0).

    Raises:
        InvalidProbability: If x/L or y/(K*L) falls outside (0, 1), i.e. a
            reserve is empty or exceeds what the liquidity can back
    """
    if liquidity == 0:
        return 0

    a = asset_ratio(reserve_asset, liquidity)
    b = claim_ratio(reserve_claim, liquidity, strike)
    return kernel.quantile(a) + kernel.quantile(b) + compute_sigma_sqrt_tau(sigma, tau, kernel)


def within_tolerance(residual: int, tolerance: int = TRADING_FUNCTION_TOLERANCE) -> bool:
    """Whether a residual is close enough to zero for the state to settle."""
    return -tolerance <= residual <= tolerance


def compute_spot_price(
    reserve_asset: int,
    liquidity: int,
    strike: int,
    sigma: int,
    tau: int,
    kernel: NumericKernel = DEFAULT_KERNEL,
) -> int:
    """Marginal price of one asset unit in claim units.

    P = K * exp(Φ⁻¹(1 - x/L) * σ√τ - σ²τ/2)

    Equals the strike at maturity.
    """
    if tau == 0:
        return strike

    sigma_sqrt_tau = compute_sigma_sqrt_tau(sigma, tau, kernel)
    d1 = kernel.quantile(WAD - asset_ratio(reserve_asset, liquidity))
    exponent = mul_down(d1, sigma_sqrt_tau) - mul_down(sigma_sqrt_tau, sigma_sqrt_tau) // 2
    return mul_down(strike, kernel.exp(exponent))
