"""Scaling and fee helpers.

Functions for moving token amounts between native decimals and 18-decimal
fixed-point, for converting the wrapped asset to and from its underlying
asset units, and for validating fee rates.

Rounding always favors the pool: amounts owed to the caller round down,
amounts owed by the caller round up.
"""

from dataclasses import dataclass

from rmm.constants import WAD
from rmm.math.fixed_point import div_down, div_up, mul_down, mul_up

from .errors import InvalidFeeError, InvalidScalingFactorError

# Largest supported token precision
MAX_DECIMALS = 18


def scaling_factor_for_decimals(decimals: int) -> int:
    """Factor that lifts a native amount to 18 decimals (10^(18 - decimals)).

    Raises:
        InvalidScalingFactorError: If decimals is outside [0, 18]
    """
    if decimals < 0 or decimals > MAX_DECIMALS:
        raise InvalidScalingFactorError(f"Token decimals must be in [0, 18], got {decimals}")
    return 10 ** (MAX_DECIMALS - decimals)


def scale_up(amount: int, scaling_factor: int) -> int:
    """Scale token amount to 18 decimals for internal math.

    Args:
        amount: Amount in token's native decimals
        scaling_factor: Factor to scale by (e.g., 10^12 for 6-decimal tokens)

    Returns:
        Amount in 18-decimal fixed-point

    Raises:
        InvalidScalingFactorError: If scaling_factor <= 0
    """
    if scaling_factor <= 0:
        raise InvalidScalingFactorError(f"Scaling factor must be positive, got {scaling_factor}")
    return amount * scaling_factor


def scale_down_down(amount: int, scaling_factor: int) -> int:
    """Scale 18-decimal result back to token decimals, rounding down.

    Used for amounts the pool pays out.

    Raises:
        InvalidScalingFactorError: If scaling_factor <= 0
    """
    if scaling_factor <= 0:
        raise InvalidScalingFactorError(f"Scaling factor must be positive, got {scaling_factor}")
    return amount // scaling_factor


def scale_down_up(amount: int, scaling_factor: int) -> int:
    """Scale 18-decimal result back to token decimals, rounding up.

    Used for amounts the pool receives.

    Raises:
        InvalidScalingFactorError: If scaling_factor <= 0
    """
    if scaling_factor <= 0:
        raise InvalidScalingFactorError(f"Scaling factor must be positive, got {scaling_factor}")
    if amount == 0:
        return 0
    return (amount - 1) // scaling_factor + 1


def validate_fee(fee: int) -> int:
    """Return fee if it is a valid 18-decimal rate.

    Raises:
        InvalidFeeError: If fee is not in range [0, 1)
    """
    if fee < 0 or fee >= WAD:
        raise InvalidFeeError(f"Swap fee must be in range [0, 1), got {fee}")
    return fee


@dataclass(frozen=True)
class YieldIndex:
    """Exchange rate of the wrapped yield-bearing token to its asset.

    Attributes:
        rate: Asset units per wrapped unit, 18-decimal (grows as yield accrues)
    """

    rate: int = WAD

    def __post_init__(self) -> None:
        if self.rate <= 0:
            raise InvalidScalingFactorError(f"Yield index must be positive, got {self.rate}")

    def wrapped_to_asset(self, amount: int) -> int:
        """Asset units backing a wrapped amount, rounded down."""
        return mul_down(amount, self.rate)

    def wrapped_to_asset_up(self, amount: int) -> int:
        """Asset units backing a wrapped amount, rounded up."""
        return mul_up(amount, self.rate)

    def asset_to_wrapped(self, amount: int) -> int:
        """Wrapped units for an asset amount, rounded down."""
        return div_down(amount, self.rate)

    def asset_to_wrapped_up(self, amount: int) -> int:
        """Wrapped units for an asset amount, rounded up."""
        return div_up(amount, self.rate)
