"""Pool configuration."""

import os
from dataclasses import dataclass, field
from decimal import Decimal

from rmm.constants import TRADING_FUNCTION_TOLERANCE
from rmm.curve.scaling import scaling_factor_for_decimals, validate_fee
from rmm.math.fixed_point import Bfp
from rmm.pool.errors import InvalidConfigError


def to_wad(value: Decimal | str | int) -> int:
    """Convert a decimal quantity (e.g. "0.8") to 18-decimal fixed-point."""
    return Bfp.from_decimal(Decimal(value)).value


@dataclass(frozen=True)
class PoolConfig:
    """Immutable parameters of a pool, fixed at construction.

    Attributes:
        sigma: Implied volatility, 18-decimal (e.g. 0.8 * 10^18)
        fee: Swap fee rate, 18-decimal, in [0, 1)
        maturity: Maturity timestamp (seconds)
        asset_decimals: Native precision of the wrapped asset token
        claim_decimals: Native precision of the claim tokens
        tolerance: Maximum |trading function| a state may settle into
    """

    sigma: int
    fee: int
    maturity: int
    asset_decimals: int = 18
    claim_decimals: int = 18
    tolerance: int = TRADING_FUNCTION_TOLERANCE

    # Derived
    asset_scaling_factor: int = field(init=False, repr=False)
    claim_scaling_factor: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.sigma <= 0:
            raise InvalidConfigError(f"Volatility must be positive, got {self.sigma}")
        if self.maturity <= 0:
            raise InvalidConfigError(f"Maturity must be a positive timestamp, got {self.maturity}")
        if self.tolerance < 0:
            raise InvalidConfigError(f"Tolerance must be non-negative, got {self.tolerance}")
        validate_fee(self.fee)
        # frozen: derived fields are set through object.__setattr__
        object.__setattr__(
            self, "asset_scaling_factor", scaling_factor_for_decimals(self.asset_decimals)
        )
        object.__setattr__(
            self, "claim_scaling_factor", scaling_factor_for_decimals(self.claim_decimals)
        )

    @classmethod
    def from_env(cls) -> "PoolConfig":
        """Build a config from RMM_* environment variables.

        - RMM_VOLATILITY: decimal volatility (default: 0.8)
        - RMM_FEE: decimal fee rate (default: 0.001)
        - RMM_MATURITY: maturity timestamp (required)
        - RMM_ASSET_DECIMALS / RMM_CLAIM_DECIMALS: token precision (default: 18)

        Raises:
            InvalidConfigError: If RMM_MATURITY is missing or a value is malformed
        """
        maturity = os.environ.get("RMM_MATURITY")
        if maturity is None:
            raise InvalidConfigError("RMM_MATURITY is not set")
        try:
            return cls(
                sigma=to_wad(os.environ.get("RMM_VOLATILITY", "0.8")),
                fee=to_wad(os.environ.get("RMM_FEE", "0.001")),
                maturity=int(maturity),
                asset_decimals=int(os.environ.get("RMM_ASSET_DECIMALS", "18")),
                claim_decimals=int(os.environ.get("RMM_CLAIM_DECIMALS", "18")),
            )
        except (ArithmeticError, ValueError) as err:
            raise InvalidConfigError(f"Malformed pool configuration: {err}") from err
