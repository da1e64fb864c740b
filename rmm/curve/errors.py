"""Curve error classes."""

from rmm.math.fixed_point import DomainError


class CurveError(Exception):
    """Base error for curve computations."""

    pass


class InvalidFeeError(CurveError):
    """Swap fee must be in range [0, 1)."""

    pass


class InvalidScalingFactorError(CurveError):
    """Scaling factor must be positive."""

    pass


class LiquidityDidNotConverge(CurveError):
    """Newton iteration for liquidity given both reserves did not converge."""

    pass


class ReserveRatioOutOfRange(DomainError):
    """A reserve ratio left [MIN_RESERVE_RATIO, MAX_RESERVE_RATIO].

    Subclasses DomainError: the amount that caused it is one the curve
    cannot price.
    """

    def __init__(self, name: str, ratio: int) -> None:
        self.name = name
        self.ratio = ratio
        super().__init__(f"{name} ratio {ratio} outside the priceable range")
