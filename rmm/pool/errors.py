"""Pool error classes.

State-machine and settlement failures. Every one of them aborts the whole
operation with nothing committed.
"""


class PoolError(Exception):
    """Base error for pool operations."""

    pass


class InvariantViolation(PoolError):
    """Post-adjustment trading function residual exceeds tolerance."""

    def __init__(self, residual: int, tolerance: int) -> None:
        self.residual = residual
        self.tolerance = tolerance
        super().__init__(f"Trading function residual {residual} exceeds tolerance {tolerance}")


class SlippageExceeded(PoolError):
    """Quoted amount is worse than the caller's bound."""

    pass


class AlreadyInitialized(PoolError):
    """Pool already holds liquidity."""

    pass


class NotInitialized(PoolError):
    """Pool has no liquidity yet."""

    pass


class MaturityReached(PoolError):
    """Operation is not allowed at or after maturity."""

    pass


class PoolLocked(PoolError):
    """A mutating operation is already in progress."""

    pass


class InvalidStrike(PoolError):
    """Initial strike must be greater than 1.0."""

    pass


class InsufficientLiquidity(PoolError):
    """Deallocation would remove all of the pool's liquidity."""

    pass


class StaleTimestamp(PoolError):
    """Timestamp precedes the pool's last update."""

    pass


class InvalidConfigError(PoolError):
    """Pool parameters are out of range."""

    pass
