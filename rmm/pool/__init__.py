"""Pool state machine built on the curve math."""

from rmm.pool.errors import (
    AlreadyInitialized,
    InsufficientLiquidity,
    InvalidConfigError,
    InvalidStrike,
    InvariantViolation,
    MaturityReached,
    NotInitialized,
    PoolError,
    PoolLocked,
    SlippageExceeded,
    StaleTimestamp,
)
from rmm.pool.pool import RmmPool, Settlement
from rmm.pool.state import (
    AllocateQuote,
    DeallocateQuote,
    PoolPreCompute,
    PoolState,
    TradeQuote,
    YieldPurchaseQuote,
    YieldSaleQuote,
)

__all__ = [
    "AllocateQuote",
    "AlreadyInitialized",
    "DeallocateQuote",
    "InsufficientLiquidity",
    "InvalidConfigError",
    "InvalidStrike",
    "InvariantViolation",
    "MaturityReached",
    "NotInitialized",
    "PoolError",
    "PoolLocked",
    "PoolPreCompute",
    "PoolState",
    "RmmPool",
    "Settlement",
    "SlippageExceeded",
    "StaleTimestamp",
    "TradeQuote",
    "YieldPurchaseQuote",
    "YieldSaleQuote",
]
