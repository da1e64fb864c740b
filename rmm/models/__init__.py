"""Pydantic models for the quote service."""

from rmm.models.quotes import (
    ErrorResponse,
    PoolResponse,
    SwapKind,
    SwapQuoteRequest,
    TradeQuoteResponse,
    YieldQuoteRequest,
    YieldQuoteResponse,
)
from rmm.models.types import Int256, Uint256

__all__ = [
    "ErrorResponse",
    "Int256",
    "PoolResponse",
    "SwapKind",
    "SwapQuoteRequest",
    "TradeQuoteResponse",
    "Uint256",
    "YieldQuoteRequest",
    "YieldQuoteResponse",
]
