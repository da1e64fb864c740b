"""Pydantic models for the quote service requests and responses."""

from enum import Enum

from pydantic import BaseModel, Field

from rmm.constants import DEFAULT_SEARCH_EPSILON
from rmm.models.types import Int256, Uint256
from rmm.pool.state import TradeQuote, YieldPurchaseQuote


class SwapKind(str, Enum):
    """Swap direction, named by the exact leg."""

    CLAIM_IN = "claim_in"  # Exact claim in, asset out
    ASSET_IN = "asset_in"  # Exact asset in, claim out
    ASSET_OUT = "asset_out"  # Claim in, exact asset out
    CLAIM_OUT = "claim_out"  # Asset in, exact claim out


class SwapQuoteRequest(BaseModel):
    """Request a swap quote."""

    kind: SwapKind
    amount: Uint256 = Field(description="Exact amount in native decimals")
    timestamp: int | None = Field(
        default=None, ge=0, description="Quote time; defaults to the current time"
    )


class YieldQuoteRequest(BaseModel):
    """Request a yield purchase sizing."""

    wrapped_in: Uint256 = Field(
        alias="wrappedIn", description="Target net wrapped input in native decimals"
    )
    epsilon: Uint256 = Field(
        default=str(DEFAULT_SEARCH_EPSILON), description="18-decimal relative tolerance"
    )
    upper_bound: Uint256 | None = Field(default=None, alias="upperBound")
    initial_guess: Uint256 | None = Field(default=None, alias="initialGuess")
    timestamp: int | None = Field(default=None, ge=0)

    model_config = {"populate_by_name": True}


class TradeQuoteResponse(BaseModel):
    """A swap quote."""

    amount_in_scaled: Uint256 = Field(alias="amountInScaled")
    amount_out_scaled: Uint256 = Field(alias="amountOutScaled")
    amount_in_native: Uint256 = Field(alias="amountInNative")
    amount_out_native: Uint256 = Field(alias="amountOutNative")
    delta_liquidity: Int256 = Field(alias="deltaLiquidity")
    strike: Uint256
    timestamp: int

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: TradeQuote) -> "TradeQuoteResponse":
        return cls(
            amount_in_scaled=quote.amount_in_scaled,
            amount_out_scaled=quote.amount_out_scaled,
            amount_in_native=quote.amount_in_native,
            amount_out_native=quote.amount_out_native,
            delta_liquidity=quote.delta_liquidity,
            strike=quote.strike,
            timestamp=quote.timestamp,
        )


class YieldQuoteResponse(BaseModel):
    """A sized yield purchase."""

    yield_out: Uint256 = Field(alias="yieldOut")
    wrapped_in: Int256 = Field(alias="wrappedIn")
    converged: bool
    iterations: int
    trade: TradeQuoteResponse

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: YieldPurchaseQuote) -> "YieldQuoteResponse":
        return cls(
            yield_out=quote.yield_out,
            wrapped_in=quote.wrapped_in,
            converged=quote.converged,
            iterations=quote.iterations,
            trade=TradeQuoteResponse.from_quote(quote.trade),
        )


class PoolResponse(BaseModel):
    """Pool state snapshot and derived values."""

    initialized: bool
    reserve_asset: Uint256 = Field(alias="reserveAsset")
    reserve_claim: Uint256 = Field(alias="reserveClaim")
    total_liquidity: Uint256 = Field(alias="totalLiquidity")
    strike: Uint256
    last_implied_price: Int256 = Field(alias="lastImpliedPrice")
    last_update_timestamp: int = Field(alias="lastUpdateTimestamp")
    lp_supply: Uint256 = Field(alias="lpSupply")
    residual: Int256
    spot_price: Uint256 | None = Field(default=None, alias="spotPrice")
    maturity: int

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """Error body for rejected requests."""

    error: str
    detail: str
