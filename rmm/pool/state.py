"""Pool state and the ephemeral values built from it.

PoolState is the only mutable data in the engine and is owned by a single
RmmPool. Everything else here is computed per call and never stored.
"""

from dataclasses import dataclass, replace


@dataclass
class PoolState:
    """Mutable pool state.

    Attributes:
        reserve_asset: Wrapped asset reserve, 18-decimal wrapped units
        reserve_claim: Principal claim reserve, 18-decimal
        total_liquidity: Curve liquidity; 0 means uninitialized
        strike: Strike used by the last adjustment
        last_implied_price: Annualized rate implied by the last spot price
        last_update_timestamp: Timestamp of the last adjustment
        lp_supply: Outstanding liquidity shares
    """

    reserve_asset: int = 0
    reserve_claim: int = 0
    total_liquidity: int = 0
    strike: int = 0
    last_implied_price: int = 0
    last_update_timestamp: int = 0
    lp_supply: int = 0

    @property
    def initialized(self) -> bool:
        return self.total_liquidity > 0

    def copy(self) -> "PoolState":
        return replace(self)


@dataclass(frozen=True)
class PoolPreCompute:
    """Per-call view of the pool at an operation timestamp.

    Attributes:
        reserve_in_asset: Asset reserve converted from wrapped units
        reserve_claim: Claim reserve
        liquidity: Liquidity solved for the reserves under strike
        strike: Strike derived from the last implied price
        tau: Time to maturity in 18-decimal years
        timestamp: Operation timestamp
    """

    reserve_in_asset: int
    reserve_claim: int
    liquidity: int
    strike: int
    tau: int
    timestamp: int


@dataclass(frozen=True)
class TradeQuote:
    """Quote for a swap, consumed immediately by the caller.

    Scaled amounts are 18-decimal; the asset leg is in wrapped units.
    delta_asset/delta_claim/delta_liquidity are the signed changes to
    apply to the pool state.
    """

    amount_in_scaled: int
    amount_out_scaled: int
    amount_in_native: int
    amount_out_native: int
    delta_asset: int
    delta_claim: int
    delta_liquidity: int
    strike: int
    timestamp: int


@dataclass(frozen=True)
class AllocateQuote:
    """Reserves required and shares minted for an allocation.

    delta_asset (wrapped) and delta_claim are 18-decimal; the *_native
    amounts are what the caller pays, rounded up.
    """

    delta_asset: int
    delta_claim: int
    delta_liquidity: int
    shares_to_mint: int
    delta_asset_native: int
    delta_claim_native: int
    strike: int
    timestamp: int


@dataclass(frozen=True)
class DeallocateQuote:
    """Reserves released and shares burned for a deallocation.

    delta_asset (wrapped) and delta_claim are 18-decimal; the *_native
    amounts are what the caller receives, rounded down.
    """

    delta_asset: int
    delta_claim: int
    delta_liquidity: int
    shares_to_burn: int
    delta_asset_native: int
    delta_claim_native: int
    strike: int
    timestamp: int


@dataclass(frozen=True)
class YieldPurchaseQuote:
    """Sizing of a wrapped-asset-for-yield trade.

    Attributes:
        yield_out: Yield claims received (equal to principal claims sold)
        wrapped_in: Net wrapped asset the caller supplies
        trade: The underlying claim-in quote
        converged: Whether the sizing search met its tolerance
        iterations: Search evaluations used
    """

    yield_out: int
    wrapped_in: int
    trade: TradeQuote
    converged: bool
    iterations: int


@dataclass(frozen=True)
class YieldSaleQuote:
    """Sale of yield claims for the wrapped asset.

    The pool sells yield_in principal claims (exact claim out); merged with
    the yield claims they redeem for asset, of which wrapped_out remains
    after paying for the principal.
    """

    yield_in: int
    wrapped_out: int
    trade: TradeQuote
