"""Covered-call pool: state machine around the curve math.

RmmPool owns a PoolState and exposes the quote functions (read-only, never
locked) and the mutating operations built on them. Every mutating
operation runs under an exclusive, non-blocking lock and inside a
transaction: the state is snapshotted first and restored if anything
raises, including the post-adjustment residual check and the settlement
hook.

Units:
- Public amounts are in each token's native decimals.
- Quotes and state are 18-decimal; the asset leg of the state is held in
  wrapped units and converted through the YieldIndex for curve math.
- Strikes, prices, fees and rates are 18-decimal.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from rmm.constants import DEFAULT_SEARCH_EPSILON, WAD
from rmm.curve.fees import (
    compute_swap_asset_in,
    compute_swap_asset_out,
    compute_swap_claim_in,
    compute_swap_claim_out,
)
from rmm.curve.liquidity import (
    compute_allocation_given_asset,
    compute_allocation_given_claim,
    compute_deallocation,
    compute_shares_to_burn,
    compute_shares_to_mint,
)
from rmm.curve.price_memory import anchor_strike_and_liquidity, compute_implied_rate
from rmm.curve.scaling import YieldIndex, scale_down_down, scale_down_up, scale_up
from rmm.curve.search import size_trade_for_target_input
from rmm.curve.solvers import (
    compute_liquidity_given_asset,
    compute_max_claim_ratio,
    solve_liquidity,
    solve_reserve_claim,
)
from rmm.curve.tau import future_tau, time_to_expiry
from rmm.curve.trading_function import compute_spot_price, trading_function, within_tolerance
from rmm.math.fixed_point import mul_down
from rmm.math.kernel import DEFAULT_KERNEL, NumericKernel
from rmm.safe_int import S

from .errors import (
    AlreadyInitialized,
    InsufficientLiquidity,
    InvariantViolation,
    InvalidStrike,
    MaturityReached,
    NotInitialized,
    PoolLocked,
    SlippageExceeded,
    StaleTimestamp,
)
from .state import (
    AllocateQuote,
    DeallocateQuote,
    PoolPreCompute,
    PoolState,
    TradeQuote,
    YieldPurchaseQuote,
    YieldSaleQuote,
)

if TYPE_CHECKING:
    from rmm.config import PoolConfig

logger = structlog.get_logger()


class Settlement(Protocol):
    """Payment layer the pool settles committed operations with.

    amounts maps "asset" (wrapped), "claim", "yield" and "lp" to signed
    native amounts: positive flows from the caller to the pool, negative
    from the pool to the caller. Raising aborts the operation and unwinds
    the state change.
    """

    def settle(self, operation: str, amounts: Mapping[str, int]) -> None: ...


class RmmPool:
    """Pool pairing a wrapped yield-bearing asset with its principal claim."""

    def __init__(
        self,
        config: PoolConfig,
        index: YieldIndex | None = None,
        kernel: NumericKernel = DEFAULT_KERNEL,
        settlement: Settlement | None = None,
        state: PoolState | None = None,
    ) -> None:
        self.config = config
        self.index = index or YieldIndex()
        self.kernel = kernel
        self.settlement = settlement
        self._state = state or PoolState()
        self._operation: str | None = None

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------

    @property
    def state(self) -> PoolState:
        """Copy of the current state."""
        return self._state.copy()

    @property
    def locked(self) -> bool:
        return self._operation is not None

    @contextmanager
    def _lock(self, operation: str) -> Iterator[None]:
        """Exclusive lock around a mutating entry point.

        Raises:
            PoolLocked: If another mutating operation is in progress
        """
        if self._operation is not None:
            raise PoolLocked(f"{operation} called during {self._operation}")
        self._operation = operation
        try:
            yield
        finally:
            self._operation = None

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        """Restore the state snapshot if the block raises."""
        snapshot = self._state.copy()
        try:
            yield
        except BaseException:
            self._state = snapshot
            raise

    def _require_initialized(self) -> None:
        if not self._state.initialized:
            raise NotInitialized("Pool has not been initialized")

    def _require_before_maturity(self, timestamp: int) -> None:
        if timestamp >= self.config.maturity:
            raise MaturityReached(
                f"Timestamp {timestamp} is at or past maturity {self.config.maturity}"
            )

    def _require_fresh(self, timestamp: int) -> None:
        if timestamp < self._state.last_update_timestamp:
            raise StaleTimestamp(
                f"Timestamp {timestamp} precedes last update {self._state.last_update_timestamp}"
            )

    def _settle(self, operation: str, amounts: Mapping[str, int]) -> None:
        if self.settlement is not None:
            self.settlement.settle(operation, amounts)

    # -------------------------------------------------------------------------
    # Curve views
    # -------------------------------------------------------------------------

    def _reserve_in_asset(self) -> int:
        return self.index.wrapped_to_asset(self._state.reserve_asset)

    def _base_liquidity(self, strike: int, tau: int) -> int:
        """Liquidity of the current reserves under strike at tau.

        The committed liquidity is reused while neither strike nor tau has
        moved since the last adjustment.
        """
        state = self._state
        last_tau = future_tau(self.config.maturity, state.last_update_timestamp)
        if strike == state.strike and tau == last_tau:
            return state.total_liquidity
        return solve_liquidity(
            self._reserve_in_asset(),
            state.reserve_claim,
            strike,
            self.config.sigma,
            tau,
            self.kernel,
        )

    def pre_compute(self, timestamp: int) -> PoolPreCompute:
        """Anchored view of the pool at timestamp.

        Raises:
            NotInitialized: If the pool has no liquidity
            StaleTimestamp: If timestamp precedes the last update
        """
        self._require_initialized()
        self._require_fresh(timestamp)

        state = self._state
        reserve_in_asset = self._reserve_in_asset()
        tau = future_tau(self.config.maturity, timestamp)
        last_tau = future_tau(self.config.maturity, state.last_update_timestamp)
        if tau == last_tau:
            strike, liquidity = state.strike, state.total_liquidity
        else:
            strike, liquidity = anchor_strike_and_liquidity(
                reserve_in_asset,
                state.reserve_claim,
                state.total_liquidity,
                self.config.sigma,
                tau,
                state.last_implied_price,
                time_to_expiry(self.config.maturity, timestamp),
                self.kernel,
            )
        return PoolPreCompute(
            reserve_in_asset=reserve_in_asset,
            reserve_claim=state.reserve_claim,
            liquidity=liquidity,
            strike=strike,
            tau=tau,
            timestamp=timestamp,
        )

    def trading_function(self, timestamp: int | None = None) -> int:
        """Residual of the committed state, at timestamp or the last update."""
        state = self._state
        if not state.initialized:
            return 0
        if timestamp is None:
            timestamp = state.last_update_timestamp
        return trading_function(
            self._reserve_in_asset(),
            state.reserve_claim,
            state.total_liquidity,
            state.strike,
            self.config.sigma,
            future_tau(self.config.maturity, timestamp),
            self.kernel,
        )

    def spot_price(self, timestamp: int | None = None) -> int:
        """Price of one asset unit in claim units."""
        if timestamp is None:
            timestamp = self._state.last_update_timestamp
        pre = self.pre_compute(timestamp)
        return compute_spot_price(
            pre.reserve_in_asset, pre.liquidity, pre.strike, self.config.sigma, pre.tau, self.kernel
        )

    def implied_rate(self) -> int:
        """Annualized rate implied by the last committed spot price."""
        return self._state.last_implied_price

    def compute_max_claim_in(self, timestamp: int) -> int:
        """Largest claim input the curve can price at timestamp."""
        return self._max_claim_in(self.pre_compute(timestamp))

    def _max_claim_in(self, pre: PoolPreCompute) -> int:
        capacity_ratio = compute_max_claim_ratio(self.config.sigma, pre.tau, self.kernel)
        capacity = mul_down(mul_down(pre.strike, pre.liquidity), capacity_ratio)
        return max(capacity - pre.reserve_claim, 0)

    def snapshot(self) -> dict[str, Any]:
        """State plus derived values, for reporting."""
        state = self._state
        return {
            "reserve_asset": state.reserve_asset,
            "reserve_claim": state.reserve_claim,
            "total_liquidity": state.total_liquidity,
            "strike": state.strike,
            "last_implied_price": state.last_implied_price,
            "last_update_timestamp": state.last_update_timestamp,
            "lp_supply": state.lp_supply,
            "residual": self.trading_function(),
            "initialized": state.initialized,
        }

    # -------------------------------------------------------------------------
    # Adjustment
    # -------------------------------------------------------------------------

    def _adjust(
        self,
        delta_asset: int,
        delta_claim: int,
        delta_liquidity: int,
        strike: int,
        timestamp: int,
    ) -> None:
        """Apply signed deltas, check the residual and refresh the price memory.

        Caller must hold the lock and a transaction.
        """
        self._require_fresh(timestamp)
        config = self.config
        tau = future_tau(config.maturity, timestamp)
        state = self._state

        base_liquidity = self._base_liquidity(strike, tau) if state.initialized else 0
        reserve_asset = (S(state.reserve_asset) + delta_asset).to_uint256()
        reserve_claim = (S(state.reserve_claim) + delta_claim).to_uint256()
        liquidity = (S(base_liquidity) + delta_liquidity).to_uint256()
        if liquidity == 0:
            raise InsufficientLiquidity("Adjustment would leave the pool without liquidity")

        reserve_in_asset = self.index.wrapped_to_asset(reserve_asset)
        residual = trading_function(
            reserve_in_asset, reserve_claim, liquidity, strike, config.sigma, tau, self.kernel
        )
        if not within_tolerance(residual, config.tolerance):
            raise InvariantViolation(residual, config.tolerance)

        spot = compute_spot_price(
            reserve_in_asset, liquidity, strike, config.sigma, tau, self.kernel
        )
        state.reserve_asset = reserve_asset
        state.reserve_claim = reserve_claim
        state.total_liquidity = liquidity
        state.strike = strike
        state.last_implied_price = compute_implied_rate(
            spot, time_to_expiry(config.maturity, timestamp), self.kernel
        )
        state.last_update_timestamp = timestamp
        logger.debug(
            "pool_adjusted",
            delta_asset=delta_asset,
            delta_claim=delta_claim,
            delta_liquidity=delta_liquidity,
            residual=residual,
            implied_rate=state.last_implied_price,
        )

    def apply_adjustment(
        self,
        delta_asset: int,
        delta_claim: int,
        delta_liquidity: int,
        strike: int,
        timestamp: int,
    ) -> None:
        """Commit a quote's deltas.

        Raises:
            InvariantViolation: If the post-state residual exceeds tolerance;
                nothing is committed
            PoolLocked: If called from within another mutating operation
        """
        with self._lock("apply_adjustment"), self._transaction():
            self._require_initialized()
            self._adjust(delta_asset, delta_claim, delta_liquidity, strike, timestamp)

    # -------------------------------------------------------------------------
    # Initialization
    # -------------------------------------------------------------------------

    def initialize(
        self, price: int, asset_amount: int, strike: int, timestamp: int
    ) -> tuple[int, int]:
        """Seed the pool with asset_amount wrapped tokens at a spot price.

        Args:
            price: Spot price of the asset in claim units, 18-decimal
            asset_amount: Wrapped asset deposited, native decimals
            strike: Initial strike, 18-decimal, must exceed 1.0
            timestamp: Current time

        Returns:
            (liquidity minted, claim tokens required in native decimals)

        Raises:
            AlreadyInitialized: If the pool already holds liquidity
            InvalidStrike: If strike <= 1.0
            MaturityReached: If timestamp is at or past maturity
        """
        with self._lock("initialize"), self._transaction():
            if self._state.initialized:
                raise AlreadyInitialized("Pool is already initialized")
            if strike <= WAD:
                raise InvalidStrike(f"Strike must be greater than 1.0, got {strike}")
            self._require_before_maturity(timestamp)

            config = self.config
            tau = future_tau(config.maturity, timestamp)
            wrapped = scale_up(asset_amount, config.asset_scaling_factor)
            reserve_in_asset = self.index.wrapped_to_asset(wrapped)
            liquidity = compute_liquidity_given_asset(
                reserve_in_asset, price, strike, config.sigma, tau, self.kernel
            )
            reserve_claim = solve_reserve_claim(
                reserve_in_asset, liquidity, strike, config.sigma, tau, self.kernel
            )

            self._state.last_update_timestamp = timestamp
            self._adjust(wrapped, reserve_claim, liquidity, strike, timestamp)
            self._state.lp_supply = liquidity

            claim_required = scale_down_up(reserve_claim, config.claim_scaling_factor)
            self._settle(
                "initialize", {"asset": asset_amount, "claim": claim_required, "lp": -liquidity}
            )

        logger.info(
            "pool_initialized",
            liquidity=liquidity,
            reserve_asset=wrapped,
            reserve_claim=reserve_claim,
            strike=strike,
            price=price,
        )
        return liquidity, claim_required

    # -------------------------------------------------------------------------
    # Swap quotes
    # -------------------------------------------------------------------------

    def _swap_pre_compute(self, timestamp: int) -> PoolPreCompute:
        self._require_initialized()
        self._require_before_maturity(timestamp)
        return self.pre_compute(timestamp)

    def _quote_claim_in(self, amount_in: int, pre: PoolPreCompute) -> TradeQuote:
        """Claim-in quote for an 18-decimal amount against a pre-computed view."""
        config = self.config
        delta = compute_swap_claim_in(
            amount_in,
            pre.reserve_in_asset,
            pre.reserve_claim,
            pre.liquidity,
            pre.strike,
            config.sigma,
            pre.tau,
            config.fee,
            self.kernel,
        )
        amount_out = self.index.asset_to_wrapped(delta.amount_out)
        return TradeQuote(
            amount_in_scaled=amount_in,
            amount_out_scaled=amount_out,
            amount_in_native=scale_down_up(amount_in, config.claim_scaling_factor),
            amount_out_native=scale_down_down(amount_out, config.asset_scaling_factor),
            delta_asset=-amount_out,
            delta_claim=amount_in,
            delta_liquidity=delta.delta_liquidity,
            strike=pre.strike,
            timestamp=pre.timestamp,
        )

    def quote_swap_claim_in(self, amount_in: int, timestamp: int) -> TradeQuote:
        """Exact claim in (native), wrapped asset out."""
        pre = self._swap_pre_compute(timestamp)
        return self._quote_claim_in(scale_up(amount_in, self.config.claim_scaling_factor), pre)

    def quote_swap_asset_in(self, amount_in: int, timestamp: int) -> TradeQuote:
        """Exact wrapped asset in (native), claim out."""
        config = self.config
        pre = self._swap_pre_compute(timestamp)
        wrapped_in = scale_up(amount_in, config.asset_scaling_factor)
        delta = compute_swap_asset_in(
            self.index.wrapped_to_asset(wrapped_in),
            pre.reserve_in_asset,
            pre.reserve_claim,
            pre.liquidity,
            pre.strike,
            config.sigma,
            pre.tau,
            config.fee,
            self.kernel,
        )
        return TradeQuote(
            amount_in_scaled=wrapped_in,
            amount_out_scaled=delta.amount_out,
            amount_in_native=amount_in,
            amount_out_native=scale_down_down(delta.amount_out, config.claim_scaling_factor),
            delta_asset=wrapped_in,
            delta_claim=-delta.amount_out,
            delta_liquidity=delta.delta_liquidity,
            strike=pre.strike,
            timestamp=timestamp,
        )

    def quote_swap_asset_out(self, amount_out: int, timestamp: int) -> TradeQuote:
        """Claim in, exact wrapped asset out (native)."""
        config = self.config
        pre = self._swap_pre_compute(timestamp)
        wrapped_out = scale_up(amount_out, config.asset_scaling_factor)
        delta = compute_swap_asset_out(
            self.index.wrapped_to_asset_up(wrapped_out),
            pre.reserve_in_asset,
            pre.reserve_claim,
            pre.liquidity,
            pre.strike,
            config.sigma,
            pre.tau,
            config.fee,
            self.kernel,
        )
        return TradeQuote(
            amount_in_scaled=delta.amount_in,
            amount_out_scaled=wrapped_out,
            amount_in_native=scale_down_up(delta.amount_in, config.claim_scaling_factor),
            amount_out_native=amount_out,
            delta_asset=-wrapped_out,
            delta_claim=delta.amount_in,
            delta_liquidity=delta.delta_liquidity,
            strike=pre.strike,
            timestamp=timestamp,
        )

    def _quote_claim_out(self, amount_out: int, pre: PoolPreCompute) -> TradeQuote:
        """Exact claim-out quote for an 18-decimal amount."""
        config = self.config
        delta = compute_swap_claim_out(
            amount_out,
            pre.reserve_in_asset,
            pre.reserve_claim,
            pre.liquidity,
            pre.strike,
            config.sigma,
            pre.tau,
            config.fee,
            self.kernel,
        )
        wrapped_in = self.index.asset_to_wrapped_up(delta.amount_in)
        return TradeQuote(
            amount_in_scaled=wrapped_in,
            amount_out_scaled=amount_out,
            amount_in_native=scale_down_up(wrapped_in, config.asset_scaling_factor),
            amount_out_native=scale_down_down(amount_out, config.claim_scaling_factor),
            delta_asset=wrapped_in,
            delta_claim=-amount_out,
            delta_liquidity=delta.delta_liquidity,
            strike=pre.strike,
            timestamp=pre.timestamp,
        )

    def quote_swap_claim_out(self, amount_out: int, timestamp: int) -> TradeQuote:
        """Wrapped asset in, exact claim out (native)."""
        pre = self._swap_pre_compute(timestamp)
        return self._quote_claim_out(scale_up(amount_out, self.config.claim_scaling_factor), pre)

    # -------------------------------------------------------------------------
    # Yield claim quotes
    # -------------------------------------------------------------------------

    def quote_yield_purchase(
        self,
        wrapped_in: int,
        timestamp: int,
        upper_bound: int | None = None,
        initial_guess: int | None = None,
        epsilon: int = DEFAULT_SEARCH_EPSILON,
    ) -> YieldPurchaseQuote:
        """Size a purchase of yield claims costing about wrapped_in (native).

        `guess` asset is split into principal and yield claims and the
        principal sold to the pool; the bounded search finds the guess whose
        net wrapped cost is just under wrapped_in. A search that runs out of
        iterations still returns its best guess with converged=False.

        Args:
            wrapped_in: Target net wrapped input, native decimals
            timestamp: Current time
            upper_bound: Largest guess to consider (18-decimal); defaults to
                the maximum claim input the curve can price
            initial_guess: Optional first guess (18-decimal)
            epsilon: 18-decimal relative tolerance
        """
        pre = self._swap_pre_compute(timestamp)
        target = scale_up(wrapped_in, self.config.asset_scaling_factor)
        if upper_bound is None:
            upper_bound = self._max_claim_in(pre)

        def net_pull(guess: int) -> int:
            trade = self._quote_claim_in(guess, pre)
            return self.index.asset_to_wrapped_up(guess) - trade.amount_out_scaled

        result = size_trade_for_target_input(net_pull, target, upper_bound, initial_guess, epsilon)
        trade = self._quote_claim_in(result.guess, pre)
        return YieldPurchaseQuote(
            yield_out=result.guess,
            wrapped_in=self.index.asset_to_wrapped_up(result.guess) - trade.amount_out_scaled,
            trade=trade,
            converged=result.converged,
            iterations=result.iterations,
        )

    def quote_yield_sale(self, yield_in: int, timestamp: int) -> YieldSaleQuote:
        """Sell yield_in yield claims (native) for the wrapped asset."""
        pre = self._swap_pre_compute(timestamp)
        amount = scale_up(yield_in, self.config.claim_scaling_factor)
        trade = self._quote_claim_out(amount, pre)
        return YieldSaleQuote(
            yield_in=amount,
            wrapped_out=self.index.asset_to_wrapped(amount) - trade.amount_in_scaled,
            trade=trade,
        )

    # -------------------------------------------------------------------------
    # Swaps
    # -------------------------------------------------------------------------

    def _execute_trade(self, operation: str, quote: TradeQuote, amounts: Mapping[str, int]) -> None:
        self._adjust(
            quote.delta_asset,
            quote.delta_claim,
            quote.delta_liquidity,
            quote.strike,
            quote.timestamp,
        )
        self._settle(operation, amounts)
        logger.info(
            "swap",
            operation=operation,
            amount_in=quote.amount_in_native,
            amount_out=quote.amount_out_native,
            delta_liquidity=quote.delta_liquidity,
            strike=quote.strike,
            implied_rate=self._state.last_implied_price,
        )

    def swap_exact_claim_for_asset(
        self, amount_in: int, min_amount_out: int, timestamp: int
    ) -> TradeQuote:
        """Sell exactly amount_in claims for at least min_amount_out wrapped asset."""
        operation = "swap_exact_claim_for_asset"
        with self._lock(operation), self._transaction():
            quote = self.quote_swap_claim_in(amount_in, timestamp)
            if quote.amount_out_native < min_amount_out:
                raise SlippageExceeded(
                    f"Output {quote.amount_out_native} below minimum {min_amount_out}"
                )
            self._execute_trade(
                operation,
                quote,
                {"claim": quote.amount_in_native, "asset": -quote.amount_out_native},
            )
        return quote

    def swap_exact_asset_for_claim(
        self, amount_in: int, min_amount_out: int, timestamp: int
    ) -> TradeQuote:
        """Sell exactly amount_in wrapped asset for at least min_amount_out claims."""
        operation = "swap_exact_asset_for_claim"
        with self._lock(operation), self._transaction():
            quote = self.quote_swap_asset_in(amount_in, timestamp)
            if quote.amount_out_native < min_amount_out:
                raise SlippageExceeded(
                    f"Output {quote.amount_out_native} below minimum {min_amount_out}"
                )
            self._execute_trade(
                operation,
                quote,
                {"asset": quote.amount_in_native, "claim": -quote.amount_out_native},
            )
        return quote

    def swap_claim_for_exact_asset(
        self, amount_out: int, max_amount_in: int, timestamp: int
    ) -> TradeQuote:
        """Buy exactly amount_out wrapped asset for at most max_amount_in claims."""
        operation = "swap_claim_for_exact_asset"
        with self._lock(operation), self._transaction():
            quote = self.quote_swap_asset_out(amount_out, timestamp)
            if quote.amount_in_native > max_amount_in:
                raise SlippageExceeded(
                    f"Input {quote.amount_in_native} above maximum {max_amount_in}"
                )
            self._execute_trade(
                operation,
                quote,
                {"claim": quote.amount_in_native, "asset": -quote.amount_out_native},
            )
        return quote

    def swap_asset_for_exact_claim(
        self, amount_out: int, max_amount_in: int, timestamp: int
    ) -> TradeQuote:
        """Buy exactly amount_out claims for at most max_amount_in wrapped asset."""
        operation = "swap_asset_for_exact_claim"
        with self._lock(operation), self._transaction():
            quote = self.quote_swap_claim_out(amount_out, timestamp)
            if quote.amount_in_native > max_amount_in:
                raise SlippageExceeded(
                    f"Input {quote.amount_in_native} above maximum {max_amount_in}"
                )
            self._execute_trade(
                operation,
                quote,
                {"asset": quote.amount_in_native, "claim": -quote.amount_out_native},
            )
        return quote

    def swap_exact_asset_for_yield(
        self,
        wrapped_in: int,
        min_yield_out: int,
        timestamp: int,
        upper_bound: int | None = None,
        initial_guess: int | None = None,
        epsilon: int = DEFAULT_SEARCH_EPSILON,
    ) -> YieldPurchaseQuote:
        """Spend at most wrapped_in wrapped asset on at least min_yield_out yield claims.

        The sizing search may return an unconverged guess; the quote is
        checked against both bounds before anything is committed.
        """
        operation = "swap_exact_asset_for_yield"
        config = self.config
        with self._lock(operation), self._transaction():
            quote = self.quote_yield_purchase(
                wrapped_in, timestamp, upper_bound, initial_guess, epsilon
            )
            yield_native = scale_down_down(quote.yield_out, config.claim_scaling_factor)
            wrapped_native = scale_down_up(quote.wrapped_in, config.asset_scaling_factor)
            if yield_native < min_yield_out:
                raise SlippageExceeded(f"Yield out {yield_native} below minimum {min_yield_out}")
            if wrapped_native > wrapped_in:
                raise SlippageExceeded(f"Input {wrapped_native} above maximum {wrapped_in}")
            self._execute_trade(
                operation, quote.trade, {"asset": wrapped_native, "yield": -yield_native}
            )
        return quote

    def swap_exact_yield_for_asset(
        self, yield_in: int, min_asset_out: int, timestamp: int
    ) -> YieldSaleQuote:
        """Sell exactly yield_in yield claims for at least min_asset_out wrapped asset."""
        operation = "swap_exact_yield_for_asset"
        config = self.config
        with self._lock(operation), self._transaction():
            quote = self.quote_yield_sale(yield_in, timestamp)
            wrapped_native = scale_down_down(max(quote.wrapped_out, 0), config.asset_scaling_factor)
            if quote.wrapped_out <= 0 or wrapped_native < min_asset_out:
                raise SlippageExceeded(
                    f"Output {quote.wrapped_out} below minimum {min_asset_out}"
                )
            self._execute_trade(
                operation, quote.trade, {"yield": yield_in, "asset": -wrapped_native}
            )
        return quote

    # -------------------------------------------------------------------------
    # Liquidity
    # -------------------------------------------------------------------------

    def quote_allocate(self, in_terms_of_asset: bool, amount: int, timestamp: int) -> AllocateQuote:
        """Proportional deposit sized by a native asset or claim amount."""
        config = self.config
        self._require_initialized()
        self._require_before_maturity(timestamp)
        pre = self.pre_compute(timestamp)

        if in_terms_of_asset:
            wrapped = scale_up(amount, config.asset_scaling_factor)
            delta = compute_allocation_given_asset(
                self.index.wrapped_to_asset(wrapped),
                pre.reserve_in_asset,
                pre.reserve_claim,
                pre.liquidity,
            )
        else:
            delta = compute_allocation_given_claim(
                scale_up(amount, config.claim_scaling_factor),
                pre.reserve_in_asset,
                pre.reserve_claim,
                pre.liquidity,
            )
            wrapped = self.index.asset_to_wrapped_up(delta.delta_asset)

        return AllocateQuote(
            delta_asset=wrapped,
            delta_claim=delta.delta_claim,
            delta_liquidity=delta.delta_liquidity,
            shares_to_mint=compute_shares_to_mint(
                delta.delta_liquidity, pre.liquidity, self._state.lp_supply
            ),
            delta_asset_native=scale_down_up(wrapped, config.asset_scaling_factor),
            delta_claim_native=scale_down_up(delta.delta_claim, config.claim_scaling_factor),
            strike=pre.strike,
            timestamp=timestamp,
        )

    def quote_deallocate(self, delta_liquidity: int, timestamp: int) -> DeallocateQuote:
        """Proportional withdrawal of delta_liquidity (18-decimal).

        Raises:
            InsufficientLiquidity: If delta_liquidity would drain the pool
        """
        config = self.config
        pre = self.pre_compute(timestamp)
        if delta_liquidity >= pre.liquidity:
            raise InsufficientLiquidity(
                f"Cannot remove {delta_liquidity} of {pre.liquidity} liquidity"
            )

        delta = compute_deallocation(
            delta_liquidity, pre.reserve_in_asset, pre.reserve_claim, pre.liquidity
        )
        wrapped = self.index.asset_to_wrapped(delta.delta_asset)
        return DeallocateQuote(
            delta_asset=wrapped,
            delta_claim=delta.delta_claim,
            delta_liquidity=delta_liquidity,
            shares_to_burn=compute_shares_to_burn(
                delta_liquidity, pre.liquidity, self._state.lp_supply
            ),
            delta_asset_native=scale_down_down(wrapped, config.asset_scaling_factor),
            delta_claim_native=scale_down_down(delta.delta_claim, config.claim_scaling_factor),
            strike=pre.strike,
            timestamp=timestamp,
        )

    def allocate(
        self, in_terms_of_asset: bool, amount: int, min_liquidity_out: int, timestamp: int
    ) -> AllocateQuote:
        """Deposit both legs proportionally, minting liquidity shares."""
        with self._lock("allocate"), self._transaction():
            quote = self.quote_allocate(in_terms_of_asset, amount, timestamp)
            if quote.delta_liquidity < min_liquidity_out:
                raise SlippageExceeded(
                    f"Liquidity {quote.delta_liquidity} below minimum {min_liquidity_out}"
                )
            self._adjust(
                quote.delta_asset, quote.delta_claim, quote.delta_liquidity, quote.strike, timestamp
            )
            self._state.lp_supply += quote.shares_to_mint
            self._settle(
                "allocate",
                {
                    "asset": quote.delta_asset_native,
                    "claim": quote.delta_claim_native,
                    "lp": -quote.shares_to_mint,
                },
            )

        logger.info(
            "allocate",
            delta_asset=quote.delta_asset,
            delta_claim=quote.delta_claim,
            delta_liquidity=quote.delta_liquidity,
            shares=quote.shares_to_mint,
        )
        return quote

    def deallocate(
        self, delta_liquidity: int, min_asset_out: int, min_claim_out: int, timestamp: int
    ) -> DeallocateQuote:
        """Withdraw both legs proportionally, burning liquidity shares.

        Stays available at and after maturity.
        """
        with self._lock("deallocate"), self._transaction():
            quote = self.quote_deallocate(delta_liquidity, timestamp)
            if quote.delta_asset_native < min_asset_out:
                raise SlippageExceeded(
                    f"Asset out {quote.delta_asset_native} below minimum {min_asset_out}"
                )
            if quote.delta_claim_native < min_claim_out:
                raise SlippageExceeded(
                    f"Claim out {quote.delta_claim_native} below minimum {min_claim_out}"
                )
            self._adjust(
                -quote.delta_asset,
                -quote.delta_claim,
                -quote.delta_liquidity,
                quote.strike,
                timestamp,
            )
            self._state.lp_supply = (S(self._state.lp_supply) - quote.shares_to_burn).value
            self._settle(
                "deallocate",
                {
                    "asset": -quote.delta_asset_native,
                    "claim": -quote.delta_claim_native,
                    "lp": quote.shares_to_burn,
                },
            )

        logger.info(
            "deallocate",
            delta_asset=quote.delta_asset,
            delta_claim=quote.delta_claim,
            delta_liquidity=quote.delta_liquidity,
            shares=quote.shares_to_burn,
        )
        return quote
