"""API endpoints for the pool quote service.

All endpoints are read-only: they quote against the process-wide pool and
never commit anything.
"""

import asyncio
import os
from datetime import UTC, datetime
from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends

from rmm.config import PoolConfig, to_wad
from rmm.models.quotes import (
    PoolResponse,
    SwapKind,
    SwapQuoteRequest,
    TradeQuoteResponse,
    YieldQuoteRequest,
    YieldQuoteResponse,
)
from rmm.pool import RmmPool

logger = structlog.get_logger()

router = APIRouter()


@lru_cache(maxsize=1)
def get_default_pool() -> RmmPool:
    """Build the process-wide pool from RMM_* environment variables.

    If RMM_INIT_PRICE, RMM_INIT_STRIKE and RMM_INIT_ASSET are all set, the
    pool is seeded at the current time; otherwise it starts uninitialized.
    """
    pool = RmmPool(PoolConfig.from_env())
    price = os.environ.get("RMM_INIT_PRICE")
    strike = os.environ.get("RMM_INIT_STRIKE")
    asset = os.environ.get("RMM_INIT_ASSET")
    if price is not None and strike is not None and asset is not None:
        pool.initialize(to_wad(price), int(asset), to_wad(strike), _now())
    else:
        logger.warning("pool_not_seeded", message="Set RMM_INIT_* to seed the pool at startup")
    return pool


def get_pool() -> RmmPool:
    """Dependency provider for the pool instance.

    Override this in tests to inject a prepared pool:
        app.dependency_overrides[get_pool] = lambda: pool

    Returns:
        The pool to quote against.
    """
    return get_default_pool()


def _now() -> int:
    return int(datetime.now(UTC).timestamp())


def _resolve_timestamp(pool: RmmPool, timestamp: int | None) -> int:
    """Requested timestamp, or the current time clamped to the last update."""
    if timestamp is not None:
        return timestamp
    return max(_now(), pool.state.last_update_timestamp)


def _quote_swap(pool: RmmPool, request: SwapQuoteRequest) -> TradeQuoteResponse:
    timestamp = _resolve_timestamp(pool, request.timestamp)
    amount = int(request.amount)
    quote_fn = {
        SwapKind.CLAIM_IN: pool.quote_swap_claim_in,
        SwapKind.ASSET_IN: pool.quote_swap_asset_in,
        SwapKind.ASSET_OUT: pool.quote_swap_asset_out,
        SwapKind.CLAIM_OUT: pool.quote_swap_claim_out,
    }[request.kind]
    return TradeQuoteResponse.from_quote(quote_fn(amount, timestamp))


def _quote_yield(pool: RmmPool, request: YieldQuoteRequest) -> YieldQuoteResponse:
    timestamp = _resolve_timestamp(pool, request.timestamp)
    quote = pool.quote_yield_purchase(
        int(request.wrapped_in),
        timestamp,
        upper_bound=int(request.upper_bound) if request.upper_bound is not None else None,
        initial_guess=int(request.initial_guess) if request.initial_guess is not None else None,
        epsilon=int(request.epsilon),
    )
    if not quote.converged:
        logger.warning(
            "yield_quote_unconverged",
            wrapped_in=request.wrapped_in,
            yield_out=quote.yield_out,
            iterations=quote.iterations,
        )
    return YieldQuoteResponse.from_quote(quote)


@router.get("/pool")
async def pool_state(pool: RmmPool = Depends(get_pool)) -> PoolResponse:
    """Snapshot of the pool state with its residual and spot price."""
    snapshot = pool.snapshot()
    spot_price = pool.spot_price() if snapshot["initialized"] else None
    return PoolResponse(
        initialized=snapshot["initialized"],
        reserve_asset=snapshot["reserve_asset"],
        reserve_claim=snapshot["reserve_claim"],
        total_liquidity=snapshot["total_liquidity"],
        strike=snapshot["strike"],
        last_implied_price=snapshot["last_implied_price"],
        last_update_timestamp=snapshot["last_update_timestamp"],
        lp_supply=snapshot["lp_supply"],
        residual=snapshot["residual"],
        spot_price=spot_price,
        maturity=pool.config.maturity,
    )


@router.post("/quote/swap", response_model_exclude_none=True)
async def quote_swap(
    request: SwapQuoteRequest,
    pool: RmmPool = Depends(get_pool),
) -> TradeQuoteResponse:
    """Quote a swap without committing it.

    Error Handling:
        - Invalid request schema: Returns 422 Validation Error (Pydantic)
        - Pool precondition or curve domain failure: Returns 400 (409 if
          the pool is not initialized)
    """
    logger.info("received_swap_quote", kind=request.kind.value, amount=request.amount)
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _quote_swap, pool, request)


@router.post("/quote/yield", response_model_exclude_none=True)
async def quote_yield(
    request: YieldQuoteRequest,
    pool: RmmPool = Depends(get_pool),
) -> YieldQuoteResponse:
    """Size a wrapped-asset-for-yield purchase without committing it."""
    logger.info("received_yield_quote", wrapped_in=request.wrapped_in)
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _quote_yield, pool, request)
