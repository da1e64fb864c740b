#!/usr/bin/env python3
"""Simulate a pool from initialization to maturity.

Initializes a pool, then alternates claim-in and asset-in swaps at evenly
spaced timestamps, printing the residual, spot price and implied rate after
each step. Finishes with a deallocation past maturity.

Usage:
    python scripts/simulate_pool.py --strike 1.5 --price 1.0 --asset 1000

    # Larger trades, more steps, debug logging
    python scripts/simulate_pool.py --trade 50 --steps 24 -v
"""

import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from rmm.config import PoolConfig, to_wad  # noqa: E402
from rmm.constants import SECONDS_PER_DAY, WAD  # noqa: E402
from rmm.math.fixed_point import DomainError  # noqa: E402
from rmm.pool import PoolError, RmmPool  # noqa: E402

logger = structlog.get_logger()

# Arbitrary epoch for the simulated clock
START_TIMESTAMP = 1_700_000_000


def format_wad(value: int, places: int = 6) -> str:
    """Render an 18-decimal value as a decimal string."""
    return f"{Decimal(value) / WAD:.{places}f}"


def print_step(label: str, pool: RmmPool, timestamp: int) -> None:
    state = pool.state
    print(
        f"{label:<28} "
        f"x={format_wad(state.reserve_asset, 4):>12} "
        f"y={format_wad(state.reserve_claim, 4):>12} "
        f"L={format_wad(state.total_liquidity, 4):>12} "
        f"K={format_wad(state.strike):>10} "
        f"P={format_wad(pool.spot_price(timestamp)):>10} "
        f"rate={format_wad(pool.implied_rate()):>10} "
        f"residual={pool.trading_function()}"
    )


def simulate(args: argparse.Namespace) -> int:
    maturity = START_TIMESTAMP + args.days * SECONDS_PER_DAY
    config = PoolConfig(
        sigma=to_wad(args.sigma),
        fee=to_wad(args.fee),
        maturity=maturity,
    )
    pool = RmmPool(config)

    liquidity, claim_required = pool.initialize(
        to_wad(args.price), to_wad(args.asset), to_wad(args.strike), START_TIMESTAMP
    )
    print(f"Initialized: liquidity={format_wad(liquidity)} claim={format_wad(claim_required)}")
    print_step("initialize", pool, START_TIMESTAMP)

    trade = to_wad(args.trade)
    interval = (maturity - START_TIMESTAMP) // (args.steps + 1)
    for step in range(1, args.steps + 1):
        timestamp = START_TIMESTAMP + step * interval
        try:
            if step % 2:
                quote = pool.swap_exact_claim_for_asset(trade, 0, timestamp)
                label = f"claim in  {format_wad(quote.amount_out_native, 4)} out"
            else:
                quote = pool.swap_exact_asset_for_claim(trade, 0, timestamp)
                label = f"asset in  {format_wad(quote.amount_out_native, 4)} out"
        except (PoolError, DomainError) as err:
            logger.warning("simulation_step_rejected", step=step, error=str(err))
            continue
        print_step(label, pool, timestamp)

    # Withdraw half the liquidity after maturity
    state = pool.state
    quote = pool.deallocate(state.total_liquidity // 2, 0, 0, maturity)
    print_step(
        f"deallocate {format_wad(quote.delta_asset_native, 2)}/"
        f"{format_wad(quote.delta_claim_native, 2)}",
        pool,
        maturity,
    )
    return 0


def main() -> int:
    """Main entry point for the pool simulation."""
    parser = argparse.ArgumentParser(
        description="Simulate a covered-call pool through to maturity",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--sigma", type=Decimal, default=Decimal("0.8"), help="Volatility")
    parser.add_argument("--fee", type=Decimal, default=Decimal("0.001"), help="Swap fee rate")
    parser.add_argument("--days", type=int, default=365, help="Days to maturity")
    parser.add_argument("--strike", type=Decimal, default=Decimal("1.5"), help="Initial strike")
    parser.add_argument("--price", type=Decimal, default=Decimal("1.0"), help="Initial price")
    parser.add_argument("--asset", type=Decimal, default=Decimal("1000"), help="Initial asset")
    parser.add_argument("--trade", type=Decimal, default=Decimal("10"), help="Size of each swap")
    parser.add_argument("--steps", type=int, default=12, help="Number of swaps")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    return simulate(args)


if __name__ == "__main__":
    sys.exit(main())
