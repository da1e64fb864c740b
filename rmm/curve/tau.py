"""Time to maturity in fixed-point years.

Tau shrinks linearly with calendar time and is exactly zero at and after
maturity, where the curve collapses to par redemption. Callers must branch
on tau == 0 rather than divide by it.
"""

from rmm.constants import SECONDS_PER_YEAR, WAD


def compute_tau(seconds: int) -> int:
    """Convert a duration in seconds to 18-decimal years (rounded down).

    Negative durations clamp to zero.
    """
    if seconds <= 0:
        return 0
    return seconds * WAD // SECONDS_PER_YEAR


def time_to_expiry(maturity: int, timestamp: int) -> int:
    """Seconds remaining until maturity, 0 at or past it."""
    if timestamp >= maturity:
        return 0
    return maturity - timestamp


def future_tau(maturity: int, timestamp: int) -> int:
    """Tau at an arbitrary timestamp."""
    return compute_tau(time_to_expiry(maturity, timestamp))


def last_tau(maturity: int, last_update_timestamp: int) -> int:
    """Tau as of the pool's last committed adjustment."""
    return future_tau(maturity, last_update_timestamp)
