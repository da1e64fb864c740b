"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Reference clock, curve parameters and initialization values
- factories: Curve states, configs, pools and a recording settlement
"""

from tests.helpers.constants import (
    FEE,
    INIT_ASSET,
    INIT_PRICE,
    INIT_STRIKE,
    MATURITY,
    ONE_YEAR_TAU,
    SIGMA,
    T0,
    THIRTY_DAYS_BEFORE_MATURITY,
)
from tests.helpers.factories import (
    CurveState,
    RecordingSettlement,
    make_config,
    make_curve_state,
    make_pool,
)

__all__ = [
    # Constants
    "T0",
    "MATURITY",
    "THIRTY_DAYS_BEFORE_MATURITY",
    "SIGMA",
    "FEE",
    "ONE_YEAR_TAU",
    "INIT_PRICE",
    "INIT_ASSET",
    "INIT_STRIKE",
    # Factories
    "CurveState",
    "RecordingSettlement",
    "make_config",
    "make_curve_state",
    "make_pool",
]
