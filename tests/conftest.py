"""Pytest configuration and fixtures."""

import pytest

from rmm.config import PoolConfig
from rmm.pool import RmmPool
from tests.helpers import (
    INIT_ASSET,
    INIT_PRICE,
    INIT_STRIKE,
    T0,
    CurveState,
    RecordingSettlement,
    make_config,
    make_curve_state,
)


@pytest.fixture
def config() -> PoolConfig:
    """Reference pool parameters: sigma 0.8, fee 0.1%, one year to maturity."""
    return make_config()


@pytest.fixture
def settlement() -> RecordingSettlement:
    return RecordingSettlement()


@pytest.fixture
def pool(config: PoolConfig, settlement: RecordingSettlement) -> RmmPool:
    """Uninitialized pool."""
    return RmmPool(config, settlement=settlement)


@pytest.fixture
def initialized_pool(pool: RmmPool) -> RmmPool:
    """Pool seeded with 1000 asset at price 1.0 and strike 1.5."""
    pool.initialize(INIT_PRICE, INIT_ASSET, INIT_STRIKE, T0)
    return pool


@pytest.fixture
def curve_state() -> CurveState:
    """Reference point on the curve, one year to maturity."""
    return make_curve_state()
