"""Covered-call curve engine for principal/yield pools - Python Implementation."""

from rmm.config import PoolConfig
from rmm.pool import RmmPool

__version__ = "0.1.0"
__all__ = ["PoolConfig", "RmmPool", "__version__"]
