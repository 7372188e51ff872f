"""Pool variants."""

from amm.pools.base import LiquidityResult, Pool, PoolState, RemoveResult, SwapResult
from amm.pools.constant_product import ConstantProductPool
from amm.pools.stable import StablePool, StablePoolState

__all__ = [
    # Base classes
    "Pool",
    "PoolState",
    "LiquidityResult",
    "RemoveResult",
    "SwapResult",
    # Variants
    "ConstantProductPool",
    "StablePool",
    "StablePoolState",
]
