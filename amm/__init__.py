"""Two-asset automated market maker core."""

from amm.config import PoolConfig, TradePreferences, configure_logging
from amm.errors import AmmError
from amm.pools import ConstantProductPool, StablePool
from amm.position import Position

__version__ = "0.1.0"
__all__ = [
    "AmmError",
    "ConstantProductPool",
    "PoolConfig",
    "Position",
    "StablePool",
    "TradePreferences",
    "configure_logging",
    "__version__",
]
