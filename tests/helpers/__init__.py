"""Test helpers module for shared test utilities.

- constants: Asset names and common amounts
- factories: Pool factory functions
"""

from tests.helpers.constants import DAI, DAY_MS, MILLION, USDC, USDT, WETH
from tests.helpers.factories import make_cp_pool, make_stable_pool, total_claimable

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "USDT",
    "DAI",
    "MILLION",
    "DAY_MS",
    # Factories
    "make_cp_pool",
    "make_stable_pool",
    "total_claimable",
]
