"""Pytest configuration and fixtures."""

import pytest

from amm.pools import ConstantProductPool, StablePool
from amm.position import Position
from tests.helpers import make_cp_pool, make_stable_pool


@pytest.fixture
def cp_pool() -> tuple[ConstantProductPool, Position]:
    """Constant-product pool seeded with (1e6, 1e6) at 30 bps."""
    return make_cp_pool()


@pytest.fixture
def stable_pool() -> tuple[StablePool, Position]:
    """Stable pool seeded with (1e6, 1e6), amp 100, 4 bps."""
    return make_stable_pool()
