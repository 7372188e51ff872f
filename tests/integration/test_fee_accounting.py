"""Fee accounting across multi-step pool histories.

Checks the solvency property after every step: the unclaimed fees of all
open positions never exceed the LP-fee balance the pool holds.
"""

import pytest

from amm.pools import Pool
from amm.position import Position
from tests.helpers import make_cp_pool, make_stable_pool, total_claimable

SWAP_SIZE = 30_000


def assert_solvent(pool: Pool, positions: list[Position]) -> None:
    claimable_a, claimable_b = total_claimable(pool, positions)
    held_a, held_b = pool.lp_fee_balances
    assert claimable_a <= held_a
    assert claimable_b <= held_b


def run_swaps(pool: Pool, positions: list[Position], count: int) -> None:
    for i in range(count):
        if i % 2 == 0:
            pool.swap_a_to_b(SWAP_SIZE + i)
        else:
            pool.swap_b_to_a(SWAP_SIZE + i)
        assert_solvent(pool, positions)


@pytest.fixture(params=["constant_product", "stable"])
def seeded_pool(request) -> tuple[Pool, list[Position]]:
    """A pool with three providers who all joined before any trading."""
    if request.param == "constant_product":
        pool, lp1 = make_cp_pool(fee_bps=500)
    else:
        pool, lp1 = make_stable_pool(fee_bps=500)
    lp2 = pool.add_liquidity(500_000, 500_000).position
    lp3 = pool.add_liquidity(250_000, 250_000).position
    return pool, [lp1, lp2, lp3]


class TestFeeSolvency:
    """Unclaimed fees stay covered by the pool's fee balances."""

    def test_swaps_only(self, seeded_pool):
        pool, positions = seeded_pool
        run_swaps(pool, positions, 20)

        claimable_a, claimable_b = total_claimable(pool, positions)
        assert claimable_a > 0 and claimable_b > 0

    def test_mixed_history(self, seeded_pool):
        pool, positions = seeded_pool
        lp1, lp2, lp3 = positions

        run_swaps(pool, positions, 20)

        pool.withdraw_fees(lp1)
        assert_solvent(pool, positions)

        pool.remove_liquidity_partial(lp2, lp2.liquidity * 3 // 10)
        assert_solvent(pool, positions)

        run_swaps(pool, positions, 10)

        pool.compound_fees(lp3)
        assert_solvent(pool, positions)

        run_swaps(pool, positions, 6)

        pool.remove_liquidity(lp1)
        assert_solvent(pool, positions)

        pool.remove_liquidity(lp2)
        pool.remove_liquidity(lp3)
        assert total_claimable(pool, positions) == (0, 0)
        assert pool.total_liquidity == 1_000
        fee_a, fee_b = pool.lp_fee_balances
        assert fee_a >= 0 and fee_b >= 0

    def test_late_joiner_earns_nothing_retroactively(self, seeded_pool):
        pool, positions = seeded_pool
        run_swaps(pool, positions, 10)

        reserve_a, reserve_b = pool.reserves
        late = pool.add_liquidity(reserve_a // 100, reserve_b // 100).position
        assert pool.claimable_fees(late) == (0, 0)

        positions.append(late)
        run_swaps(pool, positions, 4)
        fee_a, fee_b = pool.claimable_fees(late)
        assert fee_a > 0 or fee_b > 0

    def test_fees_proportional_to_shares(self, seeded_pool):
        """lp2 holds twice lp3's shares and so earns about twice the fees."""
        pool, positions = seeded_pool
        _, lp2, lp3 = positions
        run_swaps(pool, positions, 20)

        fee2_a, _ = pool.claimable_fees(lp2)
        fee3_a, _ = pool.claimable_fees(lp3)
        assert abs(fee2_a * lp3.liquidity - fee3_a * lp2.liquidity) <= lp2.liquidity
