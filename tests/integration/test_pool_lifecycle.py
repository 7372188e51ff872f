"""End-to-end provider and trader flows."""

import pytest

from amm.config import TradePreferences
from amm.errors import Expired, Overflow
from amm.pools import ConstantProductPool
from amm.safe_int import U64_MAX, IntegerOverflow
from amm.slippage import min_output_for_slippage
from tests.helpers import DAY_MS, USDC, WETH, make_cp_pool, make_stable_pool


class TestTraderFlow:
    """A trader quoting and swapping with saved preferences."""

    def test_swap_with_preferences(self, cp_pool):
        pool, _ = cp_pool
        prefs = TradePreferences(slippage_bps=100)
        now = 1_000

        quote = pool.quote_swap_a_to_b(10_000, now=now)
        assert quote.price_impact_bps <= prefs.max_price_impact_bps
        min_out = min_output_for_slippage(quote.amount_out, prefs.slippage_bps)

        result = pool.swap_a_to_b(
            10_000, min_out=min_out, now=now, deadline=prefs.deadline_from(now)
        )
        assert result.amount_out == quote.amount_out
        assert min_out == 9_772

    def test_stale_request_expires(self, cp_pool):
        pool, _ = cp_pool
        prefs = TradePreferences()
        deadline = prefs.deadline_from(0)
        with pytest.raises(Expired):
            pool.swap_a_to_b(10_000, now=deadline + 1, deadline=deadline)


class TestProviderFlow:
    """A provider depositing, earning, and exiting."""

    @pytest.mark.parametrize("auto_compound", [True, False])
    def test_earn_and_exit(self, cp_pool, auto_compound):
        pool, lp = cp_pool
        prefs = TradePreferences(auto_compound=auto_compound)
        for _ in range(3):
            pool.swap_a_to_b(10_000)
            pool.swap_b_to_a(10_000)

        shares_before = lp.liquidity
        if prefs.auto_compound:
            pool.compound_fees(lp)
            assert lp.liquidity > shares_before
        else:
            fee_a, fee_b = pool.withdraw_fees(lp)
            assert fee_a > 0 and fee_b > 0
            assert lp.liquidity == shares_before

        view = pool.position_view(lp)
        assert (view.claimable_fee_a, view.claimable_fee_b) == (0, 0)

        result = pool.remove_liquidity(lp)
        assert result.amount_a > 0 and result.amount_b > 0
        assert lp.closed

    def test_impermanent_loss_after_price_move(self):
        pool, lp = make_cp_pool(10**9, 10**9)
        pool.set_risk_parameters(max_price_impact_bps=10_000)
        pool.swap_a_to_b(10**9)

        view = pool.position_view(lp)
        # Price of A fell to about a quarter: roughly 20% loss against holding
        assert 1_900 <= view.impermanent_loss_bps <= 2_100

    def test_stable_pool_ramp_during_trading(self):
        pool, lp = make_stable_pool()
        pool.ramp_amp(1_000, DAY_MS, 2 * DAY_MS, now=0)

        for hour in range(0, 48):
            now = hour * DAY_MS // 24
            if hour % 2 == 0:
                pool.swap_a_to_b(20_000, now=now)
            else:
                pool.swap_b_to_a(20_000, now=now)

        assert pool.get_current_amp(2 * DAY_MS) == 1_000
        result = pool.remove_liquidity(lp, now=2 * DAY_MS)
        assert result.fee_a > 0 and result.fee_b > 0


class TestOverflow:
    def test_reserve_overflow_aborts(self):
        pool, _ = ConstantProductPool.create_with_liquidity(WETH, USDC, U64_MAX, U64_MAX)
        before = pool.snapshot()

        with pytest.raises(IntegerOverflow) as exc_info:
            pool.add_liquidity(1_000, 1_000)

        assert isinstance(exc_info.value, Overflow)
        assert pool.snapshot() == before
