"""Tests for slippage, deadline and price-impact guards."""

import pytest

from amm.errors import (
    EmptyReserves,
    ExcessivePriceImpact,
    Expired,
    InsufficientLiquidity,
    InvalidInput,
    PriceLimitExceeded,
    SlippageExceeded,
)
from amm.slippage import (
    check_deadline,
    check_min_output,
    check_price_impact,
    check_price_limit,
    min_output_for_slippage,
    price_impact_bps,
)


class TestDeadline:
    def test_at_deadline_passes(self):
        check_deadline(now=1000, deadline=1000)

    def test_past_deadline_raises(self):
        with pytest.raises(Expired):
            check_deadline(now=1001, deadline=1000)


class TestMinOutput:
    def test_exact_minimum_passes(self):
        check_min_output(100, 100)

    def test_below_minimum_raises(self):
        """Slippage failures are liquidity errors."""
        with pytest.raises(SlippageExceeded) as exc_info:
            check_min_output(99, 100)
        assert isinstance(exc_info.value, InsufficientLiquidity)
        assert exc_info.value.code == "slippage_exceeded"


class TestPriceLimit:
    """Execution price is amount_in / amount_out scaled by 1e9."""

    def test_within_limit(self):
        check_price_limit(10_000, 9_871, 1_013_068_584)

    def test_above_limit_raises(self):
        with pytest.raises(PriceLimitExceeded) as exc_info:
            check_price_limit(10_000, 9_871, 1_013_068_583)
        assert isinstance(exc_info.value, ExcessivePriceImpact)

    def test_zero_output_raises(self):
        with pytest.raises(EmptyReserves):
            check_price_limit(10_000, 0, 10**18)


class TestPriceImpact:
    @pytest.mark.parametrize(
        "ideal,actual,expected",
        [
            (9_970, 9_871, 99),
            (10_000, 10_000, 0),
            (10_000, 10_001, 0),
            (0, 0, 0),
            (10_000, 0, 10_000),
        ],
    )
    def test_price_impact_bps(self, ideal, actual, expected):
        assert price_impact_bps(ideal, actual) == expected

    def test_cap_is_inclusive(self):
        check_price_impact(500, 500)

    def test_above_cap_raises(self):
        with pytest.raises(ExcessivePriceImpact):
            check_price_impact(501, 500)


class TestMinOutputForSlippage:
    def test_half_percent(self):
        assert min_output_for_slippage(10_000, 50) == 9_950

    def test_one_percent(self):
        assert min_output_for_slippage(9_871, 100) == 9_772

    def test_out_of_range_raises(self):
        with pytest.raises(InvalidInput):
            min_output_for_slippage(10_000, 10_001)
