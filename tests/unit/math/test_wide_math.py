"""Tests for constant-product helper math."""

import pytest

from amm.errors import EmptyReserves, InvalidFee, InvalidInput, ZeroAmount
from amm.math.wide_math import (
    constant_product_output,
    min_value,
    mul_div,
    mul_div_up,
    quote,
    sqrt,
)
from amm.safe_int import U64_MAX, DivisionByZero, IntegerOverflow


class TestSqrt:
    """Tests for the integer square root."""

    @pytest.mark.parametrize(
        "n,expected",
        [(0, 0), (1, 1), (2, 1), (3, 1), (4, 2), (15, 3), (16, 4), (10**12, 10**6)],
    )
    def test_known_values(self, n, expected):
        assert sqrt(n) == expected

    @pytest.mark.parametrize(
        "n",
        [5, 99, 10_000, 999_999_999, 2**64 - 1, 2**127 + 12345, U64_MAX * U64_MAX, 2**255],
    )
    def test_floor_bounds(self, n):
        """sqrt(n)^2 <= n < (sqrt(n) + 1)^2."""
        root = sqrt(n)
        assert root * root <= n < (root + 1) * (root + 1)

    def test_negative_raises(self):
        with pytest.raises(InvalidInput):
            sqrt(-1)


class TestConstantProductOutput:
    """Tests for the constant-product output formula."""

    def test_reference_swap(self):
        """10,000 in at 30 bps on (1e6, 1e6): floor(9970 * 1e6 / 1,009,970)."""
        assert constant_product_output(10_000, 10**6, 10**6, 30) == 9871

    def test_zero_fee_on_net_input(self):
        """Pricing a pre-fee-deducted input with fee 0 gives the same output."""
        assert constant_product_output(9970, 10**6, 10**6, 0) == 9871

    def test_output_below_reserve(self):
        out = constant_product_output(10**12, 10**6, 10**6, 0)
        assert out < 10**6

    def test_zero_amount_raises(self):
        with pytest.raises(ZeroAmount):
            constant_product_output(0, 100, 100, 30)

    @pytest.mark.parametrize("reserve_in,reserve_out", [(0, 100), (100, 0)])
    def test_empty_reserves_raise(self, reserve_in, reserve_out):
        with pytest.raises(EmptyReserves):
            constant_product_output(10, reserve_in, reserve_out, 30)

    @pytest.mark.parametrize("fee_bps", [-1, 10_001])
    def test_invalid_fee_raises(self, fee_bps):
        with pytest.raises(InvalidFee):
            constant_product_output(10, 100, 100, fee_bps)

    def test_intermediate_overflow_raises(self):
        """Products outside u256 abort instead of wrapping."""
        with pytest.raises(IntegerOverflow):
            constant_product_output(2**200, 2**100, 2**100, 0)


class TestHelpers:
    """Tests for quote, min and mul_div."""

    def test_quote(self):
        assert quote(100, 1000, 2000) == 200

    def test_quote_empty_reserves(self):
        with pytest.raises(EmptyReserves):
            quote(100, 0, 2000)

    def test_min_value(self):
        assert min_value(3, 7) == 3
        assert min_value(7, 3) == 3

    def test_mul_div_rounds_down(self):
        assert mul_div(7, 3, 2) == 10

    def test_mul_div_up_rounds_up(self):
        assert mul_div_up(7, 3, 2) == 11
        assert mul_div_up(6, 3, 2) == 9

    def test_mul_div_by_zero(self):
        with pytest.raises(DivisionByZero):
            mul_div(1, 1, 0)
