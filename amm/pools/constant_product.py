"""Constant-product (x * y = k) pool."""

from __future__ import annotations

from amm.constants import CURVE_CONSTANT_PRODUCT
from amm.errors import ZeroAmount
from amm.math.wide_math import constant_product_output, min_value, mul_div, mul_div_up, sqrt
from amm.pools.base import Pool
from amm.safe_int import S


class ConstantProductPool(Pool):
    """Uniswap V2 style pool.

    Deposits must follow the current reserve ratio: the smaller of the two
    proportional mints is issued and the excess of the other asset is
    refunded. The fee is taken from the input before pricing, so
    reserve_a * reserve_b never decreases across a swap.
    """

    curve = CURVE_CONSTANT_PRODUCT

    def _initial_liquidity(self, amount_a: int, amount_b: int, now: int) -> int:
        return sqrt((S(amount_a) * S(amount_b)).checked_u256().value)

    def _validate_deposit(self, amount_a: int, amount_b: int) -> None:
        if amount_a <= 0 or amount_b <= 0:
            raise ZeroAmount("deposit needs both assets")

    def _deposit_shares(self, amount_a: int, amount_b: int, now: int) -> tuple[int, int, int]:
        st = self.state
        total = st.total_liquidity
        shares = min_value(
            mul_div(amount_a, total, st.reserve_a),
            mul_div(amount_b, total, st.reserve_b),
        )
        if shares == 0:
            return 0, 0, 0
        # Round the absorbed amounts up so existing holders are never diluted
        used_a = mul_div_up(shares, st.reserve_a, total)
        used_b = mul_div_up(shares, st.reserve_b, total)
        return shares, used_a, used_b

    def _output_for(
        self, net_in: int, reserve_in: int, reserve_out: int, now: int
    ) -> tuple[int, int]:
        amount_out = constant_product_output(net_in, reserve_in, reserve_out, 0)
        ideal_out = mul_div(net_in, reserve_out, reserve_in)
        return amount_out, ideal_out

    def _invariant(self, reserve_a: int, reserve_b: int, now: int) -> int:
        return (S(reserve_a) * S(reserve_b)).value
