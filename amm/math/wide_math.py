"""Overflow-checked helpers for constant-product pool math.

All intermediate products are computed with SafeInt and validated against
the u256 range; results that end up in pool state are validated as u64 by
the caller.
"""

from amm.constants import BPS_DENOMINATOR
from amm.errors import EmptyReserves, InvalidFee, InvalidInput, ZeroAmount
from amm.safe_int import S


def sqrt(y: int) -> int:
    """Integer square root (Babylonian method).

    Returns the largest z with z * z <= y.

    Raises:
        InvalidInput: If y is negative
    """
    if y < 0:
        raise InvalidInput(f"sqrt of negative value: {y}")
    if y == 0:
        return 0
    if y <= 3:
        return 1

    z = y
    x = y // 2 + 1
    while x < z:
        z = x
        x = (y // x + x) // 2
    return z


def min_value(a: int, b: int) -> int:
    return a if a < b else b


def constant_product_output(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_bps: int,
) -> int:
    """Calculate output amount using the constant product formula.

    Formula: amount_out = (in * (10000 - fee) * res_out) / (res_in * 10000 + in * (10000 - fee))

    Args:
        amount_in: Input token amount
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool
        fee_bps: Fee deducted from the input, in basis points

    Returns:
        Output token amount (rounded down)

    Raises:
        ZeroAmount: If amount_in is zero
        EmptyReserves: If either reserve is zero
        InvalidFee: If fee_bps is outside [0, 10000]
    """
    if amount_in <= 0:
        raise ZeroAmount("amount_in must be positive")
    if reserve_in <= 0 or reserve_out <= 0:
        raise EmptyReserves(f"reserves must be positive: ({reserve_in}, {reserve_out})")
    if fee_bps < 0 or fee_bps > BPS_DENOMINATOR:
        raise InvalidFee(f"fee_bps out of range: {fee_bps}")

    amount_in_with_fee = S(amount_in) * S(BPS_DENOMINATOR - fee_bps)
    numerator = (amount_in_with_fee * S(reserve_out)).checked_u256()
    denominator = (S(reserve_in) * S(BPS_DENOMINATOR) + amount_in_with_fee).checked_u256()

    return (numerator // denominator).to_u64()


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Equivalent amount of B for amount_a at the current reserve ratio.

    Read-only estimate for display; never used for swap execution.
    """
    if amount_a <= 0:
        raise ZeroAmount("amount_a must be positive")
    if reserve_a <= 0 or reserve_b <= 0:
        raise EmptyReserves(f"reserves must be positive: ({reserve_a}, {reserve_b})")

    return ((S(amount_a) * S(reserve_b)).checked_u256() // S(reserve_a)).to_u64()


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator) with a checked u256 product.

    Raises:
        DivisionByZero: If denominator is zero
        IntegerOverflow: If the product or the result leaves u256
    """
    return ((S(a) * S(b)).checked_u256() // S(denominator)).to_u256()


def mul_div_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator) with a checked u256 product."""
    return (S(a) * S(b)).checked_u256().ceiling_div(denominator).to_u256()
