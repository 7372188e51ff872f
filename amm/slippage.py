"""Curve-agnostic slippage and deadline guards.

These checks are shared by both pool variants. Each variant computes its
own "ideal" output for price impact because the ideal rate depends on the
curve shape; the comparison against the cap lives here.
"""

from amm.constants import BPS_DENOMINATOR, PRICE_SCALE
from amm.errors import (
    EmptyReserves,
    ExcessivePriceImpact,
    Expired,
    InvalidInput,
    PriceLimitExceeded,
    SlippageExceeded,
)
from amm.safe_int import S


def check_deadline(now: int, deadline: int) -> None:
    """Raise Expired if now is past the deadline (ms)."""
    if now > deadline:
        raise Expired(f"deadline {deadline} passed (now={now})")


def check_min_output(actual: int, minimum: int) -> None:
    """Raise SlippageExceeded if actual output is below the caller's minimum."""
    if actual < minimum:
        raise SlippageExceeded(f"output {actual} below minimum {minimum}")


def check_price_limit(amount_in: int, amount_out: int, max_price_scaled: int) -> None:
    """Raise PriceLimitExceeded if amount_in / amount_out (scaled 1e9) exceeds the limit.

    Raises:
        EmptyReserves: If amount_out is zero (price undefined)
        PriceLimitExceeded: If the execution price is above max_price_scaled
    """
    if amount_out <= 0:
        raise EmptyReserves("cannot price a trade with zero output")
    price = ((S(amount_in) * S(PRICE_SCALE)).checked_u256() // S(amount_out)).value
    if price > max_price_scaled:
        raise PriceLimitExceeded(f"execution price {price} above limit {max_price_scaled}")


def price_impact_bps(ideal_out: int, actual_out: int) -> int:
    """floor((ideal - actual) * 10000 / ideal); zero when actual >= ideal."""
    if ideal_out <= 0 or actual_out >= ideal_out:
        return 0
    return ((S(ideal_out) - S(actual_out)) * S(BPS_DENOMINATOR) // S(ideal_out)).value


def check_price_impact(impact_bps: int, max_impact_bps: int) -> None:
    if impact_bps > max_impact_bps:
        raise ExcessivePriceImpact(f"price impact {impact_bps} bps above cap {max_impact_bps} bps")


def min_output_for_slippage(expected_out: int, slippage_bps: int) -> int:
    """Minimum acceptable output for a slippage tolerance in basis points."""
    if slippage_bps < 0 or slippage_bps > BPS_DENOMINATOR:
        raise InvalidInput(f"slippage_bps out of range: {slippage_bps}")
    return (S(expected_out) * S(BPS_DENOMINATOR - slippage_bps) // S(BPS_DENOMINATOR)).value
