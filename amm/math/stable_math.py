"""Stable pool math.

Core math functions for the two-asset amplified (StableSwap-style) curve:

    Ann * S + D = Ann * D + D^3 / (4 * x * y),    Ann = amp * n^n = 4 * amp

Both solvers are bounded fixed-point loops. They never return a sentinel:
a zero denominator, a loop that fails to converge within
MAX_SOLVER_ITERATIONS, or a value leaving its integer width aborts, since an
incorrect D or y can be used to drain a pool.

IMPORTANT: All financial calculations use SafeInt for overflow protection
and explicit bounds checking.
"""

import structlog

from amm.constants import (
    ACC_PRECISION,
    MAX_AMP,
    MAX_SOLVER_ITERATIONS,
    MIN_AMP,
    N_COINS,
    RELATIVE_TOLERANCE_INV,
)
from amm.errors import (
    ConvergenceFailure,
    EmptyReserves,
    InvalidAmplification,
    InvalidInput,
    ZeroAmount,
)
from amm.safe_int import S, SafeInt

logger = structlog.get_logger()

# Number of unit steps allowed when snapping y to the exact ceiling root
_ROOT_SNAP_STEPS = 3


def validate_amp(amp: int) -> None:
    """Raise InvalidAmplification unless MIN_AMP <= amp <= MAX_AMP."""
    if amp < MIN_AMP or amp > MAX_AMP:
        raise InvalidAmplification(f"amp {amp} outside [{MIN_AMP}, {MAX_AMP}]")


def _converged(new: SafeInt, prev: SafeInt) -> bool:
    """|new - prev| <= 1, or relative change <= 1e-15."""
    diff = new.abs_diff(prev)
    if diff <= 1:
        return True
    return diff * RELATIVE_TOLERANCE_INV <= new


def get_d(x: int, y: int, amp: int) -> int:
    """Calculate the stable invariant D by fixed-point iteration.

    Algorithm:
        1. Initial guess: D = x + y
        2. D_p = D^3 / (4xy), computed stepwise as D * D / (2x) * D / (2y)
        3. D' = (Ann * S + D_p * n) * D / ((Ann - 1) * D + (n + 1) * D_p)
        4. Stop when |D' - D| <= 1 or the relative change is <= 1e-15

    Args:
        x: Balance of the first asset
        y: Balance of the second asset
        amp: Amplification coefficient (unscaled)

    Returns:
        The invariant D (fits in u128)

    Raises:
        InvalidAmplification: If amp is out of range
        InvalidInput: If a balance is negative
        ConvergenceFailure: If the denominator is zero or iteration doesn't converge
        IntegerOverflow: If an intermediate leaves u256 or D leaves u128
    """
    validate_amp(amp)
    if x < 0 or y < 0:
        raise InvalidInput(f"balances must be non-negative: ({x}, {y})")

    if x == 0 and y == 0:
        return 0
    if x == 0 or y == 0:
        # Constant-sum degeneracy: the product term vanishes
        return S(x + y).to_u128()

    # Fixed division order keeps D exactly symmetric in (x, y)
    sx, sy = S(min(x, y)), S(max(x, y))
    sum_balances = sx + sy
    ann = S(amp) * S(N_COINS**N_COINS)
    d = sum_balances

    for _ in range(MAX_SOLVER_ITERATIONS):
        d_p = d
        d_p = ((d_p * d).checked_u256() // (sx * S(N_COINS))).checked_u256()
        d_p = ((d_p * d).checked_u256() // (sy * S(N_COINS))).checked_u256()

        numerator = ((ann * sum_balances + d_p * S(N_COINS)) * d).checked_u256()
        denominator = ((ann - S(1)) * d + S(N_COINS + 1) * d_p).checked_u256()
        if denominator == 0:
            raise ConvergenceFailure("get_d denominator is zero")

        d_new = numerator // denominator
        d_new.to_u128()

        if _converged(d_new, d):
            return d_new.value
        d = d_new

    logger.warning("stable_invariant_did_not_converge", x=x, y=y, amp=amp)
    raise ConvergenceFailure(f"get_d did not converge after {MAX_SOLVER_ITERATIONS} iterations")


def _root_excess(y: int, b_minus_d: int, c: int) -> int:
    """Value of y^2 + (b - D) * y - c; non-negative at or above the root."""
    return y * (y + b_minus_d) - c


def get_y(x: int, d: int, amp: int) -> int:
    """Solve for the other balance y given x and the invariant D.

    Solves y^2 + (x + D/Ann - D) * y = D^3 / (4 * x * Ann) with the
    iteration y' = (y^2 + c) / (2y + b - D), rounding up so the pool keeps
    any rounding dust. The converged value is snapped to the exact integer
    ceiling of the root.

    Args:
        x: The known (new) balance
        d: The invariant to preserve
        amp: Amplification coefficient (unscaled)

    Returns:
        The balance y (fits in u128)

    Raises:
        InvalidAmplification: If amp is out of range
        InvalidInput: If x or d is not positive
        ConvergenceFailure: If the denominator is non-positive or iteration doesn't converge
        IntegerOverflow: If an intermediate leaves u256 or y leaves u128
    """
    validate_amp(amp)
    if x <= 0:
        raise InvalidInput(f"x must be positive: {x}")
    if d <= 0:
        raise InvalidInput(f"invariant must be positive: {d}")

    sx, sd = S(x), S(d)
    ann = S(amp) * S(N_COINS**N_COINS)

    # c = D^3 / (4 * x * Ann), stepwise
    c = ((sd * sd).checked_u256() // (sx * S(N_COINS))).checked_u256()
    c = ((c * sd).checked_u256() // (ann * S(N_COINS))).checked_u256()
    b = sx + sd // ann
    # b - D may be negative; kept as a plain int
    b_minus_d = b.value - d

    y = sd
    for _ in range(MAX_SOLVER_ITERATIONS):
        denominator = 2 * y.value + b_minus_d
        if denominator <= 0:
            logger.warning("stable_get_y_degenerate", x=x, d=d, amp=amp)
            raise ConvergenceFailure("get_y denominator became non-positive")

        y_new = (y * y + c).checked_u256().ceiling_div(denominator)
        y_new.to_u128()

        if _converged(y_new, y):
            return _snap_to_ceiling_root(y_new.value, b_minus_d, c.value)
        y = y_new

    logger.warning("stable_get_y_did_not_converge", x=x, d=d, amp=amp)
    raise ConvergenceFailure(f"get_y did not converge after {MAX_SOLVER_ITERATIONS} iterations")


def _snap_to_ceiling_root(y: int, b_minus_d: int, c: int) -> int:
    for _ in range(_ROOT_SNAP_STEPS):
        if _root_excess(y, b_minus_d, c) >= 0:
            break
        y += 1
    else:
        raise ConvergenceFailure("get_y result is below the root")

    for _ in range(_ROOT_SNAP_STEPS):
        if y <= 1 or _root_excess(y - 1, b_minus_d, c) < 0:
            return y
        y -= 1
    raise ConvergenceFailure("get_y result is above the root")


def calc_out_given_in(amount_in: int, reserve_in: int, reserve_out: int, amp: int) -> int:
    """Calculate output amount for a given (post-fee) input.

    Algorithm:
        1. Calculate current invariant D
        2. Add amount_in to reserve_in
        3. Solve for the new reserve_out given D
        4. Return: reserve_out - new_reserve_out

    get_y rounds the new balance up to the ceiling root, so the pool keeps
    the rounding dust.

    Raises:
        ZeroAmount: If amount_in is zero
        EmptyReserves: If either reserve is zero
        InsufficientLiquidity: If the solved balance is not strictly inside (0, reserve_out)
    """
    if amount_in <= 0:
        raise ZeroAmount("amount_in must be positive")
    if reserve_in <= 0 or reserve_out <= 0:
        raise EmptyReserves(f"reserves must be positive: ({reserve_in}, {reserve_out})")

    d = get_d(reserve_in, reserve_out, amp)
    new_reserve_out = get_y(reserve_in + amount_in, d, amp)

    if not 0 < new_reserve_out < reserve_out:
        raise EmptyReserves(
            f"degenerate root: new reserve {new_reserve_out} not in (0, {reserve_out})"
        )

    return reserve_out - new_reserve_out


def marginal_rate(reserve_in: int, reserve_out: int, amp: int) -> int:
    """Local exchange rate (out per in), scaled by ACC_PRECISION.

    Prices a 1-unit trade on the curve evaluated at ACC_PRECISION scale.
    The invariant is homogeneous of degree one, so this is the same as
    pricing a 1e-12-unit trade on the unscaled curve.
    """
    if reserve_in <= 0 or reserve_out <= 0:
        raise EmptyReserves(f"reserves must be positive: ({reserve_in}, {reserve_out})")

    scaled_in = reserve_in * ACC_PRECISION
    scaled_out = reserve_out * ACC_PRECISION
    d = get_d(scaled_in, scaled_out, amp)
    new_out = get_y(scaled_in + ACC_PRECISION, d, amp)
    return max(0, scaled_out - new_out)
