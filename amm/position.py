"""Per-holder share ledger and fee accounting.

Fees are distributed with a lazy accumulator: each pool keeps a
monotonically increasing acc_fee_per_share (scaled by ACC_PRECISION) and
each position keeps a fee debt, the part of the accumulator it has already
been credited with. The claimable fee is

    shares * acc_fee_per_share / ACC_PRECISION - fee_debt

so a swap never has to touch individual positions. A position references
its pool by id only; pools never store or enumerate positions.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from amm.constants import ACC_PRECISION, BPS_DENOMINATOR
from amm.errors import (
    EmptyReserves,
    InsufficientShares,
    InvalidInput,
    PositionMismatch,
    RoundingDrift,
    ZeroAmount,
)
from amm.math.wide_math import mul_div
from amm.safe_int import S

# Largest rounding drift (in base units) tolerated when splitting fee debt
DRIFT_TOLERANCE = 1


def accrued(shares: int, acc_fee_per_share: int) -> int:
    """Fees earned by shares since the accumulator started: shares * acc / 1e12."""
    return mul_div(shares, acc_fee_per_share, ACC_PRECISION)


def price_ratio(reserve_a: int, reserve_b: int) -> int:
    """reserve_b / reserve_a scaled by ACC_PRECISION."""
    if reserve_a <= 0 or reserve_b <= 0:
        raise EmptyReserves(f"reserves must be positive: ({reserve_a}, {reserve_b})")
    return mul_div(reserve_b, ACC_PRECISION, reserve_a)


def _split_debt(debt: int, liquidity: int, shares: int, acc: int) -> tuple[int, int]:
    """Move the removed fraction of a fee debt out of a position.

    Returns (fee_owed_for_removed_shares, debt_for_remaining_shares).

    debt_removed = debt * shares / liquidity. Flooring can leave the
    remaining shares with a debt one unit above what they have accrued; that
    unit is charged to the removed side so the debt never exceeds the
    accrued amount. The payout plus the remaining claimable never exceeds
    the position's claimable fee before the split.
    """
    claimable_total = (S(accrued(liquidity, acc)) - S(debt)).value
    debt_removed = mul_div(debt, shares, liquidity)
    remaining_debt = debt - debt_removed
    remaining_accrued = accrued(liquidity - shares, acc)

    if remaining_debt > remaining_accrued:
        drift = remaining_debt - remaining_accrued
        if drift > DRIFT_TOLERANCE:
            raise RoundingDrift(f"fee debt drift {drift} exceeds tolerance")
        debt_removed += drift
        remaining_debt = remaining_accrued

    fee_owed = accrued(shares, acc) - debt_removed
    if fee_owed < -DRIFT_TOLERANCE:
        raise RoundingDrift(f"removed fee {fee_owed} below tolerance")
    remaining_claimable = remaining_accrued - remaining_debt
    fee_owed = max(0, min(fee_owed, claimable_total - remaining_claimable))
    return fee_owed, remaining_debt


@dataclass
class Position:
    """A liquidity provider's stake in one pool.

    Attributes:
        pool_id: Identifier of the pool (a reference, not ownership)
        liquidity: Shares owned
        fee_debt_a: Accumulator value already credited for asset A
        fee_debt_b: Accumulator value already credited for asset B
        original_deposit_a: Running total of A deposited (basis for IL)
        original_deposit_b: Running total of B deposited (basis for IL)
        entry_price_ratio: reserve_b / reserve_a (scaled 1e12) at the first deposit
        position_id: Unique identifier
        closed: Set on full removal; a closed position rejects every operation
    """

    pool_id: str
    liquidity: int
    fee_debt_a: int
    fee_debt_b: int
    original_deposit_a: int
    original_deposit_b: int
    entry_price_ratio: int
    position_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    closed: bool = False

    @classmethod
    def new(
        cls,
        pool_id: str,
        shares: int,
        amount_a: int,
        amount_b: int,
        acc_a: int,
        acc_b: int,
        reserve_a: int,
        reserve_b: int,
    ) -> Position:
        """Open a position that owes nothing retroactively.

        Args:
            pool_id: Pool the shares belong to
            shares: Shares minted to the holder
            amount_a: Amount of A deposited
            amount_b: Amount of B deposited
            acc_a: Pool's current fee-per-share accumulator for A
            acc_b: Pool's current fee-per-share accumulator for B
            reserve_a: Pool reserve of A after the deposit
            reserve_b: Pool reserve of B after the deposit
        """
        if shares <= 0:
            raise ZeroAmount("position must hold shares")
        return cls(
            pool_id=pool_id,
            liquidity=shares,
            fee_debt_a=accrued(shares, acc_a),
            fee_debt_b=accrued(shares, acc_b),
            original_deposit_a=amount_a,
            original_deposit_b=amount_b,
            entry_price_ratio=price_ratio(reserve_a, reserve_b),
        )

    def ensure_open(self, pool_id: str) -> None:
        """Raise PositionMismatch unless this is an open position of pool_id."""
        if self.closed:
            raise PositionMismatch(f"position {self.position_id} is closed")
        if self.pool_id != pool_id:
            raise PositionMismatch(
                f"position {self.position_id} belongs to pool {self.pool_id}, not {pool_id}"
            )

    def increase(self, shares: int, amount_a: int, amount_b: int, acc_a: int, acc_b: int) -> None:
        """Add shares and deposits.

        The new shares owe nothing retroactively and the unclaimed fees of
        the existing shares are unchanged. The entry price ratio is not
        recomputed: impermanent loss is always measured against the first
        deposit.
        """
        if shares <= 0:
            raise ZeroAmount("increase must add shares")
        fee_a, fee_b = self.claimable(acc_a, acc_b)
        self.liquidity = (S(self.liquidity) + S(shares)).to_u64()
        self.fee_debt_a = accrued(self.liquidity, acc_a) - fee_a
        self.fee_debt_b = accrued(self.liquidity, acc_b) - fee_b
        self.original_deposit_a = (S(self.original_deposit_a) + S(amount_a)).to_u64()
        self.original_deposit_b = (S(self.original_deposit_b) + S(amount_b)).to_u64()

    def decrease(self, shares: int) -> None:
        """Remove shares, shrinking recorded deposits proportionally.

        The kept deposit is floor(deposit * kept / liquidity); it is never
        more than the exact share and at most one unit below it.

        Raises:
            InsufficientShares: If shares exceeds the position's liquidity
        """
        if shares <= 0:
            raise ZeroAmount("decrease must remove shares")
        if shares > self.liquidity:
            raise InsufficientShares(f"cannot remove {shares} of {self.liquidity} shares")
        kept = self.liquidity - shares
        self.original_deposit_a = mul_div(self.original_deposit_a, kept, self.liquidity)
        self.original_deposit_b = mul_div(self.original_deposit_b, kept, self.liquidity)
        self.liquidity = kept

    def claimable(self, acc_a: int, acc_b: int) -> tuple[int, int]:
        """Fees accrued and not yet withdrawn, per asset."""
        fee_a = (S(accrued(self.liquidity, acc_a)) - S(self.fee_debt_a)).value
        fee_b = (S(accrued(self.liquidity, acc_b)) - S(self.fee_debt_b)).value
        return fee_a, fee_b

    def resync_debt(self, acc_a: int, acc_b: int) -> None:
        """Mark everything accrued so far as credited (after a withdrawal)."""
        self.fee_debt_a = accrued(self.liquidity, acc_a)
        self.fee_debt_b = accrued(self.liquidity, acc_b)

    def split_fee_debt(self, shares: int, acc_a: int, acc_b: int) -> tuple[int, int]:
        """Detach the fee debt of shares about to be removed.

        Must be called before decrease(). Returns the fees owed for the
        removed shares; the remaining shares keep their unclaimed fees.
        """
        if shares <= 0 or shares > self.liquidity:
            raise InsufficientShares(f"cannot split {shares} of {self.liquidity} shares")
        fee_a, self.fee_debt_a = _split_debt(self.fee_debt_a, self.liquidity, shares, acc_a)
        fee_b, self.fee_debt_b = _split_debt(self.fee_debt_b, self.liquidity, shares, acc_b)
        return fee_a, fee_b

    def close(self) -> None:
        self.liquidity = 0
        self.fee_debt_a = 0
        self.fee_debt_b = 0
        self.original_deposit_a = 0
        self.original_deposit_b = 0
        self.closed = True


def impermanent_loss(
    position: Position,
    current_value_a: int,
    current_value_b: int,
    current_price_ratio: int,
) -> int:
    """Impermanent loss of a position in basis points.

    Both sides are valued in asset A at the current price
    (current_price_ratio = B per A, scaled 1e12):
        held = deposit_a + deposit_b / price
        lp   = value_a + value_b / price
        IL   = max(0, floor((held - lp) * 10000 / held))

    Raises:
        InvalidInput: If current_price_ratio is not positive
    """
    if current_price_ratio <= 0:
        raise InvalidInput(f"price ratio must be positive: {current_price_ratio}")

    held = position.original_deposit_a + mul_div(
        position.original_deposit_b, ACC_PRECISION, current_price_ratio
    )
    lp_value = current_value_a + mul_div(current_value_b, ACC_PRECISION, current_price_ratio)

    if held == 0 or lp_value >= held:
        return 0
    return mul_div(held - lp_value, BPS_DENOMINATOR, held)
