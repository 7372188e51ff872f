"""Shared pool state machine.

Both pool variants share the same operation vocabulary (add/remove
liquidity, swap, fee withdrawal) and the same accounting; they differ only
in how shares are minted for a deposit, how a swap output is priced, and
which invariant must not decrease. Those hooks are the abstract methods of
Pool.

Every operation is all-or-nothing: validation and pricing run first, and
mutation happens inside Pool._atomic(), which restores the pool state and
any involved positions if a post-condition fails.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, fields, replace
from typing import Any, ClassVar, Self

import structlog

from amm.config import DEFAULT_POOL_CONFIG, PoolConfig
from amm.constants import (
    ACC_PRECISION,
    BPS_DENOMINATOR,
    MAX_FEE_BPS,
    MAX_PROTOCOL_FEE_BPS,
    MIN_INITIAL_LIQUIDITY,
    MINIMUM_LIQUIDITY,
)
from amm.errors import (
    EmptyReserves,
    InsufficientInitialLiquidity,
    InsufficientLiquidity,
    InsufficientShares,
    InvalidFee,
    InvalidInput,
    InvariantViolation,
    PoolPaused,
    ZeroAmount,
)
from amm.math.wide_math import mul_div
from amm.models import PoolView, PositionView, SwapQuoteView
from amm.position import Position, impermanent_loss, price_ratio
from amm.safe_int import S
from amm.slippage import (
    check_deadline,
    check_min_output,
    check_price_impact,
    check_price_limit,
    price_impact_bps,
)

logger = structlog.get_logger()


@dataclass
class PoolState:
    """Mutable balances and parameters owned exclusively by a pool."""

    fee_percent: int
    protocol_fee_percent: int
    max_price_impact_bps: int
    reserve_a: int = 0
    reserve_b: int = 0
    # Undistributed LP fees, held apart from the reserves
    fee_a: int = 0
    fee_b: int = 0
    protocol_fee_a: int = 0
    protocol_fee_b: int = 0
    total_liquidity: int = 0
    # Fee-per-share accumulators, scaled by ACC_PRECISION
    acc_fee_per_share_a: int = 0
    acc_fee_per_share_b: int = 0
    paused: bool = False
    # Statistics
    volume_a: int = 0
    volume_b: int = 0
    fees_collected_a: int = 0
    fees_collected_b: int = 0
    swap_count: int = 0


@dataclass(frozen=True)
class SwapResult:
    """Result of executing a swap."""

    a_to_b: bool
    amount_in: int
    amount_out: int
    fee: int
    protocol_fee: int
    lp_fee: int
    price_impact_bps: int


@dataclass(frozen=True)
class LiquidityResult:
    """Result of a deposit (or fee compounding).

    refund_a/refund_b are the parts of the offered amounts the pool did not
    absorb; they stay with the caller.
    """

    position: Position
    shares: int
    amount_a: int
    amount_b: int
    refund_a: int = 0
    refund_b: int = 0


@dataclass(frozen=True)
class RemoveResult:
    """Amounts paid out by a (partial) removal."""

    shares: int
    amount_a: int
    amount_b: int
    fee_a: int
    fee_b: int

    @property
    def total_a(self) -> int:
        return self.amount_a + self.fee_a

    @property
    def total_b(self) -> int:
        return self.amount_b + self.fee_b


@dataclass(frozen=True)
class _SwapPlan:
    a_to_b: bool
    amount_in: int
    net_in: int
    fee: int
    protocol_fee: int
    lp_fee: int
    amount_out: int
    price_impact_bps: int


def _validate_fee(fee_bps: int, maximum: int, name: str) -> None:
    if fee_bps < 0 or fee_bps > maximum:
        raise InvalidFee(f"{name} {fee_bps} outside [0, {maximum}] bps")


class Pool(ABC):
    """A two-asset pool.

    Subclasses provide the curve: the initial share mint, the share mint for
    later deposits, the swap output with its ideal (zero-impact) output,
    and the invariant checked after every swap.
    """

    curve: ClassVar[str]
    # How far the swap invariant may drop from rounding alone
    invariant_tolerance: ClassVar[int] = 0

    def __init__(
        self,
        asset_a: str,
        asset_b: str,
        fee_bps: int = 30,
        protocol_fee_bps: int = 0,
        *,
        pool_id: str | None = None,
        config: PoolConfig | None = None,
    ) -> None:
        if asset_a == asset_b:
            raise InvalidInput(f"pool assets must differ: {asset_a}")
        _validate_fee(fee_bps, MAX_FEE_BPS, "fee_bps")
        _validate_fee(protocol_fee_bps, MAX_PROTOCOL_FEE_BPS, "protocol_fee_bps")

        self.pool_id = pool_id or uuid.uuid4().hex
        self.asset_a = asset_a
        self.asset_b = asset_b
        self.config = config or DEFAULT_POOL_CONFIG
        self.state = self._initial_state(
            fee_percent=fee_bps,
            protocol_fee_percent=protocol_fee_bps,
            max_price_impact_bps=self.config.max_price_impact_bps,
        )

    def _initial_state(self, **kwargs: Any) -> PoolState:
        return PoolState(**kwargs)

    @classmethod
    def create(cls, asset_a: str, asset_b: str, **kwargs: Any) -> Self:
        """Create an empty pool (zero reserves and accumulators)."""
        pool = cls(asset_a, asset_b, **kwargs)
        logger.info(
            "pool_created",
            pool_id=pool.pool_id,
            curve=cls.curve,
            asset_a=asset_a,
            asset_b=asset_b,
            fee_bps=pool.state.fee_percent,
        )
        return pool

    @classmethod
    def create_with_liquidity(
        cls,
        asset_a: str,
        asset_b: str,
        amount_a: int,
        amount_b: int,
        *,
        min_liquidity: int = 0,
        now: int = 0,
        deadline: int | None = None,
        **kwargs: Any,
    ) -> tuple[Self, LiquidityResult]:
        """Create a pool and make its first deposit as one step.

        If the deposit fails the pool is never handed out.
        """
        pool = cls.create(asset_a, asset_b, **kwargs)
        result = pool.add_liquidity(
            amount_a, amount_b, min_liquidity=min_liquidity, now=now, deadline=deadline
        )
        return pool, result

    # --- Curve hooks ---

    @abstractmethod
    def _initial_liquidity(self, amount_a: int, amount_b: int, now: int) -> int:
        """Total shares created by the first deposit (including the burned floor)."""
        ...

    @abstractmethod
    def _validate_deposit(self, amount_a: int, amount_b: int) -> None:
        """Reject deposit amounts the curve cannot accept."""
        ...

    @abstractmethod
    def _deposit_shares(self, amount_a: int, amount_b: int, now: int) -> tuple[int, int, int]:
        """Shares minted for a later deposit, and the amounts actually absorbed.

        Returns:
            (shares, used_a, used_b)
        """
        ...

    @abstractmethod
    def _output_for(
        self, net_in: int, reserve_in: int, reserve_out: int, now: int
    ) -> tuple[int, int]:
        """Swap output for a post-fee input.

        Returns:
            (amount_out, ideal_out) where ideal_out is the zero-impact output
        """
        ...

    @abstractmethod
    def _invariant(self, reserve_a: int, reserve_b: int, now: int) -> int:
        """Value that a swap must never decrease (beyond invariant_tolerance)."""
        ...

    # --- Getters ---

    @property
    def reserves(self) -> tuple[int, int]:
        return self.state.reserve_a, self.state.reserve_b

    @property
    def fee_percent(self) -> int:
        return self.state.fee_percent

    @property
    def protocol_fee_percent(self) -> int:
        return self.state.protocol_fee_percent

    @property
    def total_liquidity(self) -> int:
        return self.state.total_liquidity

    @property
    def protocol_fee_balances(self) -> tuple[int, int]:
        return self.state.protocol_fee_a, self.state.protocol_fee_b

    @property
    def lp_fee_balances(self) -> tuple[int, int]:
        return self.state.fee_a, self.state.fee_b

    @property
    def is_paused(self) -> bool:
        return self.state.paused

    def price_ratio(self) -> int:
        """reserve_b / reserve_a scaled by 1e12."""
        return price_ratio(self.state.reserve_a, self.state.reserve_b)

    # --- Guards ---

    def _require_active(self) -> None:
        if self.state.paused:
            raise PoolPaused(f"pool {self.pool_id} is paused")

    def _require_initialized(self) -> None:
        if self.state.total_liquidity == 0:
            raise EmptyReserves(f"pool {self.pool_id} has no liquidity")

    @staticmethod
    def _check_deadline(now: int, deadline: int | None) -> None:
        if deadline is not None:
            check_deadline(now, deadline)

    @contextmanager
    def _atomic(self, *positions: Position | None) -> Iterator[None]:
        """Apply a state transition fully or not at all."""
        saved_state = replace(self.state)
        saved_positions = [(p, replace(p)) for p in positions if p is not None]
        try:
            yield
        except Exception:
            self.state = saved_state
            for position, saved in saved_positions:
                for f in fields(position):
                    setattr(position, f.name, getattr(saved, f.name))
            raise

    # --- Liquidity ---

    def add_liquidity(
        self,
        amount_a: int,
        amount_b: int,
        *,
        min_liquidity: int = 0,
        position: Position | None = None,
        now: int = 0,
        deadline: int | None = None,
    ) -> LiquidityResult:
        """Deposit both assets and mint shares.

        The first deposit mints sqrt-style (curve-specific) total shares of
        which MINIMUM_LIQUIDITY are burned. With position= the deposit
        increases that position instead of opening a new one.

        Raises:
            PoolPaused: If the pool is paused
            Expired: If deadline has passed
            ZeroAmount: If the amounts are not acceptable or mint zero shares
            InsufficientInitialLiquidity: If the first deposit is too small
            SlippageExceeded: If fewer than min_liquidity shares are minted
        """
        self._require_active()
        self._check_deadline(now, deadline)
        if position is not None:
            position.ensure_open(self.pool_id)

        st = self.state
        if st.total_liquidity == 0:
            if position is not None:
                raise InvalidInput("cannot increase a position in an uninitialized pool")
            if amount_a <= 0 or amount_b <= 0:
                raise ZeroAmount("first deposit needs both assets")
            total = self._initial_liquidity(amount_a, amount_b, now)
            if total < MIN_INITIAL_LIQUIDITY:
                raise InsufficientInitialLiquidity(
                    f"initial liquidity {total} below {MIN_INITIAL_LIQUIDITY}"
                )
            shares = total - MINIMUM_LIQUIDITY
            used_a, used_b = amount_a, amount_b
            new_total = total
        else:
            self._validate_deposit(amount_a, amount_b)
            shares, used_a, used_b = self._deposit_shares(amount_a, amount_b, now)
            new_total = st.total_liquidity + shares

        if shares <= 0:
            raise ZeroAmount("deposit mints zero shares")
        check_min_output(shares, min_liquidity)

        with self._atomic(position):
            st = self.state
            st.reserve_a = (S(st.reserve_a) + S(used_a)).to_u64()
            st.reserve_b = (S(st.reserve_b) + S(used_b)).to_u64()
            st.total_liquidity = S(new_total).to_u64()
            if position is None:
                position = Position.new(
                    self.pool_id,
                    shares,
                    used_a,
                    used_b,
                    st.acc_fee_per_share_a,
                    st.acc_fee_per_share_b,
                    st.reserve_a,
                    st.reserve_b,
                )
            else:
                position.increase(
                    shares, used_a, used_b, st.acc_fee_per_share_a, st.acc_fee_per_share_b
                )

        logger.debug(
            "liquidity_added",
            pool_id=self.pool_id,
            position_id=position.position_id,
            shares=shares,
            amount_a=used_a,
            amount_b=used_b,
            total_liquidity=self.state.total_liquidity,
        )
        return LiquidityResult(
            position=position,
            shares=shares,
            amount_a=used_a,
            amount_b=used_b,
            refund_a=amount_a - used_a,
            refund_b=amount_b - used_b,
        )

    def _principal_for(self, shares: int) -> tuple[int, int]:
        """Reserve amounts redeemable by shares."""
        st = self.state
        return (
            mul_div(st.reserve_a, shares, st.total_liquidity),
            mul_div(st.reserve_b, shares, st.total_liquidity),
        )

    def _debit(self, shares: int, amount_a: int, amount_b: int, fee_a: int, fee_b: int) -> None:
        """Take a withdrawal out of reserves, fee balances and share supply."""
        st = self.state
        if fee_a > st.fee_a or fee_b > st.fee_b:
            raise InsufficientLiquidity(
                f"fee payout ({fee_a}, {fee_b}) exceeds held fees ({st.fee_a}, {st.fee_b})"
            )
        st.reserve_a = (S(st.reserve_a) - S(amount_a)).value
        st.reserve_b = (S(st.reserve_b) - S(amount_b)).value
        st.fee_a -= fee_a
        st.fee_b -= fee_b
        st.total_liquidity = (S(st.total_liquidity) - S(shares)).value
        if st.total_liquidity < MINIMUM_LIQUIDITY or st.reserve_a == 0 or st.reserve_b == 0:
            raise InvariantViolation("withdrawal would empty the pool")

    def remove_liquidity(
        self,
        position: Position,
        min_a: int = 0,
        min_b: int = 0,
        *,
        now: int = 0,
        deadline: int | None = None,
    ) -> RemoveResult:
        """Redeem all of a position's shares and close it.

        Pays reserve * shares / total of each asset plus the unclaimed fees.
        The minimums apply to the reserve amounts.
        """
        self._require_active()
        self._check_deadline(now, deadline)
        position.ensure_open(self.pool_id)

        shares = position.liquidity
        amount_a, amount_b = self._principal_for(shares)
        check_min_output(amount_a, min_a)
        check_min_output(amount_b, min_b)
        st = self.state
        fee_a, fee_b = position.claimable(st.acc_fee_per_share_a, st.acc_fee_per_share_b)

        with self._atomic(position):
            self._debit(shares, amount_a, amount_b, fee_a, fee_b)
            position.close()

        logger.debug(
            "liquidity_removed",
            pool_id=self.pool_id,
            position_id=position.position_id,
            shares=shares,
            amount_a=amount_a,
            amount_b=amount_b,
            fee_a=fee_a,
            fee_b=fee_b,
        )
        return RemoveResult(shares, amount_a, amount_b, fee_a, fee_b)

    def remove_liquidity_partial(
        self,
        position: Position,
        shares: int,
        min_a: int = 0,
        min_b: int = 0,
        *,
        now: int = 0,
        deadline: int | None = None,
    ) -> RemoveResult:
        """Redeem part of a position.

        The removed shares take their pro-rata part of the fee debt with
        them, so the remaining shares keep exactly their unclaimed fees.
        Removing every share is the same as remove_liquidity().
        """
        self._require_active()
        self._check_deadline(now, deadline)
        position.ensure_open(self.pool_id)
        if shares <= 0:
            raise ZeroAmount("shares must be positive")
        if shares > position.liquidity:
            raise InsufficientShares(f"cannot remove {shares} of {position.liquidity} shares")
        if shares == position.liquidity:
            return self.remove_liquidity(position, min_a, min_b, now=now, deadline=deadline)

        amount_a, amount_b = self._principal_for(shares)
        check_min_output(amount_a, min_a)
        check_min_output(amount_b, min_b)

        with self._atomic(position):
            st = self.state
            fee_a, fee_b = position.split_fee_debt(
                shares, st.acc_fee_per_share_a, st.acc_fee_per_share_b
            )
            position.decrease(shares)
            self._debit(shares, amount_a, amount_b, fee_a, fee_b)

        logger.debug(
            "liquidity_removed_partial",
            pool_id=self.pool_id,
            position_id=position.position_id,
            shares=shares,
            remaining=position.liquidity,
            amount_a=amount_a,
            amount_b=amount_b,
        )
        return RemoveResult(shares, amount_a, amount_b, fee_a, fee_b)

    # --- Swaps ---

    def _plan_swap(
        self, a_to_b: bool, amount_in: int, now: int, *, enforce_impact: bool = True
    ) -> _SwapPlan:
        if amount_in <= 0:
            raise ZeroAmount("amount_in must be positive")
        self._require_initialized()

        st = self.state
        if a_to_b:
            reserve_in, reserve_out = st.reserve_a, st.reserve_b
        else:
            reserve_in, reserve_out = st.reserve_b, st.reserve_a

        fee = mul_div(amount_in, st.fee_percent, BPS_DENOMINATOR)
        net_in = amount_in - fee
        if net_in <= 0:
            raise ZeroAmount("input is consumed entirely by the fee")

        amount_out, ideal_out = self._output_for(net_in, reserve_in, reserve_out, now)
        if amount_out <= 0:
            raise InsufficientLiquidity("swap output rounds to zero")
        if amount_out >= reserve_out:
            raise EmptyReserves("swap would drain the output reserve")

        impact = price_impact_bps(ideal_out, amount_out)
        if enforce_impact:
            check_price_impact(impact, st.max_price_impact_bps)

        protocol_fee = mul_div(fee, st.protocol_fee_percent, BPS_DENOMINATOR)
        return _SwapPlan(
            a_to_b=a_to_b,
            amount_in=amount_in,
            net_in=net_in,
            fee=fee,
            protocol_fee=protocol_fee,
            lp_fee=fee - protocol_fee,
            amount_out=amount_out,
            price_impact_bps=impact,
        )

    def _apply_swap(self, plan: _SwapPlan) -> None:
        st = self.state
        side_in, side_out = ("a", "b") if plan.a_to_b else ("b", "a")

        def add(name: str, amount: int) -> None:
            setattr(st, name, (S(getattr(st, name)) + S(amount)).to_u64())

        add(f"reserve_{side_in}", plan.net_in)
        setattr(
            st,
            f"reserve_{side_out}",
            (S(getattr(st, f"reserve_{side_out}")) - S(plan.amount_out)).value,
        )
        add(f"fee_{side_in}", plan.lp_fee)
        add(f"protocol_fee_{side_in}", plan.protocol_fee)

        acc_name = f"acc_fee_per_share_{side_in}"
        acc_delta = mul_div(plan.lp_fee, ACC_PRECISION, st.total_liquidity)
        setattr(st, acc_name, (S(getattr(st, acc_name)) + S(acc_delta)).to_u128())

        volume_name = f"volume_{side_in}"
        setattr(st, volume_name, getattr(st, volume_name) + plan.amount_in)
        collected_name = f"fees_collected_{side_in}"
        setattr(st, collected_name, getattr(st, collected_name) + plan.fee)
        st.swap_count += 1

    def _swap(
        self,
        a_to_b: bool,
        amount_in: int,
        min_out: int,
        max_price: int | None,
        now: int,
        deadline: int | None,
    ) -> SwapResult:
        self._require_active()
        self._check_deadline(now, deadline)

        plan = self._plan_swap(a_to_b, amount_in, now)
        check_min_output(plan.amount_out, min_out)
        if max_price is not None:
            check_price_limit(plan.amount_in, plan.amount_out, max_price)

        before = self._invariant(self.state.reserve_a, self.state.reserve_b, now)
        with self._atomic():
            self._apply_swap(plan)
            # Re-read live balances; never trust values cached before the update
            after = self._invariant(self.state.reserve_a, self.state.reserve_b, now)
            if after + self.invariant_tolerance < before:
                logger.warning(
                    "swap_invariant_decreased",
                    pool_id=self.pool_id,
                    before=before,
                    after=after,
                )
                raise InvariantViolation(f"invariant decreased from {before} to {after}")

        logger.debug(
            "swap_executed",
            pool_id=self.pool_id,
            a_to_b=a_to_b,
            amount_in=plan.amount_in,
            amount_out=plan.amount_out,
            fee=plan.fee,
            price_impact_bps=plan.price_impact_bps,
        )
        return SwapResult(
            a_to_b=a_to_b,
            amount_in=plan.amount_in,
            amount_out=plan.amount_out,
            fee=plan.fee,
            protocol_fee=plan.protocol_fee,
            lp_fee=plan.lp_fee,
            price_impact_bps=plan.price_impact_bps,
        )

    def swap_a_to_b(
        self,
        amount_in: int,
        min_out: int = 0,
        max_price: int | None = None,
        *,
        now: int = 0,
        deadline: int | None = None,
    ) -> SwapResult:
        """Sell amount_in of A for B.

        Args:
            amount_in: Amount of A offered (fee included)
            min_out: Minimum acceptable amount of B
            max_price: Optional limit on amount_in / amount_out, scaled by 1e9
            now: Current time in ms
            deadline: Optional request deadline in ms

        Raises:
            PoolPaused, Expired, ZeroAmount, EmptyReserves, SlippageExceeded,
            PriceLimitExceeded, ExcessivePriceImpact, InvariantViolation
        """
        return self._swap(True, amount_in, min_out, max_price, now, deadline)

    def swap_b_to_a(
        self,
        amount_in: int,
        min_out: int = 0,
        max_price: int | None = None,
        *,
        now: int = 0,
        deadline: int | None = None,
    ) -> SwapResult:
        """Sell amount_in of B for A. See swap_a_to_b()."""
        return self._swap(False, amount_in, min_out, max_price, now, deadline)

    def _quote(self, a_to_b: bool, amount_in: int, now: int) -> SwapQuoteView:
        plan = self._plan_swap(a_to_b, amount_in, now, enforce_impact=False)
        return SwapQuoteView(
            pool_id=self.pool_id,
            a_to_b=a_to_b,
            amount_in=plan.amount_in,
            amount_out=plan.amount_out,
            fee=plan.fee,
            price_impact_bps=plan.price_impact_bps,
        )

    def quote_swap_a_to_b(self, amount_in: int, *, now: int = 0) -> SwapQuoteView:
        """Price a swap of A for B without executing it.

        The price impact is reported, not enforced.
        """
        return self._quote(True, amount_in, now)

    def quote_swap_b_to_a(self, amount_in: int, *, now: int = 0) -> SwapQuoteView:
        return self._quote(False, amount_in, now)

    # --- Fees ---

    def claimable_fees(self, position: Position) -> tuple[int, int]:
        position.ensure_open(self.pool_id)
        return position.claimable(self.state.acc_fee_per_share_a, self.state.acc_fee_per_share_b)

    def withdraw_fees(self, position: Position) -> tuple[int, int]:
        """Pay out a position's unclaimed fees. Allowed while paused."""
        fee_a, fee_b = self.claimable_fees(position)

        with self._atomic(position):
            st = self.state
            if fee_a > st.fee_a or fee_b > st.fee_b:
                raise InsufficientLiquidity(
                    f"fee payout ({fee_a}, {fee_b}) exceeds held fees ({st.fee_a}, {st.fee_b})"
                )
            st.fee_a -= fee_a
            st.fee_b -= fee_b
            position.resync_debt(st.acc_fee_per_share_a, st.acc_fee_per_share_b)

        logger.debug(
            "fees_withdrawn",
            pool_id=self.pool_id,
            position_id=position.position_id,
            fee_a=fee_a,
            fee_b=fee_b,
        )
        return fee_a, fee_b

    def compound_fees(
        self,
        position: Position,
        min_liquidity: int = 0,
        *,
        now: int = 0,
        deadline: int | None = None,
    ) -> LiquidityResult:
        """Reinvest a position's unclaimed fees as liquidity in the same position.

        Fees the curve cannot absorb are paid out as the refund.
        """
        self._require_active()
        self._check_deadline(now, deadline)
        fee_a, fee_b = self.claimable_fees(position)
        self._validate_deposit(fee_a, fee_b)
        shares, used_a, used_b = self._deposit_shares(fee_a, fee_b, now)
        if shares <= 0:
            raise ZeroAmount("fees too small to mint shares")
        check_min_output(shares, min_liquidity)

        with self._atomic(position):
            st = self.state
            if fee_a > st.fee_a or fee_b > st.fee_b:
                raise InsufficientLiquidity("claimable fees exceed held fees")
            st.fee_a -= fee_a
            st.fee_b -= fee_b
            st.reserve_a = (S(st.reserve_a) + S(used_a)).to_u64()
            st.reserve_b = (S(st.reserve_b) + S(used_b)).to_u64()
            st.total_liquidity = (S(st.total_liquidity) + S(shares)).to_u64()
            position.resync_debt(st.acc_fee_per_share_a, st.acc_fee_per_share_b)
            position.increase(
                shares, used_a, used_b, st.acc_fee_per_share_a, st.acc_fee_per_share_b
            )

        logger.debug(
            "fees_compounded",
            pool_id=self.pool_id,
            position_id=position.position_id,
            shares=shares,
            amount_a=used_a,
            amount_b=used_b,
        )
        return LiquidityResult(
            position=position,
            shares=shares,
            amount_a=used_a,
            amount_b=used_b,
            refund_a=fee_a - used_a,
            refund_b=fee_b - used_b,
        )

    # --- Views ---

    def position_view(self, position: Position) -> PositionView:
        """Real-time value, fees and impermanent loss of a position.

        Reads only; neither the pool nor the position is modified.
        """
        position.ensure_open(self.pool_id)
        self._require_initialized()
        st = self.state
        value_a, value_b = self._principal_for(position.liquidity)
        fee_a, fee_b = position.claimable(st.acc_fee_per_share_a, st.acc_fee_per_share_b)
        current_ratio = self.price_ratio()
        return PositionView(
            position_id=position.position_id,
            pool_id=self.pool_id,
            liquidity=position.liquidity,
            share_of_pool_bps=mul_div(position.liquidity, BPS_DENOMINATOR, st.total_liquidity),
            value_a=value_a,
            value_b=value_b,
            claimable_fee_a=fee_a,
            claimable_fee_b=fee_b,
            original_deposit_a=position.original_deposit_a,
            original_deposit_b=position.original_deposit_b,
            entry_price_ratio=position.entry_price_ratio,
            current_price_ratio=current_ratio,
            impermanent_loss_bps=impermanent_loss(position, value_a, value_b, current_ratio),
        )

    def _view_extra(self, now: int) -> dict[str, Any]:
        return {}

    def snapshot(self, *, now: int = 0) -> PoolView:
        """Read-only view of the pool's public state."""
        st = self.state
        ratio = self.price_ratio() if st.total_liquidity > 0 else 0
        return PoolView(
            pool_id=self.pool_id,
            curve=self.curve,
            asset_a=self.asset_a,
            asset_b=self.asset_b,
            reserve_a=st.reserve_a,
            reserve_b=st.reserve_b,
            fee_a=st.fee_a,
            fee_b=st.fee_b,
            protocol_fee_a=st.protocol_fee_a,
            protocol_fee_b=st.protocol_fee_b,
            total_liquidity=st.total_liquidity,
            fee_percent=st.fee_percent,
            protocol_fee_percent=st.protocol_fee_percent,
            acc_fee_per_share_a=st.acc_fee_per_share_a,
            acc_fee_per_share_b=st.acc_fee_per_share_b,
            max_price_impact_bps=st.max_price_impact_bps,
            paused=st.paused,
            price_ratio=ratio,
            volume_a=st.volume_a,
            volume_b=st.volume_b,
            fees_collected_a=st.fees_collected_a,
            fees_collected_b=st.fees_collected_b,
            swap_count=st.swap_count,
            **self._view_extra(now),
        )

    # --- Privileged operations (authorization is checked by the caller) ---

    def pause(self) -> None:
        self.state.paused = True
        logger.info("pool_paused", pool_id=self.pool_id)

    def unpause(self) -> None:
        self.state.paused = False
        logger.info("pool_unpaused", pool_id=self.pool_id)

    def set_fee_percent(self, fee_bps: int) -> None:
        _validate_fee(fee_bps, MAX_FEE_BPS, "fee_bps")
        logger.info(
            "fee_percent_updated", pool_id=self.pool_id, old=self.state.fee_percent, new=fee_bps
        )
        self.state.fee_percent = fee_bps

    def set_protocol_fee_percent(self, protocol_fee_bps: int) -> None:
        _validate_fee(protocol_fee_bps, MAX_PROTOCOL_FEE_BPS, "protocol_fee_bps")
        logger.info(
            "protocol_fee_percent_updated",
            pool_id=self.pool_id,
            old=self.state.protocol_fee_percent,
            new=protocol_fee_bps,
        )
        self.state.protocol_fee_percent = protocol_fee_bps

    def set_risk_parameters(self, *, max_price_impact_bps: int) -> None:
        if not 0 < max_price_impact_bps <= BPS_DENOMINATOR:
            raise InvalidInput(f"max_price_impact_bps out of range: {max_price_impact_bps}")
        logger.info(
            "risk_parameters_updated",
            pool_id=self.pool_id,
            max_price_impact_bps=max_price_impact_bps,
        )
        self.state.max_price_impact_bps = max_price_impact_bps

    def withdraw_protocol_fees(self) -> tuple[int, int]:
        """Pay out and reset the protocol fee balances."""
        st = self.state
        amounts = st.protocol_fee_a, st.protocol_fee_b
        st.protocol_fee_a = 0
        st.protocol_fee_b = 0
        logger.info(
            "protocol_fees_withdrawn", pool_id=self.pool_id, fee_a=amounts[0], fee_b=amounts[1]
        )
        return amounts
