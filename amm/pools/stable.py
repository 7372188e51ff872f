"""Amplified stable-curve pool with amplification ramping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from amm.config import PoolConfig
from amm.constants import ACC_PRECISION, CURVE_STABLE, MAX_AMP, MIN_AMP
from amm.errors import InvalidAmplification, InvalidInput, ZeroAmount
from amm.math.stable_math import calc_out_given_in, get_d, marginal_rate, validate_amp
from amm.math.wide_math import mul_div
from amm.pools.base import Pool, PoolState

logger = structlog.get_logger()


@dataclass
class StablePoolState(PoolState):
    """Pool state plus the amplification schedule.

    amp is the value at ramp_start_time; between ramp_start_time and
    ramp_end_time the effective amplification moves linearly to target_amp.
    """

    amp: int = MIN_AMP
    target_amp: int = MIN_AMP
    ramp_start_time: int = 0
    ramp_end_time: int = 0


class StablePool(Pool):
    """StableSwap-style pool for assets expected to trade near parity.

    Deposits may be imbalanced (any ratio, at least one side positive) and
    mint shares in proportion to the growth of the invariant D. Swaps keep
    D from dropping by more than one unit of rounding.
    """

    curve = CURVE_STABLE
    invariant_tolerance = 1
    state: StablePoolState

    def __init__(
        self,
        asset_a: str,
        asset_b: str,
        fee_bps: int = 4,
        protocol_fee_bps: int = 0,
        *,
        amp: int,
        pool_id: str | None = None,
        config: PoolConfig | None = None,
    ) -> None:
        validate_amp(amp)
        self._initial_amp = amp
        super().__init__(
            asset_a, asset_b, fee_bps, protocol_fee_bps, pool_id=pool_id, config=config
        )

    def _initial_state(self, **kwargs: Any) -> StablePoolState:
        return StablePoolState(amp=self._initial_amp, target_amp=self._initial_amp, **kwargs)

    # --- Amplification ---

    def get_current_amp(self, now: int) -> int:
        """Effective amplification at time now (ms).

        Before the ramp window the stored amp applies, at or after its end
        the target does; in between the value moves linearly.
        """
        st = self.state
        if now >= st.ramp_end_time or st.ramp_end_time <= st.ramp_start_time:
            return st.target_amp
        elapsed = max(0, now - st.ramp_start_time)
        duration = st.ramp_end_time - st.ramp_start_time
        if st.target_amp > st.amp:
            return st.amp + (st.target_amp - st.amp) * elapsed // duration
        return st.amp - (st.amp - st.target_amp) * elapsed // duration

    def is_ramping(self, now: int) -> bool:
        """True while a ramp is scheduled or in progress; a stopped ramp never is."""
        st = self.state
        return st.ramp_start_time < st.ramp_end_time and now < st.ramp_end_time

    def ramp_amp(self, target_amp: int, start_time: int, end_time: int, *, now: int) -> None:
        """Schedule a linear move of the amplification to target_amp.

        Raises:
            InvalidInput: If start_time is in the past, the window is shorter
                than the configured minimum, or a ramp is already active
            InvalidAmplification: If target_amp is out of range or differs
                from the current value by more than the allowed factor
        """
        if self.is_ramping(now):
            raise InvalidInput("an amplification ramp is already active")
        if start_time < now:
            raise InvalidInput(f"ramp start {start_time} is in the past (now={now})")
        if end_time - start_time < self.config.min_ramp_duration_ms:
            raise InvalidInput(
                f"ramp duration {end_time - start_time} ms below "
                f"{self.config.min_ramp_duration_ms} ms"
            )
        if target_amp < MIN_AMP or target_amp > MAX_AMP:
            raise InvalidAmplification(f"target amp {target_amp} outside [{MIN_AMP}, {MAX_AMP}]")

        current = self.get_current_amp(now)
        max_change = self.config.max_amp_change
        if target_amp > current * max_change or target_amp * max_change < current:
            raise InvalidAmplification(
                f"amp change {current} -> {target_amp} exceeds factor {max_change}"
            )

        st = self.state
        st.amp = current
        st.target_amp = target_amp
        st.ramp_start_time = start_time
        st.ramp_end_time = end_time
        logger.info(
            "amp_ramp_started",
            pool_id=self.pool_id,
            amp=current,
            target_amp=target_amp,
            start_time=start_time,
            end_time=end_time,
        )

    def stop_ramp_amp(self, *, now: int) -> int:
        """Freeze the amplification at its current interpolated value."""
        current = self.get_current_amp(now)
        st = self.state
        st.amp = current
        st.target_amp = current
        st.ramp_start_time = now
        st.ramp_end_time = now
        logger.info("amp_ramp_stopped", pool_id=self.pool_id, amp=current)
        return current

    # --- Curve hooks ---

    def _initial_liquidity(self, amount_a: int, amount_b: int, now: int) -> int:
        return get_d(amount_a, amount_b, self.get_current_amp(now))

    def _validate_deposit(self, amount_a: int, amount_b: int) -> None:
        if amount_a < 0 or amount_b < 0:
            raise InvalidInput(f"amounts must be non-negative: ({amount_a}, {amount_b})")
        if amount_a == 0 and amount_b == 0:
            raise ZeroAmount("deposit needs at least one asset")

    def _deposit_shares(self, amount_a: int, amount_b: int, now: int) -> tuple[int, int, int]:
        st = self.state
        amp = self.get_current_amp(now)
        d0 = get_d(st.reserve_a, st.reserve_b, amp)
        d1 = get_d(st.reserve_a + amount_a, st.reserve_b + amount_b, amp)
        if d1 <= d0:
            return 0, 0, 0
        shares = mul_div(st.total_liquidity, d1 - d0, d0)
        return shares, amount_a, amount_b

    def _output_for(
        self, net_in: int, reserve_in: int, reserve_out: int, now: int
    ) -> tuple[int, int]:
        amp = self.get_current_amp(now)
        amount_out = calc_out_given_in(net_in, reserve_in, reserve_out, amp)
        ideal_out = mul_div(net_in, marginal_rate(reserve_in, reserve_out, amp), ACC_PRECISION)
        return amount_out, ideal_out

    def _invariant(self, reserve_a: int, reserve_b: int, now: int) -> int:
        return get_d(reserve_a, reserve_b, self.get_current_amp(now))

    def _view_extra(self, now: int) -> dict[str, Any]:
        return {"amp": self.get_current_amp(now), "target_amp": self.state.target_amp}
