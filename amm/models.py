"""Pydantic models for read-only pool and position views.

Views are built on demand from live state and never stored, so computing
one cannot mutate a pool or a position.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from amm.safe_int import U64_MAX, U128_MAX

# Base-unit balance (fits u64)
Amount = Annotated[int, Field(ge=0, le=U64_MAX, description="Base-unit amount")]

# Widened value (accumulators, invariants)
WideAmount = Annotated[int, Field(ge=0, le=U128_MAX)]

# Basis points, 0..10000
BasisPoints = Annotated[int, Field(ge=0, le=10_000)]


class _View(BaseModel):
    model_config = ConfigDict(frozen=True)


class PoolView(_View):
    """Snapshot of a pool's public state."""

    pool_id: str
    curve: Literal["constant_product", "stable"]
    asset_a: str
    asset_b: str
    reserve_a: Amount
    reserve_b: Amount
    fee_a: Amount
    fee_b: Amount
    protocol_fee_a: Amount
    protocol_fee_b: Amount
    total_liquidity: Amount
    fee_percent: BasisPoints
    protocol_fee_percent: BasisPoints
    acc_fee_per_share_a: WideAmount
    acc_fee_per_share_b: WideAmount
    max_price_impact_bps: BasisPoints
    paused: bool
    price_ratio: WideAmount = Field(description="reserve_b / reserve_a scaled by 1e12")
    volume_a: WideAmount = 0
    volume_b: WideAmount = 0
    fees_collected_a: WideAmount = 0
    fees_collected_b: WideAmount = 0
    swap_count: int = Field(default=0, ge=0)
    amp: int | None = Field(default=None, description="Current amplification (stable only)")
    target_amp: int | None = None


class PositionView(_View):
    """Real-time value of a position."""

    position_id: str
    pool_id: str
    liquidity: Amount
    share_of_pool_bps: BasisPoints
    value_a: Amount
    value_b: Amount
    claimable_fee_a: Amount
    claimable_fee_b: Amount
    original_deposit_a: Amount
    original_deposit_b: Amount
    entry_price_ratio: WideAmount
    current_price_ratio: WideAmount
    impermanent_loss_bps: BasisPoints


class SwapQuoteView(_View):
    """Pure quote for a swap; no state is changed."""

    pool_id: str
    a_to_b: bool
    amount_in: Amount
    amount_out: Amount
    fee: Amount
    price_impact_bps: BasisPoints
