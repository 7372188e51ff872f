"""Configuration for pools and traders.

Configuration from environment variables with sensible defaults:
- AMM_MAX_PRICE_IMPACT_BPS: default per-pool price impact cap
- AMM_MIN_RAMP_DURATION_MS: minimum amplification ramp duration
- AMM_MAX_AMP_CHANGE: maximum amplification change factor per ramp
- AMM_LOG_LEVEL: level used by configure_logging()
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import structlog

from amm.constants import (
    BPS_DENOMINATOR,
    DEFAULT_MAX_PRICE_IMPACT_BPS,
    MAX_AMP_CHANGE,
    MIN_RAMP_DURATION_MS,
)
from amm.errors import InvalidInput


@dataclass(frozen=True)
class PoolConfig:
    """Risk parameters applied to a pool at creation.

    Attributes:
        max_price_impact_bps: Reject swaps whose price impact exceeds this cap
        min_ramp_duration_ms: Shortest allowed amplification ramp
        max_amp_change: Largest factor by which one ramp may move amp
    """

    max_price_impact_bps: int = DEFAULT_MAX_PRICE_IMPACT_BPS
    min_ramp_duration_ms: int = MIN_RAMP_DURATION_MS
    max_amp_change: int = MAX_AMP_CHANGE

    def __post_init__(self) -> None:
        if not 0 < self.max_price_impact_bps <= BPS_DENOMINATOR:
            raise InvalidInput(f"max_price_impact_bps out of range: {self.max_price_impact_bps}")
        if self.min_ramp_duration_ms <= 0:
            raise InvalidInput("min_ramp_duration_ms must be positive")
        if self.max_amp_change < 1:
            raise InvalidInput("max_amp_change must be at least 1")

    @classmethod
    def from_env(cls) -> PoolConfig:
        """Build a config from AMM_* environment variables."""
        return cls(
            max_price_impact_bps=int(
                os.environ.get("AMM_MAX_PRICE_IMPACT_BPS", DEFAULT_MAX_PRICE_IMPACT_BPS)
            ),
            min_ramp_duration_ms=int(
                os.environ.get("AMM_MIN_RAMP_DURATION_MS", MIN_RAMP_DURATION_MS)
            ),
            max_amp_change=int(os.environ.get("AMM_MAX_AMP_CHANGE", MAX_AMP_CHANGE)),
        )


@dataclass(frozen=True)
class TradePreferences:
    """A trader's saved defaults for slippage, deadline and price impact.

    Attributes:
        slippage_bps: Default slippage tolerance (50 bps = 0.5%)
        deadline_ms: Default validity window for a request (20 minutes)
        max_price_impact_bps: Largest price impact the trader accepts (5%)
        auto_compound: Caller-side choice to reinvest fees with
            Pool.compound_fees() instead of Pool.withdraw_fees(); pools never
            read it
    """

    slippage_bps: int = 50
    deadline_ms: int = 20 * 60 * 1000
    max_price_impact_bps: int = 500
    auto_compound: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.slippage_bps <= BPS_DENOMINATOR:
            raise InvalidInput(f"slippage_bps out of range: {self.slippage_bps}")
        if self.deadline_ms <= 0:
            raise InvalidInput("deadline_ms must be positive")
        if not 0 < self.max_price_impact_bps <= BPS_DENOMINATOR:
            raise InvalidInput(f"max_price_impact_bps out of range: {self.max_price_impact_bps}")

    def deadline_from(self, now: int) -> int:
        """Absolute deadline for a request issued at now (ms)."""
        return now + self.deadline_ms


# Default configuration instances
DEFAULT_POOL_CONFIG = PoolConfig()
DEFAULT_TRADE_PREFERENCES = TradePreferences()


def configure_logging(level: str | None = None) -> None:
    """Opt-in console logging for scripts and notebooks.

    The library itself never configures structlog; it only emits events.
    """
    level_name = (level or os.environ.get("AMM_LOG_LEVEL", "INFO")).upper()
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level_name)
        ),
    )
