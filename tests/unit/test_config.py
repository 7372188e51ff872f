"""Tests for pool configuration and trader preferences."""

import dataclasses

import pytest
import structlog

from amm.config import (
    DEFAULT_POOL_CONFIG,
    DEFAULT_TRADE_PREFERENCES,
    PoolConfig,
    TradePreferences,
    configure_logging,
)
from amm.constants import DEFAULT_MAX_PRICE_IMPACT_BPS, MAX_AMP_CHANGE, MIN_RAMP_DURATION_MS
from amm.errors import InvalidInput


class TestPoolConfig:
    """Tests for PoolConfig."""

    def test_defaults(self):
        assert DEFAULT_POOL_CONFIG.max_price_impact_bps == DEFAULT_MAX_PRICE_IMPACT_BPS
        assert DEFAULT_POOL_CONFIG.min_ramp_duration_ms == MIN_RAMP_DURATION_MS
        assert DEFAULT_POOL_CONFIG.max_amp_change == MAX_AMP_CHANGE

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_POOL_CONFIG.max_price_impact_bps = 1  # type: ignore

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_price_impact_bps": 0},
            {"max_price_impact_bps": 10_001},
            {"min_ramp_duration_ms": 0},
            {"max_amp_change": 0},
        ],
    )
    def test_invalid_values_raise(self, kwargs):
        with pytest.raises(InvalidInput):
            PoolConfig(**kwargs)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("AMM_MAX_PRICE_IMPACT_BPS", "250")
        monkeypatch.setenv("AMM_MIN_RAMP_DURATION_MS", "1000")
        monkeypatch.delenv("AMM_MAX_AMP_CHANGE", raising=False)

        config = PoolConfig.from_env()

        assert config.max_price_impact_bps == 250
        assert config.min_ramp_duration_ms == 1000
        assert config.max_amp_change == MAX_AMP_CHANGE

    def test_from_env_validates(self, monkeypatch):
        monkeypatch.setenv("AMM_MAX_PRICE_IMPACT_BPS", "0")
        with pytest.raises(InvalidInput):
            PoolConfig.from_env()


class TestTradePreferences:
    """Tests for TradePreferences."""

    def test_defaults(self):
        prefs = DEFAULT_TRADE_PREFERENCES
        assert prefs.slippage_bps == 50
        assert prefs.deadline_ms == 20 * 60 * 1000
        assert prefs.max_price_impact_bps == 500
        assert prefs.auto_compound is False

    def test_deadline_from(self):
        assert TradePreferences(deadline_ms=5000).deadline_from(1000) == 6000

    @pytest.mark.parametrize(
        "kwargs",
        [{"slippage_bps": -1}, {"slippage_bps": 10_001}, {"deadline_ms": 0}],
    )
    def test_invalid_values_raise(self, kwargs):
        with pytest.raises(InvalidInput):
            TradePreferences(**kwargs)


class TestConfigureLogging:
    def test_configure_logging_accepts_level(self):
        try:
            configure_logging("debug")
            assert structlog.is_configured()
        finally:
            structlog.reset_defaults()
