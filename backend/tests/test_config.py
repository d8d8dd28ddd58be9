"""Tests for settings and the frozen engine config."""

import pytest
from pydantic import ValidationError

from rebalancer.core.config import BalancerConfig, Settings


class TestBalancerConfig:
    def test_defaults(self):
        config = BalancerConfig()
        assert (config.velocity_days, config.trend_days) == (14, 56)
        assert (config.low_stock_days, config.overstock_days) == (7, 45)
        assert (config.target_days_min, config.source_keep_days) == (14, 21)
        assert config.min_transfer_value == 25.0
        assert config.min_velocity_floor == 0.1
        assert (config.urgent_cap, config.high_cap, config.normal_cap) == (50, 100, 200)
        assert config.dry_run_default is True

    def test_is_frozen(self, config):
        with pytest.raises(ValidationError):
            config.urgent_cap = 1

    def test_low_must_be_below_overstock(self):
        with pytest.raises(ValidationError, match="low_stock_days"):
            BalancerConfig(low_stock_days=45, overstock_days=45)

    @pytest.mark.parametrize("field,value", [
        ("urgent_cap", -1),
        ("velocity_days", 0),
        ("min_velocity_floor", 0),
        ("min_transfer_value", -5),
    ])
    def test_rejects_out_of_range_values(self, field, value):
        with pytest.raises(ValidationError):
            BalancerConfig(**{field: value})

    def test_cap_for_tier(self, config):
        custom = config.model_copy(update={"high_cap": 3})
        assert custom.cap_for("urgent") == 5
        assert custom.cap_for("high") == 3


class TestSettings:
    def test_environment_overrides_engine_values(self, monkeypatch):
        monkeypatch.setenv("REBALANCE_URGENT_CAP", "7")
        monkeypatch.setenv("REBALANCE_INSIGHTS_ENABLED", "true")
        monkeypatch.setenv("REBALANCE_MIN_TRANSFER_VALUE", "12.5")

        config = Settings().balancer_config()

        assert config.urgent_cap == 7
        assert config.insights_enabled is True
        assert config.min_transfer_value == 12.5

    def test_keyword_overrides_win(self, monkeypatch):
        monkeypatch.setenv("REBALANCE_INSIGHTS_DIR", "/var/lib/rebalancer")
        config = Settings().balancer_config(insights_dir="/tmp/runs", dry_run_default=False)
        assert config.insights_dir == "/tmp/runs"
        assert config.dry_run_default is False

    def test_invalid_environment_thresholds_rejected(self, monkeypatch):
        monkeypatch.setenv("REBALANCE_LOW_STOCK_DAYS", "60")
        with pytest.raises(ValidationError):
            Settings().balancer_config()


class TestSessionEngine:
    def test_sql_echo_follows_debug_flag(self):
        from rebalancer.core.config import settings
        from rebalancer.db.session import engine

        assert engine.echo == settings.debug
