"""Tests for transfer scoring: quantities, value and urgency."""

import math

import pytest

from rebalancer.core.config import BalancerConfig
from rebalancer.services.rebalancing import ScoringService, Store, StoreStatus


def status(store_id, level, daily, days=None, high_demand=False, low=False, overstock=False):
    if days is None:
        days = level / daily if daily > 0 else level / 0.1
    return StoreStatus(
        store=Store(id=store_id, name=f"Store {store_id}"),
        inventory_level=level,
        days_of_stock=days,
        daily_velocity=daily,
        is_low=low,
        is_overstock=overstock,
        is_high_demand=high_demand,
    )


class TestCriticalLowStockScenario:
    """Empty shelf at the needy store, deep surplus elsewhere."""

    @pytest.fixture
    def scorer(self):
        return ScoringService(BalancerConfig(target_days_min=7, source_keep_days=14, low_stock_days=7, overstock_days=45))

    def test_quantities(self, scorer):
        result = scorer.score(status(1, 0, 5.0, days=0.0), status(2, 200, 2.0), supply_price=3.0)
        assert result.needed_qty == pytest.approx(35)
        assert result.can_spare == pytest.approx(172)
        assert result.recommended_qty == 35
        assert result.transfer_value == pytest.approx(105.0)

    def test_urgency_takes_critical_path(self, scorer):
        result = scorer.score(status(1, 0, 5.0, days=0.0), status(2, 200, 2.0), supply_price=3.0)
        assert result.urgency_score >= 100
        assert result.reason.split(",")[0] == "CRITICAL"
        # 200 units / 2 per day = 100 days >= 45
        assert result.urgency_score == 120
        assert result.reason == "CRITICAL,SURPLUS"


class TestUrgency:
    def test_low_without_critical(self, config):
        result = ScoringService(config).score(status(1, 10, 2.0), status(2, 60, 2.0), 1.0)
        # 5 days: LOW; 30 days at source: not surplus
        assert result.urgency_score == 50
        assert result.reason == "LOW"

    def test_critical_and_low_are_exclusive(self, config):
        result = ScoringService(config).score(status(1, 1, 2.0), status(2, 60, 2.0), 1.0)
        assert result.urgency_score == 100
        assert "LOW" not in result.reason.split(",")

    def test_all_contributions_in_order(self, config):
        result = ScoringService(config).score(
            status(1, 1, 4.0, high_demand=True), status(2, 500, 1.0), 1.0,
        )
        assert result.urgency_score == 150
        assert result.reason == "CRITICAL,DEMAND,SURPLUS"

    def test_high_demand_needy_above_low_threshold(self, config):
        # 10 days of stock: needy only because of demand
        result = ScoringService(config).score(status(1, 20, 2.0, high_demand=True), status(2, 500, 1.0), 1.0)
        assert result.urgency_score == 50
        assert result.reason == "DEMAND,SURPLUS"


class TestQuantities:
    def test_surplus_keeps_buffer_at_zero_velocity(self, config):
        # keep 21 days at floor velocity 0.1 -> 2.1 units retained
        result = ScoringService(config).score(status(1, 0, 5.0, days=0.0), status(2, 10, 0.0), 1.0)
        assert result.can_spare == pytest.approx(10 - 2.1)
        assert result.recommended_qty == 7

    def test_slow_surplus_seller_keeps_floor_buffer(self, config):
        # One unit in 14 days is below the floor, so 21 x 0.1 units stay behind
        result = ScoringService(config).score(status(1, 0, 5.0, days=0.0), status(2, 10, 1 / 14), 1.0)
        assert result.can_spare == pytest.approx(7.9)
        assert result.recommended_qty == 7

    def test_nothing_needed_when_needy_has_target_cover(self, config):
        result = ScoringService(config).score(status(1, 100, 2.0), status(2, 500, 1.0), 1.0)
        assert result.needed_qty == 0
        assert result.recommended_qty == 0
        assert result.transfer_value == 0

    def test_nothing_spare_when_source_below_buffer(self, config):
        result = ScoringService(config).score(status(1, 0, 5.0, days=0.0), status(2, 20, 1.0), 1.0)
        assert result.can_spare == 0
        assert result.recommended_qty == 0

    @pytest.mark.parametrize("needy_level,needy_v,surplus_level,surplus_v", [
        (0, 3.3, 100, 0.7),
        (4, 1.9, 45, 0.0),
        (2, 0.5, 1000, 12.1),
        (0, 0.0, 300, 2.0),
        (13, 7.7, 180, 3.3),
    ])
    def test_recommended_bounded_by_need_and_spare(self, config, needy_level, needy_v, surplus_level, surplus_v):
        result = ScoringService(config).score(
            status(1, needy_level, needy_v), status(2, surplus_level, surplus_v), 2.5,
        )
        assert 0 <= result.recommended_qty
        assert result.recommended_qty <= math.floor(result.needed_qty)
        assert result.recommended_qty <= math.floor(result.can_spare)
        assert result.transfer_value == pytest.approx(result.recommended_qty * 2.5)
