"""Classify each inventory item by days of stock and demand trend."""

from typing import List

from rebalancer.core.config import BalancerConfig
from rebalancer.services.rebalancing.entities import InventoryItem, Store
from rebalancer.services.rebalancing.velocity_provider import VelocityMap


class SituationAnalyzer:
    def __init__(self, config: BalancerConfig):
        self.config = config

    def days_of_stock(self, inventory_level: float, daily_velocity: float) -> float:
        """Inventory over velocity, with zero velocity replaced by the floor."""
        denominator = daily_velocity if daily_velocity > 0 else self.config.min_velocity_floor
        return inventory_level / denominator

    def analyze(self, store: Store, items: List[InventoryItem], velocity_map: VelocityMap) -> List[InventoryItem]:
        """Annotate items in place with velocity and classification flags."""
        low_days = self.config.low_stock_days
        over_days = self.config.overstock_days
        multiplier = self.config.high_demand_multiplier
        store_velocities = velocity_map.get(store.id) or {}

        for item in items:
            velocity = store_velocities.get(item.product_id) or {}
            daily = float(velocity.get("daily") or 0.0)
            weekly = float(velocity.get("weekly") or 0.0)
            level = max(item.inventory_level or 0, 0)

            item.daily_velocity = daily
            item.weekly_velocity = weekly
            item.days_of_stock = self.days_of_stock(level, daily)
            item.is_low = item.days_of_stock <= low_days
            item.is_overstock = item.days_of_stock >= over_days

            # weekly is a 7x daily-equivalent of the trend window
            trend_daily = weekly / 7.0 if weekly > 0 else 0.0
            item.is_high_demand = trend_daily > 0 and daily > trend_daily * multiplier

        return items
