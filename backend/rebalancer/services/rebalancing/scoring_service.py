"""Transfer quantity, value and urgency for one needy/surplus pair.

    needed      = max(0, target_days_min * needy_velocity - needy_inventory)
    can_spare   = max(0, surplus_inventory - source_keep_days * max(surplus_velocity, floor))
    recommended = floor(min(needed, can_spare))
    value       = recommended * supply_price

Urgency is additive and the thresholds are evaluated in this order:

    +100 CRITICAL  needy days of stock <= 1
    +50  LOW       otherwise, needy days of stock <= low_stock_days
    +30  DEMAND    needy store is high-demand
    +20  SURPLUS   surplus days of stock >= overstock_days
"""

import math
from typing import List

from rebalancer.core.config import BalancerConfig
from rebalancer.services.rebalancing.entities import ScoreResult, StoreStatus, UrgencyReason

CRITICAL_DAYS = 1


class ScoringService:
    def __init__(self, config: BalancerConfig):
        self.config = config

    def score(self, needy: StoreStatus, surplus: StoreStatus, supply_price: float) -> ScoreResult:
        cfg = self.config

        needed_qty = max(0.0, cfg.target_days_min * needy.daily_velocity - needy.inventory_level)
        surplus_velocity = max(surplus.daily_velocity, cfg.min_velocity_floor)
        can_spare = max(0.0, surplus.inventory_level - cfg.source_keep_days * surplus_velocity)
        recommended = int(math.floor(min(needed_qty, can_spare)))
        value = recommended * float(supply_price or 0)

        urgency = 0
        reasons: List[str] = []
        if needy.days_of_stock <= CRITICAL_DAYS:
            urgency += 100
            reasons.append(UrgencyReason.CRITICAL.value)
        elif needy.days_of_stock <= cfg.low_stock_days:
            urgency += 50
            reasons.append(UrgencyReason.LOW.value)
        if needy.is_high_demand:
            urgency += 30
            reasons.append(UrgencyReason.DEMAND.value)
        if surplus.days_of_stock >= cfg.overstock_days:
            urgency += 20
            reasons.append(UrgencyReason.SURPLUS.value)

        return ScoreResult(
            recommended_qty=recommended,
            transfer_value=value,
            urgency_score=urgency,
            reason=",".join(reasons),
            needed_qty=needed_qty,
            can_spare=can_spare,
        )
