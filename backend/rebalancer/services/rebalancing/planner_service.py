"""Prioritised, capped transfer plan."""

from typing import List

from rebalancer.core.config import BalancerConfig
from rebalancer.services.rebalancing.entities import Opportunity, Plan, PlanTier


class PlannerService:
    def __init__(self, config: BalancerConfig):
        self.config = config

    def build_plan(self, opportunities: List[Opportunity]) -> Plan:
        """Bucket opportunities by urgency tier, most urgent first.

        Caps bound the daily logistics load; they are applied after sorting
        so each tier keeps its highest-scoring entries.
        """
        plan = Plan()
        if not opportunities:
            return plan

        # sorted() is stable: equal scores keep discovery order
        ordered = sorted(opportunities, key=lambda o: o.urgency_score, reverse=True)
        for opportunity in ordered:
            getattr(plan, PlanTier.for_score(opportunity.urgency_score).value).append(opportunity)

        for tier in PlanTier:
            bucket = getattr(plan, tier.value)
            del bucket[self.config.cap_for(tier.value):]
        return plan
