"""Persist planned transfers as execution + allocation records.

Dry run is the default and performs no writes. In live mode every
opportunity gets its own header row and allocation row, committed together;
a failure rolls back that pair and aborts the run with the failing
opportunity's identifiers.
"""

import hashlib
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rebalancer.core.config import BalancerConfig
from rebalancer.core.exceptions import ExecutionWriteError
from rebalancer.models.transfer import TransferAllocation, TransferExecution
from rebalancer.services.rebalancing.entities import ExecutionResult, Opportunity, Plan, PlanTier

logger = logging.getLogger(__name__)

EXECUTED_BY = "auto_balancer"


class ExecutionService:
    def __init__(
        self,
        db: Session,
        config: BalancerConfig,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.db = db
        self.config = config
        self.clock = clock

    def execute(
        self,
        plan: Plan,
        dry_run: bool = True,
        heartbeat: Optional[Callable[[], None]] = None,
    ) -> ExecutionResult:
        """Persist the plan tier by tier, calling ``heartbeat`` after each tier."""
        if dry_run:
            return ExecutionResult(executed=0, allocations=0, dry_run=True)

        executed = 0
        allocations = 0
        for tier, opportunities in plan.tiers():
            for opportunity in opportunities:
                self._persist(tier, opportunity)
                executed += 1
                allocations += 1
            if heartbeat is not None:
                heartbeat()

        logger.info(f"Persisted {executed} transfer executions ({plan.counts()})")
        return ExecutionResult(executed=executed, allocations=allocations, dry_run=False)

    def _persist(self, tier: PlanTier, opportunity: Opportunity) -> None:
        now = self.clock()
        stamp = now.strftime("%Y%m%d_%H%M%S")
        try:
            execution = TransferExecution(
                public_id=f"auto_{stamp}_{uuid.uuid4().hex[:8]}",
                alias_code=f"{tier.value.upper()}_{stamp}",
                priority=tier.value,
                simulation_mode=False,
                status="pending",
                executed_by=EXECUTED_BY,
                created_at=now,
            )
            self.db.add(execution)
            self.db.flush()

            allocation_key = (
                f"{opportunity.product_id}:{opportunity.from_outlet}:"
                f"{opportunity.to_outlet}:{execution.public_id}"
            )
            self.db.add(TransferAllocation(
                execution_id=execution.id,
                product_id=opportunity.product_id,
                from_outlet_id=opportunity.from_outlet,
                to_outlet_id=opportunity.to_outlet,
                allocated_quantity=opportunity.recommended_qty,
                transfer_value=Decimal(str(round(opportunity.transfer_value, 2))),
                calculation_data={
                    "reason": opportunity.reason,
                    "urgency": opportunity.urgency_score,
                    "from": opportunity.from_outlet,
                    "to": opportunity.to_outlet,
                },
                public_id="alloc_" + hashlib.md5(allocation_key.encode()).hexdigest()[:12],
            ))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"Transfer write failed for product {opportunity.product_id} "
                f"({opportunity.from_outlet} -> {opportunity.to_outlet}): {e}"
            )
            raise ExecutionWriteError(
                tier.value, opportunity.product_id, opportunity.from_outlet, opportunity.to_outlet, str(e)
            ) from e
