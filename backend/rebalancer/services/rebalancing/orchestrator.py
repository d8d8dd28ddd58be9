"""Single entry point wiring the rebalancing pipeline together.

    stores -> inventory per store -> batched velocities -> analysis
           -> product matrix -> needy x surplus scoring -> plan
           -> execution (dry run by default) -> optional insights

Only counts are returned to the caller; opportunity and plan payloads stay
inside the run.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from rebalancer.core.config import BalancerConfig
from rebalancer.core.exceptions import InventoryFetchError, RunTimeoutError
from rebalancer.services.rebalancing.entities import (
    ExecutionResult,
    InventoryItem,
    Opportunity,
    ProductMatrixEntry,
    RunSummary,
    Store,
)
from rebalancer.services.rebalancing.execution_service import ExecutionService
from rebalancer.services.rebalancing.insights_service import InsightsService
from rebalancer.services.rebalancing.inventory_provider import StoreInventoryProvider
from rebalancer.services.rebalancing.opportunity_service import OpportunityService
from rebalancer.services.rebalancing.planner_service import PlannerService
from rebalancer.services.rebalancing.run_lock import RunLockService
from rebalancer.services.rebalancing.scoring_service import ScoringService
from rebalancer.services.rebalancing.situation_analyzer import SituationAnalyzer
from rebalancer.services.rebalancing.velocity_provider import SalesVelocityProvider

logger = logging.getLogger(__name__)


class Orchestrator:
    def __init__(
        self,
        config: BalancerConfig,
        inventory_provider: StoreInventoryProvider,
        velocity_provider: SalesVelocityProvider,
        analyzer: SituationAnalyzer,
        opportunity_service: OpportunityService,
        scoring_service: ScoringService,
        planner: PlannerService,
        executor: ExecutionService,
        run_lock: Optional[RunLockService] = None,
        insights_service: Optional[InsightsService] = None,
    ):
        self.config = config
        self.inventory_provider = inventory_provider
        self.velocity_provider = velocity_provider
        self.analyzer = analyzer
        self.opportunity_service = opportunity_service
        self.scoring_service = scoring_service
        self.planner = planner
        self.executor = executor
        self.run_lock = run_lock
        self.insights_service = insights_service
        self._started = 0.0

    def run(self, dry_run: Optional[bool] = None) -> RunSummary:
        if dry_run is None:
            dry_run = self.config.dry_run_default
        self._started = time.monotonic()
        logger.info(f"Rebalancing run started (dry_run={dry_run})")

        stores = self.inventory_provider.list_active_stores()
        store_items, skipped = self._load_inventory(stores)
        if skipped:
            stores = [s for s in stores if s.id not in skipped]

        store_product_map = {sid: [i.product_id for i in items] for sid, items in store_items.items()}
        velocities = self.velocity_provider.velocities(stores, store_product_map)
        self._check_deadline("velocity")

        for store in stores:
            self.analyzer.analyze(store, store_items[store.id], velocities)

        matrix = self.opportunity_service.build_product_matrix(stores, store_items)
        opportunities = self.find_opportunities(matrix)
        plan = self.planner.build_plan(opportunities)
        self._check_deadline("planning")

        if dry_run:
            execution = self.executor.execute(plan, dry_run=True)
        elif self.run_lock is not None:
            with self.run_lock.held():
                execution = self.executor.execute(plan, dry_run=False, heartbeat=self.run_lock.renew)
        else:
            execution = self.executor.execute(plan, dry_run=False)

        insights = self._export_insights(stores, store_items)

        summary = RunSummary(
            stores=len(stores),
            opportunities=len(opportunities),
            plan=plan.counts(),
            execution=execution,
            insights=insights,
            dry_run=dry_run,
            skipped_stores=sorted(skipped),
            duration_ms=round((time.monotonic() - self._started) * 1000, 2),
        )
        logger.info(
            f"Rebalancing run finished: {summary.stores} stores, {summary.opportunities} opportunities, "
            f"plan={summary.plan}, executed={execution.executed}, dry_run={dry_run}, "
            f"{summary.duration_ms}ms"
        )
        return summary

    def find_opportunities(self, matrix: Dict[int, ProductMatrixEntry]) -> List[Opportunity]:
        """Score every needy x surplus pair per product and keep viable transfers."""
        min_value = self.config.min_transfer_value
        opportunities: List[Opportunity] = []

        for product_id, entry in matrix.items():
            needy, surplus = self.opportunity_service.partition(entry)
            if not needy or not surplus:
                continue
            for to_status in needy:
                for from_status in surplus:
                    if to_status.store_id == from_status.store_id:
                        continue
                    score = self.scoring_service.score(to_status, from_status, entry.supply_price)
                    if score.recommended_qty <= 0 or score.transfer_value < min_value:
                        continue
                    opportunities.append(Opportunity(
                        product_id=product_id,
                        from_outlet=from_status.store_id,
                        to_outlet=to_status.store_id,
                        recommended_qty=score.recommended_qty,
                        transfer_value=score.transfer_value,
                        urgency_score=score.urgency_score,
                        reason=score.reason,
                        from_days=from_status.days_of_stock,
                        to_days=to_status.days_of_stock,
                    ))
        return opportunities

    def _load_inventory(self, stores: List[Store]):
        store_items: Dict[int, List[InventoryItem]] = {}
        skipped: set = set()
        for store in stores:
            self._check_deadline(f"inventory load (store {store.id})")
            try:
                store_items[store.id] = self.inventory_provider.inventory_for(store)
            except InventoryFetchError as e:
                if not self.config.isolate_store_failures:
                    raise
                logger.error(f"Skipping store {store.id}: {e}")
                skipped.add(store.id)
        return store_items, skipped

    def _export_insights(self, stores: List[Store], store_items: Dict[int, List[InventoryItem]]) -> Optional[Dict[str, int]]:
        if not self.config.insights_enabled or self.insights_service is None:
            return None
        insights = self.insights_service.generate(stores, store_items)
        self.insights_service.write(insights)
        return self.insights_service.summarize(insights)

    def _check_deadline(self, phase: str) -> None:
        timeout = self.config.run_timeout_seconds
        if timeout <= 0:
            return
        elapsed = time.monotonic() - self._started
        if elapsed > timeout:
            raise RunTimeoutError(phase, elapsed)


def build_orchestrator(db: Session, config: BalancerConfig) -> Orchestrator:
    """Wire the default database-backed pipeline for one session."""
    return Orchestrator(
        config=config,
        inventory_provider=StoreInventoryProvider(db, config),
        velocity_provider=SalesVelocityProvider(db, config),
        analyzer=SituationAnalyzer(config),
        opportunity_service=OpportunityService(config),
        scoring_service=ScoringService(config),
        planner=PlannerService(config),
        executor=ExecutionService(db, config),
        run_lock=RunLockService(db, config),
        insights_service=InsightsService(config),
    )
