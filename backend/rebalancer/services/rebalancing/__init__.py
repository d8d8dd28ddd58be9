"""Inventory rebalancing pipeline."""

from rebalancer.services.rebalancing.entities import (
    ExecutionResult,
    InventoryItem,
    Opportunity,
    Plan,
    PlanTier,
    ProductMatrixEntry,
    RunSummary,
    ScoreResult,
    Store,
    StoreStatus,
    UrgencyReason,
)
from rebalancer.services.rebalancing.execution_service import ExecutionService
from rebalancer.services.rebalancing.insights_service import InsightsService
from rebalancer.services.rebalancing.inventory_provider import StoreInventoryProvider
from rebalancer.services.rebalancing.opportunity_service import OpportunityService
from rebalancer.services.rebalancing.orchestrator import Orchestrator, build_orchestrator
from rebalancer.services.rebalancing.planner_service import PlannerService
from rebalancer.services.rebalancing.run_lock import RunLockService
from rebalancer.services.rebalancing.scoring_service import ScoringService
from rebalancer.services.rebalancing.situation_analyzer import SituationAnalyzer
from rebalancer.services.rebalancing.velocity_provider import SalesVelocityProvider

__all__ = [
    "ExecutionResult",
    "InventoryItem",
    "Opportunity",
    "Plan",
    "PlanTier",
    "ProductMatrixEntry",
    "RunSummary",
    "ScoreResult",
    "Store",
    "StoreStatus",
    "UrgencyReason",
    "ExecutionService",
    "InsightsService",
    "StoreInventoryProvider",
    "OpportunityService",
    "Orchestrator",
    "build_orchestrator",
    "PlannerService",
    "RunLockService",
    "ScoringService",
    "SituationAnalyzer",
    "SalesVelocityProvider",
]
