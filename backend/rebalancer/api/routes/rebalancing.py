"""Rebalancing API routes.

Trigger a rebalancing run (dry run unless explicitly disabled) and inspect
the active engine configuration.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from rebalancer.core.config import BalancerConfig, get_settings
from rebalancer.core.exceptions import RebalanceError, RunLockedError
from rebalancer.db.session import DbSession
from rebalancer.schemas.rebalancing import RunSummaryResponse
from rebalancer.services.rebalancing import build_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


def get_balancer_config() -> BalancerConfig:
    return get_settings().balancer_config()


@router.post("/run", response_model=RunSummaryResponse)
def run_rebalancing(
    db: DbSession,
    config: BalancerConfig = Depends(get_balancer_config),
    dry_run: bool = Query(default=True, description="Compute the plan without persisting transfers"),
):
    """Run the rebalancing pipeline once and return its counts.

    Live runs (``dry_run=false``) persist one execution and allocation per
    planned transfer and are refused while another live run holds the lock.
    """
    orchestrator = build_orchestrator(db, config)
    try:
        summary = orchestrator.run(dry_run=dry_run)
    except RunLockedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except RebalanceError as e:
        logger.error(f"Rebalancing run failed: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return summary.to_dict()


@router.get("/config")
def get_rebalancing_config(config: BalancerConfig = Depends(get_balancer_config)):
    """Return the thresholds, caps and windows the engine runs with."""
    return config.model_dump()
