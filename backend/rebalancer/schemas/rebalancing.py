"""Rebalancing run schemas."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel


class ExecutionResultResponse(BaseModel):
    executed: int
    allocations: int
    dry_run: bool


class InsightsCountsResponse(BaseModel):
    high_demand: int
    low_stock: int
    overstock: int


class RunSummaryResponse(BaseModel):
    """Counts-only summary of one rebalancing run."""

    stores: int
    opportunities: int
    plan: Dict[str, int]
    execution: ExecutionResultResponse
    insights: Optional[InsightsCountsResponse] = None
    dry_run: bool
    skipped_stores: List[int] = []
    duration_ms: float
