"""Errors raised by the rebalancing pipeline.

Read and write failures carry the identifiers a caller needs to retry
(store, product, outlets, tier). Degenerate inputs such as zero velocity
are never errors.
"""

from datetime import datetime
from typing import Optional


class RebalanceError(Exception):
    """Base class for run-fatal rebalancing failures."""


class InventoryFetchError(RebalanceError):
    """Raised when one store's inventory cannot be read."""
    def __init__(self, store_id: int, detail: str = ""):
        self.store_id = store_id
        super().__init__(f"Inventory fetch failed for store {store_id}: {detail}")


class VelocityFetchError(RebalanceError):
    """Raised when a chunk of the sales velocity batch cannot be read."""
    def __init__(self, chunk_index: int, detail: str = ""):
        self.chunk_index = chunk_index
        super().__init__(f"Velocity fetch failed for product chunk {chunk_index}: {detail}")


class ExecutionWriteError(RebalanceError):
    """Raised when a transfer execution/allocation pair cannot be persisted."""
    def __init__(self, tier: str, product_id: int, from_outlet: int, to_outlet: int, detail: str = ""):
        self.tier = tier
        self.product_id = product_id
        self.from_outlet = from_outlet
        self.to_outlet = to_outlet
        super().__init__(
            f"Failed to persist {tier} transfer of product {product_id} "
            f"from store {from_outlet} to store {to_outlet}: {detail}"
        )


class RunLockedError(RebalanceError):
    """Raised when another live run holds the rebalancing lock."""
    def __init__(self, holder: str, acquired_at: Optional[datetime] = None):
        self.holder = holder
        self.acquired_at = acquired_at
        since = f" since {acquired_at.isoformat()}" if acquired_at else ""
        super().__init__(f"Rebalancing run already in progress (held by {holder}{since})")


class RunTimeoutError(RebalanceError):
    """Raised when a run exceeds its configured deadline."""
    def __init__(self, phase: str, elapsed: float):
        self.phase = phase
        self.elapsed = elapsed
        super().__init__(f"Rebalancing run exceeded its deadline during {phase} ({elapsed:.1f}s elapsed)")
