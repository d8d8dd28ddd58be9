"""Data structures passed between the rebalancing pipeline stages."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple


class PlanTier(str, Enum):
    """Urgency buckets, in execution order."""

    URGENT = "urgent"
    HIGH = "high"
    NORMAL = "normal"

    @classmethod
    def for_score(cls, urgency_score: int) -> "PlanTier":
        if urgency_score >= 80:
            return cls.URGENT
        if urgency_score >= 50:
            return cls.HIGH
        return cls.NORMAL


class UrgencyReason(str, Enum):
    """Labels recorded on an opportunity for each urgency contribution."""

    CRITICAL = "CRITICAL"
    LOW = "LOW"
    DEMAND = "DEMAND"
    SURPLUS = "SURPLUS"


@dataclass(frozen=True)
class Store:
    id: int
    name: str
    region: Optional[str] = None


@dataclass
class InventoryItem:
    """On-hand stock for one product at one store.

    The inventory provider fills identity, prices and level; the situation
    analyzer fills the velocity and classification fields in place.
    """

    product_id: int
    inventory_level: int
    supply_price: float = 0.0
    retail_price: float = 0.0
    daily_velocity: float = 0.0
    weekly_velocity: float = 0.0
    days_of_stock: float = 0.0
    is_low: bool = False
    is_overstock: bool = False
    is_high_demand: bool = False


@dataclass(frozen=True)
class StoreStatus:
    """Read-only view of an analyzed item at a given store."""

    store: Store
    inventory_level: int
    days_of_stock: float
    daily_velocity: float
    is_low: bool
    is_overstock: bool
    is_high_demand: bool

    @classmethod
    def from_item(cls, store: Store, item: InventoryItem) -> "StoreStatus":
        return cls(
            store=store,
            inventory_level=item.inventory_level,
            days_of_stock=item.days_of_stock,
            daily_velocity=item.daily_velocity,
            is_low=item.is_low,
            is_overstock=item.is_overstock,
            is_high_demand=item.is_high_demand,
        )

    @property
    def store_id(self) -> int:
        return self.store.id


@dataclass
class ProductMatrixEntry:
    product_id: int
    supply_price: float
    stores: Dict[int, StoreStatus] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoreResult:
    recommended_qty: int
    transfer_value: float
    urgency_score: int
    reason: str
    needed_qty: float = 0.0
    can_spare: float = 0.0


@dataclass(frozen=True)
class Opportunity:
    """Candidate transfer of one product from a surplus store to a needy one."""

    product_id: int
    from_outlet: int
    to_outlet: int
    recommended_qty: int
    transfer_value: float
    urgency_score: int
    reason: str
    from_days: float
    to_days: float

    def __post_init__(self):
        if self.from_outlet == self.to_outlet:
            raise ValueError(f"Opportunity for product {self.product_id} transfers store {self.from_outlet} to itself")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Plan:
    urgent: List[Opportunity] = field(default_factory=list)
    high: List[Opportunity] = field(default_factory=list)
    normal: List[Opportunity] = field(default_factory=list)

    def tiers(self) -> Iterator[Tuple[PlanTier, List[Opportunity]]]:
        """Yield (tier, opportunities) in execution order."""
        for tier in PlanTier:
            yield tier, getattr(self, tier.value)

    def counts(self) -> Dict[str, int]:
        return {tier.value: len(items) for tier, items in self.tiers()}

    def __len__(self) -> int:
        return len(self.urgent) + len(self.high) + len(self.normal)


@dataclass(frozen=True)
class ExecutionResult:
    executed: int = 0
    allocations: int = 0
    dry_run: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RunSummary:
    """Counts-only outcome of one orchestrator run."""

    stores: int
    opportunities: int
    plan: Dict[str, int]
    execution: ExecutionResult
    insights: Optional[Dict[str, int]] = None
    dry_run: bool = True
    skipped_stores: List[int] = field(default_factory=list)
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stores": self.stores,
            "opportunities": self.opportunities,
            "plan": dict(self.plan),
            "execution": self.execution.to_dict(),
            "insights": dict(self.insights) if self.insights is not None else None,
            "dry_run": self.dry_run,
            "skipped_stores": list(self.skipped_stores),
            "duration_ms": self.duration_ms,
        }
