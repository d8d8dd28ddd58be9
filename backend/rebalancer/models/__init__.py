"""SQLAlchemy models."""

from rebalancer.models.catalog import Outlet, Product, OutletInventory
from rebalancer.models.sales import Sale, SaleLineItem, SaleStatus
from rebalancer.models.transfer import TransferExecution, TransferAllocation, RebalanceRunLock

__all__ = [
    "Outlet",
    "Product",
    "OutletInventory",
    "Sale",
    "SaleLineItem",
    "SaleStatus",
    "TransferExecution",
    "TransferAllocation",
    "RebalanceRunLock",
]
