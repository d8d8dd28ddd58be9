"""Cross-store product matrix and needy/surplus partitioning."""

from typing import Dict, List, Mapping, Tuple

from rebalancer.core.config import BalancerConfig
from rebalancer.services.rebalancing.entities import (
    InventoryItem,
    ProductMatrixEntry,
    Store,
    StoreStatus,
)


class OpportunityService:
    def __init__(self, config: BalancerConfig):
        self.config = config

    def build_product_matrix(
        self,
        stores: List[Store],
        store_items: Mapping[int, List[InventoryItem]],
    ) -> Dict[int, ProductMatrixEntry]:
        """Group analyzed items by product across stores.

        The supply price comes from the first store seen carrying the product.
        """
        matrix: Dict[int, ProductMatrixEntry] = {}
        for store in stores:
            for item in store_items.get(store.id, []):
                entry = matrix.get(item.product_id)
                if entry is None:
                    entry = ProductMatrixEntry(product_id=item.product_id, supply_price=item.supply_price)
                    matrix[item.product_id] = entry
                entry.stores[store.id] = StoreStatus.from_item(store, item)
        return matrix

    def partition(self, entry: ProductMatrixEntry) -> Tuple[List[StoreStatus], List[StoreStatus]]:
        """Split a product's stores into (needy, surplus).

        Needy stores are low on stock, or trending up with less than the
        target cover. Surplus stores are overstocked.
        """
        needy: List[StoreStatus] = []
        surplus: List[StoreStatus] = []
        for status in entry.stores.values():
            if status.is_low or (status.is_high_demand and status.days_of_stock < self.config.target_days_min):
                needy.append(status)
            if status.is_overstock:
                surplus.append(status)
        return needy, surplus
