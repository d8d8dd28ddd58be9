"""Store and on-hand inventory reads."""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rebalancer.core.config import BalancerConfig
from rebalancer.core.exceptions import InventoryFetchError, RebalanceError
from rebalancer.models.catalog import Outlet, OutletInventory, Product
from rebalancer.services.rebalancing.entities import InventoryItem, Store

logger = logging.getLogger(__name__)


class StoreInventoryProvider:
    """Loads active outlets and their positive on-hand stock."""

    def __init__(self, db: Session, config: BalancerConfig):
        self.db = db
        self.batch_limit = config.inventory_batch_limit

    def list_active_stores(self) -> List[Store]:
        try:
            rows = self.db.execute(
                select(Outlet.id, Outlet.name, Outlet.physical_state)
                .where(Outlet.not_deleted())
                .order_by(Outlet.id)
            ).all()
        except SQLAlchemyError as e:
            raise RebalanceError(f"Failed to list active stores: {e}") from e
        return [Store(id=row.id, name=row.name, region=row.physical_state) for row in rows]

    def inventory_for(self, store: Store) -> List[InventoryItem]:
        """Return items with stock on hand, joined to current prices.

        At most ``inventory_batch_limit`` rows are read per store.
        """
        query = (
            select(
                OutletInventory.product_id,
                OutletInventory.inventory_level,
                Product.supply_price,
                Product.retail_price,
            )
            .join(Product, Product.id == OutletInventory.product_id)
            .where(
                OutletInventory.outlet_id == store.id,
                OutletInventory.inventory_level > 0,
                OutletInventory.not_deleted(),
                Product.not_deleted(),
            )
            .order_by(OutletInventory.product_id)
            .limit(self.batch_limit)
        )
        try:
            rows = self.db.execute(query).all()
        except SQLAlchemyError as e:
            raise InventoryFetchError(store.id, str(e)) from e

        items = [
            InventoryItem(
                product_id=row.product_id,
                inventory_level=int(row.inventory_level),
                supply_price=float(row.supply_price or 0),
                retail_price=float(row.retail_price or 0),
            )
            for row in rows
        ]
        if len(items) >= self.batch_limit:
            logger.warning(f"Store {store.id} inventory truncated at batch limit {self.batch_limit}")
        logger.debug(f"Loaded {len(items)} inventory rows for store {store.id}")
        return items
