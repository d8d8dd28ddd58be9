"""Sales velocity over a short recent window and a longer trend window.

Velocity is read from closed, non-returned, non-deleted sale lines with a
positive quantity, grouped by outlet and product:

    daily  = units sold in the last ``velocity_days`` / velocity_days
    weekly = (units sold in the last ``trend_days`` / trend_days) * 7

``weekly`` is a daily-equivalent scaled to a week so both figures are
comparable. Outlet/product pairs without matching sales are absent from the
result; callers default them to zero.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Mapping

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rebalancer.core.config import BalancerConfig
from rebalancer.core.exceptions import VelocityFetchError
from rebalancer.models.sales import Sale, SaleLineItem, SaleStatus
from rebalancer.services.rebalancing.entities import Store

logger = logging.getLogger(__name__)

# outlet_id -> product_id -> {"daily": float, "weekly": float}
VelocityMap = Dict[int, Dict[int, Dict[str, float]]]


def chunked(values: List[int], size: int) -> Iterable[List[int]]:
    for start in range(0, len(values), size):
        yield values[start:start + size]


class SalesVelocityProvider:
    """Batched, chunked velocity reads for many stores at once."""

    def __init__(
        self,
        db: Session,
        config: BalancerConfig,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.db = db
        self.velocity_days = config.velocity_days
        self.trend_days = config.trend_days
        self.chunk_size = config.velocity_chunk_size
        self.clock = clock

    def velocities(
        self,
        stores: List[Store],
        store_product_map: Mapping[int, Iterable[int]],
    ) -> VelocityMap:
        if not stores or not store_product_map:
            return {}

        store_ids = [s.id for s in stores]
        # Deduplicate while keeping first-seen order for stable chunking
        product_ids = list(dict.fromkeys(
            pid for pids in store_product_map.values() for pid in pids
        ))
        if not product_ids:
            return {}

        now = self.clock()
        velocity_since = now - timedelta(days=self.velocity_days)
        trend_since = now - timedelta(days=self.trend_days)

        velocity_map: VelocityMap = {}
        for index, chunk in enumerate(chunked(product_ids, self.chunk_size)):
            try:
                recent = self._sum_units(store_ids, chunk, velocity_since)
                trend = self._sum_units(store_ids, chunk, trend_since)
            except SQLAlchemyError as e:
                raise VelocityFetchError(index, str(e)) from e

            for outlet_id, product_id, units in recent:
                velocity_map.setdefault(outlet_id, {}).setdefault(product_id, {})["daily"] = (
                    float(units) / self.velocity_days
                )
            for outlet_id, product_id, units in trend:
                velocity_map.setdefault(outlet_id, {}).setdefault(product_id, {})["weekly"] = (
                    float(units) / self.trend_days * 7.0
                )
            logger.debug(
                f"Velocity chunk {index}: {len(chunk)} products, "
                f"{len(recent)} recent rows, {len(trend)} trend rows"
            )

        return velocity_map

    def _sum_units(self, store_ids: List[int], product_ids: List[int], since: datetime):
        query = (
            select(Sale.outlet_id, SaleLineItem.product_id, func.sum(SaleLineItem.quantity))
            .join(Sale, Sale.id == SaleLineItem.sale_id)
            .where(
                Sale.sale_date >= since,
                Sale.outlet_id.in_(store_ids),
                SaleLineItem.product_id.in_(product_ids),
                Sale.status == SaleStatus.CLOSED.value,
                SaleLineItem.is_return.is_(False),
                Sale.not_deleted(),
                SaleLineItem.quantity > 0,
            )
            .group_by(Sale.outlet_id, SaleLineItem.product_id)
        )
        return self.db.execute(query).all()
