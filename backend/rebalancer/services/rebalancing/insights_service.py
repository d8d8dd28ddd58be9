"""Business-intelligence aggregate of a run's classifications.

The snapshot is written as JSON for a downstream personalization process.
Writing is best effort: failures are logged and never abort the run.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from rebalancer.core.config import BalancerConfig
from rebalancer.services.rebalancing.entities import InventoryItem, Store

logger = logging.getLogger(__name__)

INSIGHTS_FILENAME = "auto_balancer_insights_latest.json"
VELOCITY_LEADERS_LIMIT = 50


class InsightsService:
    def __init__(self, config: BalancerConfig):
        self.config = config

    def generate(self, stores: List[Store], store_items: Mapping[int, List[InventoryItem]]) -> Dict[str, Any]:
        high_demand: List[list] = []
        low_stock: List[list] = []
        overstock: List[list] = []
        leaders: List[list] = []

        for store in stores:
            for item in store_items.get(store.id, []):
                row = [store.id, item.product_id, item.daily_velocity, item.days_of_stock]
                if item.is_high_demand:
                    high_demand.append(row)
                if item.is_low:
                    low_stock.append(row)
                if item.is_overstock:
                    overstock.append(row + [item.inventory_level])
                if item.daily_velocity > 0:
                    leaders.append([store.id, item.product_id, item.daily_velocity])

        leaders.sort(key=lambda r: r[2], reverse=True)

        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "high_demand": high_demand,
            "low_stock": low_stock,
            "overstock": overstock,
            "velocity_leaders_top50": leaders[:VELOCITY_LEADERS_LIMIT],
        }

    def write(self, insights: Dict[str, Any]) -> Optional[Path]:
        """Write the snapshot to the insights directory; return the path or None."""
        path = Path(self.config.insights_dir) / INSIGHTS_FILENAME
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(insights, indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Could not write insights snapshot to {path}: {e}")
            return None
        return path

    @staticmethod
    def summarize(insights: Dict[str, Any]) -> Dict[str, int]:
        return {
            "high_demand": len(insights["high_demand"]),
            "low_stock": len(insights["low_stock"]),
            "overstock": len(insights["overstock"]),
        }
