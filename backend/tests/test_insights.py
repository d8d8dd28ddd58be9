"""Tests for the business-intelligence snapshot."""

import json

from rebalancer.services.rebalancing import InsightsService, InventoryItem, Store
from rebalancer.services.rebalancing.insights_service import INSIGHTS_FILENAME


def item(product_id, daily, days, level=10, low=False, over=False, demand=False):
    return InventoryItem(
        product_id=product_id,
        inventory_level=level,
        daily_velocity=daily,
        days_of_stock=days,
        is_low=low,
        is_overstock=over,
        is_high_demand=demand,
    )


class TestGenerate:
    def test_classifications_are_collected(self, config):
        stores = [Store(id=1, name="A"), Store(id=2, name="B")]
        items = {
            1: [item(10, 2.0, 1.0, level=2, low=True, demand=True)],
            2: [item(10, 1.0, 300.0, level=300, over=True), item(11, 0.0, 50.0, level=5, over=True)],
        }

        insights = InsightsService(config).generate(stores, items)

        assert insights["high_demand"] == [[1, 10, 2.0, 1.0]]
        assert insights["low_stock"] == [[1, 10, 2.0, 1.0]]
        assert insights["overstock"] == [[2, 10, 1.0, 300.0, 300], [2, 11, 0.0, 50.0, 5]]
        assert "generated_at" in insights

    def test_velocity_leaders_sorted_capped_and_positive(self, config):
        stores = [Store(id=1, name="A")]
        items = {1: [item(pid, float(pid), 5.0) for pid in range(60)]}

        leaders = InsightsService(config).generate(stores, items)["velocity_leaders_top50"]

        assert len(leaders) == 50
        assert leaders[0] == [1, 59, 59.0]
        assert [row[2] for row in leaders] == sorted((row[2] for row in leaders), reverse=True)
        assert all(row[2] > 0 for row in leaders)

    def test_summarize_counts(self):
        counts = InsightsService.summarize({"high_demand": [1, 2], "low_stock": [], "overstock": [3]})
        assert counts == {"high_demand": 2, "low_stock": 0, "overstock": 1}


class TestWrite:
    def test_writes_latest_snapshot(self, config, tmp_path):
        service = InsightsService(config.model_copy(update={"insights_dir": str(tmp_path / "runs")}))
        insights = service.generate([Store(id=1, name="A")], {1: [item(10, 1.0, 5.0, low=True)]})

        path = service.write(insights)

        assert path == tmp_path / "runs" / INSIGHTS_FILENAME
        written = json.loads(path.read_text(encoding="utf-8"))
        assert written["low_stock"] == [[1, 10, 1.0, 5.0]]
        assert set(written) == {"generated_at", "high_demand", "low_stock", "overstock", "velocity_leaders_top50"}

    def test_write_failure_is_not_fatal(self, config, tmp_path, caplog):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("occupied")
        service = InsightsService(config.model_copy(update={"insights_dir": str(blocker)}))

        assert service.write({"high_demand": [], "low_stock": [], "overstock": []}) is None
        assert "Could not write insights" in caplog.text
