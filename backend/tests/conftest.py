"""Pytest configuration and fixtures."""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rebalancer.api.routes.rebalancing import get_balancer_config
from rebalancer.core.config import BalancerConfig
from rebalancer.db.base import Base
from rebalancer.db.session import get_db
from rebalancer.main import app
# Import all models to ensure they're registered with Base.metadata
from rebalancer.models import *
from rebalancer.services.rebalancing.entities import Opportunity

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# Reference time for seeded sales; velocity windows are relative to it
NOW = datetime.now(timezone.utc)


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    """Create a test database session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def config() -> BalancerConfig:
    """Engine config with round thresholds used across tests."""
    return BalancerConfig(
        low_stock_days=7,
        overstock_days=45,
        target_days_min=14,
        source_keep_days=21,
        high_demand_multiplier=1.5,
        min_transfer_value=5.0,
        urgent_cap=5,
        high_cap=5,
        normal_cap=5,
    )


@pytest.fixture(scope="function")
def client(db_session: Session, config: BalancerConfig) -> Generator[TestClient, None, None]:
    """Create a test client with database and config overrides."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_balancer_config] = lambda: config
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class Seeder:
    """Helpers for populating outlets, products, stock and sales."""

    def __init__(self, db: Session):
        self.db = db

    def outlet(self, name: str, state: str = "NSW", deleted: bool = False) -> Outlet:
        outlet = Outlet(name=name, physical_state=state)
        if deleted:
            outlet.soft_delete()
        self.db.add(outlet)
        self.db.flush()
        return outlet

    def product(self, name: str, supply_price: str = "10.00", retail_price: str = "25.00") -> Product:
        product = Product(
            name=name,
            sku=name.upper().replace(" ", "-"),
            supply_price=Decimal(supply_price),
            retail_price=Decimal(retail_price),
        )
        self.db.add(product)
        self.db.flush()
        return product

    def stock(self, outlet: Outlet, product: Product, level: int) -> OutletInventory:
        row = OutletInventory(outlet_id=outlet.id, product_id=product.id, inventory_level=level)
        self.db.add(row)
        self.db.flush()
        return row

    def sale(
        self,
        outlet: Outlet,
        product: Product,
        quantity: int,
        days_ago: float = 1,
        status: str = "CLOSED",
        is_return: bool = False,
        deleted: bool = False,
    ) -> Sale:
        sale = Sale(outlet_id=outlet.id, sale_date=NOW - timedelta(days=days_ago), status=status)
        if deleted:
            sale.soft_delete()
        sale.lines.append(SaleLineItem(product_id=product.id, quantity=quantity, is_return=is_return))
        self.db.add(sale)
        self.db.flush()
        return sale

    def daily_sales(self, outlet: Outlet, product: Product, per_day: int, days: int = 14) -> None:
        """One closed sale per day for the last *days* days."""
        for day in range(days):
            self.sale(outlet, product, per_day, days_ago=day + 0.5)


@pytest.fixture
def seeder(db_session: Session) -> Seeder:
    return Seeder(db_session)


@pytest.fixture
def rebalance_scenario(seeder: Seeder, db_session: Session):
    """Three stores, one product short at store A with surplus at store B.

    - Widget: A holds 2 selling 2/day (1 day of stock), B holds 300 selling
      1/day (overstock), C holds 50 selling 2/day (balanced).
    - Sticker: same shape but worth too little to move.
    """
    store_a = seeder.outlet("Store A")
    store_b = seeder.outlet("Store B")
    store_c = seeder.outlet("Store C")
    widget = seeder.product("Widget", supply_price="10.00")
    sticker = seeder.product("Sticker", supply_price="0.01")

    seeder.stock(store_a, widget, 2)
    seeder.stock(store_b, widget, 300)
    seeder.stock(store_c, widget, 50)
    seeder.daily_sales(store_a, widget, 2)
    seeder.daily_sales(store_b, widget, 1)
    seeder.daily_sales(store_c, widget, 2)

    seeder.stock(store_a, sticker, 1)
    seeder.stock(store_b, sticker, 500)
    seeder.daily_sales(store_a, sticker, 1)

    db_session.commit()
    return {
        "store_a": store_a,
        "store_b": store_b,
        "store_c": store_c,
        "widget": widget,
        "sticker": sticker,
    }


@pytest.fixture
def make_opportunity():
    return _make_opportunity


def _make_opportunity(
    urgency_score: int,
    product_id: int = 1,
    from_outlet: int = 1,
    to_outlet: int = 2,
    qty: int = 10,
    value: float = 100.0,
) -> Opportunity:
    return Opportunity(
        product_id=product_id,
        from_outlet=from_outlet,
        to_outlet=to_outlet,
        recommended_qty=qty,
        transfer_value=value,
        urgency_score=urgency_score,
        reason="LOW",
        from_days=60.0,
        to_days=3.0,
    )
