"""Outlet, product and on-hand inventory models (read by the engine)."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rebalancer.db.base import Base, SoftDeleteMixin, TimestampMixin


class Outlet(Base, TimestampMixin, SoftDeleteMixin):
    """Retail store taking part in rebalancing."""

    __tablename__ = "outlets"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    physical_state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)  # region / state

    # Relationships
    inventory: Mapped[list["OutletInventory"]] = relationship(
        "OutletInventory", back_populates="outlet"
    )


class Product(Base, TimestampMixin, SoftDeleteMixin):
    """Catalog product with current supply (cost) and retail prices."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    sku: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    supply_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    retail_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)


class OutletInventory(Base, SoftDeleteMixin):
    """Current on-hand level per product per outlet."""

    __tablename__ = "outlet_inventory"
    __table_args__ = (
        UniqueConstraint("outlet_id", "product_id", name="uq_inventory_outlet_product"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    outlet_id: Mapped[int] = mapped_column(
        ForeignKey("outlets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    inventory_level: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Relationships
    outlet: Mapped["Outlet"] = relationship("Outlet", back_populates="inventory")
    product: Mapped["Product"] = relationship("Product")
