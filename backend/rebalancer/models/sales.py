"""Sales header and line item models used for velocity."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rebalancer.db.base import Base, SoftDeleteMixin


class SaleStatus(str, Enum):
    """POS sale lifecycle states."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"
    VOIDED = "VOIDED"


class Sale(Base, SoftDeleteMixin):
    """Sale header as synced from the POS."""

    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(primary_key=True)
    outlet_id: Mapped[int] = mapped_column(
        ForeignKey("outlets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sale_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), default=SaleStatus.CLOSED.value, nullable=False)

    # Relationships
    lines: Mapped[list["SaleLineItem"]] = relationship(
        "SaleLineItem", back_populates="sale", cascade="all, delete-orphan"
    )


class SaleLineItem(Base):
    """One product line of a sale."""

    __tablename__ = "sale_line_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    sale_id: Mapped[int] = mapped_column(
        ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    is_return: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    sale: Mapped["Sale"] = relationship("Sale", back_populates="lines")
