"""Transfer execution/allocation records and the run lock."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, JSON, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rebalancer.db.base import Base


class TransferExecution(Base):
    """Header row for one executed plan entry."""

    __tablename__ = "transfer_executions"

    id: Mapped[int] = mapped_column(primary_key=True)
    public_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    alias_code: Mapped[str] = mapped_column(String(64), nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # urgent/high/normal
    simulation_mode: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)
    executed_by: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    allocations: Mapped[list["TransferAllocation"]] = relationship(
        "TransferAllocation", back_populates="execution", cascade="all, delete-orphan"
    )


class TransferAllocation(Base):
    """Single product transfer line within an execution."""

    __tablename__ = "transfer_allocations"

    id: Mapped[int] = mapped_column(primary_key=True)
    execution_id: Mapped[int] = mapped_column(
        ForeignKey("transfer_executions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id"), nullable=False, index=True
    )
    from_outlet_id: Mapped[int] = mapped_column(ForeignKey("outlets.id"), nullable=False)
    to_outlet_id: Mapped[int] = mapped_column(ForeignKey("outlets.id"), nullable=False)
    allocated_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    transfer_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    calculation_data: Mapped[dict] = mapped_column(JSON, nullable=False)  # reason/urgency/from/to
    public_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    # Relationships
    execution: Mapped["TransferExecution"] = relationship(
        "TransferExecution", back_populates="allocations"
    )


class RebalanceRunLock(Base):
    """Advisory lock row held for the duration of a live write phase."""

    __tablename__ = "rebalance_run_locks"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    holder: Mapped[str] = mapped_column(String(100), nullable=False)
    acquired_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
