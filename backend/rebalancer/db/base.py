"""SQLAlchemy declarative base and common utilities."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class SoftDeleteMixin:
    """Soft-delete support via a nullable ``deleted_at`` timestamp.

    Rows synced from the POS are never physically removed; a non-null
    ``deleted_at`` hides them from every read the engine performs.
    Use ``not_deleted()`` as a query filter.
    """

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None,
    )

    def soft_delete(self) -> None:
        """Mark this row as deleted."""
        from datetime import timezone
        self.deleted_at = datetime.now(timezone.utc)

    @classmethod
    def not_deleted(cls):
        """SQLAlchemy filter expression: ``WHERE deleted_at IS NULL``."""
        return cls.deleted_at.is_(None)
