"""
SQLAlchemy declarative base and mixins

Provides:
- Base: declarative base class
- CreatedAuditMixin: created_by / created_at
- SoftDeleteMixin: deleted_at / deleted_by and is_deleted
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base

    Every model inherits from this class
    """

    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class CreatedAuditMixin:
    """Creator identity and creation timestamp, both immutable"""

    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class SoftDeleteMixin:
    """
    Soft-delete mixin

    A non-null deleted_at marks the row as logically deleted
    """

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )
    deleted_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
