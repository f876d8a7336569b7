"""
Release database models

One GO/NO-GO decision per release, plus the JIRA tickets excluded from it
(or slated for the hotfix)
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from greenlight.database.base import Base, CreatedAuditMixin, SoftDeleteMixin


class ReleaseStatus(str, Enum):
    """Release decision"""
    GO = "GO"
    NO_GO = "NO_GO"


class ReleaseType(str, Enum):
    """Release type (added in schema v2)"""
    FULL = "FULL"
    HOTFIX = "HOTFIX"


def release_status_type() -> SQLEnum:
    return SQLEnum(
        ReleaseStatus,
        name="release_status",
        native_enum=False,
        create_constraint=True,
        validate_strings=True,
    )


def release_type_type(create_constraint: bool = True) -> SQLEnum:
    return SQLEnum(
        ReleaseType,
        name="release_type",
        native_enum=False,
        create_constraint=create_constraint,
        validate_strings=True,
    )


class Release(CreatedAuditMixin, SoftDeleteMixin, Base):
    """Release decision table"""

    __tablename__ = "releases"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    release_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[ReleaseStatus] = mapped_column(release_status_type(), nullable=False)
    release_type: Mapped[ReleaseType] = mapped_column(
        release_type_type(),
        nullable=False,
        default=ReleaseType.FULL,
        server_default=ReleaseType.FULL.value,
    )
    explanation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Reserved for edit support; nothing writes these yet
    updated_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    tickets: Mapped[List["ExcludedTicket"]] = relationship(
        back_populates="release",
        order_by="ExcludedTicket.id",
        lazy="raise",
        passive_deletes="all",
    )

    def __repr__(self):
        return f"<Release {self.id}: {self.release_date} {self.status} ({self.release_type})>"


class ExcludedTicket(CreatedAuditMixin, Base):
    """Tickets attached to a release"""

    __tablename__ = "excluded_tickets"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    release_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("releases.id"),
        nullable=False,
        index=True,
    )
    ticket_key: Mapped[str] = mapped_column(String(64), nullable=False)
    ticket_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ticket_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    release: Mapped["Release"] = relationship(back_populates="tickets", lazy="raise")

    def __repr__(self):
        return f"<ExcludedTicket {self.id}: {self.ticket_key} -> release {self.release_id}>"
