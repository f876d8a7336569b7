"""
Database package

SQLAlchemy 2.0 async engine, models, schema migration guard and repository
"""

from greenlight.database.engine import (
    engine,
    async_session_maker,
    get_db,
    get_engine,
    close_db,
)
from greenlight.database.base import Base, CreatedAuditMixin, SoftDeleteMixin
from greenlight.database.migrations import CURRENT_SCHEMA_VERSION, SchemaMigrationGuard
from greenlight.database.release_repository import (
    ReleaseDraft,
    ReleaseRepository,
    TicketDetails,
)

__all__ = [
    # Engine
    "engine",
    "async_session_maker",
    "get_db",
    "get_engine",
    "close_db",
    # Base
    "Base",
    "CreatedAuditMixin",
    "SoftDeleteMixin",
    # Schema
    "CURRENT_SCHEMA_VERSION",
    "SchemaMigrationGuard",
    # Repository
    "ReleaseDraft",
    "ReleaseRepository",
    "TicketDetails",
]
