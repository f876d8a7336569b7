"""
Release repository

Maps Release / ExcludedTicket rows to and from the database.

- Soft delete: a release is hidden from list_active once deleted_at is set,
  but stays in the table for audit and is still reachable by id
- Tickets come back as a nested list on each release, in insertion order
- create() is a single transaction: no parent without its tickets
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date
from typing import AsyncIterator, List, Optional, Sequence

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from greenlight.database.models.release import (
    ExcludedTicket,
    Release,
    ReleaseStatus,
    ReleaseType,
)

logger = structlog.get_logger(__name__)

DEFAULT_LIST_LIMIT = 10


@dataclass
class ReleaseDraft:
    """Release fields supplied by the caller, already validated"""
    release_date: date
    status: ReleaseStatus
    release_type: ReleaseType = ReleaseType.FULL
    explanation: Optional[str] = None


@dataclass
class TicketDetails:
    """A ticket as resolved by the lookup service"""
    key: str
    summary: Optional[str] = None
    url: Optional[str] = None


class ReleaseRepository:
    """CRUD over releases and their excluded tickets"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        """Commit on success, roll back on any error"""
        try:
            yield self.db
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def list_active(self, limit: int = DEFAULT_LIST_LIMIT) -> List[Release]:
        """Newest non-deleted releases with their tickets"""
        if limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit}")

        query = (
            select(Release)
            .where(Release.deleted_at.is_(None))
            .options(selectinload(Release.tickets))
            .order_by(Release.created_at.desc(), Release.id.desc())
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, release_id: int) -> Optional[Release]:
        """Fetch one release regardless of delete state"""
        query = (
            select(Release)
            .where(Release.id == release_id)
            .options(selectinload(Release.tickets))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def create(
        self,
        draft: ReleaseDraft,
        tickets: Sequence[TicketDetails],
        acting_user: str,
    ) -> Release:
        """
        Insert a release and its tickets in one transaction

        Args:
            draft: release fields
            tickets: resolved ticket details, stored in the given order
            acting_user: identity recorded as created_by on every row

        Returns:
            The stored release, re-read with its tickets
        """
        log = logger.bind(acting_user=acting_user, ticket_count=len(tickets))

        async with self._transaction():
            release = Release(
                release_date=draft.release_date,
                status=draft.status,
                release_type=draft.release_type,
                explanation=draft.explanation,
                created_by=acting_user,
            )
            self.db.add(release)
            # Children need the generated id
            await self.db.flush()

            for ticket in tickets:
                self.db.add(
                    ExcludedTicket(
                        release_id=release.id,
                        ticket_key=ticket.key,
                        ticket_summary=ticket.summary,
                        ticket_url=ticket.url,
                        created_by=acting_user,
                    )
                )
            await self.db.flush()

            release_id = release.id

        log.info("release_created", release_id=release_id)

        return await self.get_by_id(release_id)

    async def soft_delete(self, release_id: int, acting_user: str) -> bool:
        """
        Mark a release deleted

        Only an active row is touched, so a second call (or a call on an
        unknown id) reports False instead of failing.
        """
        stmt = (
            update(Release)
            .where(Release.id == release_id, Release.deleted_at.is_(None))
            .values(deleted_at=func.now(), deleted_by=acting_user)
            .execution_options(synchronize_session=False)
        )

        async with self._transaction():
            result = await self.db.execute(stmt)

        changed = result.rowcount > 0
        logger.info(
            "release_soft_deleted" if changed else "release_soft_delete_noop",
            release_id=release_id,
            acting_user=acting_user,
        )
        return changed
