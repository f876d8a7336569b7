"""
Release service

Orchestrates a release decision: validation, ticket lookup, persistence and
notification
"""

from dataclasses import replace
from typing import Iterable, List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from greenlight.database.models.release import Release, ReleaseStatus
from greenlight.database.release_repository import (
    DEFAULT_LIST_LIMIT,
    ReleaseDraft,
    ReleaseRepository,
)
from greenlight.integrations.jira import JiraClient
from greenlight.integrations.notifications import EmailNotifier

logger = structlog.get_logger(__name__)


class ReleaseValidationError(ValueError):
    """The submitted release breaks a business rule"""


def normalize_ticket_keys(ticket_keys: Optional[Iterable[str]]) -> List[str]:
    """Strip keys and drop blanks, preserving order"""
    if not ticket_keys:
        return []
    return [key.strip() for key in ticket_keys if key and key.strip()]


class ReleaseService:
    """Release service"""

    def __init__(
        self,
        db: AsyncSession,
        jira: JiraClient,
        notifier: EmailNotifier,
    ):
        self.repository = ReleaseRepository(db)
        self.jira = jira
        self.notifier = notifier

    async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> List[Release]:
        return await self.repository.list_active(limit)

    async def get(self, release_id: int) -> Optional[Release]:
        return await self.repository.get_by_id(release_id)

    async def create(
        self,
        draft: ReleaseDraft,
        ticket_keys: Optional[Iterable[str]],
        acting_user: str,
    ) -> Release:
        """Record a decision, then notify"""
        log = logger.bind(acting_user=acting_user, status=draft.status.value)

        if draft.status == ReleaseStatus.NO_GO and not (draft.explanation or "").strip():
            raise ReleaseValidationError("An explanation is required for a NO GO decision")
        if draft.explanation is not None and not draft.explanation.strip():
            draft = replace(draft, explanation=None)

        keys = normalize_ticket_keys(ticket_keys)
        tickets = await self.jira.resolve_many(keys)

        release = await self.repository.create(draft, tickets, acting_user)

        await self._notify(release, "Created", acting_user)

        log.info("release_recorded", release_id=release.id, ticket_count=len(tickets))
        return release

    async def delete(self, release_id: int, acting_user: str) -> bool:
        return await self.repository.soft_delete(release_id, acting_user)

    async def _notify(self, release: Release, action: str, actor: str) -> None:
        """Notification failures never undo or fail the write"""
        try:
            await self.notifier.send(release, action, actor)
        except Exception:
            logger.warning(
                "release_notification_failed",
                release_id=release.id,
                action=action,
                exc_info=True,
            )
