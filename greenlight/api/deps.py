"""
API dependencies

Schema guard, key-value store, collaborators and the release service
"""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from greenlight.core.config import settings
from greenlight.core.redis_client import get_redis
from greenlight.core.release_service import ReleaseService
from greenlight.database.engine import get_db, get_engine
from greenlight.database.migrations import KeyValueStore, SchemaMigrationGuard
from greenlight.integrations.jira import JiraClient
from greenlight.integrations.notifications import EmailNotifier

logger = structlog.get_logger(__name__)


async def get_state_store() -> KeyValueStore:
    """The key-value store holding the schema version marker"""
    if not settings.REDIS_URL:
        logger.error("state_store_not_configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database configuration error",
        )
    return await get_redis()


async def require_current_schema(
    engine: Annotated[AsyncEngine, Depends(get_engine)],
    state: Annotated[KeyValueStore, Depends(get_state_store)],
) -> None:
    """Run the migration guard; refuse the request if it fails"""
    guard = SchemaMigrationGuard(engine, state)
    if not await guard.ensure_schema():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database initialization failed",
        )


def get_jira_client() -> JiraClient:
    return JiraClient.from_settings()


def get_notifier() -> EmailNotifier:
    return EmailNotifier()


def get_release_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    jira: Annotated[JiraClient, Depends(get_jira_client)],
    notifier: Annotated[EmailNotifier, Depends(get_notifier)],
) -> ReleaseService:
    return ReleaseService(db, jira, notifier)


# Type aliases
Jira = Annotated[JiraClient, Depends(get_jira_client)]
Releases = Annotated[ReleaseService, Depends(get_release_service)]
