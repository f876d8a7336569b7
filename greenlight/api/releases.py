"""
Release API

List, record and soft-delete GO/NO-GO release decisions
"""

from datetime import date, datetime
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field, field_validator

from greenlight.api.deps import Releases, require_current_schema
from greenlight.core.auth import CurrentUserEmail, RootUserEmail, is_root_user
from greenlight.core.config import settings
from greenlight.core.release_service import ReleaseValidationError
from greenlight.database.models.release import ReleaseStatus, ReleaseType
from greenlight.database.release_repository import ReleaseDraft

logger = structlog.get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_current_schema)])


# ============================================================
# Pydantic Models
# ============================================================

class ReleaseCreateRequest(BaseModel):
    """Create release request"""
    release_date: date
    status: ReleaseStatus
    release_type: ReleaseType = ReleaseType.FULL
    explanation: Optional[str] = None
    tickets: List[str] = Field(default_factory=list)

    @field_validator("release_type", mode="before")
    @classmethod
    def default_release_type(cls, value):
        return ReleaseType.FULL if value in (None, "") else value

    @field_validator("tickets", mode="before")
    @classmethod
    def default_tickets(cls, value):
        return [] if value is None else value


class TicketResponse(BaseModel):
    """Excluded ticket"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_key: str
    ticket_summary: Optional[str]
    ticket_url: Optional[str]
    created_by: str
    created_at: datetime


class ReleaseResponse(BaseModel):
    """Release with its tickets"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    release_date: date
    status: ReleaseStatus
    release_type: ReleaseType
    explanation: Optional[str]
    created_by: str
    created_at: datetime
    deleted_at: Optional[datetime]
    deleted_by: Optional[str]
    tickets: List[TicketResponse]


class ReleaseListResponse(BaseModel):
    """Recent releases"""
    releases: List[ReleaseResponse]
    is_root: bool


class ReleaseDeleteResponse(BaseModel):
    id: int
    deleted: bool


# ============================================================
# API Endpoints
# ============================================================

@router.get("", response_model=ReleaseListResponse)
async def list_releases(
    service: Releases,
    user_email: CurrentUserEmail,
    limit: int = Query(10, ge=1, le=100),
):
    """Most recent active releases"""
    releases = await service.list_recent(limit)
    return ReleaseListResponse(
        releases=[ReleaseResponse.model_validate(release) for release in releases],
        is_root=is_root_user(user_email, settings.root_users),
    )


@router.post("", response_model=ReleaseResponse, status_code=status.HTTP_201_CREATED)
async def create_release(
    request: ReleaseCreateRequest,
    service: Releases,
    user_email: CurrentUserEmail,
):
    """Record a GO/NO-GO decision"""
    draft = ReleaseDraft(
        release_date=request.release_date,
        status=request.status,
        release_type=request.release_type,
        explanation=request.explanation,
    )

    try:
        release = await service.create(draft, request.tickets, user_email)
    except ReleaseValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return ReleaseResponse.model_validate(release)


@router.delete("/{release_id}", response_model=ReleaseDeleteResponse)
async def delete_release(
    release_id: int,
    service: Releases,
    user_email: RootUserEmail,
):
    """Soft-delete a release (root users only)"""
    if not await service.delete(release_id, user_email):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Release not found or already deleted",
        )

    return ReleaseDeleteResponse(id=release_id, deleted=True)
