"""
Current user API
"""

from fastapi import APIRouter
from pydantic import BaseModel

from greenlight.core.auth import CurrentUserEmail, is_root_user
from greenlight.core.config import settings

router = APIRouter()


class CurrentUserResponse(BaseModel):
    email: str
    is_root: bool


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(user_email: CurrentUserEmail):
    """Who the proxy says the caller is, and whether they may delete releases"""
    return CurrentUserResponse(
        email=user_email,
        is_root=is_root_user(user_email, settings.root_users),
    )
