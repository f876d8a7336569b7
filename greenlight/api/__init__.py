"""
API routes

Every route here sits behind the access proxy identity check
"""

from fastapi import APIRouter, Depends

from greenlight.api import jira, releases, users
from greenlight.core.auth import get_current_user_email

router = APIRouter(dependencies=[Depends(get_current_user_email)])

# Current user
router.include_router(users.router, tags=["users"])

# Release decisions
router.include_router(releases.router, prefix="/releases", tags=["releases"])

# JIRA
router.include_router(jira.router, tags=["jira"])
