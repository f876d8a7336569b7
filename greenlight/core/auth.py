"""
Identity boundary

Requests arrive already authenticated by the access proxy, which injects the
user's email into a header. That value is trusted verbatim.
Root users (allowed to delete releases) come from the ROOT_USERS setting.
"""

from typing import Annotated, Iterable

from fastapi import Depends, HTTPException, Request, status

from greenlight.core.config import settings


def is_root_user(user_email: str, root_users: Iterable[str]) -> bool:
    """Exact match against the configured root users"""
    return user_email in set(root_users)


def get_current_user_email(request: Request) -> str:
    """
    Dependency: the authenticated user's email

    401 when the proxy did not supply one
    """
    user_email = request.headers.get(settings.IDENTITY_HEADER)
    if not user_email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: No user email found",
        )
    return user_email


def require_root_user(
    user_email: Annotated[str, Depends(get_current_user_email)],
) -> str:
    """Dependency: only root users get through"""
    if not is_root_user(user_email, settings.root_users):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized: Only root users can perform this action",
        )
    return user_email


# Type aliases for dependency injection
CurrentUserEmail = Annotated[str, Depends(get_current_user_email)]
RootUserEmail = Annotated[str, Depends(require_root_user)]
