"""
Bearer-token dependencies for the complaint and admin routes.

Citizen routes depend on ``get_current_user``; ``/api/admin`` routes on
``get_current_admin``. A missing or bad token is 401, a deactivated account
or a non-admin on an admin route is 403.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from civicpulse.database.connection import get_db
from civicpulse.database.models.user import User
from civicpulse.middleware.request_id import bind_caller
from civicpulse.services.auth_service import AuthError, AuthService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

CHALLENGE = {"WWW-Authenticate": "Bearer"}


async def _resolve_caller(token: str, db: AsyncSession) -> User:
    try:
        result = await AuthService(db).verify_jwt(token)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message, headers=CHALLENGE) from e

    if result.created:
        logger.info(f"👤 First sign-in for {result.user.email}")
    bind_caller(result.user.email)
    return result.user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers=CHALLENGE,
        )
    return await _resolve_caller(credentials.credentials, db)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Anonymous callers get ``None``; a token that is present must still be valid."""
    if credentials is None:
        return None
    return await _resolve_caller(credentials.credentials, db)


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await get_current_user(credentials, db)
    if not user.is_admin:
        logger.warning(f"🚫 Admin route refused for {user.email}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return user
