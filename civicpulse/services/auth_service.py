"""
Authentication service for bearer JWT handling.

Tokens are issued by the identity provider with the shared secret; the API
only verifies them and keeps a user row per subject.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from civicpulse.database.models.user import User, UserRole
from civicpulse.database.repositories.user import UserRepository
from civicpulse.providers.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Authentication error."""

    def __init__(self, message: str, status_code: int = 401):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass
class VerifyResult:
    """Result of JWT verification."""

    user: User
    created: bool = False


def create_jwt(
    subject: str,
    email: str,
    name: str,
    role: str = UserRole.CITIZEN.value,
    settings: Optional[Settings] = None,
    expires_in: Optional[timedelta] = None,
) -> str:
    """
    Create a signed token with the claims the API expects.

    Args:
        subject: Stable user identifier (``sub``)
        email: User email
        name: Display name
        role: ``citizen`` or ``admin``
        expires_in: Token lifetime, JWT_EXPIRE_HOURS by default

    Returns:
        JWT token string
    """
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_in or timedelta(hours=settings.jwt_expire_hours))

    payload = {
        "sub": subject,
        "email": email,
        "name": name,
        "role": role,
        "exp": expire,
        "iat": now,
    }

    return jwt.encode(
        payload,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


class AuthService:
    """Service for authentication operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.settings = get_settings()

    async def verify_jwt(self, token: str) -> VerifyResult:
        """
        Verify a JWT token and return the user it belongs to.

        The user row is created on the first token seen for a subject and
        refreshed from the claims afterwards.

        Raises:
            AuthError: If the token is invalid, expired or the user is inactive
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm],
            )
        except JWTError as e:
            logger.warning(f"JWT verification failed: {e}")
            raise AuthError("Invalid or expired token") from e

        subject = payload.get("sub")
        if not subject:
            raise AuthError("Invalid token: missing subject")

        email = payload.get("email")
        if not email:
            raise AuthError("Invalid token: missing email")

        role = payload.get("role", UserRole.CITIZEN.value)
        if role not in {r.value for r in UserRole}:
            raise AuthError(f"Invalid token: unknown role '{role}'")

        created = await self.user_repo.get_by_subject(subject) is None
        user = await self.user_repo.create_or_update_from_claims(
            subject=subject,
            email=email,
            name=payload.get("name") or email.split("@")[0],
            role=role,
        )

        if not user.is_active:
            raise AuthError("User account is deactivated", status_code=403)

        if created:
            logger.info(f"New user registered from token: {user.email} ({user.role})")

        return VerifyResult(user=user, created=created)
