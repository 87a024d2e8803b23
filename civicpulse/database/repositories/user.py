"""
Users known from bearer tokens.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from civicpulse.database.connection import utcnow
from civicpulse.database.models.user import User, UserRole
from civicpulse.database.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Lookup by token subject and upsert from claims."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, User)

    async def get_by_subject(self, subject: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.subject == subject)
        )
        return result.scalar_one_or_none()

    async def create_or_update_from_claims(
        self,
        subject: str,
        email: str,
        name: str,
        role: str = UserRole.CITIZEN.value,
    ) -> User:
        """
        Create a new user or update an existing one from token claims.

        Also updates last_login_at timestamp. The role always follows the
        latest token.

        Returns:
            Created or updated User instance
        """
        user = await self.get_by_subject(subject)

        if user:
            user.email = email
            user.name = name
            user.role = role
            user.last_login_at = utcnow()
            return await self.update(user)

        user = User(
            subject=subject,
            email=email,
            name=name,
            role=role,
            last_login_at=utcnow(),
        )
        return await self.create(user)

    async def get_admins(self) -> List[User]:
        result = await self.session.execute(
            select(User).where(User.role == UserRole.ADMIN.value).order_by(User.name)
        )
        return list(result.scalars().all())
