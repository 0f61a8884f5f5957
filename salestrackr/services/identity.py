"""
Identity store: persistence of user credentials and roles.

Emails are stored lower-cased so the unique constraint on ``users.email``
is effectively case-insensitive.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from salestrackr.core.exceptions import ConflictError
from salestrackr.core.security import get_password_hash
from salestrackr.models.user import ROLE_AGENT, User

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "User already exists with this email"


def normalise_email(email: str) -> str:
    return email.strip().lower()


class IdentityStore:
    """Lookup and creation of ``User`` rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == normalise_email(email))
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id, populate_existing=True)

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.name, User.id))
        return list(result.scalars().all())

    async def create(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: str = ROLE_AGENT,
    ) -> User:
        """Insert a user with a bcrypt-hashed password.

        Raises ``ConflictError`` (HTTP 400) when the email is taken, including
        when a concurrent registration wins the race on the unique index.
        """
        email = normalise_email(email)
        if await self.get_by_email(email) is not None:
            raise ConflictError(DUPLICATE_EMAIL, status_code=400)

        user = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(DUPLICATE_EMAIL, status_code=400) from None
        await self.db.refresh(user)
        logger.info("Registered user %d (%s) as %s", user.id, user.email, user.role)
        return user
