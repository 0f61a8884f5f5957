"""
Server-side session store.

The auth gate depends only on the ``SessionStore`` interface; the SQL
implementation keeps sessions in the ``auth_sessions`` table so a revoked
session is gone for every worker immediately. Every write is committed
before the call returns, so a response is never sent ahead of the session
it announces.
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrackr.core.clock import ensure_utc, utcnow
from salestrackr.core.config import settings
from salestrackr.core.security import generate_session_token, hash_session_token
from salestrackr.models.auth_session import AuthSession

logger = logging.getLogger(__name__)

# token_urlsafe(32) yields 43 chars; anything far longer is not one of ours
_MAX_TOKEN_LENGTH = 256


@dataclass(frozen=True)
class SessionRecord:
    user_id: int
    role: str
    expires_at: datetime


class SessionStore(abc.ABC):
    """Mapping of opaque token → (user id, role, expiry)."""

    @abc.abstractmethod
    async def create(self, user_id: int, role: str) -> str:
        """Persist a new session and return its raw token."""

    @abc.abstractmethod
    async def get(self, token: str) -> SessionRecord | None:
        """Return the live session for *token*, or ``None`` if unknown or expired."""

    @abc.abstractmethod
    async def revoke(self, token: str) -> None:
        """Delete the session for *token*. Unknown tokens are ignored."""

    @abc.abstractmethod
    async def purge_expired(self) -> int:
        """Delete every expired session; return how many were removed."""


class SqlSessionStore(SessionStore):
    def __init__(self, db: AsyncSession, max_age: timedelta | None = None):
        self.db = db
        self.max_age = max_age or timedelta(days=settings.SESSION_MAX_AGE_DAYS)

    async def create(self, user_id: int, role: str) -> str:
        token = generate_session_token()
        now = utcnow()
        self.db.add(
            AuthSession(
                token_hash=hash_session_token(token),
                user_id=user_id,
                role=role,
                created_at=now,
                expires_at=now + self.max_age,
            )
        )
        await self.db.commit()
        return token

    async def get(self, token: str) -> SessionRecord | None:
        if not token or len(token) > _MAX_TOKEN_LENGTH:
            return None
        result = await self.db.execute(
            select(AuthSession).where(AuthSession.token_hash == hash_session_token(token))
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None

        expires_at = ensure_utc(row.expires_at)
        if expires_at <= utcnow():
            await self.db.delete(row)
            await self.db.commit()
            logger.info("Expired session for user %d removed", row.user_id)
            return None
        return SessionRecord(user_id=row.user_id, role=row.role, expires_at=expires_at)

    async def revoke(self, token: str) -> None:
        if not token or len(token) > _MAX_TOKEN_LENGTH:
            return
        await self.db.execute(
            delete(AuthSession).where(AuthSession.token_hash == hash_session_token(token))
        )
        await self.db.commit()

    async def purge_expired(self) -> int:
        result = await self.db.execute(
            delete(AuthSession).where(AuthSession.expires_at <= utcnow())
        )
        await self.db.commit()
        return result.rowcount or 0
