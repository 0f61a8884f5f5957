"""
AuthSession model: server-side session records keyed by token digest.

The raw cookie token is never stored; only its keyed SHA-256 digest.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from salestrackr.db.base import Base


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    token_hash: str = Column(String(64), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    user_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    expires_at: datetime = Column(DateTime(timezone=True), nullable=False, index=True)  # type: ignore[assignment]
