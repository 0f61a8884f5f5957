"""
FastAPI dependencies: database session, service wiring and auth guards.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Cookie, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from salestrackr.core.config import settings
from salestrackr.db.session import async_session_factory
from salestrackr.services.auth import AuthGate, Identity
from salestrackr.services.identity import IdentityStore
from salestrackr.services.sessions import SessionStore, SqlSessionStore
from salestrackr.services.visits import VisitLedger

# auto_error=False so requests carrying only the session cookie get through
bearer_scheme = HTTPBearer(auto_error=False)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Services ────────────────────────────────────────────────────────
def get_session_store(db: AsyncSession = Depends(get_db)) -> SessionStore:
    return SqlSessionStore(db)


def get_identity_store(db: AsyncSession = Depends(get_db)) -> IdentityStore:
    return IdentityStore(db)


def get_auth_gate(
    identities: IdentityStore = Depends(get_identity_store),
    sessions: SessionStore = Depends(get_session_store),
) -> AuthGate:
    return AuthGate(identities, sessions)


def get_visit_ledger(db: AsyncSession = Depends(get_db)) -> VisitLedger:
    return VisitLedger(db)


# ── Auth dependencies ───────────────────────────────────────────────
def get_presented_tokens(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session_cookie: Optional[str] = Cookie(default=None, alias=settings.SESSION_COOKIE_NAME),
) -> list[str]:
    """Every distinct token the request carries: session cookie first, then Bearer."""
    tokens: list[str] = []
    for token in (session_cookie, credentials.credentials if credentials else None):
        if token and token not in tokens:
            tokens.append(token)
    return tokens


def get_session_token(
    tokens: list[str] = Depends(get_presented_tokens),
) -> Optional[str]:
    """The token that identifies the caller: the cookie, or Bearer when no cookie is sent."""
    return tokens[0] if tokens else None


async def require_auth(
    request: Request,
    token: Optional[str] = Depends(get_session_token),
    gate: AuthGate = Depends(get_auth_gate),
) -> Identity:
    """Reject the request unless it carries a live session."""
    identity = await gate.authenticate(token)
    request.state.identity = identity
    return identity


async def require_admin(
    identity: Identity = Depends(require_auth),
) -> Identity:
    """Only allow the admin role to proceed."""
    return AuthGate.authorize_admin(identity)
