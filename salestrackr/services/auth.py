"""
Auth gate: credential checks and the session lifecycle.

Session state machine for a token::

    Anonymous ──login / register──▶ Authenticated ──logout / expiry / tamper──▶ Invalidated

A successful login or registration always mints a brand-new token; whatever
token the client carried before (cookie and Bearer alike) is revoked, never
upgraded in place.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from pydantic import ValidationError as PydanticValidationError

from salestrackr.core.exceptions import (AuthError, ForbiddenError,
                                         NotFoundError, ValidationError)
from salestrackr.core.security import burn_password_check, verify_password
from salestrackr.models.user import ROLE_ADMIN, User
from salestrackr.schemas.user import LoginRequest, RegisterRequest
from salestrackr.services.identity import IdentityStore
from salestrackr.services.sessions import SessionStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
AUTH_REQUIRED = "Authentication required"
INVALID_TOKEN = "Invalid token"


@dataclass(frozen=True)
class Identity:
    """Authenticated caller attached to the request by ``require_auth``."""

    user_id: int
    role: str
    token: str = field(repr=False)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def _validation_error(exc: PydanticValidationError) -> ValidationError:
    errors = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return ValidationError(errors=errors)


class AuthGate:
    def __init__(self, identities: IdentityStore, sessions: SessionStore):
        self.identities = identities
        self.sessions = sessions

    # ── Credential flows ────────────────────────────────────────────
    async def register(
        self,
        name: str,
        email: str,
        password: str,
        role: str | None = None,
        *,
        prior_tokens: Iterable[str] = (),
    ) -> tuple[User, str]:
        """Create an account and log it in. Returns ``(user, session_token)``."""
        payload = {"name": name, "email": email, "password": password}
        if role is not None:
            payload["role"] = role
        try:
            data = RegisterRequest.model_validate(payload)
        except PydanticValidationError as exc:
            raise _validation_error(exc) from None

        user = await self.identities.create(
            name=data.name,
            email=data.email,
            password=data.password,
            role=data.role,
        )
        token = await self._start_session(user, prior_tokens)
        return user, token

    async def login(
        self,
        email: str,
        password: str,
        *,
        prior_tokens: Iterable[str] = (),
    ) -> tuple[User, str]:
        """Check credentials and mint a fresh session. Returns ``(user, session_token)``.

        Unknown email and wrong password fail identically.
        """
        try:
            data = LoginRequest.model_validate({"email": email, "password": password})
        except PydanticValidationError as exc:
            raise _validation_error(exc) from None

        user = await self.identities.get_by_email(data.email)
        if user is None:
            burn_password_check(data.password)
            logger.info("Failed login for unknown email")
            raise AuthError(INVALID_CREDENTIALS)
        if not verify_password(data.password, user.hashed_password):
            logger.info("Failed login for user %d", user.id)
            raise AuthError(INVALID_CREDENTIALS)

        token = await self._start_session(user, prior_tokens)
        logger.info("User %d logged in", user.id)
        return user, token

    async def logout(self, *tokens: str | None) -> None:
        """Revoke every given token that names a session. Always succeeds."""
        await self._revoke_all(tokens)
        logger.info("Session closed")

    async def _start_session(self, user: User, prior_tokens: Iterable[str]) -> str:
        await self._revoke_all(prior_tokens)
        return await self.sessions.create(user.id, user.role)

    async def _revoke_all(self, tokens: Iterable[str | None]) -> None:
        for token in tokens:
            if token:
                await self.sessions.revoke(token)

    # ── Request gate ────────────────────────────────────────────────
    async def authenticate(self, token: str | None) -> Identity:
        """Resolve a presented token to an ``Identity`` or raise ``AuthError``."""
        if not token:
            raise AuthError(AUTH_REQUIRED)
        record = await self.sessions.get(token)
        if record is None:
            logger.info("Rejected invalid or expired session token")
            raise AuthError(INVALID_TOKEN, clear_cookie=True)
        return Identity(user_id=record.user_id, role=record.role, token=token)

    async def current_user(self, identity: Identity | None) -> User:
        """Fresh Identity Store read for the caller; never served from the session."""
        if identity is None:
            raise AuthError(AUTH_REQUIRED)
        user = await self.identities.get_by_id(identity.user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def authorize_admin(identity: Identity | None) -> Identity:
        if identity is None:
            raise AuthError(AUTH_REQUIRED)
        if not identity.is_admin:
            raise ForbiddenError("Admin access required")
        return identity
