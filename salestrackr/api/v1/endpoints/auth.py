"""
Auth endpoints: register, login, logout, current user.

Sessions are server-side; the client only ever holds an opaque token in an
HttpOnly cookie (or sends it back as a Bearer header).
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from salestrackr.api.v1.deps import (get_auth_gate, get_identity_store,
                                     get_presented_tokens, require_admin,
                                     require_auth)
from salestrackr.core.config import settings
from salestrackr.core.exceptions import AuthError, NotFoundError
from salestrackr.core.rate_limit import limiter
from salestrackr.schemas.common import MessageResponse
from salestrackr.schemas.user import (LoginRequest, RegisterRequest,
                                      UserListResponse, UserRead,
                                      UserResponse)
from salestrackr.services.auth import AuthGate, Identity
from salestrackr.services.identity import IdentityStore

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.cookie_samesite,
        max_age=settings.session_max_age_seconds,
        path="/",
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")


@router.post("/register", response_model=UserResponse, status_code=201)
@limiter.limit(settings.REGISTER_RATE_LIMIT)
async def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    prior_tokens: list[str] = Depends(get_presented_tokens),
    gate: AuthGate = Depends(get_auth_gate),
) -> UserResponse:
    """Create an agent (or admin) account and start a session for it."""
    user, token = await gate.register(
        body.name,
        body.email,
        body.password,
        body.role,
        prior_tokens=prior_tokens,
    )
    _set_session_cookie(response, token)
    return UserResponse(
        user=UserRead.model_validate(user),
        message="User registered successfully",
    )


@router.post("/login", response_model=UserResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    prior_tokens: list[str] = Depends(get_presented_tokens),
    gate: AuthGate = Depends(get_auth_gate),
) -> UserResponse:
    """Authenticate with email/password. Always issues a fresh session cookie."""
    user, token = await gate.login(body.email, body.password, prior_tokens=prior_tokens)
    _set_session_cookie(response, token)
    return UserResponse(user=UserRead.model_validate(user), message="Login successful")


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    tokens: list[str] = Depends(get_presented_tokens),
    gate: AuthGate = Depends(get_auth_gate),
) -> MessageResponse:
    """End the session. Idempotent: succeeds with or without a live session."""
    await gate.logout(*tokens)
    _clear_session_cookie(response)
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=UserResponse)
async def read_current_user(
    identity: Identity = Depends(require_auth),
    gate: AuthGate = Depends(get_auth_gate),
) -> UserResponse:
    """Return the profile of the authenticated user, read fresh from the store."""
    try:
        user = await gate.current_user(identity)
    except NotFoundError:
        await gate.logout(identity.token)
        logger.warning("Session for missing user %d revoked", identity.user_id)
        raise AuthError("User not found", clear_cookie=True) from None
    return UserResponse(user=UserRead.model_validate(user))


@router.get("/users", response_model=UserListResponse)
async def list_users(
    _admin: Identity = Depends(require_admin),
    identities: IdentityStore = Depends(get_identity_store),
) -> UserListResponse:
    """List every account (admin only)."""
    users = await identities.list_users()
    return UserListResponse(users=[UserRead.model_validate(u) for u in users])
