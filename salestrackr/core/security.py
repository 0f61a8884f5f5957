"""
Password hashing (bcrypt) and opaque session-token helpers.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

from passlib.context import CryptContext

from salestrackr.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

_SECRET = settings.SECRET_KEY.encode("utf-8")

# Verified against when the email is unknown so both login failures cost the same
_DUMMY_HASH = pwd_context.hash("salestrackr-timing-equaliser")


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


def burn_password_check(plain: str) -> None:
    """Run a throwaway bcrypt verification (used when no user matched)."""
    pwd_context.verify(plain, _DUMMY_HASH)


# ── Session tokens ──────────────────────────────────────────────────
def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


def hash_session_token(token: str) -> str:
    """Keyed digest of a session token; only this value is persisted."""
    return hmac.new(_SECRET, token.encode("utf-8"), hashlib.sha256).hexdigest()
