"""Tests for the request gate: token transport, invalidation, roles and rate limits."""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from conftest import API, COOKIE, PASSWORD, register
from salestrackr.core.exceptions import AuthError, ForbiddenError
from salestrackr.core.rate_limit import limiter
from salestrackr.models.user import User
from salestrackr.services.auth import AuthGate, Identity
from salestrackr.services.identity import IdentityStore
from salestrackr.services.sessions import SqlSessionStore


# ── Token transport ─────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_bearer_header_is_accepted(async_client: AsyncClient, other_client: AsyncClient):
    token = (await register(async_client)).cookies.get(COOKIE)

    resp = await other_client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "alice@example.com"


@pytest.mark.asyncio
async def test_cookie_wins_over_bearer_header(async_client: AsyncClient, other_client: AsyncClient):
    await register(async_client)
    bob_token = (await register(other_client, name="Bob", email="bob@example.com")).cookies.get(COOKIE)

    resp = await async_client.get(
        f"{API}/auth/me", headers={"Authorization": f"Bearer {bob_token}"}
    )
    assert resp.json()["user"]["name"] == "Alice"


@pytest.mark.asyncio
async def test_login_revokes_cookie_even_when_bearer_is_sent(async_client: AsyncClient, other_client: AsyncClient):
    cookie_token = (await register(async_client)).cookies.get(COOKIE)

    resp = await async_client.post(
        f"{API}/auth/login",
        json={"email": "alice@example.com", "password": PASSWORD},
        headers={"Authorization": "Bearer some-other-token"},
    )
    assert resp.status_code == 200

    stale = await other_client.get(
        f"{API}/auth/me", headers={"Authorization": f"Bearer {cookie_token}"}
    )
    assert stale.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_cookie_and_bearer_sessions(async_client: AsyncClient, other_client: AsyncClient):
    cookie_token = (await register(async_client)).cookies.get(COOKIE)
    login = await other_client.post(
        f"{API}/auth/login", json={"email": "alice@example.com", "password": PASSWORD}
    )
    bearer_token = login.cookies.get(COOKIE)
    other_client.cookies.clear()

    resp = await async_client.post(
        f"{API}/auth/logout", headers={"Authorization": f"Bearer {bearer_token}"}
    )
    assert resp.status_code == 200

    for token in (cookie_token, bearer_token):
        me = await other_client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 401


@pytest.mark.asyncio
async def test_tampered_token_is_rejected_and_cookie_cleared(async_client: AsyncClient):
    token = (await register(async_client)).cookies.get(COOKIE)
    async_client.cookies.clear()
    async_client.cookies.set(COOKIE, token[:-2] + ("AA" if not token.endswith("AA") else "BB"))

    resp = await async_client.get(f"{API}/auth/me")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"
    assert resp.headers["www-authenticate"] == "Bearer"
    assert "Max-Age=0" in resp.headers["set-cookie"]


@pytest.mark.asyncio
async def test_oversized_token_is_rejected(async_client: AsyncClient):
    resp = await async_client.get(
        f"{API}/auth/me", headers={"Authorization": "Bearer " + "x" * 5000}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_expired_session_is_rejected(async_client: AsyncClient, db_session):
    await register(async_client)
    user = (await db_session.execute(select(User))).scalar_one()
    expired = await SqlSessionStore(db_session, max_age=timedelta(seconds=-1)).create(user.id, user.role)

    resp = await async_client.get(
        f"{API}/auth/me", headers={"Authorization": f"Bearer {expired}"}
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


@pytest.mark.asyncio
async def test_protected_routes_require_a_session(async_client: AsyncClient):
    for path in ("/visits", "/visits/active", "/clients", "/depots", "/missed-orders",
                 "/training-logs", "/product-complaints"):
        resp = await async_client.get(f"{API}{path}")
        assert resp.status_code == 401, path


# ── Roles ───────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_agent_cannot_list_users(agent_client: AsyncClient):
    resp = await agent_client.get(f"{API}/auth/users")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Admin access required"


@pytest.mark.asyncio
async def test_admin_lists_users(agent_client: AsyncClient, admin_client: AsyncClient):
    resp = await admin_client.get(f"{API}/auth/users")
    assert resp.status_code == 200
    emails = {u["email"] for u in resp.json()["users"]}
    assert emails == {"alice@example.com", "root@example.com"}


def test_authorize_admin_requires_admin_role():
    agent = Identity(user_id=1, role="agent", token="t")
    admin = Identity(user_id=2, role="admin", token="t")

    assert AuthGate.authorize_admin(admin) is admin
    with pytest.raises(ForbiddenError):
        AuthGate.authorize_admin(agent)
    with pytest.raises(AuthError):
        AuthGate.authorize_admin(None)


def test_identity_repr_hides_token():
    identity = Identity(user_id=7, role="agent", token="very-secret-token")
    assert "very-secret-token" not in repr(identity)


# ── Gate used directly ──────────────────────────────────────────────
@pytest.mark.asyncio
async def test_gate_round_trip(db_session):
    gate = AuthGate(IdentityStore(db_session), SqlSessionStore(db_session))

    user, token = await gate.register("Carol", "Carol@Example.com", PASSWORD)
    assert user.email == "carol@example.com"

    identity = await gate.authenticate(token)
    assert identity.user_id == user.id
    assert identity.role == "agent"
    assert (await gate.current_user(identity)).name == "Carol"

    await gate.logout(token)
    with pytest.raises(AuthError) as exc_info:
        await gate.authenticate(token)
    assert exc_info.value.clear_cookie is True


@pytest.mark.asyncio
async def test_gate_rejects_missing_token(db_session):
    gate = AuthGate(IdentityStore(db_session), SqlSessionStore(db_session))
    with pytest.raises(AuthError) as exc_info:
        await gate.authenticate(None)
    assert exc_info.value.message == "Authentication required"
    assert exc_info.value.clear_cookie is False


# ── Rate limiting ───────────────────────────────────────────────────
@pytest.fixture
def rate_limited():
    limiter.enabled = True
    limiter.reset()
    yield limiter
    limiter.reset()
    limiter.enabled = False


@pytest.mark.asyncio
async def test_login_is_rate_limited(async_client: AsyncClient, rate_limited):
    payload = {"email": "nobody@example.com", "password": "wrong-password"}
    for _ in range(5):
        resp = await async_client.post(f"{API}/auth/login", json=payload)
        assert resp.status_code == 401

    resp = await async_client.post(f"{API}/auth/login", json=payload)
    assert resp.status_code == 429
    body = resp.json()
    assert body["success"] is False
    assert body["detail"].startswith("Rate limit exceeded")


@pytest.mark.asyncio
async def test_register_is_rate_limited(async_client: AsyncClient, rate_limited):
    for i in range(10):
        resp = await register(async_client, email=f"agent{i}@example.com")
        assert resp.status_code == 201, resp.text

    resp = await register(async_client, email="agent10@example.com")
    assert resp.status_code == 429
    assert resp.json()["success"] is False
