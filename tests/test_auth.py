"""Tests for login, the authorization gate and self-service account endpoints."""

from datetime import timedelta

import pytest
from conftest import PASSWORD, bearer, make_user
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from bulletin.api.deps import ensure_super_admin
from bulletin.core.exceptions import Forbidden
from bulletin.core.security import create_access_token, decode_access_token
from bulletin.models.user import User
from bulletin.schemas.token import Identity
from bulletin.stores.users import UserStore

ANNOUNCEMENT = {
    "title": "Notice",
    "date": "2025-12-01",
    "description": "Something happened",
    "icon": "Bell",
    "badge": "New",
    "badgeVariant": "default",
}


@pytest.mark.asyncio
async def test_login_returns_token_with_stored_role(async_client: AsyncClient, admin: User):
    resp = await async_client.post(
        "/api/auth/login", json={"email": "Editor@Example.com", "password": PASSWORD}
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["user"] == {
        "id": admin.id,
        "email": "editor@example.com",
        "name": "Editor",
        "role": "admin",
        "mustChangePassword": False,
    }
    identity = decode_access_token(data["token"])
    assert identity is not None
    assert identity.id == admin.id
    assert identity.role == "admin"


@pytest.mark.asyncio
async def test_login_records_last_login(
    async_client: AsyncClient, admin: User, db_session: AsyncSession
):
    admin_id, email = admin.id, admin.email
    assert admin.last_login_at is None
    await async_client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    db_session.expire_all()
    refreshed = await UserStore(db_session).get_by_id(admin_id)
    assert refreshed.last_login_at is not None


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient, admin: User):
    resp = await async_client.post(
        "/api/auth/login", json={"email": admin.email, "password": "not-the-password"}
    )
    assert resp.status_code == 401
    assert resp.json()["error"] == "The email or password you entered is incorrect"


@pytest.mark.asyncio
async def test_login_unknown_email(async_client: AsyncClient):
    resp = await async_client.post(
        "/api/auth/login", json={"email": "ghost@example.com", "password": PASSWORD}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_login_validation_details(async_client: AsyncClient):
    resp = await async_client.post("/api/auth/login", json={"email": "a@b.c", "password": "123"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Please check your input"
    assert body["details"] == [
        {"field": "password", "message": "Password must be at least 6 characters"}
    ]


@pytest.mark.asyncio
async def test_token_role_is_not_live_refreshed(
    async_client: AsyncClient, admin: User, db_session: AsyncSession
):
    resp = await async_client.post("/api/auth/login", json={"email": admin.email, "password": PASSWORD})
    token = resp.json()["token"]

    admin.role = "super_admin"
    await db_session.commit()

    assert decode_access_token(token).role == "admin"


# ── Authorization gate ──────────────────────────────────────────────
@pytest.mark.asyncio
async def test_missing_header_is_auth_required(async_client: AsyncClient):
    resp = await async_client.post("/api/announcements", json=ANNOUNCEMENT)
    assert resp.status_code == 401
    assert resp.json()["error"] == "Please log in to continue"


@pytest.mark.asyncio
async def test_non_bearer_header_is_auth_required(async_client: AsyncClient):
    resp = await async_client.post(
        "/api/announcements", json=ANNOUNCEMENT, headers={"Authorization": "Basic abc"}
    )
    assert resp.status_code == 401
    assert resp.json()["error"] == "Please log in to continue"


@pytest.mark.asyncio
async def test_invalid_token_is_session_expired(async_client: AsyncClient):
    resp = await async_client.post(
        "/api/announcements", json=ANNOUNCEMENT, headers={"Authorization": "Bearer garbage"}
    )
    assert resp.status_code == 401
    assert resp.json()["error"] == "Your session has expired. Please log in again."


@pytest.mark.asyncio
async def test_expired_token_is_session_expired(async_client: AsyncClient, admin: User):
    token = create_access_token(
        Identity(id=admin.id, email=admin.email, role=admin.role),
        expires_delta=timedelta(minutes=-5),
    )
    resp = await async_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert "expired" in resp.json()["error"]


@pytest.mark.asyncio
async def test_auth_checked_before_body_validation(async_client: AsyncClient):
    resp = await async_client.post("/api/events", json={"title": ""})
    assert resp.status_code == 401


# ── Self-service ────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_me(async_client: AsyncClient, admin: User, admin_headers):
    resp = await async_client.get("/api/auth/me", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "id": admin.id,
        "email": admin.email,
        "name": "Editor",
        "role": "admin",
        "mustChangePassword": False,
    }


@pytest.mark.asyncio
async def test_logout(async_client: AsyncClient, admin_headers):
    resp = await async_client.post("/api/auth/logout", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True


@pytest.mark.asyncio
async def test_update_profile_returns_fresh_token(async_client: AsyncClient, admin: User, admin_headers):
    resp = await async_client.put(
        "/api/auth/profile",
        json={"email": "New.Editor@Example.com", "name": "Ed"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["user"]["email"] == "new.editor@example.com"
    assert data["user"]["name"] == "Ed"
    assert data["user"]["role"] == "admin"
    assert decode_access_token(data["token"]).email == "new.editor@example.com"


@pytest.mark.asyncio
async def test_update_profile_email_conflict(
    async_client: AsyncClient, admin_headers, super_admin: User
):
    resp = await async_client.put(
        "/api/auth/profile", json={"email": "ROOT@example.com"}, headers=admin_headers
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "This email is already in use"


@pytest.mark.asyncio
async def test_change_password(async_client: AsyncClient, admin: User, admin_headers):
    resp = await async_client.put(
        "/api/auth/password",
        json={"currentPassword": PASSWORD, "newPassword": "brand-new-pass"},
        headers=admin_headers,
    )
    assert resp.status_code == 200

    old = await async_client.post("/api/auth/login", json={"email": admin.email, "password": PASSWORD})
    assert old.status_code == 401
    new = await async_client.post(
        "/api/auth/login", json={"email": admin.email, "password": "brand-new-pass"}
    )
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_change_password_requires_current(async_client: AsyncClient, admin_headers):
    resp = await async_client.put(
        "/api/auth/password",
        json={"currentPassword": "wrong-password", "newPassword": "brand-new-pass"},
        headers=admin_headers,
    )
    assert resp.status_code == 401
    assert resp.json()["error"] == "Current password is incorrect"


@pytest.mark.asyncio
async def test_change_password_clears_must_change_flag(
    async_client: AsyncClient, db_session: AsyncSession
):
    user = await make_user(db_session, "fresh@example.com")
    user.must_change_password = True
    await db_session.commit()

    resp = await async_client.put(
        "/api/auth/password",
        json={"currentPassword": PASSWORD, "newPassword": "another-pass"},
        headers=bearer(user),
    )
    assert resp.status_code == 200
    me = await async_client.get("/api/auth/me", headers=bearer(user))
    assert me.json()["mustChangePassword"] is False


def test_ensure_super_admin():
    ensure_super_admin(Identity(id="user-1", email="a@example.com", role="super_admin"))
    with pytest.raises(Forbidden):
        ensure_super_admin(Identity(id="user-2", email="b@example.com", role="admin"))
