"""Tests for super-admin user management and soft deletion."""

import pytest
from conftest import PASSWORD, bearer
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from bulletin.models.user import User
from bulletin.stores.users import UserStore

NEW_USER = {"email": "New.Admin@Example.com", "password": "welcome1", "name": "New Admin"}


@pytest.mark.asyncio
async def test_create_user_requires_super_admin(async_client: AsyncClient, admin_headers):
    resp = await async_client.post("/api/users", json=NEW_USER, headers=admin_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_create_user_without_token(async_client: AsyncClient):
    resp = await async_client.post("/api/users", json=NEW_USER)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_create_user(async_client: AsyncClient, super_headers):
    resp = await async_client.post("/api/users", json=NEW_USER, headers=super_headers)
    assert resp.status_code == 201
    data = resp.json()
    assert data["success"] is True
    user = data["user"]
    assert user["id"].startswith("user-")
    assert user["email"] == "new.admin@example.com"
    assert user["role"] == "admin"
    assert user["mustChangePassword"] is True
    assert user["isActive"] is True
    assert "passwordHash" not in user and "password_hash" not in user


@pytest.mark.asyncio
async def test_invited_user_can_log_in(async_client: AsyncClient, super_headers):
    await async_client.post("/api/users", json=NEW_USER, headers=super_headers)
    resp = await async_client.post(
        "/api/auth/login", json={"email": "new.admin@example.com", "password": "welcome1"}
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["mustChangePassword"] is True


@pytest.mark.asyncio
async def test_create_user_duplicate_email_case_insensitive(
    async_client: AsyncClient, super_headers
):
    await async_client.post("/api/users", json=NEW_USER, headers=super_headers)
    dup = dict(NEW_USER, email="NEW.ADMIN@example.com")
    resp = await async_client.post("/api/users", json=dup, headers=super_headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "A user with this email already exists"


@pytest.mark.asyncio
async def test_create_user_rejects_unknown_role(async_client: AsyncClient, super_headers):
    resp = await async_client.post(
        "/api/users", json=dict(NEW_USER, role="owner"), headers=super_headers
    )
    assert resp.status_code == 400
    assert resp.json()["details"][0]["field"] == "role"


@pytest.mark.asyncio
async def test_list_users_hides_inactive(
    async_client: AsyncClient, super_headers, admin: User, db_session: AsyncSession
):
    await UserStore(db_session).soft_delete(admin.id)
    resp = await async_client.get("/api/users", headers=super_headers)
    assert resp.status_code == 200
    emails = [u["email"] for u in resp.json()]
    assert "root@example.com" in emails
    assert admin.email not in emails


@pytest.mark.asyncio
async def test_get_user_not_found(async_client: AsyncClient, super_headers):
    resp = await async_client.get("/api/users/user-missing", headers=super_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "User not found"


@pytest.mark.asyncio
async def test_update_other_user(async_client: AsyncClient, super_headers, admin: User):
    resp = await async_client.put(
        f"/api/users/{admin.id}",
        json={"name": "Renamed", "role": "super_admin"},
        headers=super_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Renamed"
    assert data["role"] == "super_admin"
    assert data["email"] == admin.email


# ── Self-protection ─────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_self_role_change_rejected(
    async_client: AsyncClient, super_admin: User, super_headers
):
    resp = await async_client.put(
        f"/api/users/{super_admin.id}", json={"role": "admin"}, headers=super_headers
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "You cannot change your own role or deactivate yourself"


@pytest.mark.asyncio
async def test_self_role_change_rejected_for_plain_admin(
    async_client: AsyncClient, admin: User, admin_headers
):
    resp = await async_client.put(
        f"/api/users/{admin.id}", json={"role": "admin"}, headers=admin_headers
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_self_name_change_allowed(
    async_client: AsyncClient, super_admin: User, super_headers
):
    resp = await async_client.put(
        f"/api/users/{super_admin.id}", json={"name": "Boss"}, headers=super_headers
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Boss"


@pytest.mark.asyncio
async def test_plain_admin_cannot_update_others(
    async_client: AsyncClient, admin_headers, super_admin: User
):
    resp = await async_client.put(
        f"/api/users/{super_admin.id}", json={"name": "Hijacked"}, headers=admin_headers
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_cannot_deactivate_self(
    async_client: AsyncClient, super_admin: User, super_headers
):
    resp = await async_client.delete(f"/api/users/{super_admin.id}", headers=super_headers)
    assert resp.status_code == 400


# ── Soft delete ─────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_deactivated_user_cannot_log_in_but_is_retrievable(
    async_client: AsyncClient, super_headers, admin: User
):
    ok = await async_client.post("/api/auth/login", json={"email": admin.email, "password": PASSWORD})
    assert ok.status_code == 200

    resp = await async_client.delete(f"/api/users/{admin.id}", headers=super_headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    login = await async_client.post(
        "/api/auth/login", json={"email": admin.email, "password": PASSWORD}
    )
    assert login.status_code == 401

    fetched = await async_client.get(f"/api/users/{admin.id}", headers=super_headers)
    assert fetched.status_code == 200
    assert fetched.json()["isActive"] is False


@pytest.mark.asyncio
async def test_deactivate_unknown_user(async_client: AsyncClient, super_headers):
    resp = await async_client.delete("/api/users/user-missing", headers=super_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_store_soft_delete_keeps_row(db_session: AsyncSession, admin: User):
    store = UserStore(db_session)
    assert await store.soft_delete(admin.id) is True
    assert await store.find_by_email(admin.email) is None
    kept = await store.find_by_email(admin.email.upper(), active_only=False)
    assert kept is not None and kept.is_active is False
    assert await store.soft_delete("user-missing") is False


# ── Password reset ──────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_reset_password_forces_change(
    async_client: AsyncClient, super_headers, admin: User
):
    resp = await async_client.put(
        f"/api/users/{admin.id}/reset-password",
        json={"newPassword": "temporary1"},
        headers=super_headers,
    )
    assert resp.status_code == 200

    login = await async_client.post(
        "/api/auth/login", json={"email": admin.email, "password": "temporary1"}
    )
    assert login.status_code == 200
    assert login.json()["user"]["mustChangePassword"] is True
    assert (await async_client.get("/api/auth/me", headers=bearer(admin))).status_code == 200


@pytest.mark.asyncio
async def test_self_reactivate_flag_is_not_a_self_action(
    async_client: AsyncClient, super_admin: User, super_headers
):
    resp = await async_client.put(
        f"/api/users/{super_admin.id}", json={"isActive": True}, headers=super_headers
    )
    assert resp.status_code == 200
    assert resp.json()["isActive"] is True
