"""Sign-in sync and profile endpoints."""

from __future__ import annotations

from conftest import bearer, create_user, make_token, user_token
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from wph.auth import service as auth_service
from wph.db.models import User
from wph.users import service as users_service


class TestSyncUser:
    """Test POST /api/users."""

    async def test_creates_submitter(self, client: AsyncClient):
        headers = bearer(make_token("g-1", "alice@one.example", name="Alice", avatar_url="https://img/a.png"))
        response = await client.post("/api/users", json={}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        user = data["user"]
        assert user["username"] == "alice"
        assert user["display_name"] == "Alice"
        assert user["avatar_url"] == "https://img/a.png"
        assert user["role"] == "submitter"

    async def test_usernames_from_same_email_prefix(self, client: AsyncClient):
        first = await client.post("/api/users", headers=bearer(make_token("g-1", "alice@one.example")))
        second = await client.post("/api/users", headers=bearer(make_token("g-2", "alice@two.example")))
        assert first.json()["user"]["username"] == "alice"
        assert second.json()["user"]["username"] == "alice1"

    async def test_display_name_defaults_to_email_local_part(self, client: AsyncClient):
        response = await client.post("/api/users", headers=bearer(make_token("g-1", "satoshi@gmx.example")))
        assert response.json()["user"]["display_name"] == "satoshi"

    async def test_requested_username(self, client: AsyncClient, db_session: AsyncSession):
        await create_user(db_session, "vitalik")
        response = await client.post(
            "/api/users", json={"username": "Vitalik"}, headers=bearer(make_token("g-9", "v@eth.example"))
        )
        assert response.json()["user"]["username"] == "vitalik1"

    async def test_role_is_never_taken_from_body(self, client: AsyncClient):
        response = await client.post(
            "/api/users", json={"role": "admin"}, headers=bearer(make_token("g-1", "mallory@x.example"))
        )
        assert response.json()["user"]["role"] == "submitter"

    async def test_existing_user_is_refreshed(self, client: AsyncClient, db_session: AsyncSession, alice):
        headers = bearer(make_token(alice.auth_id, alice.email, name="Alice L.", avatar_url="https://img/new.png"))
        response = await client.post("/api/users", headers=headers)
        user = response.json()["user"]
        assert user["id"] == alice.id
        assert user["username"] == "alice"
        assert user["display_name"] == "Alice L."
        assert user["avatar_url"] == "https://img/new.png"

    async def test_links_by_email(self, client: AsyncClient, db_session: AsyncSession, alice):
        response = await client.post("/api/users", headers=bearer(make_token("new-provider-id", alice.email)))
        assert response.json()["user"]["id"] == alice.id
        auth_id = await db_session.scalar(select(User.auth_id).where(User.id == alice.id))
        assert auth_id == "new-provider-id"

    async def test_requires_token(self, client: AsyncClient):
        response = await client.post("/api/users", json={})
        assert response.status_code == 401

    async def test_long_email_local_part_fits_username_column(self, client: AsyncClient):
        email = f"{'a' * 80}@long.example"
        first = await client.post("/api/users", headers=bearer(make_token("g-1", email)))
        second = await client.post("/api/users", headers=bearer(make_token("g-2", f"{'a' * 80}@other.example")))
        assert first.status_code == 200
        assert first.json()["user"]["username"] == "a" * 56
        assert second.json()["user"]["username"] == f"{'a' * 56}1"
        assert len(second.json()["user"]["username"]) <= 64

    async def test_long_provider_name_fits_display_name_column(self, client: AsyncClient):
        headers = bearer(make_token("g-1", "long@name.example", name="N" * 300))
        response = await client.post("/api/users", headers=headers)
        assert response.status_code == 200
        assert response.json()["user"]["display_name"] == "N" * 128


class TestProvisioningRetry:
    """A username or account created concurrently is recovered from, not a 500."""

    async def test_username_taken_after_lookup(self, client: AsyncClient, alice, monkeypatch):
        real_resolve = auth_service.resolve_unique
        calls = []

        async def stale_then_real(candidate, exists, separator="-"):
            calls.append(candidate)
            if len(calls) == 1:
                # Another sign-in claimed "alice" after the existence check
                return "alice"
            return await real_resolve(candidate, exists, separator)

        monkeypatch.setattr(auth_service, "resolve_unique", stale_then_real)
        response = await client.post("/api/users", headers=bearer(make_token("g-2", "alice@two.example")))
        assert response.status_code == 200
        assert response.json()["user"]["username"] == "alice1"
        assert len(calls) == 2

    async def test_account_created_concurrently(
        self, client: AsyncClient, db_session: AsyncSession, alice, monkeypatch
    ):
        async def not_found_yet(db, identity):
            return None

        # The first lookup runs before a parallel sign-in for the same identity commits
        monkeypatch.setattr(users_service, "find_user", not_found_yet)
        response = await client.post("/api/users", headers=user_token(alice))
        assert response.status_code == 200
        assert response.json()["user"]["id"] == alice.id
        assert await db_session.scalar(select(func.count()).select_from(User)) == 1

    async def test_gives_up_with_conflict(self, client: AsyncClient, db_session: AsyncSession, alice, monkeypatch):
        async def always_stale(candidate, exists, separator="-"):
            return "alice"

        monkeypatch.setattr(auth_service, "resolve_unique", always_stale)
        response = await client.post("/api/users", headers=bearer(make_token("g-2", "alice@two.example")))
        assert response.status_code == 409
        assert response.json() == {"detail": "Could not allocate a unique username"}
        assert await db_session.scalar(select(func.count()).select_from(User)) == 1


class TestOwnProfile:
    """Test /api/users/me."""

    async def test_get(self, client: AsyncClient, alice):
        response = await client.get("/api/users/me", headers=user_token(alice))
        assert response.status_code == 200
        assert response.json()["email"] == "alice@example.com"

    async def test_update(self, client: AsyncClient, alice):
        response = await client.patch(
            "/api/users/me",
            json={"bio": "gm", "username": "Alice2", "wallet_address": "0xabc"},
            headers=user_token(alice),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["bio"] == "gm"
        assert data["username"] == "alice2"
        assert data["wallet_address"] == "0xabc"

    async def test_username_taken(self, client: AsyncClient, db_session: AsyncSession, alice):
        await create_user(db_session, "bob")
        response = await client.patch("/api/users/me", json={"username": "bob"}, headers=user_token(alice))
        assert response.status_code == 409
        assert response.json() == {"detail": "Username already taken"}

    async def test_username_charset(self, client: AsyncClient, alice):
        response = await client.patch("/api/users/me", json={"username": "al ice!"}, headers=user_token(alice))
        assert response.status_code == 400

    async def test_deactivated_account(self, client: AsyncClient, db_session: AsyncSession):
        banned = await create_user(db_session, "eve", is_active=False)
        response = await client.get("/api/users/me", headers=user_token(banned))
        assert response.status_code == 403

    async def test_expired_token(self, client: AsyncClient, alice):
        token = make_token(alice.auth_id, alice.email, expires_in=-10)
        response = await client.get("/api/users/me", headers=bearer(token))
        assert response.status_code == 401


class TestPublicProfile:
    """Test GET /api/users/{username}."""

    async def test_public_fields_only(self, client: AsyncClient, alice):
        response = await client.get("/api/users/alice")
        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "alice"
        assert "email" not in data
        assert "wallet_address" not in data

    async def test_unknown(self, client: AsyncClient):
        response = await client.get("/api/users/nobody")
        assert response.status_code == 404

    async def test_inactive(self, client: AsyncClient, db_session: AsyncSession):
        await create_user(db_session, "eve", is_active=False)
        response = await client.get("/api/users/eve")
        assert response.status_code == 404
