"""Category listing, lookup and creation."""

from __future__ import annotations

from conftest import create_category, create_project, user_token
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from wph.db.models import Category


class TestListCategories:
    """Test GET /api/categories."""

    async def test_sorted_with_counts(self, client: AsyncClient, db_session: AsyncSession, alice, defi):
        nft = await create_category(db_session, "nft", "NFT", sort_order=0)
        retired = Category(slug="old", name="Old", is_active=False)
        db_session.add(retired)
        await db_session.commit()
        await create_project(db_session, alice, defi, "One")
        await create_project(db_session, alice, defi, "Two")
        await create_project(db_session, alice, defi, "Gone", is_active=False)
        await create_project(db_session, alice, nft, "Art")

        response = await client.get("/api/categories")
        assert response.status_code == 200
        data = response.json()
        assert [(c["slug"], c["projects_count"]) for c in data] == [("nft", 1), ("defi", 2)]

    async def test_empty_category_counts_zero(self, client: AsyncClient, defi):
        data = (await client.get("/api/categories")).json()
        assert data[0]["projects_count"] == 0

    async def test_single_by_slug(self, client: AsyncClient, db_session: AsyncSession, alice, defi):
        await create_project(db_session, alice, defi, "One")
        response = await client.get("/api/categories", params={"slug": "defi"})
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "DeFi"
        assert data["projects_count"] == 1

    async def test_unknown_slug(self, client: AsyncClient, defi):
        response = await client.get("/api/categories", params={"slug": "gaming"})
        assert response.status_code == 404
        assert response.json() == {"detail": "Category not found"}


class TestCreateCategory:
    """Test POST /api/categories."""

    async def test_admin_creates(self, client: AsyncClient, admin):
        response = await client.post(
            "/api/categories",
            json={"name": "Gaming", "slug": "gaming", "icon": "gamepad", "sort_order": 3},
            headers=user_token(admin),
        )
        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "gaming"
        assert data["sort_order"] == 3
        assert data["projects_count"] == 0
        assert data["is_active"] is True

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/categories", json={"name": "Gaming", "slug": "gaming"})
        assert response.status_code == 401

    async def test_requires_admin(self, client: AsyncClient, alice):
        response = await client.post(
            "/api/categories", json={"name": "Gaming", "slug": "gaming"}, headers=user_token(alice)
        )
        assert response.status_code == 403

    async def test_missing_fields(self, client: AsyncClient, admin):
        response = await client.post("/api/categories", json={"name": "Gaming"}, headers=user_token(admin))
        assert response.status_code == 400
        assert response.json() == {"detail": "Name and slug are required"}

    async def test_slug_must_be_url_safe(self, client: AsyncClient, admin):
        response = await client.post(
            "/api/categories", json={"name": "Gaming", "slug": "Gaming Stuff"}, headers=user_token(admin)
        )
        assert response.status_code == 400

    async def test_duplicate_slug(self, client: AsyncClient, admin, defi):
        response = await client.post(
            "/api/categories", json={"name": "DeFi again", "slug": "defi"}, headers=user_token(admin)
        )
        assert response.status_code == 409
        assert response.json() == {"detail": "Category with this slug already exists"}
