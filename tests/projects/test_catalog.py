"""GET /api/projects: filtering, search, ordering and pagination."""

from __future__ import annotations

import pytest
from conftest import create_category, create_project, create_user
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from wph.db.models import ProjectTag


@pytest.fixture
async def catalog(db_session: AsyncSession, alice, defi):
    """Five active DeFi projects by alice, one NFT project by bob, one hidden."""
    bob = await create_user(db_session, "bob")
    nft = await create_category(db_session, "nft", "NFT", sort_order=2)
    projects = []
    for i in range(5):
        projects.append(
            await create_project(
                db_session,
                alice,
                defi,
                f"Swap {i}",
                description=f"Decentralized exchange number {i}",
                is_featured=(i == 1),
            )
        )
    projects.append(await create_project(db_session, bob, nft, "Pixel Apes", description="100% on-chain art"))
    await create_project(db_session, bob, nft, "Hidden", is_active=False)

    db_session.add_all(
        [
            ProjectTag(project_id=projects[0].id, tag_name="dex"),
            ProjectTag(project_id=projects[0].id, tag_name="amm"),
            ProjectTag(project_id=projects[5].id, tag_name="art"),
        ]
    )
    await db_session.commit()
    return {"alice": alice, "bob": bob, "projects": projects}


class TestListProjects:
    """Test the catalog listing."""

    async def test_empty_catalog(self, client: AsyncClient):
        response = await client.get("/api/projects")
        assert response.status_code == 200
        assert response.json() == {"projects": [], "total": 0, "hasMore": False}

    async def test_lists_active_only(self, client: AsyncClient, catalog):
        data = (await client.get("/api/projects")).json()
        assert data["total"] == 6
        assert "Hidden" not in {p["title"] for p in data["projects"]}

    async def test_featured_first_then_newest(self, client: AsyncClient, catalog):
        data = (await client.get("/api/projects")).json()
        titles = [p["title"] for p in data["projects"]]
        assert titles[0] == "Swap 1"
        assert titles[1:] == ["Pixel Apes", "Swap 4", "Swap 3", "Swap 2", "Swap 0"]

    async def test_shape(self, client: AsyncClient, catalog):
        data = (await client.get("/api/projects", params={"search": "Swap 0"})).json()
        project = data["projects"][0]
        assert project["slug"] == "swap-0"
        assert sorted(project["tags"]) == ["amm", "dex"]
        assert project["owner"] == {"username": "alice", "displayName": "Alice Liddell"}
        assert project["category"]["slug"] == "defi"
        assert project["category"]["name"] == "DeFi"

    async def test_pagination_first_page(self, client: AsyncClient, catalog):
        data = (await client.get("/api/projects", params={"category": "defi", "limit": 2, "offset": 0})).json()
        assert len(data["projects"]) == 2
        assert data["total"] == 5
        assert data["hasMore"] is True

    async def test_pagination_last_page(self, client: AsyncClient, catalog):
        data = (await client.get("/api/projects", params={"category": "defi", "limit": 2, "offset": 4})).json()
        assert len(data["projects"]) == 1
        assert data["total"] == 5
        assert data["hasMore"] is False

    @pytest.mark.parametrize(("limit", "offset"), [(1, 0), (2, 2), (3, 3), (5, 0), (10, 1)])
    async def test_has_more_matches_total(self, client: AsyncClient, catalog, limit, offset):
        data = (await client.get("/api/projects", params={"limit": limit, "offset": offset})).json()
        assert data["hasMore"] == (offset + limit < data["total"])
        assert len(data["projects"]) == max(0, min(limit, data["total"] - offset))

    async def test_pages_do_not_overlap(self, client: AsyncClient, catalog):
        seen = []
        for offset in range(0, 6, 2):
            data = (await client.get("/api/projects", params={"limit": 2, "offset": offset})).json()
            seen.extend(p["id"] for p in data["projects"])
        assert len(seen) == len(set(seen)) == 6

    async def test_category_filter(self, client: AsyncClient, catalog):
        data = (await client.get("/api/projects", params={"category": "nft"})).json()
        assert [p["title"] for p in data["projects"]] == ["Pixel Apes"]
        assert data["total"] == 1

    async def test_unknown_category_is_empty(self, client: AsyncClient, catalog):
        data = (await client.get("/api/projects", params={"category": "gaming"})).json()
        assert data == {"projects": [], "total": 0, "hasMore": False}

    async def test_username_filter(self, client: AsyncClient, catalog):
        data = (await client.get("/api/projects", params={"username": "bob"})).json()
        assert data["total"] == 1
        assert data["projects"][0]["owner"]["username"] == "bob"

    async def test_unknown_username_is_empty(self, client: AsyncClient, catalog):
        data = (await client.get("/api/projects", params={"username": "nobody"})).json()
        assert data["total"] == 0

    async def test_featured_filter(self, client: AsyncClient, catalog):
        data = (await client.get("/api/projects", params={"featured": "true"})).json()
        assert [p["title"] for p in data["projects"]] == ["Swap 1"]

    async def test_search_title_case_insensitive(self, client: AsyncClient, catalog):
        data = (await client.get("/api/projects", params={"search": "pixel"})).json()
        assert [p["title"] for p in data["projects"]] == ["Pixel Apes"]

    async def test_search_description(self, client: AsyncClient, catalog):
        data = (await client.get("/api/projects", params={"search": "EXCHANGE"})).json()
        assert data["total"] == 5
        for project in data["projects"]:
            haystack = f"{project['title']} {project['description'] or ''}".lower()
            assert "exchange" in haystack

    async def test_search_wildcards_are_literal(self, client: AsyncClient, catalog):
        percent = (await client.get("/api/projects", params={"search": "100%"})).json()
        assert [p["title"] for p in percent["projects"]] == ["Pixel Apes"]

        underscore = (await client.get("/api/projects", params={"search": "Swap_"})).json()
        assert underscore["total"] == 0

    async def test_filters_combine(self, client: AsyncClient, catalog):
        data = (await client.get("/api/projects", params={"username": "alice", "search": "number 3"})).json()
        assert [p["title"] for p in data["projects"]] == ["Swap 3"]
        assert data["total"] == 1

    async def test_limit_bounds(self, client: AsyncClient):
        assert (await client.get("/api/projects", params={"limit": 101})).status_code == 422
        assert (await client.get("/api/projects", params={"offset": -1})).status_code == 422
