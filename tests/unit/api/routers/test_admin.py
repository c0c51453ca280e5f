"""
Tests for the admin endpoints.
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from skinvault.container import Container
from tests.factories.texture_factory import TextureTestData, make_cape_png, make_skin_png

pytestmark = pytest.mark.asyncio

IDENTITY = TextureTestData.VALID_IDENTITIES[0]


async def _seed(client: AsyncClient) -> None:
    await client.post(
        f"/api/v1/profile/{IDENTITY}/skin",
        files={"skin": ("skin.png", make_skin_png(), "image/png")},
        data={"is_slim": "true"},
    )
    await client.post(
        f"/api/v1/profile/{IDENTITY}/cape",
        files={"cape": ("cape.png", make_cape_png(), "image/png")},
    )
    await client.get(f"/api/v1/avatar/{IDENTITY}/16")


class TestAdminStats:
    async def test_empty_stats(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/v1/admin/stats")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_identities"] == 0
        assert data["artifacts"]["artifact_count"] == 0

    async def test_stats_after_uploads(self, async_client: AsyncClient) -> None:
        await _seed(async_client)

        data = (await async_client.get("/api/v1/admin/stats")).json()["data"]

        assert data["total_identities"] == 1
        assert data["total_skins"] == 1
        assert data["total_capes"] == 1
        assert data["slim_skins"] == 1
        assert data["artifacts"]["artifact_count"] == 1
        assert data["artifacts"]["identity_count"] == 1


class TestAdminDeleteUser:
    async def test_delete_user_data(
        self, async_client: AsyncClient, test_container: Container
    ) -> None:
        await _seed(async_client)

        response = await async_client.delete(f"/api/v1/admin/user/{IDENTITY}")

        assert response.status_code == 200
        assert response.json()["data"]["message"] == "User data deleted successfully"
        assert list(test_container.blob_store.root.rglob("*.png")) == []
        assert (await test_container.artifact_store.get_stats()).artifact_count == 0
        profile = (await async_client.get(f"/api/v1/profile/{IDENTITY}")).json()
        assert profile["properties"] == []

    async def test_delete_unknown_user(self, async_client: AsyncClient) -> None:
        response = await async_client.delete(f"/api/v1/admin/user/{IDENTITY}")
        assert response.status_code == 404
