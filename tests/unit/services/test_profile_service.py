"""
Unit tests for texture listings and game profile payloads.
"""

from __future__ import annotations

import base64
import json

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from skinvault.models.enums import SkinModel, TextureKind
from skinvault.services.profile_service import DEFAULT_PROFILE_NAME, ProfileService
from skinvault.services.source_registry import SourceRegistry
from tests.factories.texture_factory import TextureTestData, make_cape_png

pytestmark = pytest.mark.asyncio

BASE_URL = "http://skins.test"


@pytest.fixture
def profiles(registry: SourceRegistry) -> ProfileService:
    return ProfileService(registry=registry, base_url=BASE_URL + "/")


def _decode_textures(value: str) -> dict:
    return json.loads(base64.b64decode(value))


class TestProfileService:
    """Tests for ProfileService."""

    def test_texture_url(self, profiles: ProfileService) -> None:
        assert profiles.texture_url("skins/abc/def.png") == f"{BASE_URL}/textures/skins/abc/def.png"

    async def test_textures_for_unknown_identity(
        self, db_session: AsyncSession, profiles: ProfileService, identity: str
    ) -> None:
        assert await profiles.textures(db_session, identity) == {}

    async def test_textures_lists_skin_and_cape(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        profiles: ProfileService,
        identity: str,
        skin_png: bytes,
    ) -> None:
        skin_fp = await registry.put(db_session, identity, skin_png, model=SkinModel.SLIM)
        cape_fp = await registry.put(
            db_session, identity, make_cape_png(), kind=TextureKind.CAPE
        )

        textures = await profiles.textures(db_session, identity)

        assert textures["SKIN"].url == f"{BASE_URL}/textures/skins/{identity}/{skin_fp}.png"
        assert textures["SKIN"].metadata == {"model": "slim"}
        assert textures["CAPE"].url == f"{BASE_URL}/textures/capes/{identity}/{cape_fp}.png"
        assert textures["CAPE"].metadata is None

    async def test_profile_for_unknown_identity_has_no_properties(
        self, db_session: AsyncSession, profiles: ProfileService
    ) -> None:
        profile = await profiles.profile(db_session, TextureTestData.DASHED_IDENTITY)

        assert profile.id == TextureTestData.CANONICAL_DASHED_IDENTITY
        assert profile.name == DEFAULT_PROFILE_NAME
        assert profile.properties == []

    async def test_profile_textures_property(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        profiles: ProfileService,
        identity: str,
        skin_png: bytes,
    ) -> None:
        await registry.put(db_session, identity, skin_png)

        profile = await profiles.profile(db_session, identity, name="Notch")

        assert [p.name for p in profile.properties] == ["textures"]
        payload = _decode_textures(profile.properties[0].value)
        assert payload["profileId"] == identity
        assert payload["profileName"] == "Notch"
        assert isinstance(payload["timestamp"], int)
        assert set(payload["textures"]) == {"SKIN"}
        # Classic skins carry no metadata block
        assert "metadata" not in payload["textures"]["SKIN"]
