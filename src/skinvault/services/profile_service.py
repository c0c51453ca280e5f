"""
Texture listing and game profile payloads.

Builds the public view of an identity's textures: direct URLs for the raw
skin and cape, and the session-server style profile whose ``textures``
property carries the same information as base64-encoded JSON.
"""

from __future__ import annotations

import base64
import logging
import time
from typing import Dict

from sqlalchemy.ext.asyncio import AsyncSession

from skinvault.models.identity import normalize_identity
from skinvault.models.profile import (
    GameProfile,
    ProfileProperty,
    TextureInfo,
    TexturesValue,
)
from skinvault.models.texture import UserTexture
from skinvault.services.source_registry import SourceRegistry

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_NAME = "Player"
TEXTURES_PATH = "/textures"


class ProfileService:
    """Builds texture and profile payloads for an identity.

    Parameters
    ----------
    registry : SourceRegistry
        Source of the identity's texture record.
    base_url : str
        Public base URL of the service, without a trailing slash.
    """

    def __init__(self, registry: SourceRegistry, base_url: str) -> None:
        self._registry = registry
        self._base_url = base_url.rstrip("/")

    def texture_url(self, location: str) -> str:
        """Public URL of a stored raw texture."""
        return f"{self._base_url}{TEXTURES_PATH}/{location}"

    def _texture_map(self, record: UserTexture | None) -> Dict[str, TextureInfo]:
        textures: Dict[str, TextureInfo] = {}
        if record is None:
            return textures

        if record.skin_location:
            metadata = {"model": "slim"} if record.is_slim else None
            textures["SKIN"] = TextureInfo(
                url=self.texture_url(record.skin_location), metadata=metadata
            )
        if record.cape_location:
            textures["CAPE"] = TextureInfo(url=self.texture_url(record.cape_location))
        return textures

    async def textures(
        self, session: AsyncSession, identity: str
    ) -> Dict[str, TextureInfo]:
        """Return the ``SKIN``/``CAPE`` texture map for an identity."""
        record = await self._registry.get_record(session, identity)
        return self._texture_map(record)

    async def profile(
        self,
        session: AsyncSession,
        identity: str,
        name: str = DEFAULT_PROFILE_NAME,
    ) -> GameProfile:
        """
        Build the game profile for an identity.

        Parameters
        ----------
        session : AsyncSession
            Database session
        identity : str
            Player UUID (dashed or undashed)
        name : str
            Profile name to report

        Returns
        -------
        GameProfile
            Profile with a base64 ``textures`` property, or with no
            properties when the identity has never uploaded anything
        """
        identity = normalize_identity(identity)
        record = await self._registry.get_record(session, identity)
        if record is None:
            logger.debug("No textures for %s; returning empty profile", identity)
            return GameProfile(id=identity, name=name)

        value = TexturesValue(
            timestamp=int(time.time()),
            profile_id=identity,
            profile_name=name,
            textures=self._texture_map(record),
        )
        encoded = base64.b64encode(
            value.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
        ).decode("ascii")

        return GameProfile(
            id=identity,
            name=name,
            properties=[ProfileProperty(name="textures", value=encoded)],
        )
