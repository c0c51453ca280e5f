"""Request/response schemas for texture, profile and admin endpoints."""

from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

from skinvault.models.enums import TextureKind
from skinvault.models.profile import TextureInfo
from skinvault.models.render import ArtifactCacheStats


class TextureUploadResult(BaseModel):
    """Result of a successful skin or cape upload."""

    model_config = ConfigDict(strict=True)

    kind: TextureKind
    url: str
    fingerprint: str
    is_slim: bool = False


class MessageResult(BaseModel):
    """Plain confirmation message."""

    model_config = ConfigDict(strict=True)

    message: str


class TexturesResponse(BaseModel):
    """Texture URLs for an identity, keyed by ``SKIN`` / ``CAPE``."""

    textures: Dict[str, TextureInfo] = Field(default_factory=dict)


class ServiceStats(BaseModel):
    """Texture counts and artifact cache statistics."""

    total_identities: int
    total_skins: int
    total_capes: int
    slim_skins: int
    artifacts: ArtifactCacheStats
