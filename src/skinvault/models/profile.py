"""
Texture and game profile payload models.

The profile payload follows the session server format used by game
clients: the ``textures`` property value is base64-encoded JSON.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TextureInfo(BaseModel):
    """Public URL and metadata for one texture."""

    url: str
    metadata: Optional[Dict[str, str]] = None


class TexturesValue(BaseModel):
    """Decoded value of the ``textures`` profile property."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: int
    profile_id: str = Field(..., alias="profileId")
    profile_name: str = Field(..., alias="profileName")
    textures: Dict[str, TextureInfo] = Field(default_factory=dict)


class ProfileProperty(BaseModel):
    """A single signed-or-unsigned profile property."""

    name: str
    value: str


class GameProfile(BaseModel):
    """Game profile with its texture properties."""

    id: str
    name: str
    properties: List[ProfileProperty] = Field(default_factory=list)
