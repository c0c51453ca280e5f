"""
Source texture models.

Defines Pydantic models for the per-identity texture records held by the
source registry, and the create/update payloads used by the repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import SkinModel, TextureKind
from .identity import Identity


class SourceTexture(BaseModel):
    """The current version of one source texture for one identity.

    The fingerprint always describes the bytes stored at ``location``;
    a re-upload produces a new location and a new fingerprint.
    """

    identity: Identity
    kind: TextureKind
    location: str = Field(..., min_length=1, description="Blob storage reference")
    fingerprint: str = Field(
        ..., min_length=32, max_length=64, description="Content digest of the raw bytes"
    )
    model: SkinModel = Field(
        default=SkinModel.CLASSIC, description="Skin geometry layout (skins only)"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def is_slim(self) -> bool:
        """Whether this is a slim-armed skin."""
        return self.model == SkinModel.SLIM


class UserTextureBase(BaseModel):
    """Base model for a user texture record."""

    user_uuid: Identity
    skin_location: Optional[str] = Field(default=None, max_length=500)
    skin_hash: Optional[str] = Field(default=None, max_length=64)
    is_slim: bool = Field(default=False)
    cape_location: Optional[str] = Field(default=None, max_length=500)
    cape_hash: Optional[str] = Field(default=None, max_length=64)

    model_config = ConfigDict(validate_assignment=True)


class UserTextureCreate(UserTextureBase):
    """Model for creating user texture records."""

    pass


class UserTextureUpdate(BaseModel):
    """Model for updating user texture records.

    Only fields that are explicitly set are written, so ``None`` can be
    used to clear a texture.
    """

    skin_location: Optional[str] = Field(default=None, max_length=500)
    skin_hash: Optional[str] = Field(default=None, max_length=64)
    is_slim: Optional[bool] = None
    cape_location: Optional[str] = Field(default=None, max_length=500)
    cape_hash: Optional[str] = Field(default=None, max_length=64)


class UserTexture(UserTextureBase):
    """Full user texture record with timestamps."""

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def source(self, kind: TextureKind) -> Optional[SourceTexture]:
        """Project the record onto a single source texture, if present."""
        if kind == TextureKind.SKIN:
            location, fingerprint = self.skin_location, self.skin_hash
        else:
            location, fingerprint = self.cape_location, self.cape_hash

        if not location or not fingerprint:
            return None

        model = SkinModel.SLIM if kind == TextureKind.SKIN and self.is_slim else SkinModel.CLASSIC
        return SourceTexture(
            identity=self.user_uuid,
            kind=kind,
            location=location,
            fingerprint=fingerprint,
            model=model,
        )


class TextureStatistics(BaseModel):
    """Counts of stored source textures."""

    total_identities: int = Field(default=0, ge=0)
    total_skins: int = Field(default=0, ge=0)
    total_capes: int = Field(default=0, ge=0)
    slim_skins: int = Field(default=0, ge=0)
