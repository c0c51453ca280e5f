"""
Data models module for skinvault.

Defines Pydantic models for identities, source textures, render requests
and artifact cache bookkeeping.
"""

from __future__ import annotations

from .enums import CacheStatus, RenderKind, SkinModel, TextureKind
from .identity import Identity, is_valid_identity, normalize_identity
from .profile import GameProfile, ProfileProperty, TextureInfo, TexturesValue
from .render import (
    DEFAULT_RENDER_SIZE,
    MAX_RENDER_SIZE,
    MIN_RENDER_SIZE,
    ArtifactCacheStats,
    ArtifactKey,
    RenderRequest,
    RenderResult,
    WarmResult,
)
from .texture import (
    SourceTexture,
    TextureStatistics,
    UserTexture,
    UserTextureCreate,
    UserTextureUpdate,
)

__all__ = [
    "ArtifactCacheStats",
    "ArtifactKey",
    "CacheStatus",
    "DEFAULT_RENDER_SIZE",
    "GameProfile",
    "Identity",
    "MAX_RENDER_SIZE",
    "MIN_RENDER_SIZE",
    "ProfileProperty",
    "RenderKind",
    "RenderRequest",
    "RenderResult",
    "SkinModel",
    "SourceTexture",
    "TextureInfo",
    "TextureKind",
    "TextureStatistics",
    "TexturesValue",
    "UserTexture",
    "UserTextureCreate",
    "UserTextureUpdate",
    "WarmResult",
    "is_valid_identity",
    "normalize_identity",
]
