"""
Enums for skinvault models.

Defines enumeration types used across the application for consistent
type safety and validation.
"""

from __future__ import annotations

from enum import Enum


class TextureKind(str, Enum):
    """Kinds of uploaded source textures."""

    SKIN = "skin"  # primary texture, source of all renders
    CAPE = "cape"  # secondary texture


class SkinModel(str, Enum):
    """Skin geometry layouts (arm width)."""

    CLASSIC = "classic"
    SLIM = "slim"


class RenderKind(str, Enum):
    """Kinds of derived renders produced from a skin."""

    AVATAR = "avatar"
    HEAD = "head"


class CacheStatus(str, Enum):
    """How a render request was satisfied (exposed as ``X-Cache``)."""

    HIT = "HIT"
    MISS = "MISS"
    PLACEHOLDER = "PLACEHOLDER"
