"""
Render request, artifact key and cache statistics models.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import CacheStatus, RenderKind
from .identity import Identity

MIN_RENDER_SIZE = 8
MAX_RENDER_SIZE = 512
DEFAULT_RENDER_SIZE = 64


class RenderRequest(BaseModel):
    """A request for one derived render.

    Size bounds are enforced by the render service (not here) so that an
    out-of-range size surfaces as ``InvalidSizeError`` rather than a
    pydantic validation error.
    """

    identity: Identity
    kind: RenderKind
    size: int = DEFAULT_RENDER_SIZE

    model_config = ConfigDict(frozen=True)


class ArtifactKey(BaseModel):
    """Cache key of a derived artifact.

    The source fingerprint is part of the key, so a key built from a stale
    fingerprint can never be looked up once the source changes.
    """

    identity: Identity
    kind: RenderKind
    size: int = Field(..., ge=MIN_RENDER_SIZE, le=MAX_RENDER_SIZE)
    fingerprint: str = Field(..., min_length=32, max_length=64, pattern=r"^[0-9a-f]+$")

    model_config = ConfigDict(frozen=True)

    @property
    def filename(self) -> str:
        """Storage file name for this artifact."""
        return f"{self.kind.value}_{self.size}_{self.fingerprint}.png"


class RenderResult(BaseModel):
    """Outcome of a render request."""

    content: bytes
    kind: RenderKind
    size: int
    cache_status: CacheStatus
    fingerprint: str | None = None
    media_type: str = "image/png"

    model_config = ConfigDict(frozen=True)


class ArtifactCacheStats(BaseModel):
    """Statistics about the artifact cache contents.

    Attributes
    ----------
    artifact_count : int
        Number of cached render files.
    identity_count : int
        Number of identities with at least one cached render.
    total_size_bytes : int
        Total disk usage of cached renders.
    oldest_file : datetime | None
        Modification time of the oldest cached render.
    newest_file : datetime | None
        Modification time of the newest cached render.
    """

    artifact_count: int
    identity_count: int
    total_size_bytes: int
    oldest_file: datetime | None
    newest_file: datetime | None


class WarmResult(BaseModel):
    """Result of a cache-warming run.

    Attributes
    ----------
    rendered : int
        Renders derived and stored during the run.
    cached : int
        Renders that were already cached.
    placeholders : int
        Renders that degraded to a placeholder (corrupt or missing source).
    total : int
        Total renders processed.
    """

    rendered: int
    cached: int
    placeholders: int
    total: int
