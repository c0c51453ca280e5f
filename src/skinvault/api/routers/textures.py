"""Texture upload, deletion and profile endpoints.

- POST /profile/{user_uuid}/skin -- upload a skin (multipart ``skin``, form ``is_slim``)
- POST /profile/{user_uuid}/cape -- upload a cape (multipart ``cape``)
- DELETE /profile/{user_uuid}/skin -- remove the skin
- DELETE /profile/{user_uuid}/cape -- remove the cape
- GET /profile/{user_uuid} -- game profile with base64 ``textures`` property
- GET /textures/{user_uuid} -- texture URLs keyed by ``SKIN`` / ``CAPE``
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from skinvault.api.deps import (
    get_db,
    get_identity,
    get_profile_service,
    get_source_registry,
)
from skinvault.api.schemas.responses import ApiResponse
from skinvault.api.schemas.textures import (
    MessageResult,
    TexturesResponse,
    TextureUploadResult,
)
from skinvault.config.settings import settings
from skinvault.exceptions import BadRequestError, NotFoundError, PayloadTooLargeError
from skinvault.models.enums import SkinModel, TextureKind
from skinvault.models.profile import GameProfile
from skinvault.services.blob_store import LocalBlobStore
from skinvault.services.profile_service import ProfileService
from skinvault.services.source_registry import SourceRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["textures"])


async def _read_upload(upload: UploadFile) -> bytes:
    """Read an uploaded file, enforcing the configured size limit."""
    limit = settings.max_upload_bytes
    data = await upload.read(limit + 1)
    if not data:
        raise BadRequestError(f"No {upload.filename or 'texture'} data provided")
    if len(data) > limit:
        raise PayloadTooLargeError(size=len(data), limit=limit)
    return data


async def _upload(
    db: AsyncSession,
    registry: SourceRegistry,
    profiles: ProfileService,
    identity: str,
    upload: UploadFile,
    kind: TextureKind,
    model: SkinModel = SkinModel.CLASSIC,
) -> ApiResponse[TextureUploadResult]:
    data = await _read_upload(upload)
    digest = await registry.put(db, identity, data, kind=kind, model=model)
    location = LocalBlobStore.location_for(kind, identity, digest)
    logger.info("Accepted %s upload for %s (%d bytes)", kind.value, identity, len(data))
    return ApiResponse[TextureUploadResult](
        data=TextureUploadResult(
            kind=kind,
            url=profiles.texture_url(location),
            fingerprint=digest,
            is_slim=model == SkinModel.SLIM,
        )
    )


@router.post("/profile/{user_uuid}/skin", response_model=ApiResponse[TextureUploadResult])
async def upload_skin(
    skin: UploadFile = File(..., description="64x64 or 64x32 PNG skin"),
    is_slim: bool = Form(False, description="Slim (3px) arm model"),
    identity: str = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    registry: SourceRegistry = Depends(get_source_registry),
    profiles: ProfileService = Depends(get_profile_service),
) -> ApiResponse[TextureUploadResult]:
    """
    Upload or replace a player's skin.

    Replacing a skin drops every cached avatar and head render for the
    player.

    Parameters
    ----------
    skin : UploadFile
        PNG skin, 64x64 or legacy 64x32.
    is_slim : bool
        Whether the skin uses the slim arm model.
    identity : str
        Canonical player UUID.

    Returns
    -------
    ApiResponse[TextureUploadResult]
        Public URL and fingerprint of the stored skin.
    """
    model = SkinModel.SLIM if is_slim else SkinModel.CLASSIC
    return await _upload(db, registry, profiles, identity, skin, TextureKind.SKIN, model)


@router.post("/profile/{user_uuid}/cape", response_model=ApiResponse[TextureUploadResult])
async def upload_cape(
    cape: UploadFile = File(..., description="64x32 PNG cape"),
    identity: str = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    registry: SourceRegistry = Depends(get_source_registry),
    profiles: ProfileService = Depends(get_profile_service),
) -> ApiResponse[TextureUploadResult]:
    """Upload or replace a player's cape. Cached renders are kept."""
    return await _upload(db, registry, profiles, identity, cape, TextureKind.CAPE)


async def _delete(
    db: AsyncSession, registry: SourceRegistry, identity: str, kind: TextureKind
) -> ApiResponse[MessageResult]:
    removed = await registry.delete(db, identity, kind)
    if not removed:
        raise NotFoundError(resource_type=kind.value.capitalize(), identifier=identity)
    return ApiResponse[MessageResult](
        data=MessageResult(message=f"{kind.value.capitalize()} deleted successfully")
    )


@router.delete("/profile/{user_uuid}/skin", response_model=ApiResponse[MessageResult])
async def delete_skin(
    identity: str = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    registry: SourceRegistry = Depends(get_source_registry),
) -> ApiResponse[MessageResult]:
    """Remove a player's skin; renders fall back to the placeholder."""
    return await _delete(db, registry, identity, TextureKind.SKIN)


@router.delete("/profile/{user_uuid}/cape", response_model=ApiResponse[MessageResult])
async def delete_cape(
    identity: str = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    registry: SourceRegistry = Depends(get_source_registry),
) -> ApiResponse[MessageResult]:
    """Remove a player's cape."""
    return await _delete(db, registry, identity, TextureKind.CAPE)


@router.get("/profile/{user_uuid}", response_model=GameProfile)
async def get_profile(
    identity: str = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    profiles: ProfileService = Depends(get_profile_service),
) -> GameProfile:
    """
    Return the game profile for a player.

    Unknown players get a profile with no properties rather than a 404,
    so game clients fall back to their default skin.
    """
    return await profiles.profile(db, identity)


@router.get("/textures/{user_uuid}", response_model=TexturesResponse)
async def get_textures(
    identity: str = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    profiles: ProfileService = Depends(get_profile_service),
) -> TexturesResponse:
    """Return the texture URLs for a player."""
    return TexturesResponse(textures=await profiles.textures(db, identity))
