"""Administrative endpoints.

- GET /admin/stats -- texture counts and artifact cache statistics
- DELETE /admin/user/{user_uuid} -- remove every texture and render of a player

The service assumes a trusted caller; access control belongs in front of it.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from skinvault.api.deps import (
    get_artifact_store,
    get_db,
    get_identity,
    get_source_registry,
)
from skinvault.api.schemas.responses import ApiResponse
from skinvault.api.schemas.textures import MessageResult, ServiceStats
from skinvault.exceptions import NotFoundError
from skinvault.services.artifact_store import FilesystemArtifactStore
from skinvault.services.source_registry import SourceRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=ApiResponse[ServiceStats])
async def get_stats(
    db: AsyncSession = Depends(get_db),
    registry: SourceRegistry = Depends(get_source_registry),
    artifact_store: FilesystemArtifactStore = Depends(get_artifact_store),
) -> ApiResponse[ServiceStats]:
    """Return stored texture counts and artifact cache statistics."""
    textures = await registry.get_statistics(db)
    artifacts = await artifact_store.get_stats()
    return ApiResponse[ServiceStats](
        data=ServiceStats(
            total_identities=textures.total_identities,
            total_skins=textures.total_skins,
            total_capes=textures.total_capes,
            slim_skins=textures.slim_skins,
            artifacts=artifacts,
        )
    )


@router.delete("/user/{user_uuid}", response_model=ApiResponse[MessageResult])
async def delete_user_data(
    identity: str = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    registry: SourceRegistry = Depends(get_source_registry),
) -> ApiResponse[MessageResult]:
    """
    Delete a player's record, raw textures and cached renders.

    Raises
    ------
    NotFoundError
        If the player has no texture record.
    """
    if not await registry.delete_all(db, identity):
        raise NotFoundError(resource_type="User", identifier=identity)

    logger.info("Admin deleted all texture data for %s", identity)
    return ApiResponse[MessageResult](
        data=MessageResult(message="User data deleted successfully")
    )
