"""Avatar and head render endpoints.

- GET /avatar/{user_uuid}[/{size}] -- flat face render
- GET /head/{user_uuid}[/{size}] -- face render with the overlay layer

Renders are public and always return a PNG: players without a usable skin
get a flat-colour placeholder. The ``X-Cache`` header reports ``HIT``,
``MISS`` or ``PLACEHOLDER``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response

from skinvault.api.deps import get_db, get_identity, get_render_service
from skinvault.config.settings import settings
from skinvault.exceptions import BadRequestError
from skinvault.models.enums import CacheStatus, RenderKind
from skinvault.models.render import RenderResult
from skinvault.services.render_service import RenderService

router = APIRouter(tags=["renders"])

# ---------------------------------------------------------------------------
# Cache-Control headers
# ---------------------------------------------------------------------------
_CACHE_CONTROL_RENDER = "public, max-age=3600"  # 1 hour
_CACHE_CONTROL_PLACEHOLDER = "public, max-age=300"  # 5 minutes

_PNG_RESPONSES: dict[int | str, dict[str, object]] = {
    200: {
        "content": {"image/png": {}},
        "description": "Rendered PNG or flat-colour placeholder",
    },
    400: {"description": "Invalid UUID or render size"},
}


def _parse_size(raw: str) -> int:
    """Parse the size path segment; range checks happen in the render service."""
    try:
        return int(raw)
    except ValueError as e:
        raise BadRequestError(
            f"Render size must be an integer, got '{raw}'",
            details={"size": raw},
        ) from e


def _to_response(result: RenderResult) -> Response:
    cache_control = (
        _CACHE_CONTROL_PLACEHOLDER
        if result.cache_status == CacheStatus.PLACEHOLDER
        else _CACHE_CONTROL_RENDER
    )
    headers = {
        "Cache-Control": cache_control,
        "X-Cache": result.cache_status.value,
    }
    if result.fingerprint:
        headers["ETag"] = f'"{result.kind.value}-{result.size}-{result.fingerprint}"'
    return Response(content=result.content, media_type=result.media_type, headers=headers)


async def _render(
    service: RenderService,
    db: AsyncSession,
    identity: str,
    kind: RenderKind,
    size: int,
) -> Response:
    result = await service.render(db, identity, kind, size)
    return _to_response(result)


@router.get("/avatar/{user_uuid}", responses=_PNG_RESPONSES, response_class=Response)
async def get_avatar(
    identity: str = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    service: RenderService = Depends(get_render_service),
) -> Response:
    """Serve the avatar at the configured default size."""
    return await _render(service, db, identity, RenderKind.AVATAR, settings.default_render_size)


@router.get("/avatar/{user_uuid}/{size}", responses=_PNG_RESPONSES, response_class=Response)
async def get_avatar_sized(
    size: str,
    identity: str = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    service: RenderService = Depends(get_render_service),
) -> Response:
    """Serve the avatar at ``size`` x ``size`` pixels (8-512).

    Parameters
    ----------
    size : str
        Edge length in pixels.
    identity : str
        Canonical player UUID.
    db : AsyncSession
        Database session for the skin lookup.
    service : RenderService
        Render engine.

    Returns
    -------
    Response
        PNG bytes with Cache-Control and X-Cache headers.
    """
    return await _render(service, db, identity, RenderKind.AVATAR, _parse_size(size))


@router.get("/head/{user_uuid}", responses=_PNG_RESPONSES, response_class=Response)
async def get_head(
    identity: str = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    service: RenderService = Depends(get_render_service),
) -> Response:
    """Serve the head render at the configured default size."""
    return await _render(service, db, identity, RenderKind.HEAD, settings.default_render_size)


@router.get("/head/{user_uuid}/{size}", responses=_PNG_RESPONSES, response_class=Response)
async def get_head_sized(
    size: str,
    identity: str = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    service: RenderService = Depends(get_render_service),
) -> Response:
    """Serve the head render (face plus overlay) at ``size`` x ``size`` pixels."""
    return await _render(service, db, identity, RenderKind.HEAD, _parse_size(size))
