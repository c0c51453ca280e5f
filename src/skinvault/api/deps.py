"""FastAPI dependencies for API endpoints."""

from collections.abc import AsyncGenerator

from fastapi import Path
from sqlalchemy.ext.asyncio import AsyncSession

from skinvault.config.database import db_manager
from skinvault.container import container
from skinvault.exceptions import BadRequestError
from skinvault.models.identity import normalize_identity
from skinvault.services.artifact_store import FilesystemArtifactStore
from skinvault.services.profile_service import ProfileService
from skinvault.services.render_service import RenderService
from skinvault.services.source_registry import SourceRegistry


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for database session.

    Yields an async SQLAlchemy session that auto-commits on success
    and rolls back on exception.

    Yields
    ------
    AsyncSession
        An async SQLAlchemy session for database operations.
    """
    async for session in db_manager.get_session():
        yield session


def get_render_service() -> RenderService:
    """Dependency returning the container's render service."""
    return container.render_service


def get_source_registry() -> SourceRegistry:
    """Dependency returning the container's source registry."""
    return container.source_registry


def get_profile_service() -> ProfileService:
    """Dependency returning the container's profile service."""
    return container.profile_service


def get_identity(
    user_uuid: str = Path(
        ...,
        min_length=32,
        max_length=36,
        pattern=r"^[0-9A-Fa-f-]+$",
        description="Player UUID, with or without hyphens",
    ),
) -> str:
    """
    Dependency resolving the ``user_uuid`` path parameter to a canonical identity.

    Raises
    ------
    BadRequestError
        If the value is not a UUID once hyphens are stripped.
    """
    try:
        return normalize_identity(user_uuid)
    except ValueError as e:
        raise BadRequestError("Invalid UUID format", details={"user_uuid": user_uuid}) from e


def get_artifact_store() -> FilesystemArtifactStore:
    """Dependency returning the container's artifact store."""
    return container.artifact_store
