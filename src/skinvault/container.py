"""
Dependency Injection Container for skinvault.

This module provides a centralized container for wiring the render engine
to its collaborators. It implements a lightweight dependency injection
pattern that:

- Provides factory methods for creating repository instances (transient)
- Manages singleton service instances via cached properties
- Enables easy mock injection for testing

Usage
-----
    >>> from skinvault.container import container
    >>> render_service = container.render_service  # Cached
    >>> repo = container.create_user_texture_repository()  # New each call

Design Principles
-----------------
- Repository factories return new instances each call (transient)
- Service singletons are cached via @cached_property (lazy initialization)
- Storage locations come from the injected ``Settings``
- Container can be reset for testing isolation
"""

from __future__ import annotations

from functools import cached_property
from typing import Optional

from skinvault.config.settings import Settings, settings as default_settings
from skinvault.repositories import UserTextureRepository
from skinvault.services.artifact_store import FilesystemArtifactStore
from skinvault.services.blob_store import LocalBlobStore
from skinvault.services.image_codec import ImageCodec
from skinvault.services.profile_service import ProfileService
from skinvault.services.render_service import RenderService
from skinvault.services.source_registry import SourceRegistry


class Container:
    """
    Dependency injection container for skinvault.

    Parameters
    ----------
    settings : Optional[Settings]
        Settings providing storage directories and the public base URL.
        Defaults to the global settings instance.

    Examples
    --------
        >>> container = Container(settings=Settings(storage_dir=tmp_path))
        >>> container.render_service is container.render_service
        True
    """

    _SINGLETONS = (
        "codec",
        "blob_store",
        "artifact_store",
        "source_registry",
        "render_service",
        "profile_service",
    )

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings

    @property
    def settings(self) -> Settings:
        """Settings used to configure services."""
        return self._settings or default_settings

    # -------------------------------------------------------------------------
    # Repository Factory Methods (Transient - new instance per call)
    # -------------------------------------------------------------------------

    def create_user_texture_repository(self) -> UserTextureRepository:
        """
        Create a new UserTextureRepository instance.

        Returns
        -------
        UserTextureRepository
            A new repository for texture record CRUD operations.
        """
        return UserTextureRepository()

    # -------------------------------------------------------------------------
    # Singleton Service Properties (Cached - same instance on repeated access)
    # -------------------------------------------------------------------------

    @cached_property
    def codec(self) -> ImageCodec:
        """Get the singleton ImageCodec instance."""
        return ImageCodec()

    @cached_property
    def blob_store(self) -> LocalBlobStore:
        """Get the singleton raw texture blob store."""
        return LocalBlobStore(self.settings.textures_dir)

    @cached_property
    def artifact_store(self) -> FilesystemArtifactStore:
        """Get the singleton derived artifact store."""
        return FilesystemArtifactStore(self.settings.artifacts_dir)

    @cached_property
    def source_registry(self) -> SourceRegistry:
        """
        Get the singleton SourceRegistry instance.

        Returns
        -------
        SourceRegistry
            Registry wired to a fresh repository, the blob store, the
            artifact store and the codec.
        """
        return SourceRegistry(
            repository=self.create_user_texture_repository(),
            blob_store=self.blob_store,
            artifact_store=self.artifact_store,
            codec=self.codec,
        )

    @cached_property
    def render_service(self) -> RenderService:
        """
        Get the singleton RenderService instance.

        Examples
        --------
        >>> service1 = container.render_service
        >>> service2 = container.render_service
        >>> service1 is service2
        True
        """
        return RenderService(
            registry=self.source_registry,
            artifact_store=self.artifact_store,
            codec=self.codec,
        )

    @cached_property
    def profile_service(self) -> ProfileService:
        """Get the singleton ProfileService instance."""
        return ProfileService(
            registry=self.source_registry,
            base_url=self.settings.base_url,
        )

    # -------------------------------------------------------------------------
    # Testing Support
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """
        Reset the container by clearing all cached singleton instances.

        This method is primarily for testing purposes, allowing tests to
        inject mocks and then restore the container to a clean state.
        """
        for prop in self._SINGLETONS:
            self.__dict__.pop(prop, None)


# Global container instance
container = Container()
