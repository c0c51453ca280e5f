"""
Pytest configuration and fixtures for skinvault tests.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import Mock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from skinvault.config.settings import Settings
from skinvault.container import Container
from skinvault.db.models import Base
from skinvault.repositories import UserTextureRepository
from skinvault.services.artifact_store import FilesystemArtifactStore
from skinvault.services.blob_store import LocalBlobStore
from skinvault.services.image_codec import ImageCodec
from skinvault.services.render_service import RenderService
from skinvault.services.source_registry import SourceRegistry
from tests.factories.texture_factory import TextureTestData, make_skin_png


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing storage and the database into ``tmp_path``."""
    settings = Settings(
        storage_dir=tmp_path / "storage",
        development_mode=True,
        database_dev_url=f"sqlite+aiosqlite:///{tmp_path / 'skinvault_test.db'}",
        base_url="http://skins.test/",
    )
    settings.create_directories()
    return settings


@pytest.fixture
async def db_session(tmp_path: Path) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a database session backed by a throwaway SQLite file.

    Tables are created per test so every test starts from an empty registry.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}", echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()

    await engine.dispose()


@pytest.fixture
def codec() -> ImageCodec:
    return ImageCodec()


@pytest.fixture
def blob_store(test_settings: Settings) -> LocalBlobStore:
    return LocalBlobStore(test_settings.textures_dir)


@pytest.fixture
def artifact_store(test_settings: Settings) -> FilesystemArtifactStore:
    return FilesystemArtifactStore(test_settings.artifacts_dir)


@pytest.fixture
def registry(
    blob_store: LocalBlobStore,
    artifact_store: FilesystemArtifactStore,
    codec: ImageCodec,
) -> SourceRegistry:
    return SourceRegistry(
        repository=UserTextureRepository(),
        blob_store=blob_store,
        artifact_store=artifact_store,
        codec=codec,
    )


@pytest.fixture
def codec_spy(codec: ImageCodec) -> Mock:
    """An ImageCodec wrapped in a Mock so decode/derive calls can be counted."""
    return Mock(wraps=codec)


@pytest.fixture
def render_service(
    registry: SourceRegistry,
    artifact_store: FilesystemArtifactStore,
    codec_spy: Mock,
) -> RenderService:
    return RenderService(
        registry=registry, artifact_store=artifact_store, codec=codec_spy
    )


@pytest.fixture
def test_container(test_settings: Settings) -> Container:
    """A container wired to temporary storage."""
    return Container(settings=test_settings)


@pytest.fixture
def identity() -> str:
    return TextureTestData.VALID_IDENTITIES[0]


@pytest.fixture
def skin_png() -> bytes:
    """A 64x64 skin with a solid face and no overlay."""
    return make_skin_png()
