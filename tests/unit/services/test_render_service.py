"""
Unit tests for the avatar/head render service.

Covers cache HIT/MISS behaviour, invalidation on re-upload, placeholder
fallbacks for missing or corrupt sources, size validation and warming.
"""

from __future__ import annotations

from io import BytesIO
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession

from skinvault.exceptions import InvalidSizeError, RepositoryError, StorageError
from skinvault.models.enums import CacheStatus, RenderKind
from skinvault.models.render import ArtifactKey, RenderRequest
from skinvault.services.artifact_store import FilesystemArtifactStore
from skinvault.services.blob_store import LocalBlobStore
from skinvault.services.image_codec import (
    AVATAR_PLACEHOLDER_COLOR,
    HEAD_PLACEHOLDER_COLOR,
    ImageCodec,
)
from skinvault.services.render_service import RenderService, validate_size
from skinvault.services.source_registry import SourceRegistry
from tests.factories.texture_factory import (
    FACE_COLOR,
    OVERLAY_COLOR,
    TextureTestData,
    make_skin_png,
    png_bytes,
)

pytestmark = pytest.mark.asyncio

SCENARIO_IDENTITY = "abc123" + "0" * 26


def _pixels(data: bytes) -> set:
    return set(Image.open(BytesIO(data)).convert("RGBA").getdata())


def _size(data: bytes) -> tuple[int, int]:
    return Image.open(BytesIO(data)).size


class TestValidateSize:
    @pytest.mark.parametrize("size", [8, 9, 64, 511, 512])
    def test_in_range(self, size: int) -> None:
        assert validate_size(size) == size

    @pytest.mark.parametrize("size", [-1, 0, 7, 513, 4096])
    def test_out_of_range(self, size: int) -> None:
        with pytest.raises(InvalidSizeError) as exc_info:
            validate_size(size)
        assert exc_info.value.size == size
        assert (exc_info.value.minimum, exc_info.value.maximum) == (8, 512)


class TestRenderCaching:
    """HIT/MISS behaviour and derivation call counts."""

    async def test_first_request_misses_then_hits(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        codec_spy: Mock,
        identity: str,
        skin_png: bytes,
    ) -> None:
        await registry.put(db_session, identity, skin_png)

        first = await render_service.render(db_session, identity, RenderKind.AVATAR, 64)
        second = await render_service.render(db_session, identity, RenderKind.AVATAR, 64)

        assert first.cache_status == CacheStatus.MISS
        assert second.cache_status == CacheStatus.HIT
        assert first.content == second.content
        assert first.fingerprint == second.fingerprint
        assert codec_spy.decode.call_count == 1
        assert codec_spy.derive.call_count == 1

    async def test_render_output(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        identity: str,
    ) -> None:
        await registry.put(db_session, identity, make_skin_png(overlay=OVERLAY_COLOR))

        avatar = await render_service.render(db_session, identity, RenderKind.AVATAR, 32)
        head = await render_service.render(db_session, identity, "head", 32)

        assert avatar.media_type == "image/png"
        assert _size(avatar.content) == (32, 32)
        assert _pixels(avatar.content) == {FACE_COLOR}
        assert _pixels(head.content) == {OVERLAY_COLOR}

    async def test_sizes_are_cached_independently(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        codec_spy: Mock,
        identity: str,
        skin_png: bytes,
    ) -> None:
        await registry.put(db_session, identity, skin_png)

        await render_service.render(db_session, identity, RenderKind.AVATAR, 64)
        result = await render_service.render(db_session, identity, RenderKind.AVATAR, 128)

        assert result.cache_status == CacheStatus.MISS
        assert codec_spy.derive.call_count == 2

    async def test_render_request(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        skin_png: bytes,
    ) -> None:
        await registry.put(db_session, TextureTestData.DASHED_IDENTITY, skin_png)
        request = RenderRequest(
            identity=TextureTestData.DASHED_IDENTITY, kind=RenderKind.HEAD, size=16
        )

        result = await render_service.render_request(db_session, request)

        assert result.cache_status == CacheStatus.MISS
        assert result.size == 16

    async def test_dashed_and_plain_identity_share_cache(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        skin_png: bytes,
    ) -> None:
        await registry.put(db_session, TextureTestData.DASHED_IDENTITY, skin_png)

        await render_service.render(db_session, TextureTestData.DASHED_IDENTITY, RenderKind.AVATAR)
        result = await render_service.render(
            db_session, TextureTestData.CANONICAL_DASHED_IDENTITY, RenderKind.AVATAR
        )

        assert result.cache_status == CacheStatus.HIT


class TestSizeValidation:
    """Size bounds are checked before any I/O."""

    @pytest.mark.parametrize("size", [7, 513])
    async def test_out_of_range_raises_before_registry_access(
        self, identity: str, size: int
    ) -> None:
        registry = MagicMock(spec=SourceRegistry)
        registry.get = AsyncMock()
        artifact_store = MagicMock(spec=FilesystemArtifactStore)
        service = RenderService(registry, artifact_store, ImageCodec())

        with pytest.raises(InvalidSizeError):
            await service.render(AsyncMock(), identity, RenderKind.AVATAR, size)

        registry.get.assert_not_awaited()

    @pytest.mark.parametrize("size", [8, 512])
    async def test_boundaries_render(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        identity: str,
        skin_png: bytes,
        size: int,
    ) -> None:
        await registry.put(db_session, identity, skin_png)

        result = await render_service.render(db_session, identity, RenderKind.HEAD, size)

        assert result.cache_status == CacheStatus.MISS
        assert _size(result.content) == (size, size)

    async def test_out_of_range_raises_even_for_invalid_identity(
        self, db_session: AsyncSession, render_service: RenderService
    ) -> None:
        with pytest.raises(InvalidSizeError):
            await render_service.render(db_session, "not-a-uuid", RenderKind.AVATAR, 0)


class TestPlaceholders:
    """Fallbacks that still return a renderable image."""

    async def test_unknown_identity(
        self,
        db_session: AsyncSession,
        render_service: RenderService,
        artifact_store: FilesystemArtifactStore,
        identity: str,
    ) -> None:
        result = await render_service.render(db_session, identity, RenderKind.AVATAR, 16)

        assert result.cache_status == CacheStatus.PLACEHOLDER
        assert result.fingerprint is None
        assert _pixels(result.content) == {AVATAR_PLACEHOLDER_COLOR}
        assert (await artifact_store.get_stats()).artifact_count == 0

    async def test_head_placeholder_colour(
        self, db_session: AsyncSession, render_service: RenderService, identity: str
    ) -> None:
        result = await render_service.render(db_session, identity, RenderKind.HEAD, 16)
        assert _pixels(result.content) == {HEAD_PLACEHOLDER_COLOR}

    async def test_invalid_identity(
        self, db_session: AsyncSession, render_service: RenderService
    ) -> None:
        result = await render_service.render(db_session, "not-a-uuid", RenderKind.AVATAR, 16)
        assert result.cache_status == CacheStatus.PLACEHOLDER

    async def test_corrupt_blob(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        blob_store: LocalBlobStore,
        artifact_store: FilesystemArtifactStore,
        identity: str,
        skin_png: bytes,
    ) -> None:
        await registry.put(db_session, identity, skin_png)
        source = await registry.get(db_session, identity)
        assert source is not None
        (blob_store.root / source.location).write_bytes(b"corrupted")

        result = await render_service.render(db_session, identity, RenderKind.AVATAR, 16)

        assert result.cache_status == CacheStatus.PLACEHOLDER
        assert (await artifact_store.get_stats()).artifact_count == 0

    async def test_misshapen_blob(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        blob_store: LocalBlobStore,
        identity: str,
        skin_png: bytes,
    ) -> None:
        await registry.put(db_session, identity, skin_png)
        source = await registry.get(db_session, identity)
        assert source is not None
        (blob_store.root / source.location).write_bytes(
            png_bytes(Image.new("RGBA", (16, 16), FACE_COLOR))
        )

        result = await render_service.render(db_session, identity, RenderKind.HEAD, 16)

        assert result.cache_status == CacheStatus.PLACEHOLDER

    async def test_missing_blob(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        blob_store: LocalBlobStore,
        identity: str,
        skin_png: bytes,
    ) -> None:
        await registry.put(db_session, identity, skin_png)
        source = await registry.get(db_session, identity)
        assert source is not None
        (blob_store.root / source.location).unlink()

        result = await render_service.render(db_session, identity, RenderKind.AVATAR, 16)

        assert result.cache_status == CacheStatus.PLACEHOLDER

    async def test_registry_failure(self, identity: str) -> None:
        registry = MagicMock(spec=SourceRegistry)
        registry.get = AsyncMock(side_effect=RepositoryError("db down"))
        service = RenderService(registry, MagicMock(spec=FilesystemArtifactStore), ImageCodec())

        result = await service.render(AsyncMock(), identity, RenderKind.AVATAR, 16)

        assert result.cache_status == CacheStatus.PLACEHOLDER


class TestStorageDegradation:
    """Artifact cache failures never fail the render."""

    async def test_lookup_failure_derives(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        identity: str,
        skin_png: bytes,
    ) -> None:
        await registry.put(db_session, identity, skin_png)
        broken = MagicMock(spec=FilesystemArtifactStore)
        broken.lookup = AsyncMock(side_effect=StorageError("unreadable"))
        broken.put = AsyncMock()
        service = RenderService(registry, broken, ImageCodec())

        result = await service.render(db_session, identity, RenderKind.AVATAR, 16)

        assert result.cache_status == CacheStatus.MISS
        broken.put.assert_awaited_once()

    async def test_store_failure_still_serves(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        identity: str,
        skin_png: bytes,
    ) -> None:
        await registry.put(db_session, identity, skin_png)
        broken = MagicMock(spec=FilesystemArtifactStore)
        broken.lookup = AsyncMock(return_value=None)
        broken.put = AsyncMock(side_effect=StorageError("disk full"))
        service = RenderService(registry, broken, ImageCodec())

        result = await service.render(db_session, identity, RenderKind.AVATAR, 16)

        assert result.cache_status == CacheStatus.MISS
        assert _pixels(result.content) == {FACE_COLOR}


class TestInvalidation:
    """Re-uploads and explicit invalidation."""

    async def test_reupload_scenario(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        artifact_store: FilesystemArtifactStore,
        codec_spy: Mock,
    ) -> None:
        await registry.put(db_session, SCENARIO_IDENTITY, make_skin_png())

        first = await render_service.render(db_session, SCENARIO_IDENTITY, RenderKind.AVATAR, 64)
        second = await render_service.render(db_session, SCENARIO_IDENTITY, RenderKind.AVATAR, 64)
        assert (first.cache_status, second.cache_status) == (CacheStatus.MISS, CacheStatus.HIT)
        old_key = ArtifactKey(
            identity=SCENARIO_IDENTITY,
            kind=RenderKind.AVATAR,
            size=64,
            fingerprint=first.fingerprint,
        )

        new_face = (1, 2, 3, 255)
        await registry.put(db_session, SCENARIO_IDENTITY, make_skin_png(face=new_face))
        third = await render_service.render(db_session, SCENARIO_IDENTITY, RenderKind.AVATAR, 64)

        assert third.cache_status == CacheStatus.MISS
        assert third.fingerprint != first.fingerprint
        assert _pixels(third.content) == {new_face}
        assert await artifact_store.lookup(old_key) is None
        assert codec_spy.derive.call_count == 2

    async def test_on_source_changed(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        identity: str,
        skin_png: bytes,
    ) -> None:
        await registry.put(db_session, identity, skin_png)
        await render_service.render(db_session, identity, RenderKind.AVATAR, 16)
        await render_service.render(db_session, identity, RenderKind.HEAD, 16)

        removed = await render_service.on_source_changed(identity)
        result = await render_service.render(db_session, identity, RenderKind.AVATAR, 16)

        assert removed == 2
        assert result.cache_status == CacheStatus.MISS

    async def test_on_source_changed_propagates_storage_error(self, identity: str) -> None:
        store = MagicMock(spec=FilesystemArtifactStore)
        store.invalidate_all = AsyncMock(side_effect=StorageError("busy"))
        service = RenderService(MagicMock(spec=SourceRegistry), store, ImageCodec())

        with pytest.raises(StorageError):
            await service.on_source_changed(identity)


class TestWarm:
    """Tests for RenderService.warm."""

    async def test_warm_renders_then_reports_cached(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        skin_png: bytes,
    ) -> None:
        for identity in TextureTestData.VALID_IDENTITIES[:2]:
            await registry.put(db_session, identity, skin_png)
        seen: list[tuple[str, str]] = []

        first = await render_service.warm(
            db_session, sizes=(16, 32), progress_callback=lambda i, s: seen.append((i, s))
        )
        second = await render_service.warm(db_session, sizes=(16, 32))

        assert (first.rendered, first.cached, first.placeholders, first.total) == (8, 0, 0, 8)
        assert (second.rendered, second.cached, second.total) == (0, 8, 8)
        assert len(seen) == 8
        assert {status for _, status in seen} == {"rendered"}

    async def test_warm_counts_placeholders(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        blob_store: LocalBlobStore,
        identity: str,
        skin_png: bytes,
    ) -> None:
        await registry.put(db_session, identity, skin_png)
        source = await registry.get(db_session, identity)
        assert source is not None
        (blob_store.root / source.location).write_bytes(b"broken")

        result = await render_service.warm(db_session, kinds=(RenderKind.AVATAR,))

        assert result.placeholders == 1
        assert result.total == 1

    async def test_warm_dry_run_writes_nothing(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        artifact_store: FilesystemArtifactStore,
        codec_spy: Mock,
        identity: str,
        skin_png: bytes,
    ) -> None:
        await registry.put(db_session, identity, skin_png)

        result = await render_service.warm(db_session, dry_run=True)

        assert result.rendered == 2
        assert result.total == 2
        assert (await artifact_store.get_stats()).artifact_count == 0
        codec_spy.derive.assert_not_called()

    async def test_warm_respects_limit(
        self,
        db_session: AsyncSession,
        registry: SourceRegistry,
        render_service: RenderService,
        skin_png: bytes,
    ) -> None:
        for identity in TextureTestData.VALID_IDENTITIES:
            await registry.put(db_session, identity, skin_png)

        result = await render_service.warm(db_session, kinds=(RenderKind.HEAD,), limit=1)

        assert result.total == 1

    async def test_warm_validates_sizes_up_front(
        self, db_session: AsyncSession, render_service: RenderService
    ) -> None:
        with pytest.raises(InvalidSizeError):
            await render_service.warm(db_session, sizes=(64, 1024))
