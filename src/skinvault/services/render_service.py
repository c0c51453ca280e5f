"""
Avatar and head render service.

Produces derived renders of a player's skin at a requested size and keeps
them in the artifact cache so repeat requests skip derivation.

Flow for one request:

1. Validate the size (the only failure surfaced to callers).
2. Resolve the current skin via the source registry; no skin means the
   flat-colour placeholder.
3. Look up the artifact keyed by (identity, kind, size, fingerprint).
4. On a miss: read the raw bytes, decode, check the geometry, run the
   recipe, scale and encode.
5. Store the artifact (a failed store is logged and the render is still
   served).

Corrupt or misshapen sources, registry failures and unreadable blobs all
degrade to the placeholder so a renderable image is always returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from skinvault.exceptions import (
    DecodeError,
    DimensionMismatchError,
    InvalidSizeError,
    RepositoryError,
    StorageError,
)
from skinvault.models.enums import CacheStatus, RenderKind
from skinvault.models.identity import normalize_identity
from skinvault.models.render import (
    DEFAULT_RENDER_SIZE,
    MAX_RENDER_SIZE,
    MIN_RENDER_SIZE,
    ArtifactKey,
    RenderRequest,
    RenderResult,
    WarmResult,
)
from skinvault.models.texture import SourceTexture
from skinvault.services.image_codec import SKIN_SHAPES, ImageCodec
from skinvault.services.interfaces import ArtifactStoreInterface
from skinvault.services.source_registry import SourceRegistry

logger = logging.getLogger(__name__)


def validate_size(size: int) -> int:
    """Return ``size`` if it is a supported render size.

    Raises
    ------
    InvalidSizeError
        If ``size`` is outside ``MIN_RENDER_SIZE..MAX_RENDER_SIZE``.
    """
    if not MIN_RENDER_SIZE <= size <= MAX_RENDER_SIZE:
        raise InvalidSizeError(size, MIN_RENDER_SIZE, MAX_RENDER_SIZE)
    return size


class RenderService:
    """Derivation engine for avatar and head renders.

    Parameters
    ----------
    registry : SourceRegistry
        Resolves the current skin of an identity.
    artifact_store : ArtifactStoreInterface
        Cache of derived renders.
    codec : ImageCodec
        Bitmap codec and derivation recipes.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        artifact_store: ArtifactStoreInterface,
        codec: ImageCodec,
    ) -> None:
        self._registry = registry
        self._artifact_store = artifact_store
        self._codec = codec

    # ------------------------------------------------------------------
    # Public API: render
    # ------------------------------------------------------------------

    async def render(
        self,
        session: AsyncSession,
        identity: str,
        kind: RenderKind | str,
        size: int = DEFAULT_RENDER_SIZE,
    ) -> RenderResult:
        """
        Return the render of ``kind`` for ``identity`` at ``size`` pixels.

        Parameters
        ----------
        session : AsyncSession
            Database session for the registry lookup.
        identity : str
            Player UUID (dashed or undashed).
        kind : RenderKind | str
            ``avatar`` or ``head``.
        size : int
            Edge length of the square output in pixels.

        Returns
        -------
        RenderResult
            PNG bytes plus the cache outcome (HIT, MISS or PLACEHOLDER).

        Raises
        ------
        InvalidSizeError
            If ``size`` is outside the supported range. Raised before any
            registry or storage access.
        """
        kind = RenderKind(kind)
        validate_size(size)

        try:
            identity = normalize_identity(identity)
        except (TypeError, ValueError):
            logger.info("Unrecognised identity %r; serving placeholder", identity)
            return self._placeholder(kind, size)

        try:
            source = await self._registry.get(session, identity)
        except RepositoryError:
            logger.error(
                "Source registry unavailable for %s; serving placeholder",
                identity,
                exc_info=True,
            )
            return self._placeholder(kind, size)

        if source is None:
            logger.debug("No skin for %s; serving %s placeholder", identity, kind.value)
            return self._placeholder(kind, size)

        key = ArtifactKey(
            identity=identity, kind=kind, size=size, fingerprint=source.fingerprint
        )

        # 1. Cache HIT
        try:
            cached = await self._artifact_store.lookup(key)
        except StorageError:
            logger.warning(
                "Artifact cache unavailable for %s/%s/%d; deriving without cache",
                identity,
                kind.value,
                size,
            )
            cached = None

        if cached is not None:
            logger.debug("Cache HIT for %s render: %s (%d)", kind.value, identity, size)
            return RenderResult(
                content=cached,
                kind=kind,
                size=size,
                cache_status=CacheStatus.HIT,
                fingerprint=source.fingerprint,
            )

        # 2. Derive
        content = await self._derive(source, kind, size)
        if content is None:
            return self._placeholder(kind, size)

        # 3. Store (best-effort)
        try:
            await self._artifact_store.put(key, content)
        except StorageError:
            logger.warning(
                "Failed to cache %s render for %s (%d); serving uncached",
                kind.value,
                identity,
                size,
            )

        logger.info("Cache MISS for %s render: %s (%d)", kind.value, identity, size)
        return RenderResult(
            content=content,
            kind=kind,
            size=size,
            cache_status=CacheStatus.MISS,
            fingerprint=source.fingerprint,
        )

    async def render_request(
        self, session: AsyncSession, request: RenderRequest
    ) -> RenderResult:
        """Render a typed ``RenderRequest``."""
        return await self.render(session, request.identity, request.kind, request.size)

    # ------------------------------------------------------------------
    # Public API: invalidation hook
    # ------------------------------------------------------------------

    async def on_source_changed(self, identity: str) -> int:
        """
        Drop every cached render of an identity.

        The source registry already calls this path on skin upload and
        delete; it is exposed for callers that change sources out of band.

        Returns
        -------
        int
            Number of artifacts removed.

        Raises
        ------
        StorageError
            If the cache cannot be cleared.
        """
        identity = normalize_identity(identity)
        removed = await self._artifact_store.invalidate_all(identity)
        logger.info("Source changed for %s; removed %d artifact(s)", identity, removed)
        return removed

    # ------------------------------------------------------------------
    # Public API: warm
    # ------------------------------------------------------------------

    async def warm(
        self,
        session: AsyncSession,
        *,
        kinds: Sequence[RenderKind] = (RenderKind.AVATAR, RenderKind.HEAD),
        sizes: Sequence[int] = (DEFAULT_RENDER_SIZE,),
        limit: int | None = None,
        dry_run: bool = False,
        progress_callback: Callable[[str, str], None] | None = None,
    ) -> WarmResult:
        """Pre-render artifacts for every identity that has a skin.

        Parameters
        ----------
        session : AsyncSession
            Database session for listing skins.
        kinds : Sequence[RenderKind]
            Render kinds to produce.
        sizes : Sequence[int]
            Render sizes to produce; each is validated up front.
        limit : int | None
            Maximum number of identities to process.
        dry_run : bool
            If ``True``, count what *would* be rendered without deriving.
        progress_callback : Callable[[str, str], None] | None
            Optional ``(identity, status)`` callback for CLI progress.

        Returns
        -------
        WarmResult
            Counts of rendered / cached / placeholders / total.
        """
        for size in sizes:
            validate_size(size)

        rendered = 0
        cached = 0
        placeholders = 0
        total = 0

        sources = await self._registry.find_with_skin(session, limit=limit)
        for source in sources:
            for kind in kinds:
                for size in sizes:
                    total += 1
                    if dry_run:
                        status = await self._peek(source, kind, size)
                    else:
                        result = await self.render(session, source.identity, kind, size)
                        status = {
                            CacheStatus.HIT: "cached",
                            CacheStatus.MISS: "rendered",
                            CacheStatus.PLACEHOLDER: "placeholder",
                        }[result.cache_status]

                    if status == "cached":
                        cached += 1
                    elif status == "placeholder":
                        placeholders += 1
                    else:
                        rendered += 1

                    if progress_callback is not None:
                        progress_callback(source.identity, status)

        logger.info(
            "Warm complete: rendered=%d, cached=%d, placeholders=%d, total=%d",
            rendered,
            cached,
            placeholders,
            total,
        )
        return WarmResult(
            rendered=rendered,
            cached=cached,
            placeholders=placeholders,
            total=total,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _peek(self, source: SourceTexture, kind: RenderKind, size: int) -> str:
        key = ArtifactKey(
            identity=source.identity,
            kind=kind,
            size=size,
            fingerprint=source.fingerprint,
        )
        try:
            hit = await self._artifact_store.lookup(key)
        except StorageError:
            hit = None
        return "cached" if hit is not None else "dry_run"

    async def _derive(
        self, source: SourceTexture, kind: RenderKind, size: int
    ) -> bytes | None:
        """Derive render bytes from a source, or None if it is unusable."""
        try:
            raw = await self._registry.read_bytes(source)
        except StorageError:
            logger.error(
                "Failed to read skin blob for %s", source.identity, exc_info=True
            )
            return None

        if raw is None:
            logger.warning(
                "Skin blob missing for %s at %s; serving placeholder",
                source.identity,
                source.location,
            )
            return None

        try:
            bitmap = self._codec.decode(raw, SKIN_SHAPES)
            return self._codec.derive(kind, bitmap, size)
        except DecodeError as e:
            logger.warning(
                "Corrupt skin for %s (%s); serving placeholder", source.identity, e
            )
        except DimensionMismatchError as e:
            logger.warning(
                "Skin for %s has unexpected geometry (%s); serving placeholder",
                source.identity,
                e,
            )
        return None

    def _placeholder(self, kind: RenderKind, size: int) -> RenderResult:
        return RenderResult(
            content=self._codec.placeholder(kind, size),
            kind=kind,
            size=size,
            cache_status=CacheStatus.PLACEHOLDER,
        )
