"""
Source texture registry.

The registry is the only writer of source texture records. It combines the
user texture repository (record of current location and fingerprint per
identity) with the blob store (raw bytes), and triggers artifact
invalidation whenever an identity's skin changes.

Ordering on upload and delete:

1. Validate and write the new raw blob.
2. Invalidate the identity's cached artifacts.
3. Save and commit the registry row.
4. Remove the superseded raw blob.

The superseded blob is only removed once the commit has succeeded, so a
committed row never points at bytes that are gone. A failed commit leaves
the new blob behind as an unreferenced file instead.

Invalidation happens before the new fingerprint becomes visible. If it
fails, the upload still proceeds: cached entries are keyed by fingerprint,
so anything left behind is unreachable once the new row is committed.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from skinvault.exceptions import RepositoryError, StorageError
from skinvault.models.enums import SkinModel, TextureKind
from skinvault.models.identity import normalize_identity
from skinvault.models.texture import (
    SourceTexture,
    TextureStatistics,
    UserTexture,
    UserTextureUpdate,
)
from skinvault.repositories.user_texture_repository import UserTextureRepository
from skinvault.services.fingerprint import fingerprint
from skinvault.services.image_codec import ImageCodec
from skinvault.services.interfaces import (
    ArtifactStoreInterface,
    BlobStoreInterface,
)

logger = logging.getLogger(__name__)


class SourceRegistry:
    """Accessor and sole writer for per-identity source textures.

    Parameters
    ----------
    repository : UserTextureRepository
        Record store for texture metadata.
    blob_store : BlobStoreInterface
        Raw texture byte storage.
    artifact_store : ArtifactStoreInterface
        Derived artifact cache, invalidated on skin changes.
    codec : ImageCodec
        Used to validate uploads before they are accepted.
    """

    def __init__(
        self,
        repository: UserTextureRepository,
        blob_store: BlobStoreInterface,
        artifact_store: ArtifactStoreInterface,
        codec: ImageCodec,
    ) -> None:
        self._repository = repository
        self._blob_store = blob_store
        self._artifact_store = artifact_store
        self._codec = codec

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_record(
        self, session: AsyncSession, identity: str
    ) -> Optional[UserTexture]:
        """Return the full texture record for an identity, if any."""
        identity = normalize_identity(identity)
        try:
            row = await self._repository.get_by_user_uuid(session, identity)
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to load textures for {identity}",
                operation="select",
                entity_type="UserTexture",
                original_error=e,
            ) from e
        if row is None:
            return None
        return UserTexture.model_validate(row)

    async def get(
        self,
        session: AsyncSession,
        identity: str,
        kind: TextureKind = TextureKind.SKIN,
    ) -> Optional[SourceTexture]:
        """
        Resolve the current source texture of one kind for an identity.

        Parameters
        ----------
        session : AsyncSession
            Database session
        identity : str
            Player UUID (dashed or undashed)
        kind : TextureKind
            Skin or cape

        Returns
        -------
        Optional[SourceTexture]
            Current source, or None if the identity has no such texture
        """
        record = await self.get_record(session, identity)
        if record is None:
            return None
        return record.source(kind)

    async def read_bytes(self, source: SourceTexture) -> Optional[bytes]:
        """Read the raw bytes of a source texture from the blob store."""
        return await self._blob_store.get(source.location)

    async def find_with_skin(
        self, session: AsyncSession, limit: Optional[int] = None
    ) -> List[SourceTexture]:
        """Return the current skin of every identity that has one."""
        rows = await self._repository.find_with_skin(session, limit=limit)
        sources: List[SourceTexture] = []
        for row in rows:
            source = UserTexture.model_validate(row).source(TextureKind.SKIN)
            if source is not None:
                sources.append(source)
        return sources

    async def get_statistics(self, session: AsyncSession) -> TextureStatistics:
        """Count stored skins and capes."""
        return await self._repository.get_statistics(session)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def put(
        self,
        session: AsyncSession,
        identity: str,
        raw: bytes,
        kind: TextureKind = TextureKind.SKIN,
        model: SkinModel = SkinModel.CLASSIC,
    ) -> str:
        """
        Store a new source texture and return its fingerprint.

        Parameters
        ----------
        session : AsyncSession
            Database session
        identity : str
            Player UUID (dashed or undashed)
        raw : bytes
            Uploaded PNG bytes
        kind : TextureKind
            Skin or cape
        model : SkinModel
            Skin geometry layout; ignored for capes

        Returns
        -------
        str
            Fingerprint of the stored bytes

        Raises
        ------
        DecodeError
            If ``raw`` is not a readable PNG
        DimensionMismatchError
            If the geometry is wrong for ``kind``
        StorageError
            If the raw blob cannot be written
        RepositoryError
            If the record cannot be saved
        """
        identity = normalize_identity(identity)
        self._codec.validate_texture(kind, raw)

        digest = fingerprint(raw)
        existing = await self.get_record(session, identity)
        previous_location = self._location_of(existing, kind)

        location = await self._blob_store.put(kind, identity, digest, raw)

        if kind == TextureKind.SKIN:
            await self._invalidate(identity)
            update = UserTextureUpdate(
                skin_location=location,
                skin_hash=digest,
                is_slim=model == SkinModel.SLIM,
            )
        else:
            update = UserTextureUpdate(cape_location=location, cape_hash=digest)

        await self._save(session, identity, update)
        await self._commit(session, identity)

        if previous_location and previous_location != location:
            await self._discard_blob(previous_location)

        logger.info(
            "Stored %s for %s (fingerprint=%s, model=%s)",
            kind.value,
            identity,
            digest,
            model.value,
        )
        return digest

    async def delete(
        self,
        session: AsyncSession,
        identity: str,
        kind: TextureKind = TextureKind.SKIN,
    ) -> bool:
        """
        Remove one source texture from an identity.

        Returns
        -------
        bool
            True if a texture was removed, False if there was none
        """
        identity = normalize_identity(identity)
        existing = await self.get_record(session, identity)
        location = self._location_of(existing, kind)
        if location is None:
            logger.debug("No %s to delete for %s", kind.value, identity)
            return False

        if kind == TextureKind.SKIN:
            await self._invalidate(identity)
            update = UserTextureUpdate(skin_location=None, skin_hash=None, is_slim=False)
        else:
            update = UserTextureUpdate(cape_location=None, cape_hash=None)

        await self._save(session, identity, update)
        await self._commit(session, identity)
        await self._discard_blob(location)

        logger.info("Deleted %s for %s", kind.value, identity)
        return True

    async def delete_all(self, session: AsyncSession, identity: str) -> bool:
        """
        Remove an identity's record, raw blobs and cached artifacts.

        Returns
        -------
        bool
            True if a record existed
        """
        identity = normalize_identity(identity)
        existing = await self.get_record(session, identity)

        await self._invalidate(identity)
        if existing is None:
            return False

        try:
            await self._repository.delete_by_user_uuid(session, identity)
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to delete textures for {identity}",
                operation="delete",
                entity_type="UserTexture",
                original_error=e,
            ) from e
        await self._commit(session, identity)

        for location in (existing.skin_location, existing.cape_location):
            if location:
                await self._discard_blob(location)

        logger.info("Deleted all texture data for %s", identity)
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _location_of(record: Optional[UserTexture], kind: TextureKind) -> Optional[str]:
        if record is None:
            return None
        if kind == TextureKind.SKIN:
            return record.skin_location
        return record.cape_location

    async def _save(
        self, session: AsyncSession, identity: str, update: UserTextureUpdate
    ) -> None:
        try:
            await self._repository.upsert(session, identity, update)
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to save textures for {identity}",
                operation="upsert",
                entity_type="UserTexture",
                original_error=e,
            ) from e

    async def _commit(self, session: AsyncSession, identity: str) -> None:
        try:
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise RepositoryError(
                f"Failed to commit textures for {identity}",
                operation="commit",
                entity_type="UserTexture",
                original_error=e,
            ) from e

    async def _invalidate(self, identity: str) -> int:
        try:
            return await self._artifact_store.invalidate_all(identity)
        except StorageError:
            logger.warning(
                "Artifact invalidation failed for %s; stale renders stay unreachable "
                "behind the old fingerprint",
                identity,
                exc_info=True,
            )
            return 0

    async def _discard_blob(self, location: str) -> None:
        try:
            await self._blob_store.delete(location)
        except StorageError:
            logger.warning("Failed to remove superseded blob %s", location, exc_info=True)
