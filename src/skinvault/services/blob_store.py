"""
Local filesystem blob store for raw source textures.

Blobs are content addressed: ``{root}/{kind}s/{identity}/{fingerprint}.png``.
The location recorded in the registry is the path relative to ``root``,
so the storage directory can move without rewriting database rows.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional
from uuid import uuid4

from skinvault.exceptions import StorageError
from skinvault.models.enums import TextureKind
from skinvault.services.interfaces import BlobStoreInterface

logger = logging.getLogger(__name__)


class LocalBlobStore(BlobStoreInterface):
    """Stores raw texture bytes under a root directory.

    Parameters
    ----------
    root : Path
        Base directory for texture blobs (``settings.textures_dir``).
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        """Base directory of the store."""
        return self._root

    # ------------------------------------------------------------------
    # Path handling
    # ------------------------------------------------------------------

    @staticmethod
    def location_for(kind: TextureKind, identity: str, fingerprint: str) -> str:
        """Return the relative location for a texture blob."""
        return f"{kind.value}s/{identity}/{fingerprint}.png"

    def _resolve(self, location: str) -> Path:
        """Resolve a location to a path inside the root directory.

        Raises
        ------
        StorageError
            If the location escapes the root directory.
        """
        root = self._root.resolve()
        path = (root / location).resolve()
        if root not in path.parents:
            raise StorageError(
                f"Blob location escapes storage root: {location}",
                operation="resolve",
                path=location,
            )
        return path

    # ------------------------------------------------------------------
    # BlobStoreInterface
    # ------------------------------------------------------------------

    async def get(self, location: str) -> Optional[bytes]:
        path = self._resolve(location)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            logger.warning("Texture blob not found: %s", location)
            return None
        except OSError as e:
            logger.error("Failed to read texture blob %s", location, exc_info=True)
            raise StorageError(
                f"Failed to read texture blob {location}",
                operation="get",
                path=location,
                original_error=e,
            ) from e

    async def put(
        self,
        kind: TextureKind,
        identity: str,
        fingerprint: str,
        data: bytes,
    ) -> str:
        location = self.location_for(kind, identity, fingerprint)
        path = self._resolve(location)

        # Atomic write: temp file -> rename
        tmp_path = path.with_name(f".{path.stem}.tmp.{uuid4()}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(data)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("Failed to write texture blob %s", location, exc_info=True)
            tmp_path.unlink(missing_ok=True)
            raise StorageError(
                f"Failed to write texture blob {location}",
                operation="put",
                path=location,
                original_error=e,
            ) from e

        logger.info("Stored %s blob: %s (%d bytes)", kind.value, location, len(data))
        return location

    async def delete(self, location: str) -> bool:
        path = self._resolve(location)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("Texture blob already absent: %s", location)
            return False
        except OSError as e:
            logger.error("Failed to delete texture blob %s", location, exc_info=True)
            raise StorageError(
                f"Failed to delete texture blob {location}",
                operation="delete",
                path=location,
                original_error=e,
            ) from e

        logger.info("Deleted texture blob: %s", location)
        return True
