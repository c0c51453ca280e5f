"""
Filesystem-backed cache of derived renders.

Artifacts are sharded by the first two characters of the identity:
``{root}/{identity[:2]}/{identity}/{kind}_{size}_{fingerprint}.png``.

Writes go to a temp file in the same directory followed by ``os.replace``
(atomic on POSIX), so concurrent readers see either the previous file, the
new file, or nothing, but never partial bytes.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional
from uuid import uuid4

from skinvault.exceptions import StorageError
from skinvault.models.render import ArtifactCacheStats, ArtifactKey
from skinvault.services.interfaces import ArtifactStoreInterface

logger = logging.getLogger(__name__)

_ARTIFACT_PATTERN = "*.png"


class FilesystemArtifactStore(ArtifactStoreInterface):
    """Derived artifact cache rooted at a local directory.

    Parameters
    ----------
    root : Path
        Cache root directory (``settings.artifacts_dir``).
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        """Cache root directory."""
        return self._root

    # ------------------------------------------------------------------
    # Path handling
    # ------------------------------------------------------------------

    def identity_dir(self, identity: str) -> Path:
        """Directory holding every artifact of one identity."""
        return self._root / identity[:2] / identity

    def path_for(self, key: ArtifactKey) -> Path:
        """On-disk path of the artifact for ``key``."""
        return self.identity_dir(key.identity) / key.filename

    @staticmethod
    def _is_artifact(path: Path) -> bool:
        # Temp files of in-flight writes start with a dot
        return path.is_file() and not path.name.startswith(".")

    # ------------------------------------------------------------------
    # Lookup / put
    # ------------------------------------------------------------------

    async def lookup(self, key: ArtifactKey) -> Optional[bytes]:
        path = self.path_for(key)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("Failed to read cached artifact %s", path, exc_info=True)
            raise StorageError(
                f"Failed to read cached artifact {path}",
                operation="lookup",
                path=str(path),
                original_error=e,
            ) from e

        logger.debug("Artifact cache HIT: %s", path)
        return data

    async def put(self, key: ArtifactKey, data: bytes) -> None:
        path = self.path_for(key)
        tmp_path = path.with_name(f".{path.stem}.tmp.{uuid4()}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(data)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("Failed to write cached artifact %s", path, exc_info=True)
            tmp_path.unlink(missing_ok=True)
            raise StorageError(
                f"Failed to write cached artifact {path}",
                operation="put",
                path=str(path),
                original_error=e,
            ) from e

        logger.info("Cached artifact: %s (%d bytes)", path, len(data))

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    async def invalidate_all(self, identity: str) -> int:
        directory = self.identity_dir(identity)
        if not directory.is_dir():
            logger.debug("No cached artifacts to invalidate for %s", identity)
            return 0

        removed = 0
        for path in directory.glob(_ARTIFACT_PATTERN):
            if not self._is_artifact(path):
                continue
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                # Removed concurrently
                continue
            except OSError as e:
                logger.error("Failed to delete cached artifact %s", path, exc_info=True)
                raise StorageError(
                    f"Failed to invalidate artifacts for {identity}",
                    operation="invalidate",
                    path=str(path),
                    original_error=e,
                ) from e

        logger.info("Invalidated %d cached artifact(s) for %s", removed, identity)
        return removed

    # ------------------------------------------------------------------
    # Stats / purge
    # ------------------------------------------------------------------

    async def get_stats(self) -> ArtifactCacheStats:
        """Compute statistics about the artifact cache contents.

        Scans the sharded cache tree for ``.png`` artifacts, counting files
        and distinct identities and summing file sizes.

        Returns
        -------
        ArtifactCacheStats
            Aggregated statistics including counts, total size, and
            oldest/newest file modification times.
        """
        artifact_count = 0
        identities: set[str] = set()
        total_size_bytes = 0
        oldest_mtime: float | None = None
        newest_mtime: float | None = None

        if self._root.is_dir():
            for path in self._root.rglob(_ARTIFACT_PATTERN):
                if not self._is_artifact(path):
                    continue
                try:
                    stat = path.stat()
                except FileNotFoundError:
                    continue
                artifact_count += 1
                identities.add(path.parent.name)
                total_size_bytes += stat.st_size
                if oldest_mtime is None or stat.st_mtime < oldest_mtime:
                    oldest_mtime = stat.st_mtime
                if newest_mtime is None or stat.st_mtime > newest_mtime:
                    newest_mtime = stat.st_mtime

        logger.info(
            "Artifact cache stats: artifacts=%d, identities=%d, total_size=%d bytes",
            artifact_count,
            len(identities),
            total_size_bytes,
        )

        return ArtifactCacheStats(
            artifact_count=artifact_count,
            identity_count=len(identities),
            total_size_bytes=total_size_bytes,
            oldest_file=(
                datetime.fromtimestamp(oldest_mtime) if oldest_mtime is not None else None
            ),
            newest_file=(
                datetime.fromtimestamp(newest_mtime) if newest_mtime is not None else None
            ),
        )

    async def purge(self) -> int:
        """Delete every cached artifact.

        The directory tree itself is preserved.

        Returns
        -------
        int
            Total bytes freed (sum of deleted file sizes).
        """
        bytes_freed = 0
        if not self._root.is_dir():
            return bytes_freed

        for path in self._root.rglob(_ARTIFACT_PATTERN):
            if not path.is_file():
                continue
            try:
                size = path.stat().st_size
                path.unlink()
                bytes_freed += size
            except OSError:
                logger.warning("Failed to delete cached artifact: %s", path, exc_info=True)

        logger.info("Artifact purge complete: freed %d bytes", bytes_freed)
        return bytes_freed
