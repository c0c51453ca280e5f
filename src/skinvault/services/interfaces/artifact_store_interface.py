"""
Abstract Base Class for the derived artifact cache.

Artifacts are keyed by ``ArtifactKey`` (identity, render kind, size and
source fingerprint). Because the fingerprint is part of the key, entries
written for an old source version become unreachable as soon as the
registry reports a new fingerprint.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...models.render import ArtifactCacheStats, ArtifactKey


class ArtifactStoreInterface(ABC):
    """
    Abstract interface for derived render storage.

    Every individual operation must be atomic with respect to readers: a
    lookup racing a put or an invalidation returns either the complete
    artifact or None, never partial bytes.
    """

    @abstractmethod
    async def lookup(self, key: ArtifactKey) -> Optional[bytes]:
        """
        Fetch a cached artifact.

        Parameters
        ----------
        key : ArtifactKey
            Artifact cache key.

        Returns
        -------
        Optional[bytes]
            Cached bytes, or None on a cache miss.

        Raises
        ------
        StorageError
            If the cache cannot be read (distinct from a miss).
        """
        pass

    @abstractmethod
    async def put(self, key: ArtifactKey, data: bytes) -> None:
        """
        Store an artifact, replacing any entry under the same key.

        Raises
        ------
        StorageError
            If the artifact cannot be written.
        """
        pass

    @abstractmethod
    async def invalidate_all(self, identity: str) -> int:
        """
        Remove every artifact belonging to an identity.

        Parameters
        ----------
        identity : str
            Canonical identity.

        Returns
        -------
        int
            Number of artifacts removed.

        Raises
        ------
        StorageError
            If the identity's artifacts cannot be removed.
        """
        pass

    @abstractmethod
    async def get_stats(self) -> ArtifactCacheStats:
        """Compute statistics about the cached artifacts."""
        pass

    @abstractmethod
    async def purge(self) -> int:
        """
        Delete every cached artifact.

        Returns
        -------
        int
            Total bytes freed.
        """
        pass
