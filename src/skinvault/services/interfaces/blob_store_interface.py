"""
Abstract Base Class for raw texture blob storage.

The blob store holds the original uploaded bytes of every source texture.
Locations are opaque strings handed back by ``put`` and recorded by the
source registry; callers never build them themselves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...models.enums import TextureKind


class BlobStoreInterface(ABC):
    """
    Abstract interface for raw texture byte storage.

    Implementations must raise ``StorageError`` for I/O failures and
    return ``None`` (``get``) or ``False`` (``delete``) when the blob is
    simply not present.

    Examples
    --------
    >>> class MemoryBlobStore(BlobStoreInterface):
    ...     async def get(self, location: str) -> Optional[bytes]:
    ...         return self._blobs.get(location)
    """

    @abstractmethod
    async def get(self, location: str) -> Optional[bytes]:
        """
        Read the bytes stored at a location.

        Parameters
        ----------
        location : str
            Location previously returned by ``put``.

        Returns
        -------
        Optional[bytes]
            The stored bytes, or None if nothing is stored there.

        Raises
        ------
        StorageError
            If the backend cannot be read.
        """
        pass

    @abstractmethod
    async def put(
        self,
        kind: TextureKind,
        identity: str,
        fingerprint: str,
        data: bytes,
    ) -> str:
        """
        Store raw texture bytes.

        Parameters
        ----------
        kind : TextureKind
            Texture kind (skin or cape).
        identity : str
            Canonical identity owning the texture.
        fingerprint : str
            Content fingerprint of ``data``.
        data : bytes
            Raw uploaded bytes.

        Returns
        -------
        str
            Location of the stored blob.

        Raises
        ------
        StorageError
            If the bytes cannot be written.
        """
        pass

    @abstractmethod
    async def delete(self, location: str) -> bool:
        """
        Delete the blob at a location.

        Parameters
        ----------
        location : str
            Location previously returned by ``put``.

        Returns
        -------
        bool
            True if a blob was removed, False if nothing was stored there.

        Raises
        ------
        StorageError
            If the backend refuses the deletion.
        """
        pass
