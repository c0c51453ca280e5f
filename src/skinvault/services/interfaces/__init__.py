"""
Service interfaces (ABCs) for the skinvault application.

These abstract base classes define contracts for the storage collaborators
of the render engine, enabling dependency injection, testing with mocks,
and swappable backends (local filesystem, object storage).
"""

from .artifact_store_interface import ArtifactStoreInterface
from .blob_store_interface import BlobStoreInterface

__all__ = [
    "ArtifactStoreInterface",
    "BlobStoreInterface",
]
