"""
Service layer for skinvault.

Contains the texture codec, storage backends, the source registry and the
render engine that ties them together.
"""

from .artifact_store import FilesystemArtifactStore
from .blob_store import LocalBlobStore
from .fingerprint import fingerprint
from .image_codec import ImageCodec
from .profile_service import ProfileService
from .render_service import RenderService, validate_size
from .source_registry import SourceRegistry

__all__ = [
    "FilesystemArtifactStore",
    "ImageCodec",
    "LocalBlobStore",
    "ProfileService",
    "RenderService",
    "SourceRegistry",
    "fingerprint",
    "validate_size",
]
