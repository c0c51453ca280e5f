"""
Content fingerprinting for uploaded textures.

The fingerprint of a source texture is part of every derived artifact key,
so a re-upload with different bytes makes all previously cached renders
unreachable.
"""

from __future__ import annotations

import hashlib

FINGERPRINT_ALGORITHM = "sha256"
FINGERPRINT_LENGTH = 64


def fingerprint(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw texture bytes.

    Examples
    --------
    >>> fingerprint(b"")[:12]
    'e3b0c44298fc'
    """
    return hashlib.sha256(data).hexdigest()
