"""
Validated identity type for player texture sets.

Identities are UUIDs. Clients may send them dashed or undashed and in
any case; everything inside skinvault works with the canonical form:
32 lowercase hexadecimal characters with hyphens stripped.
"""

from __future__ import annotations

import re
from typing import Annotated

from pydantic import BeforeValidator, Field

IDENTITY_LENGTH = 32

_IDENTITY_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def normalize_identity(v: str) -> str:
    """Canonicalise a player UUID.

    Parameters
    ----------
    v : str
        UUID in dashed (36 chars) or undashed (32 chars) form.

    Returns
    -------
    str
        32 lowercase hex characters.

    Raises
    ------
    TypeError
        If ``v`` is not a string.
    ValueError
        If ``v`` is not a UUID once hyphens are stripped.

    Examples
    --------
    >>> normalize_identity("069A79F4-44E9-4726-A5BE-FCA90E38AAF5")
    '069a79f444e94726a5befca90e38aaf5'
    """
    if not isinstance(v, str):
        raise TypeError("Identity must be a string")

    cleaned = v.strip().replace("-", "").lower()

    if len(cleaned) != IDENTITY_LENGTH:
        raise ValueError(
            f"Identity must be a 32 character UUID (hyphens optional), got {len(cleaned)}: {v}"
        )

    if not _IDENTITY_PATTERN.match(cleaned):
        raise ValueError(f"Identity contains non-hexadecimal characters: {v}")

    return cleaned


def is_valid_identity(v: str) -> bool:
    """Return True if ``v`` normalises to a canonical identity."""
    try:
        normalize_identity(v)
    except (TypeError, ValueError):
        return False
    return True


Identity = Annotated[
    str,
    BeforeValidator(normalize_identity),
    Field(
        min_length=IDENTITY_LENGTH,
        max_length=IDENTITY_LENGTH,
        description="Canonical player UUID (32 lowercase hex characters)",
    ),
]
