"""
Database models for skinvault.

This module contains the SQLAlchemy model backing the source texture
registry: one row per player identity holding the location and content
fingerprint of the current skin and cape.
"""

from __future__ import annotations

import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class UserTexture(Base):
    """Current source textures (skin and cape) for a single identity."""

    __tablename__ = "user_textures"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Canonical identity (32 lowercase hex characters, no hyphens)
    user_uuid: Mapped[str] = mapped_column(
        String(32), unique=True, index=True, nullable=False
    )

    # Skin (primary texture)
    skin_location: Mapped[Optional[str]] = mapped_column(String(500))
    skin_hash: Mapped[Optional[str]] = mapped_column(String(64))
    is_slim: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Cape (secondary texture)
    cape_location: Mapped[Optional[str]] = mapped_column(String(500))
    cape_hash: Mapped[Optional[str]] = mapped_column(String(64))

    # Timestamps
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<UserTexture(user_uuid={self.user_uuid!r}, "
            f"skin_hash={self.skin_hash!r}, cape_hash={self.cape_hash!r})>"
        )
