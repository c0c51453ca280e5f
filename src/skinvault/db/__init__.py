"""
Database module for skinvault.

Contains the SQLAlchemy model for the source texture registry and its
Alembic migrations.
"""

from __future__ import annotations

from skinvault.db.models import Base, UserTexture

__all__: list[str] = ["Base", "UserTexture"]
