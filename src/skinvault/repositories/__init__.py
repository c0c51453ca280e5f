"""
Repository layer for data access patterns.

This module provides repository interfaces and implementations following
the Repository pattern for clean separation of domain logic and data persistence.
"""

from .base import BaseRepository, BaseSQLAlchemyRepository
from .user_texture_repository import UserTextureRepository

__all__ = [
    "BaseRepository",
    "BaseSQLAlchemyRepository",
    "UserTextureRepository",
]
