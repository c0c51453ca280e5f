"""
User texture repository.

Handles persistence of the per-identity source texture record (skin and
cape locations, content fingerprints and the slim flag).
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from skinvault.db.models import UserTexture as UserTextureDB
from skinvault.models.texture import (
    TextureStatistics,
    UserTextureCreate,
    UserTextureUpdate,
)
from skinvault.repositories.base import BaseSQLAlchemyRepository


class UserTextureRepository(
    BaseSQLAlchemyRepository[
        UserTextureDB,
        UserTextureCreate,
        UserTextureUpdate,
    ]
):
    """Repository for per-identity source texture records."""

    def __init__(self) -> None:
        """Initialize repository with UserTexture model."""
        super().__init__(UserTextureDB)

    async def get(self, session: AsyncSession, id: str) -> Optional[UserTextureDB]:
        """Get texture record by canonical identity."""
        return await self.get_by_user_uuid(session, id)

    async def exists(self, session: AsyncSession, id: str) -> bool:
        """Check if a texture record exists for an identity."""
        return await self.exists_by_user_uuid(session, id)

    async def get_by_user_uuid(
        self, session: AsyncSession, user_uuid: str
    ) -> Optional[UserTextureDB]:
        """
        Get texture record by identity.

        Parameters
        ----------
        session : AsyncSession
            Database session
        user_uuid : str
            Canonical identity (32 lowercase hex characters)

        Returns
        -------
        Optional[UserTextureDB]
            Texture record if found, None otherwise
        """
        result = await session.execute(
            select(UserTextureDB).where(UserTextureDB.user_uuid == user_uuid)
        )
        return result.scalar_one_or_none()

    async def exists_by_user_uuid(self, session: AsyncSession, user_uuid: str) -> bool:
        """Check if a texture record exists for an identity."""
        result = await session.execute(
            select(UserTextureDB.id).where(UserTextureDB.user_uuid == user_uuid)
        )
        return result.first() is not None

    async def upsert(
        self,
        session: AsyncSession,
        user_uuid: str,
        obj_in: UserTextureUpdate,
    ) -> UserTextureDB:
        """
        Apply an update to an identity's record, creating it if needed.

        Parameters
        ----------
        session : AsyncSession
            Database session
        user_uuid : str
            Canonical identity
        obj_in : UserTextureUpdate
            Fields to write; unset fields are left untouched

        Returns
        -------
        UserTextureDB
            The created or updated record
        """
        existing = await self.get_by_user_uuid(session, user_uuid)
        if existing is not None:
            return await self.update(session, db_obj=existing, obj_in=obj_in)

        create_data = obj_in.model_dump(exclude_unset=True)
        create_data["is_slim"] = bool(create_data.get("is_slim"))
        return await self.create(
            session, obj_in=UserTextureCreate(user_uuid=user_uuid, **create_data)
        )

    async def delete_by_user_uuid(
        self, session: AsyncSession, user_uuid: str
    ) -> Optional[UserTextureDB]:
        """Delete an identity's record, returning it if it existed."""
        return await self.delete(session, id=user_uuid)

    async def find_with_skin(
        self, session: AsyncSession, limit: Optional[int] = None
    ) -> List[UserTextureDB]:
        """
        Find records that currently hold a skin.

        Parameters
        ----------
        session : AsyncSession
            Database session
        limit : Optional[int]
            Maximum number of records to return

        Returns
        -------
        List[UserTextureDB]
            Records ordered by identity
        """
        query = (
            select(UserTextureDB)
            .where(UserTextureDB.skin_hash.is_not(None))
            .order_by(UserTextureDB.user_uuid)
        )
        if limit is not None:
            query = query.limit(limit)
        result = await session.execute(query)
        return list(result.scalars().all())

    async def get_statistics(self, session: AsyncSession) -> TextureStatistics:
        """
        Count stored skins and capes.

        Parameters
        ----------
        session : AsyncSession
            Database session

        Returns
        -------
        TextureStatistics
            Texture counts summary
        """
        result = await session.execute(
            select(
                func.count(UserTextureDB.id).label("total_identities"),
                func.count(UserTextureDB.skin_hash).label("total_skins"),
                func.count(UserTextureDB.cape_hash).label("total_capes"),
                func.sum(
                    case(
                        (
                            UserTextureDB.skin_hash.is_not(None)
                            & UserTextureDB.is_slim.is_(True),
                            1,
                        ),
                        else_=0,
                    )
                ).label("slim_skins"),
            )
        )

        row = result.first()
        if not row:
            return TextureStatistics()

        return TextureStatistics(
            total_identities=row.total_identities or 0,
            total_skins=row.total_skins or 0,
            total_capes=row.total_capes or 0,
            slim_skins=row.slim_skins or 0,
        )
