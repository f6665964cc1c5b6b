"""Favorites ledger: idempotent save/unsave of listings per user."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from sublease_platform.domain.errors import NotFound
from sublease_platform.domain.models import Favorite, Listing
from sublease_platform.infra.database import insert_ignoring_conflicts

logger = logging.getLogger(__name__)


class FavoritesService:
    """Many-to-many association between users and saved listings."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, user_id: int, listing_id: int) -> None:
        """Save a listing. Saving it again is a no-op."""
        if await self.db.get(Listing, listing_id) is None:
            raise NotFound("Listing not found")

        result = await self.db.execute(
            insert_ignoring_conflicts(self.db, Favorite, user_id=user_id, listing_id=listing_id)
        )
        await self.db.commit()
        if result.rowcount:
            logger.info("User %s favorited listing %s", user_id, listing_id)

    async def remove(self, user_id: int, listing_id: int) -> None:
        """Unsave a listing. Removing a missing favorite is a no-op."""
        result = await self.db.execute(
            delete(Favorite).where(Favorite.user_id == user_id, Favorite.listing_id == listing_id)
        )
        await self.db.commit()
        if result.rowcount:
            logger.info("User %s unfavorited listing %s", user_id, listing_id)

    async def list(self, user_id: int) -> list[Listing]:
        """Favorited listings, most recently saved first."""
        result = await self.db.execute(
            select(Listing)
            .join(Favorite, Favorite.listing_id == Listing.id)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        )
        return list(result.scalars().all())

    async def is_favorited(self, user_id: int, listing_id: int) -> bool:
        result = await self.db.execute(
            select(Favorite.id)
            .where(Favorite.user_id == user_id, Favorite.listing_id == listing_id)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None
