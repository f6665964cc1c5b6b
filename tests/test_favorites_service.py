"""Tests for the favorites ledger."""

import pytest
from sqlalchemy import func, select

from sublease_platform.domain.errors import NotFound
from sublease_platform.domain.models import Favorite
from sublease_platform.services.favorites_service import FavoritesService


async def _favorite_count(db_session) -> int:
    return await db_session.scalar(select(func.count(Favorite.id)))


class TestFavorites:

    async def test_add_is_idempotent(self, db_session, make_user, make_listing):
        user = await make_user()
        listing = await make_listing()
        service = FavoritesService(db_session)

        await service.add(user.id, listing.id)
        await service.add(user.id, listing.id)

        assert await _favorite_count(db_session) == 1
        assert await service.is_favorited(user.id, listing.id) is True

    async def test_remove_never_favorited_is_noop(self, db_session, make_user, make_listing):
        user = await make_user()
        listing = await make_listing()

        await FavoritesService(db_session).remove(user.id, listing.id)

        assert await _favorite_count(db_session) == 0

    async def test_remove(self, db_session, make_user, make_listing):
        user = await make_user()
        listing = await make_listing()
        service = FavoritesService(db_session)
        await service.add(user.id, listing.id)

        await service.remove(user.id, listing.id)

        assert await service.is_favorited(user.id, listing.id) is False

    async def test_unknown_listing(self, db_session, make_user):
        user = await make_user()

        with pytest.raises(NotFound):
            await FavoritesService(db_session).add(user.id, 999)

    async def test_list_newest_favorite_first(self, db_session, make_user, make_listing):
        user = await make_user()
        older = await make_listing(title="Older")
        newer = await make_listing(title="Newer")
        hidden = await make_listing(title="Hidden", is_available=False)
        service = FavoritesService(db_session)

        await service.add(user.id, newer.id)
        await service.add(user.id, older.id)
        await service.add(user.id, hidden.id)

        results = await service.list(user.id)

        assert [l.id for l in results] == [hidden.id, older.id, newer.id]

    async def test_lists_are_per_user(self, db_session, make_user, make_listing):
        alice = await make_user()
        bob = await make_user()
        listing = await make_listing()
        service = FavoritesService(db_session)

        await service.add(alice.id, listing.id)

        assert [l.id for l in await service.list(alice.id)] == [listing.id]
        assert await service.list(bob.id) == []
        assert await service.is_favorited(bob.id, listing.id) is False

    async def test_add_over_existing_row_keeps_it(self, db_session, make_user, make_listing):
        user = await make_user()
        listing = await make_listing()
        existing = Favorite(user_id=user.id, listing_id=listing.id)
        db_session.add(existing)
        await db_session.flush()

        await FavoritesService(db_session).add(user.id, listing.id)

        [row] = (await db_session.execute(select(Favorite))).scalars().all()
        assert row.id == existing.id
        assert await _favorite_count(db_session) == 1
